"""
Observation filtering for the current report view.
"""

import logging
from typing import List, Optional, Sequence

import pandas as pd

from .models import DateRange
from ..utils.config import PARAMETER_GROUPS

logger = logging.getLogger(__name__)


def parameter_group(parameter: str) -> Optional[str]:
    """TMDL parameter group for a parameter, or ``None`` if it has none."""
    return PARAMETER_GROUPS.get(parameter)


def receiving_waterbodies(tmdl: pd.DataFrame, parameter: str) -> List[str]:
    """Receiving waterbodies with a TMDL in the parameter's group."""
    group = parameter_group(parameter)
    if group is None:
        return []
    return sorted(tmdl.loc[tmdl['ParameterGroup'] == group, 'Receiving'].unique())


def filter_observations(observations: pd.DataFrame, parameter: str, date_range,
                        tmdl_enabled: bool, selected_waterbodies: Optional[Sequence[str]],
                        tmdl: Optional[pd.DataFrame] = None) -> pd.DataFrame:
    """
    Rows relevant to the current view.

    Parameters:
    -----------
    observations : pd.DataFrame
        Full observation table
    parameter : str
        Selected constituent
    date_range : DateRange or (start, end)
        Validated here; rows are not dropped by date so that the aggregator
        can count the full period of record per station
    tmdl_enabled : bool
        TMDL filter switch
    selected_waterbodies : sequence of str
        Receiving waterbodies picked by the user
    tmdl : pd.DataFrame, optional
        TMDL associations; required when the TMDL filter is active

    Returns:
    --------
    pd.DataFrame
        Observations for the parameter. When the TMDL filter is active the
        Watershed column holds the matched receiving waterbody.
    """
    DateRange.coerce(date_range)

    rows = observations[observations['Parameter'] == parameter]

    if not tmdl_enabled or not selected_waterbodies:
        return rows.reset_index(drop=True)

    if tmdl is None:
        raise ValueError("TMDL associations are required when the TMDL filter is enabled")

    group = parameter_group(parameter)
    if group is None:
        logger.info(f"Parameter {parameter} has no TMDL group; TMDL filter matches nothing")
        return rows.iloc[0:0].reset_index(drop=True)

    matches = tmdl.loc[
        (tmdl['ParameterGroup'] == group) & (tmdl['Receiving'].isin(list(selected_waterbodies))),
        ['StationCode', 'Receiving']
    ].drop_duplicates()

    relabelled = rows.drop(columns=['Watershed']).merge(matches, on='StationCode', how='inner')
    relabelled = relabelled.rename(columns={'Receiving': 'Watershed'})

    return relabelled[list(rows.columns)].reset_index(drop=True)
