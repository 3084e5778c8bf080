"""
Report pipeline: selected inputs -> station summaries ready for display.

Every call recomputes from the dataset store; nothing is cached between
calls.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .dataset_store import DatasetStore
from .exceedance import SUMMARY_COLUMNS, aggregate
from .filters import filter_observations
from .models import (
    CountBounds, DateRange, SelectionIncomplete, ThresholdBounds, as_parameter
)
from .thresholds import ThresholdResolver
from ..utils.config import HOTSPOT_CUTOFF

logger = logging.getLogger(__name__)

VIEW_COLUMNS = SUMMARY_COLUMNS + ['Longitude', 'Latitude', 'label']


@dataclass(frozen=True)
class ReportState:
    """Values of the report controls."""
    parameter: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    count_range: Optional[Tuple[int, int]] = None
    tmdl_enabled: bool = False
    waterbodies: Tuple[str, ...] = field(default_factory=tuple)
    threshold: Optional[float] = None

    def missing(self) -> List[str]:
        missing = []
        if not self.parameter:
            missing.append('parameter')
        if self.start_date is None or self.end_date is None:
            missing.append('date range')
        if self.count_range is None or len(self.count_range) != 2:
            missing.append('station count range')
        return missing


@dataclass
class HotspotView:
    parameter: str
    threshold: Optional[float]
    threshold_source: str
    stations: pd.DataFrame

    @property
    def is_empty(self) -> bool:
        return self.stations.empty


def station_label(station_code, exceeds, n) -> str:
    """Point label: '<StationCode>: <exceeds> % exceeding, <n> total obs.'"""
    exceeds_text = 'NA' if pd.isna(exceeds) else f"{int(exceeds)}"
    return f"{station_code}: {exceeds_text} % exceeding, {n} total obs."


def threshold_defaults(store: DatasetStore, parameter: str) -> ThresholdBounds:
    """Seed values for the threshold input of a parameter."""
    parameter = as_parameter(parameter, store.allowed_parameters)
    resolver = ThresholdResolver(store.thresholds())
    return resolver.default_and_bounds(parameter, store.parameter_observations(parameter))


def compute_hotspots(store: DatasetStore, state: ReportState) -> HotspotView:
    """
    Run filter -> threshold -> aggregate for the current control values.

    Raises ``SelectionIncomplete`` while a required control is unset and
    ``UnknownParameterError`` for a parameter outside the constituent choices.
    """
    missing = state.missing()
    if missing:
        raise SelectionIncomplete(missing)

    parameter = as_parameter(state.parameter, store.allowed_parameters)
    date_range = DateRange.from_values(state.start_date, state.end_date)
    count_bounds = CountBounds(int(state.count_range[0]), int(state.count_range[1]))

    resolver = ThresholdResolver(store.thresholds())
    if state.threshold is not None:
        threshold = float(state.threshold)
        source = 'user'
    else:
        threshold = resolver.default_and_bounds(
            parameter, store.parameter_observations(parameter)
        ).default
        source = resolver.threshold_source(parameter)

    rows = filter_observations(
        store.observations(), parameter, date_range,
        state.tmdl_enabled, list(state.waterbodies),
        tmdl=store.tmdl_associations()
    )
    summary = aggregate(rows, threshold, date_range, count_bounds)

    stations = summary.merge(
        store.stations()[['StationCode', 'Longitude', 'Latitude']],
        on='StationCode', how='left'
    )
    stations['label'] = [
        station_label(code, exceeds, n)
        for code, exceeds, n in zip(stations['StationCode'], stations['exceeds'], stations['n'])
    ]

    logger.debug(
        f"Recomputed hotspots for {parameter}: {len(rows)} rows -> {len(stations)} stations "
        f"(threshold={threshold}, source={source})"
    )

    return HotspotView(parameter, threshold, source, stations[VIEW_COLUMNS])


def watershed_summary(stations: pd.DataFrame) -> pd.DataFrame:
    """Roll station summaries up to one row per watershed."""
    columns = ['Watershed', 'stations', 'observations', 'mean_exceeds', 'max_exceeds', 'hotspots']
    if stations.empty:
        return pd.DataFrame(columns=columns)

    grouped = stations.groupby('Watershed')
    rollup = pd.DataFrame({
        'stations': grouped['StationCode'].nunique(),
        'observations': grouped['n'].sum(),
        'mean_exceeds': grouped['exceeds'].mean().round(1),
        'max_exceeds': grouped['exceeds'].max(),
        'hotspots': grouped['exceeds'].apply(lambda s: int((s >= HOTSPOT_CUTOFF).sum())),
    }).reset_index()

    return rollup.sort_values(['mean_exceeds', 'Watershed'], ascending=[False, True],
                              na_position='last')[columns].reset_index(drop=True)


def station_timeseries(store: DatasetStore, parameter: str, station_code: str) -> pd.DataFrame:
    """Observations of one parameter at one station, oldest first."""
    obs = store.parameter_observations(parameter)
    series = obs[obs['StationCode'] == str(station_code)][['Date', 'Result']]
    return series.sort_values('Date').reset_index(drop=True)


def summary_for_download(view: HotspotView) -> pd.DataFrame:
    """Station summary columns suitable for CSV export."""
    export = view.stations[['StationCode', 'Watershed', 'Latitude', 'Longitude', 'exceeds', 'n']].copy()
    export.insert(0, 'Parameter', view.parameter)
    export['Threshold'] = np.nan if view.threshold is None else view.threshold
    return export.sort_values('exceeds', ascending=False, na_position='last').reset_index(drop=True)
