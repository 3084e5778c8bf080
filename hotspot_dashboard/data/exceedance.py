"""
Exceedance aggregation: one summary row per station.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd
import plotly.colors as pc

from .models import CountBounds, DateRange
from ..utils.config import (
    EXCEEDANCE_COLORSCALE, EXCEEDANCE_DOMAIN, MARKER_SIZE_RANGE, NA_COLOR
)

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ['Watershed', 'StationCode', 'exceeds', 'n', 'color', 'size']

COLORSCALE = pc.make_colorscale(getattr(pc.sequential, EXCEEDANCE_COLORSCALE))


def exceedance_colors(exceeds: pd.Series) -> pd.Series:
    """Map percentages on the fixed [0, 100] domain to colours; NaN gets the sentinel colour."""
    low, high = EXCEEDANCE_DOMAIN
    colors = pd.Series(NA_COLOR, index=exceeds.index, dtype=object)

    valid = exceeds.notna()
    if valid.any():
        positions = ((exceeds[valid].clip(low, high) - low) / (high - low)).tolist()
        colors[valid] = pc.sample_colorscale(COLORSCALE, positions)

    return colors


def exceedance_sizes(exceeds: pd.Series) -> pd.Series:
    """Linearly rescale percentages from [0, 100] to the marker size range."""
    low, high = EXCEEDANCE_DOMAIN
    size_min, size_max = MARKER_SIZE_RANGE
    scaled = size_min + (exceeds.clip(low, high) - low) * (size_max - size_min) / (high - low)
    return scaled.fillna(size_min)


def aggregate(rows: pd.DataFrame, threshold: Optional[float], date_range,
              count_bounds) -> pd.DataFrame:
    """
    Reduce filtered observations to one row per (Watershed, StationCode).

    Parameters:
    -----------
    rows : pd.DataFrame
        Output of ``filter_observations``
    threshold : float or None
        Results strictly above this value count as exceedances. ``None``
        yields NaN percentages.
    date_range : DateRange or (start, end)
        Inclusive on both ends; restricts the rows counted as exceedances
    count_bounds : CountBounds or (min, max)
        Inclusive bounds on the station's total observation count ``n``

    Returns:
    --------
    pd.DataFrame
        Columns: Watershed, StationCode, exceeds, n, color, size
    """
    date_range = DateRange.coerce(date_range)
    count_bounds = CountBounds(*count_bounds)

    if rows.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    keys = ['Watershed', 'StationCode']

    # n covers the full period of record, not just the selected dates
    totals = rows.groupby(keys).size().rename('n').reset_index()

    in_range = rows[(rows['Date'] >= date_range.start) & (rows['Date'] <= date_range.end)]
    if in_range.empty:
        logger.debug("No observations inside the selected date range")
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    if threshold is None:
        marked = pd.Series(np.nan, index=in_range.index)
    else:
        marked = (in_range['Result'] > threshold).astype(float)

    exceed_counts = (
        in_range.assign(marked=marked)
        .groupby(keys)['marked']
        .sum(min_count=1)
        .rename('exceed_count')
        .reset_index()
    )

    summary = exceed_counts.merge(totals, on=keys, how='left')
    summary['exceeds'] = np.round(100 * summary['exceed_count'] / summary['n'], 0)

    summary = summary[(summary['n'] >= count_bounds.min) & (summary['n'] <= count_bounds.max)].copy()
    if summary.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    summary['n'] = summary['n'].astype(int)
    summary['color'] = exceedance_colors(summary['exceeds'])
    summary['size'] = exceedance_sizes(summary['exceeds'])

    return (
        summary[SUMMARY_COLUMNS]
        .drop_duplicates(subset=keys)
        .sort_values(keys)
        .reset_index(drop=True)
    )
