"""
Threshold lookup and default selection.
"""

from typing import Optional

import pandas as pd

from .models import ThresholdBounds


class ThresholdResolver:
    """Looks up defined thresholds, falling back to the median of observed results."""

    def __init__(self, thresholds: pd.DataFrame):
        self._lookup = dict(zip(thresholds['Parameter'], thresholds['Threshold'].astype(float)))

    def resolve(self, parameter: str) -> Optional[float]:
        """Return the defined threshold for ``parameter`` or ``None``."""
        return self._lookup.get(parameter)

    def threshold_source(self, parameter: str) -> str:
        return 'defined' if parameter in self._lookup else 'median'

    def default_and_bounds(self, parameter: str, observations: pd.DataFrame) -> ThresholdBounds:
        """
        Seed values for the threshold input.

        min/max are the 0th/100th percentiles of Result for the parameter's
        observations; default is the defined threshold, or the median when
        none is defined.
        """
        results = observations.loc[observations['Parameter'] == parameter, 'Result'].dropna()
        defined = self.resolve(parameter)

        if results.empty:
            return ThresholdBounds(None, defined, None)

        low, median, high = results.quantile([0.0, 0.5, 1.0]).tolist()
        default = defined if defined is not None else float(median)
        return ThresholdBounds(float(low), default, float(high))
