"""
Shared types and exceptions for the hotspot data layer.
"""

from typing import Iterable, NamedTuple, NewType, Optional

import pandas as pd

ParameterId = NewType('ParameterId', str)


class DatasetError(RuntimeError):
    """Raised when the input tables cannot be loaded or are malformed."""


class UnknownParameterError(ValueError):
    """Raised when a parameter id is not present in the loaded dataset."""

    def __init__(self, parameter):
        super().__init__(f"Unknown parameter: {parameter!r}")
        self.parameter = parameter


class SelectionIncomplete(Exception):
    """A required report control has no value yet."""

    def __init__(self, missing):
        super().__init__(f"Missing selection: {', '.join(missing)}")
        self.missing = list(missing)


class DateRange(NamedTuple):
    start: pd.Timestamp
    end: pd.Timestamp

    @classmethod
    def from_values(cls, start, end) -> 'DateRange':
        """Build an inclusive range from anything ``pd.Timestamp`` accepts."""
        start_ts = pd.Timestamp(start).normalize()
        end_ts = pd.Timestamp(end).normalize()
        if start_ts > end_ts:
            raise ValueError(f"Date range start {start_ts.date()} is after end {end_ts.date()}")
        return cls(start_ts, end_ts)

    @classmethod
    def coerce(cls, value) -> 'DateRange':
        if isinstance(value, cls):
            return value
        start, end = value
        return cls.from_values(start, end)


class CountBounds(NamedTuple):
    min: int
    max: int


class ThresholdBounds(NamedTuple):
    min: Optional[float]
    default: Optional[float]
    max: Optional[float]


def as_parameter(value, known: Iterable[str]) -> ParameterId:
    """Validate ``value`` against the known parameter ids."""
    if value not in set(known):
        raise UnknownParameterError(value)
    return ParameterId(value)
