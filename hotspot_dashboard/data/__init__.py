"""
Data layer for the Water Quality Hotspot Dashboard

- dataset_store.py: loads and holds the observation, threshold and TMDL tables
- filters.py: selects the observation rows for the current view
- thresholds.py: threshold lookup and median fallback
- exceedance.py: per-station exceedance percentages and visual encoding
- pipeline.py: composes the steps for the report callbacks
"""

from .dataset_store import DatasetStore, get_dataset_store
from .models import DatasetError, SelectionIncomplete, UnknownParameterError

__all__ = [
    'DatasetStore',
    'get_dataset_store',
    'DatasetError',
    'SelectionIncomplete',
    'UnknownParameterError',
]
