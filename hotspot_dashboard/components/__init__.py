"""
Hotspot Dashboard Components Package
"""

from .map_component import get_map_component
from .filter_panel import ReportFilterPanel

__all__ = ['get_map_component', 'ReportFilterPanel']
