"""
Hotspot Map Component

Renders station summaries as a plotly point layer: colour and size encode the
percentage of observations exceeding the threshold.
"""

import copy
import logging
from typing import Dict, Optional

import pandas as pd
import plotly.graph_objects as go

from ..data.exceedance import COLORSCALE
from ..utils.config import (
    DEFAULT_MAP_HEIGHT, DEFAULT_MAP_VIEW, EXCEEDANCE_DOMAIN, LEGEND_TITLE,
    MAP_STYLE, MAX_ZOOM_LEVEL, MIN_ZOOM_LEVEL, NA_COLOR, VALID_MAP_STYLES
)

logger = logging.getLogger(__name__)


def calculate_optimal_view(stations: pd.DataFrame) -> Dict:
    """Calculate optimal center and zoom based on station locations."""
    lat_min, lat_max = stations['Latitude'].min(), stations['Latitude'].max()
    lon_min, lon_max = stations['Longitude'].min(), stations['Longitude'].max()

    max_range = max(lat_max - lat_min, lon_max - lon_min)

    # Larger spread = lower zoom level
    if max_range > 8:
        zoom_level = 4
    elif max_range > 4:
        zoom_level = 5
    elif max_range > 2:
        zoom_level = 6
    elif max_range > 1:
        zoom_level = 7
    elif max_range > 0.5:
        zoom_level = 8
    else:
        zoom_level = 9

    return {
        'center': {'lat': float((lat_min + lat_max) / 2), 'lon': float((lon_min + lon_max) / 2)},
        'zoom': max(MIN_ZOOM_LEVEL, min(MAX_ZOOM_LEVEL, zoom_level))
    }


def figure_view(fig) -> Dict:
    """Center and zoom of a map figure, as a plain dict for dcc.Store."""
    layout_map = fig.layout.map
    return {
        'center': {'lat': layout_map.center.lat, 'lon': layout_map.center.lon},
        'zoom': layout_map.zoom
    }


def view_from_relayout(relayout_data: Optional[Dict], view: Optional[Dict]) -> Optional[Dict]:
    """
    Apply pan/zoom events from ``relayoutData`` on top of a stored view.

    Returns ``view`` itself when the event carries no center or zoom.
    """
    if not relayout_data or not ({'map.center', 'map.zoom'} & set(relayout_data)):
        return view

    updated = copy.deepcopy(view) if view else copy.deepcopy(DEFAULT_MAP_VIEW)
    if 'map.center' in relayout_data:
        center = relayout_data['map.center']
        updated['center'] = {'lat': center['lat'], 'lon': center['lon']}
    if 'map.zoom' in relayout_data:
        updated['zoom'] = relayout_data['map.zoom']
    return updated


class HotspotMapComponent:
    """Builds the hotspot map figure. Holds no view state between calls."""

    def create_hotspot_map(self, stations: pd.DataFrame,
                           parameter: Optional[str] = None,
                           selected_station: Optional[str] = None,
                           map_style: str = MAP_STYLE,
                           height: int = DEFAULT_MAP_HEIGHT,
                           view: Optional[Dict] = None) -> go.Figure:
        """
        Create the hotspot map.

        Parameters:
        -----------
        stations : pd.DataFrame
            Station summaries with Latitude, Longitude, exceeds, n, size,
            color and label columns
        parameter : str, optional
            Constituent name shown in the title
        selected_station : str, optional
            StationCode to highlight
        map_style : str
            Basemap style
        height : int
            Height of the map in pixels
        view : dict, optional
            ``{'center': {'lat', 'lon'}, 'zoom'}`` to keep; fits the
            stations when omitted

        Returns:
        --------
        plotly.graph_objects.Figure
        """
        if map_style not in VALID_MAP_STYLES:
            logger.warning(f"Invalid map style '{map_style}', using default '{MAP_STYLE}'")
            map_style = MAP_STYLE

        located = stations.dropna(subset=['Latitude', 'Longitude']) if not stations.empty else stations
        if located.empty:
            return self.create_empty_map("No data for the current selection", map_style, height, view)

        if view is None:
            view = calculate_optimal_view(located)

        scored = located[located['exceeds'].notna()]
        unscored = located[located['exceeds'].isna()]

        fig = go.Figure()

        if not scored.empty:
            fig.add_trace(go.Scattermap(
                lat=scored['Latitude'],
                lon=scored['Longitude'],
                mode='markers',
                marker=dict(size=scored['size'], color=list(scored['color']), opacity=0.85),
                text=scored['label'],
                customdata=scored['StationCode'],
                hovertemplate="%{text}<extra></extra>",
                name='Stations',
                showlegend=False
            ))
            self._add_colorbar(fig)

        if not unscored.empty:
            fig.add_trace(go.Scattermap(
                lat=unscored['Latitude'],
                lon=unscored['Longitude'],
                mode='markers',
                marker=dict(size=unscored['size'], color=NA_COLOR, opacity=0.7),
                text=unscored['label'],
                customdata=unscored['StationCode'],
                hovertemplate="%{text}<extra></extra>",
                name='No threshold',
                showlegend=True
            ))

        if selected_station and selected_station in located['StationCode'].values:
            self._add_selected_station_highlight(fig, located, selected_station)

        title = f"{parameter} exceedance hotspots ({len(located)} stations)" if parameter \
            else f"Exceedance hotspots ({len(located)} stations)"

        fig.update_layout(
            map=dict(
                style=map_style,
                center=view['center'],
                zoom=view['zoom']
            ),
            height=height,
            margin=dict(r=0, t=50, l=0, b=0),
            title=title,
            font=dict(family="Arial", size=12),
            legend=dict(
                orientation="h",
                yanchor="bottom",
                y=1.02,
                xanchor="right",
                x=1,
                bgcolor="rgba(255, 255, 255, 0.8)"
            ),
            hoverlabel=dict(
                bgcolor="white",
                bordercolor="black",
                font=dict(size=12)
            )
        )

        return fig

    def create_empty_map(self, message: str, map_style: str = MAP_STYLE,
                         height: int = DEFAULT_MAP_HEIGHT,
                         view: Optional[Dict] = None) -> go.Figure:
        """Basemap with a centred message and no points."""
        view = view or DEFAULT_MAP_VIEW
        fig = go.Figure(go.Scattermap(lat=[], lon=[], mode='markers'))
        fig.update_layout(
            map=dict(style=map_style, center=view['center'], zoom=view['zoom']),
            height=height,
            margin=dict(r=0, t=50, l=0, b=0),
            title=message,
            annotations=[dict(
                text=message,
                x=0.5, y=0.5, xref='paper', yref='paper',
                showarrow=False,
                font=dict(size=16, color='#6c757d'),
                bgcolor='rgba(255, 255, 255, 0.8)'
            )]
        )
        return fig

    def _add_colorbar(self, fig: go.Figure):
        # Point colours come precomputed; this trace only carries the legend scale
        low, high = EXCEEDANCE_DOMAIN
        fig.add_trace(go.Scattermap(
            lat=[None, None],
            lon=[None, None],
            mode='markers',
            marker=dict(
                color=[low, high],
                colorscale=COLORSCALE,
                cmin=low,
                cmax=high,
                showscale=True,
                colorbar=dict(title=dict(text=LEGEND_TITLE), thickness=15)
            ),
            hoverinfo='skip',
            name=LEGEND_TITLE,
            showlegend=False
        ))

    def _add_selected_station_highlight(self, fig: go.Figure, stations: pd.DataFrame,
                                        selected_station: str):
        selected = stations[stations['StationCode'] == selected_station].iloc[0]
        fig.add_trace(go.Scattermap(
            lat=[selected['Latitude']],
            lon=[selected['Longitude']],
            mode='markers',
            marker=dict(size=selected['size'] + 10, color='rgba(0, 123, 255, 0.35)'),
            hoverinfo='skip',
            name=f"Selected: {selected_station}",
            showlegend=True
        ))


def get_map_component() -> HotspotMapComponent:
    """Get a map component instance."""
    return HotspotMapComponent()
