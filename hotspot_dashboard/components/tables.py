"""
Summary tables shown under the hotspot map.
"""

import pandas as pd
from dash import dash_table, html

from ..utils.config import HOTSPOT_CUTOFF, TABLE_STYLE

STATION_TABLE_COLUMNS = [
    {'name': 'Station', 'id': 'StationCode'},
    {'name': 'Watershed', 'id': 'Watershed'},
    {'name': '% Exceeding', 'id': 'exceeds', 'type': 'numeric'},
    {'name': 'Total Obs.', 'id': 'n', 'type': 'numeric'},
]

WATERSHED_TABLE_COLUMNS = [
    {'name': 'Watershed', 'id': 'Watershed'},
    {'name': 'Stations', 'id': 'stations', 'type': 'numeric'},
    {'name': 'Total Obs.', 'id': 'observations', 'type': 'numeric'},
    {'name': 'Mean % Exceeding', 'id': 'mean_exceeds', 'type': 'numeric'},
    {'name': 'Max % Exceeding', 'id': 'max_exceeds', 'type': 'numeric'},
    {'name': f'Stations ≥ {HOTSPOT_CUTOFF}%', 'id': 'hotspots', 'type': 'numeric'},
]


def _records(df: pd.DataFrame, columns) -> list:
    ids = [c['id'] for c in columns]
    # NaN is not JSON serialisable for the table component
    return df[ids].astype(object).where(df[ids].notna(), None).to_dict('records')


def create_station_table(stations: pd.DataFrame):
    """Station summaries, highest exceedance first."""
    if stations.empty:
        return html.P("No stations match the current filters.", className="text-muted")

    ordered = stations.sort_values(['exceeds', 'n'], ascending=[False, False], na_position='last')

    return dash_table.DataTable(
        id='station-table',
        data=_records(ordered, STATION_TABLE_COLUMNS),
        columns=STATION_TABLE_COLUMNS,
        style_cell=TABLE_STYLE['style_cell'],
        style_header=TABLE_STYLE['style_header'],
        style_data_conditional=[
            {
                'if': {'filter_query': f'{{exceeds}} >= {HOTSPOT_CUTOFF}'},
                'backgroundColor': '#f8d7da'
            }
        ],
        page_size=15,
        sort_action="native",
        filter_action="native"
    )


def create_watershed_table(rollup: pd.DataFrame):
    """Per-watershed roll-up of station summaries."""
    if rollup.empty:
        return html.P("No watersheds to summarise.", className="text-muted")

    return dash_table.DataTable(
        id='watershed-table',
        data=_records(rollup, WATERSHED_TABLE_COLUMNS),
        columns=WATERSHED_TABLE_COLUMNS,
        style_cell=TABLE_STYLE['style_cell'],
        style_header=TABLE_STYLE['style_header'],
        page_size=10,
        sort_action="native"
    )
