"""
Report Filter Panel

Constituent, date range, TMDL, threshold and station-count controls.
"""

from typing import Dict, List

import dash_bootstrap_components as dbc
from dash import html, dcc

from ..data.dataset_store import DatasetStore


def parameter_options(store: DatasetStore) -> List[Dict]:
    """Dropdown options: constituents first, then the nutrient block."""
    constituents, nutrients = store.parameter_choices
    options = [{'label': p, 'value': p} for p in constituents]
    if nutrients:
        options.append({'label': '── Nutrients ──', 'value': '__nutrients__', 'disabled': True})
        options.extend({'label': p, 'value': p} for p in nutrients)
    return options


def count_slider_marks(max_count: int) -> Dict:
    steps = [0, max_count // 4, max_count // 2, (3 * max_count) // 4, max_count]
    return {
        value: {'label': f"{value:,}", 'style': {'fontSize': '10px'}}
        for value in sorted(set(steps))
    }


class ReportFilterPanel:
    """Sidebar controls for the hotspot report."""

    def __init__(self, store: DatasetStore):
        self.store = store

    def create_filter_panel(self) -> dbc.Card:
        date_range = self.store.date_range
        max_count = self.store.count_range.max
        options = parameter_options(self.store)
        default_parameter = next((o['value'] for o in options if not o.get('disabled')), None)

        return dbc.Card([
            dbc.CardHeader([
                html.H5("🔍 Report Filters", className="mb-0")
            ]),
            dbc.CardBody([

                # Constituent
                html.Div([
                    html.Label("Constituent:", className="fw-bold mb-2"),
                    dcc.Dropdown(
                        id="parameter-dropdown",
                        options=options,
                        value=default_parameter,
                        clearable=False,
                        className="mb-3"
                    )
                ]),

                # Date range
                html.Div([
                    html.Label("Date Range:", className="fw-bold mb-2"),
                    dcc.DatePickerRange(
                        id="date-range-picker",
                        min_date_allowed=date_range.start.strftime('%Y-%m-%d') if date_range else None,
                        max_date_allowed=date_range.end.strftime('%Y-%m-%d') if date_range else None,
                        start_date=date_range.start.strftime('%Y-%m-%d') if date_range else None,
                        end_date=date_range.end.strftime('%Y-%m-%d') if date_range else None,
                        display_format='YYYY-MM-DD',
                        className="mb-3"
                    )
                ]),

                # TMDL filter
                html.Div([
                    html.Label("TMDL Waterbodies:", className="fw-bold mb-2"),
                    dbc.Switch(
                        id="tmdl-switch",
                        label="Only stations in TMDL receiving waterbodies",
                        value=False,
                        className="mb-2"
                    ),
                    dcc.Dropdown(
                        id="waterbody-dropdown",
                        options=[],
                        value=[],
                        multi=True,
                        placeholder="Select receiving waterbodies",
                        disabled=True,
                        className="mb-1"
                    ),
                    html.Small(id="waterbody-info", className="text-muted d-block mb-3")
                ]),

                # Threshold
                html.Div([
                    html.Label("Threshold:", className="fw-bold mb-2"),
                    dbc.Input(
                        id="threshold-input",
                        type="number",
                        debounce=True,
                        className="mb-1"
                    ),
                    html.Small(id="threshold-info", className="text-muted d-block mb-3")
                ]),

                # Station count
                html.Div([
                    html.Label("Observations per Station:", className="fw-bold"),
                    dcc.RangeSlider(
                        id="count-range-slider",
                        min=0, max=max_count, step=1,
                        value=[0, max_count],
                        marks=count_slider_marks(max_count),
                        tooltip={"placement": "bottom", "always_visible": True}
                    )
                ], className="mb-3"),

                html.Hr(),
                html.Div([
                    html.Strong(id="results-count", children="Loading..."),
                    html.Div(id="filter-summary", className="small text-muted mt-1")
                ])
            ])
        ], className="h-100", style={'maxHeight': '90vh', 'overflowY': 'auto'})
