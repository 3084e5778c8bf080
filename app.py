"""
Water Quality Hotspot Dashboard

Interactive report showing how often monitoring stations exceed water
quality thresholds for a selected constituent and period.
"""

import logging
import os

import dash
from dash import dcc, html, Input, Output, State, callback_context, no_update
from dash.exceptions import PreventUpdate
import dash_bootstrap_components as dbc

from hotspot_dashboard.components.filter_panel import ReportFilterPanel
from hotspot_dashboard.components.map_component import (
    figure_view, get_map_component, view_from_relayout
)
from hotspot_dashboard.components.station_plot import create_station_plot
from hotspot_dashboard.components.tables import create_station_table, create_watershed_table
from hotspot_dashboard.data.dataset_store import get_dataset_store
from hotspot_dashboard.data.filters import receiving_waterbodies, parameter_group
from hotspot_dashboard.data.models import (
    DatasetError, DateRange, SelectionIncomplete, UnknownParameterError
)
from hotspot_dashboard.data.pipeline import (
    ReportState, compute_hotspots, station_timeseries, summary_for_download,
    threshold_defaults, watershed_summary
)
from hotspot_dashboard.data.thresholds import ThresholdResolver
from hotspot_dashboard.utils.config import APP_DESCRIPTION, APP_TITLE, PLOT_CONFIG
from hotspot_dashboard.utils.settings import load_settings, setup_logging

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

settings = load_settings()
setup_logging(settings['logging']['level'])
logger = logging.getLogger(__name__)

data_settings = dict(settings['data'])
if not os.path.isabs(data_settings['path']):
    data_settings['path'] = os.path.join(PROJECT_ROOT, data_settings['path'])

try:
    store = get_dataset_store(data_settings)
except DatasetError as e:
    logger.error(f"Could not load dataset from {data_settings['path']}: {e}")
    raise

map_component = get_map_component()
filter_panel = ReportFilterPanel(store)
threshold_resolver = ThresholdResolver(store.thresholds())

app = dash.Dash(
    __name__,
    external_stylesheets=[dbc.themes.BOOTSTRAP],
    title=APP_TITLE,
    update_title='Loading...'
)

# Expose the server for gunicorn
server = app.server


def create_header():
    """Create the application header."""
    return dbc.Container([
        dbc.Row([
            dbc.Col([
                html.Div([
                    html.H1(APP_TITLE, className="display-5 mb-2 text-center",
                            style={"fontWeight": "700", "color": "#1f77b4"}),
                    html.P(APP_DESCRIPTION, className="lead mb-3 text-center",
                           style={"fontSize": "1.1rem", "color": "#6c757d"}),
                ], style={
                    "padding": "1.5rem 1rem",
                    "borderRadius": "15px",
                    "boxShadow": "0 4px 6px rgba(0, 0, 0, 0.07)",
                    "marginBottom": "1rem"
                })
            ])
        ])
    ], fluid=True)


def create_sidebar():
    """Create the sidebar with report filters and display settings."""
    return [
        filter_panel.create_filter_panel(),

        html.Br(),

        dbc.Card([
            dbc.CardHeader(html.H5("⚙️ Display Settings", className="mb-0")),
            dbc.CardBody([
                dbc.Label("Map Style:"),
                dcc.Dropdown(
                    id="map-style-dropdown",
                    options=[
                        {"label": "🗺️ OpenStreetMap", "value": "open-street-map"},
                        {"label": "🌍 Carto Positron", "value": "carto-positron"},
                        {"label": "🧭 Carto Voyager", "value": "carto-voyager"},
                        {"label": "🌚 Carto Dark", "value": "carto-darkmatter"},
                        {"label": "📰 White Background", "value": "white-bg"}
                    ],
                    value=settings['map']['style'],
                    clearable=False,
                    className="mb-3"
                ),

                dbc.Label("Map Height:"),
                dcc.Dropdown(
                    id="map-height-dropdown",
                    options=[
                        {"label": "📱 Compact (500px)", "value": 500},
                        {"label": "📊 Standard (650px)", "value": 650},
                        {"label": "🖥️ Large (900px)", "value": 900},
                    ],
                    value=settings['map']['height'],
                    clearable=False,
                    className="mb-3"
                ),
            ])
        ], className="mb-3"),
    ]


def create_main_content():
    """Create the main content area."""
    return [
        html.Div(id="status-alerts"),

        # Map section
        dbc.Card([
            dbc.CardHeader([
                html.H5("🗺️ Exceedance Hotspots", className="mb-0 d-inline"),
                dbc.Badge(id="station-count-badge", color="info", className="float-end")
            ]),
            dbc.CardBody([
                dcc.Loading(
                    id="loading-map",
                    type="default",
                    children=[
                        dcc.Graph(
                            id="hotspot-map",
                            style={"height": f"{settings['map']['height']}px"},
                            config={"displayModeBar": True, "displaylogo": False}
                        )
                    ]
                )
            ])
        ], className="mb-3"),

        # Station detail
        dbc.Card([
            dbc.CardHeader([
                html.H5("📈 Station Detail", className="mb-0 d-inline"),
                dbc.Badge(id="selected-station-badge", color="success",
                          className="float-end", style={"display": "none"})
            ]),
            dbc.CardBody([
                html.Div(id="station-detail-container", children=[
                    html.P("Select a station on the map to view its observations.",
                           className="text-muted")
                ])
            ])
        ], className="mb-3"),

        # Tables
        dbc.Card([
            dbc.CardHeader([
                html.H5("📋 Summary Tables", className="mb-0 d-inline"),
                dbc.Button("⬇️ Download CSV", id="download-btn", color="outline-primary",
                           size="sm", className="float-end", n_clicks=0),
                dcc.Download(id="summary-download")
            ]),
            dbc.CardBody([
                dbc.Tabs([
                    dbc.Tab(html.Div(id="station-table-container", className="mt-3"),
                            label="Stations", tab_id="stations-tab"),
                    dbc.Tab(html.Div(id="watershed-table-container", className="mt-3"),
                            label="Watersheds", tab_id="watersheds-tab"),
                ], active_tab="stations-tab")
            ])
        ])
    ]


app.layout = dbc.Container([
    create_header(),

    dbc.Row([
        dbc.Col(create_sidebar(), width=3, style={"minWidth": "260px"}),
        dbc.Col(create_main_content(), width=9)
    ], className="g-3"),

    dcc.Store(id='selected-station-store'),
    dcc.Store(id='map-view-store'),

], fluid=True)


def _threshold_value(value):
    if value is None or value == '':
        return None
    return float(value)


def build_report_state(parameter, start_date, end_date, count_range,
                       tmdl_enabled, waterbodies, threshold) -> ReportState:
    """Collect control values into a ReportState."""
    return ReportState(
        parameter=parameter,
        start_date=start_date,
        end_date=end_date,
        count_range=tuple(count_range) if count_range else None,
        tmdl_enabled=bool(tmdl_enabled),
        waterbodies=tuple(waterbodies or ()),
        threshold=_threshold_value(threshold)
    )


def run_report(state: ReportState):
    """
    Compute hotspots for a callback.

    Returns (view, alert): view is None when the report could not be built and
    alert explains why. Raises PreventUpdate while the selection is incomplete.
    """
    try:
        return compute_hotspots(store, state), None
    except SelectionIncomplete:
        raise PreventUpdate
    except (UnknownParameterError, ValueError) as e:
        logger.warning(f"Cannot compute hotspots: {e}")
        return None, dbc.Alert(str(e), color="warning", dismissable=True)
    except Exception:
        logger.exception(f"Unexpected error computing hotspots for {state.parameter}")
        return None, dbc.Alert("The report could not be computed. See the server log for details.",
                               color="danger", dismissable=True)


@app.callback(
    [Output('waterbody-dropdown', 'options'),
     Output('waterbody-dropdown', 'value'),
     Output('waterbody-dropdown', 'disabled'),
     Output('waterbody-info', 'children')],
    [Input('parameter-dropdown', 'value'),
     Input('tmdl-switch', 'value')],
    [State('waterbody-dropdown', 'value')]
)
def update_waterbody_options(parameter, tmdl_enabled, current_selection):
    """Populate receiving waterbodies for the parameter's TMDL group."""
    if not parameter:
        raise PreventUpdate

    group = parameter_group(parameter)
    waterbodies = receiving_waterbodies(store.tmdl_associations(), parameter)
    options = [{'label': w, 'value': w} for w in waterbodies]
    selection = [w for w in (current_selection or []) if w in waterbodies]

    if group is None:
        info = f"{parameter} has no TMDL parameter group"
    elif not waterbodies:
        info = f"No {group} TMDL waterbodies in the dataset"
    else:
        info = f"{len(waterbodies)} {group} TMDL waterbodies"

    return options, selection, not (tmdl_enabled and waterbodies), info


@app.callback(
    [Output('threshold-input', 'value'),
     Output('threshold-input', 'min'),
     Output('threshold-input', 'max'),
     Output('threshold-info', 'children')],
    [Input('parameter-dropdown', 'value')]
)
def update_threshold_defaults(parameter):
    """Seed the threshold input when the constituent changes."""
    if not parameter:
        raise PreventUpdate

    try:
        bounds = threshold_defaults(store, parameter)
    except UnknownParameterError as e:
        logger.warning(str(e))
        return None, None, None, str(e)

    if threshold_resolver.threshold_source(parameter) == 'defined':
        info = f"Defined threshold: {bounds.default:g}"
    elif bounds.default is not None:
        info = f"No defined threshold; using the median result ({bounds.default:g})"
    else:
        info = "No observations for this constituent"

    if bounds.min is not None:
        info = f"{info}. Observed range {bounds.min:g} to {bounds.max:g}"

    return bounds.default, bounds.min, bounds.max, info


@app.callback(
    [Output('hotspot-map', 'figure'),
     Output('station-count-badge', 'children'),
     Output('results-count', 'children'),
     Output('filter-summary', 'children'),
     Output('station-table-container', 'children'),
     Output('watershed-table-container', 'children'),
     Output('status-alerts', 'children'),
     Output('map-view-store', 'data')],
    [Input('parameter-dropdown', 'value'),
     Input('date-range-picker', 'start_date'),
     Input('date-range-picker', 'end_date'),
     Input('count-range-slider', 'value'),
     Input('tmdl-switch', 'value'),
     Input('waterbody-dropdown', 'value'),
     Input('threshold-input', 'value'),
     Input('map-style-dropdown', 'value'),
     Input('map-height-dropdown', 'value')],
    [State('selected-station-store', 'data'),
     State('map-view-store', 'data')]
)
def update_report(parameter, start_date, end_date, count_range, tmdl_enabled,
                  waterbodies, threshold, map_style, map_height, selected_station, map_view):
    """Recompute station summaries and redraw the map and tables."""
    state = build_report_state(parameter, start_date, end_date, count_range,
                               tmdl_enabled, waterbodies, threshold)

    # Keep this session's view when only display settings changed
    ctx = callback_context
    keep_view = None
    if ctx.triggered:
        trigger_id = ctx.triggered[0]['prop_id'].split('.')[0]
        if trigger_id in ['map-style-dropdown', 'map-height-dropdown']:
            keep_view = map_view

    view, alert = run_report(state)
    if view is None:
        return no_update, no_update, no_update, no_update, no_update, no_update, alert, no_update

    fig = map_component.create_hotspot_map(
        view.stations,
        parameter=view.parameter,
        selected_station=selected_station,
        map_style=map_style,
        height=map_height,
        view=keep_view
    )

    station_count = len(view.stations)
    summary_parts = [f"Threshold: {view.threshold:g}" if view.threshold is not None else "Threshold: none"]
    if state.tmdl_enabled and state.waterbodies:
        summary_parts.append(f"TMDL waterbodies: {', '.join(state.waterbodies)}")

    return (
        fig,
        f"{station_count:,} stations",
        f"{station_count:,} stations shown",
        " | ".join(summary_parts),
        create_station_table(view.stations),
        create_watershed_table(watershed_summary(view.stations)),
        None,
        figure_view(fig)
    )


@app.callback(
    Output('map-view-store', 'data', allow_duplicate=True),
    [Input('hotspot-map', 'relayoutData')],
    [State('map-view-store', 'data')],
    prevent_initial_call=True
)
def track_map_view(relayout_data, map_view):
    """Remember where the user panned or zoomed the map."""
    updated = view_from_relayout(relayout_data, map_view)
    if updated is map_view:
        raise PreventUpdate
    return updated


@app.callback(
    Output('hotspot-map', 'style'),
    [Input('map-height-dropdown', 'value')]
)
def update_map_container_height(map_height):
    """Update the map container height based on user selection."""
    return {"height": f"{map_height}px"}


@app.callback(
    [Output('selected-station-store', 'data'),
     Output('selected-station-badge', 'children'),
     Output('selected-station-badge', 'style'),
     Output('station-detail-container', 'children')],
    [Input('hotspot-map', 'clickData'),
     Input('parameter-dropdown', 'value'),
     Input('threshold-input', 'value'),
     Input('date-range-picker', 'start_date'),
     Input('date-range-picker', 'end_date')],
    [State('selected-station-store', 'data')]
)
def handle_station_selection(click_data, parameter, threshold, start_date, end_date, selected_station):
    """Show the observation history of the clicked station."""
    station_code = selected_station
    if click_data:
        try:
            station_code = click_data['points'][0]['customdata']
            if isinstance(station_code, (list, tuple)):
                station_code = station_code[0] if station_code else None
        except (KeyError, IndexError, TypeError):
            return no_update, no_update, no_update, no_update

    if not station_code or not parameter:
        return None, "", {"display": "none"}, html.P(
            "Select a station on the map to view its observations.", className="text-muted")

    station_code = str(station_code)
    series = station_timeseries(store, parameter, station_code)

    date_range = None
    if start_date and end_date:
        try:
            date_range = DateRange.from_values(start_date, end_date)
        except ValueError:
            date_range = None

    fig = create_station_plot(
        station_code, parameter, series,
        threshold=_threshold_value(threshold),
        date_range=date_range
    )

    return (
        station_code,
        station_code,
        {"display": "inline-block"},
        dcc.Graph(figure=fig, config=PLOT_CONFIG)
    )


@app.callback(
    Output('summary-download', 'data'),
    [Input('download-btn', 'n_clicks')],
    [State('parameter-dropdown', 'value'),
     State('date-range-picker', 'start_date'),
     State('date-range-picker', 'end_date'),
     State('count-range-slider', 'value'),
     State('tmdl-switch', 'value'),
     State('waterbody-dropdown', 'value'),
     State('threshold-input', 'value')],
    prevent_initial_call=True
)
def download_summary(n_clicks, parameter, start_date, end_date, count_range,
                     tmdl_enabled, waterbodies, threshold):
    """Export the current station summaries as CSV."""
    if not n_clicks:
        raise PreventUpdate

    state = build_report_state(parameter, start_date, end_date, count_range,
                               tmdl_enabled, waterbodies, threshold)
    view, _ = run_report(state)
    if view is None:
        raise PreventUpdate

    export = summary_for_download(view)
    filename = f"hotspots_{view.parameter}_{state.start_date}_{state.end_date}.csv"
    return dcc.send_data_frame(export.to_csv, filename, index=False)


if __name__ == '__main__':
    server_settings = settings['server']
    logger.info(f"Starting {APP_TITLE} on {server_settings['host']}:{server_settings['port']}")
    app.run(
        host=server_settings['host'],
        port=server_settings['port'],
        debug=server_settings['debug']
    )
