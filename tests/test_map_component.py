#!/usr/bin/env python3
"""
Tests for the hotspot map, station detail chart and summary tables.
"""

import numpy as np
import pandas as pd
from dash import dash_table, html

from hotspot_dashboard.components.map_component import (
    HotspotMapComponent, figure_view, view_from_relayout
)
from hotspot_dashboard.components.station_plot import create_station_plot
from hotspot_dashboard.components.tables import create_station_table, create_watershed_table
from hotspot_dashboard.data.models import DateRange
from hotspot_dashboard.data.pipeline import ReportState, compute_hotspots, watershed_summary
from hotspot_dashboard.utils.config import DEFAULT_MAP_VIEW, LEGEND_TITLE, NA_COLOR


def _view(store, **overrides):
    values = dict(parameter='ENT', start_date='2019-01-01', end_date='2021-12-31', count_range=(0, 10))
    values.update(overrides)
    return compute_hotspots(store, ReportState(**values))


def _trace(fig, name):
    return next(trace for trace in fig.data if trace.name == name)


def test_map_has_colorbar_and_labels(store):
    view = _view(store)
    fig = HotspotMapComponent().create_hotspot_map(view.stations, parameter='ENT')

    assert len(fig.data) == 2
    points = _trace(fig, 'Stations')
    assert 'STA1: 50 % exceeding, 4 total obs.' in list(points.text)
    assert 'ENT' in fig.layout.title.text

    legend = _trace(fig, LEGEND_TITLE)
    assert legend.marker.showscale
    assert legend.marker.colorbar.title.text == LEGEND_TITLE
    assert (legend.marker.cmin, legend.marker.cmax) == (0, 100)


def test_map_points_use_aggregated_colors(store):
    view = _view(store)
    fig = HotspotMapComponent().create_hotspot_map(view.stations)

    points = _trace(fig, 'Stations')
    assert list(points.marker.color) == list(view.stations['color'])
    assert list(points.customdata) == list(view.stations['StationCode'])


def test_map_without_threshold_uses_sentinel_trace(store):
    view = _view(store)
    stations = view.stations.copy()
    stations.loc[stations['StationCode'] == 'STA2', 'exceeds'] = np.nan

    fig = HotspotMapComponent().create_hotspot_map(stations)
    unscored = _trace(fig, 'No threshold')
    assert unscored.marker.color == NA_COLOR
    assert list(unscored.customdata) == ['STA2']


def test_empty_map_shows_no_data(store):
    view = _view(store, start_date='2010-01-01', end_date='2010-12-31')
    fig = HotspotMapComponent().create_hotspot_map(view.stations)

    assert fig.layout.annotations[0].text.startswith('No data')
    assert figure_view(fig) == DEFAULT_MAP_VIEW


def test_invalid_map_style_falls_back(store):
    view = _view(store)
    fig = HotspotMapComponent().create_hotspot_map(view.stations, map_style='not-a-style')
    assert fig.layout.map.style == 'open-street-map'


def test_selected_station_highlight(store):
    view = _view(store)
    fig = HotspotMapComponent().create_hotspot_map(view.stations, selected_station='STA3')
    assert fig.data[-1].name == 'Selected: STA3'


def test_auto_fit_centres_on_stations(store):
    view = _view(store)
    fig = HotspotMapComponent().create_hotspot_map(view.stations)

    fitted = figure_view(fig)
    assert fitted['center']['lat'] == (32.77 + 33.80) / 2
    assert fitted['zoom'] == 7


def test_shared_component_keeps_views_per_session(store):
    component = HotspotMapComponent()
    local = _view(store).stations
    distant = local.assign(Latitude=45.0, Longitude=-122.0)

    # Session B fits to its stations, then session A fits elsewhere
    view_b = figure_view(component.create_hotspot_map(local))
    component.create_hotspot_map(distant)

    # B only changes the basemap and passes back its own view
    fig_b = component.create_hotspot_map(local, map_style='carto-positron', view=view_b)
    assert fig_b.layout.map.center.lat == view_b['center']['lat']
    assert fig_b.layout.map.zoom == view_b['zoom']
    assert fig_b.layout.map.style == 'carto-positron'


def test_view_from_relayout():
    stored = {'center': {'lat': 33.0, 'lon': -117.0}, 'zoom': 8}

    assert view_from_relayout(None, stored) is stored
    assert view_from_relayout({'autosize': True}, stored) is stored

    panned = view_from_relayout({'map.center': {'lon': -118.5, 'lat': 34.2}, 'map.zoom': 10.5}, stored)
    assert panned == {'center': {'lat': 34.2, 'lon': -118.5}, 'zoom': 10.5}
    assert stored['zoom'] == 8

    assert view_from_relayout({'map.zoom': 5}, None) == {'center': DEFAULT_MAP_VIEW['center'], 'zoom': 5}


def test_station_plot_threshold_line():
    series = pd.DataFrame({
        'Date': pd.to_datetime(['2020-01-01', '2020-06-01', '2021-01-01']),
        'Result': [50.0, 150.0, 200.0],
    })
    fig = create_station_plot('STA1', 'ENT', series, threshold=104.0,
                              date_range=DateRange.from_values('2020-01-01', '2020-12-31'))

    assert '2 of 3 above threshold' in fig.layout.title.text
    assert len(fig.layout.shapes) == 2


def test_station_plot_without_observations():
    fig = create_station_plot('STA1', 'ENT', pd.DataFrame(columns=['Date', 'Result']))
    assert 'No ENT observations' in fig.layout.annotations[0].text


def test_tables(store):
    view = _view(store)
    table = create_station_table(view.stations)
    assert isinstance(table, dash_table.DataTable)
    assert table.data[0]['StationCode'] == 'STA3'

    rollup = create_watershed_table(watershed_summary(view.stations))
    assert isinstance(rollup, dash_table.DataTable)
    assert len(rollup.data) == 2


def test_tables_without_data(store):
    view = _view(store, count_range=(50, 60))
    assert isinstance(create_station_table(view.stations), html.P)
    assert isinstance(create_watershed_table(watershed_summary(view.stations)), html.P)
