#!/usr/bin/env python3
"""
Tests for observation filtering and TMDL waterbody relabelling.
"""

import pandas as pd
import pytest

from hotspot_dashboard.data.filters import (
    filter_observations, parameter_group, receiving_waterbodies
)


def test_tmdl_off_returns_parameter_rows(observations, full_range):
    rows = filter_observations(observations, 'ENT', full_range, False, [])
    assert len(rows) == 9
    assert set(rows['Parameter']) == {'ENT'}
    assert set(rows['Watershed']) == {'W1', 'W2'}


def test_empty_waterbody_selection_ignores_toggle(observations, tmdl, full_range):
    off = filter_observations(observations, 'ENT', full_range, False, [])
    on = filter_observations(observations, 'ENT', full_range, True, [], tmdl=tmdl)
    pd.testing.assert_frame_equal(off, on)


def test_tmdl_relabels_watershed_with_receiving_waterbody(observations, tmdl, full_range):
    rows = filter_observations(observations, 'ENT', full_range, True, ['R1'], tmdl=tmdl)

    assert set(rows['StationCode']) == {'STA1'}
    assert len(rows) == 4
    assert set(rows['Watershed']) == {'R1'}
    assert list(rows.columns) == list(observations.columns)


def test_tmdl_uses_parameter_group(observations, tmdl, full_range):
    # R3 is a Metals TMDL: matches Copper but not ENT
    copper = filter_observations(observations, 'Copper', full_range, True, ['R3'], tmdl=tmdl)
    assert set(copper['StationCode']) == {'STA3'}
    assert set(copper['Watershed']) == {'R3'}

    ent = filter_observations(observations, 'ENT', full_range, True, ['R3'], tmdl=tmdl)
    assert ent.empty


def test_tmdl_multiple_waterbodies(observations, tmdl, full_range):
    rows = filter_observations(observations, 'ENT', full_range, True, ['R1', 'R2'], tmdl=tmdl)
    by_station = rows.groupby('StationCode')['Watershed'].unique()
    assert list(by_station['STA1']) == ['R1']
    assert list(by_station['STA3']) == ['R2']
    assert len(rows) == 6


def test_station_in_two_receiving_waterbodies_appears_under_each(observations, full_range):
    tmdl = pd.DataFrame({
        'ParameterGroup': ['Pathogens', 'Pathogens', 'Pathogens'],
        'StationCode': ['STA1', 'STA1', 'STA1'],
        'Receiving': ['R1', 'R2', 'R2'],
    })
    rows = filter_observations(observations, 'ENT', full_range, True, ['R1', 'R2'], tmdl=tmdl)
    assert len(rows) == 8
    assert rows.groupby('Watershed').size().to_dict() == {'R1': 4, 'R2': 4}


def test_tmdl_no_matching_stations_is_empty_not_error(observations, tmdl, full_range):
    rows = filter_observations(observations, 'TN', full_range, True, ['R1'], tmdl=tmdl)
    assert rows.empty
    assert list(rows.columns) == list(observations.columns)


def test_parameter_without_group(observations, tmdl, full_range):
    assert parameter_group('pH') is None
    rows = filter_observations(observations, 'pH', full_range, True, ['R1'], tmdl=tmdl)
    assert rows.empty


def test_tmdl_enabled_requires_associations(observations, full_range):
    with pytest.raises(ValueError):
        filter_observations(observations, 'ENT', full_range, True, ['R1'])


def test_reversed_date_range_rejected(observations):
    with pytest.raises(ValueError):
        filter_observations(observations, 'ENT', ('2021-01-01', '2020-01-01'), False, [])


def test_filter_keeps_rows_outside_date_range(observations):
    """Date restriction is left to the aggregator so n covers the full record."""
    rows = filter_observations(observations, 'ENT', ('2021-01-01', '2021-12-31'), False, [])
    assert len(rows) == 9


def test_receiving_waterbodies_for_parameter(tmdl):
    assert receiving_waterbodies(tmdl, 'ENT') == ['R1', 'R2']
    assert receiving_waterbodies(tmdl, 'Copper') == ['R3']
    assert receiving_waterbodies(tmdl, 'TN') == []
    assert receiving_waterbodies(tmdl, 'pH') == []
