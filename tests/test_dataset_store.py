#!/usr/bin/env python3
"""
Tests for loading the dataset tables and the precomputed summaries.
"""

import sqlite3

import pandas as pd
import pytest

from hotspot_dashboard.data.dataset_store import DatasetStore
from hotspot_dashboard.data.models import DatasetError

from conftest import create_test_observations, create_test_thresholds, create_test_tmdl


def _write_csv_dataset(path, observations=None):
    observations = create_test_observations() if observations is None else observations
    observations.to_csv(path / 'observations.csv', index=False)
    create_test_thresholds().to_csv(path / 'thresholds.csv', index=False)
    create_test_tmdl().to_csv(path / 'tmdl.csv', index=False)


def test_summaries(store):
    assert store.date_range.start == pd.Timestamp('2019-05-01')
    assert store.date_range.end == pd.Timestamp('2021-09-01')
    assert tuple(store.count_range) == (1, 4)

    stations = store.stations()
    assert list(stations['StationCode']) == ['STA1', 'STA2', 'STA3']
    assert {'Longitude', 'Latitude'} <= set(stations.columns)


def test_parameter_choices_separate_nutrients(store):
    constituents, nutrients = store.parameter_choices
    assert constituents == ['Copper', 'ENT']
    assert nutrients == ['TN']
    assert store.allowed_parameters == ['Copper', 'ENT', 'TN']


def test_parameter_choices_include_thresholded_outside_top_ten():
    rows = []
    for i in range(11):
        rows += [(f'S{i}', 'W', f'P{i:02d}', '2020-01-01', 1.0, -117.0, 33.0)] * (20 - i)
    rows.append(('S0', 'W', 'Rare', '2020-01-01', 1.0, -117.0, 33.0))
    obs = pd.DataFrame(rows, columns=['StationCode', 'Watershed', 'Parameter', 'Date',
                                      'Result', 'Longitude', 'Latitude'])
    thresholds = pd.DataFrame({'Parameter': ['Rare'], 'Threshold': [1.0]})
    store = DatasetStore(obs, thresholds, create_test_tmdl())

    constituents, _ = store.parameter_choices
    assert 'Rare' in constituents
    assert 'P10' not in constituents
    assert len(constituents) == 11


def test_accessors_return_copies(store):
    obs = store.observations()
    obs['Result'] = -1
    assert (store.observations()['Result'] >= 0).all()

    store.thresholds().drop(index=0, inplace=True)
    assert len(store.thresholds()) == 2


def test_from_csv_dir(tmp_path):
    _write_csv_dataset(tmp_path)
    store = DatasetStore.from_csv_dir(str(tmp_path))

    assert len(store.observations()) == 16
    assert pd.api.types.is_datetime64_any_dtype(store.observations()['Date'])
    assert store.allowed_parameters == ['Copper', 'ENT', 'TN']


def test_missing_csv_file_raises(tmp_path):
    create_test_thresholds().to_csv(tmp_path / 'thresholds.csv', index=False)
    with pytest.raises(DatasetError, match='observations.csv'):
        DatasetStore.from_csv_dir(str(tmp_path))


def test_missing_columns_raise():
    obs = create_test_observations().drop(columns=['Result'])
    with pytest.raises(DatasetError, match='Result'):
        DatasetStore(obs, create_test_thresholds(), create_test_tmdl())


def test_unparseable_rows_are_dropped(tmp_path):
    obs = create_test_observations()
    obs['Result'] = obs['Result'].astype(object)
    obs.loc[0, 'Result'] = 'ND'
    obs['Date'] = obs['Date'].dt.strftime('%Y-%m-%d')
    obs.loc[1, 'Date'] = 'not a date'
    _write_csv_dataset(tmp_path, obs)

    store = DatasetStore.from_csv_dir(str(tmp_path))
    assert len(store.observations()) == 14


def test_duplicate_thresholds_keep_first():
    thresholds = pd.DataFrame({'Parameter': ['ENT', 'ENT'], 'Threshold': [104.0, 35.0]})
    store = DatasetStore(create_test_observations(), thresholds, create_test_tmdl())
    assert store.thresholds()['Threshold'].tolist() == [104.0]


def test_from_sqlite(tmp_path):
    db_path = tmp_path / 'wq.db'
    conn = sqlite3.connect(db_path)
    obs = create_test_observations()
    obs['Date'] = obs['Date'].dt.strftime('%Y-%m-%d')
    obs.to_sql('observations', conn, index=False)
    create_test_thresholds().to_sql('thresholds', conn, index=False)
    create_test_tmdl().to_sql('tmdl', conn, index=False)
    conn.close()

    store = DatasetStore.from_sqlite(str(db_path))
    assert len(store.observations()) == 16
    assert len(store.tmdl_associations()) == 3


def test_sqlite_missing_table_raises(tmp_path):
    db_path = tmp_path / 'wq.db'
    conn = sqlite3.connect(db_path)
    create_test_thresholds().to_sql('thresholds', conn, index=False)
    conn.close()

    with pytest.raises(DatasetError, match='missing required tables'):
        DatasetStore.from_sqlite(str(db_path))


def test_from_settings_rejects_unknown_source(tmp_path):
    with pytest.raises(DatasetError):
        DatasetStore.from_settings({'source': 'parquet', 'path': str(tmp_path)})


def test_empty_dataset():
    obs = create_test_observations().iloc[0:0]
    store = DatasetStore(obs, create_test_thresholds(), create_test_tmdl())
    assert store.date_range is None
    assert tuple(store.count_range) == (0, 0)
    assert store.parameter_choices == ([], [])
