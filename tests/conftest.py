import os
import sys

import pandas as pd
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hotspot_dashboard.data.dataset_store import DatasetStore


def create_test_observations() -> pd.DataFrame:
    """Small synthetic monitoring dataset: three stations, two watersheds."""
    rows = [
        # StationCode, Watershed, Parameter, Date, Result
        ('STA1', 'W1', 'ENT', '2020-01-15', 50),
        ('STA1', 'W1', 'ENT', '2020-06-15', 150),
        ('STA1', 'W1', 'ENT', '2021-03-01', 200),
        ('STA1', 'W1', 'ENT', '2021-09-01', 80),
        ('STA2', 'W1', 'ENT', '2020-02-01', 10),
        ('STA2', 'W1', 'ENT', '2020-07-01', 20),
        ('STA2', 'W1', 'ENT', '2021-05-01', 500),
        ('STA3', 'W2', 'ENT', '2019-05-01', 300),
        ('STA3', 'W2', 'ENT', '2021-06-01', 400),
        ('STA1', 'W1', 'Copper', '2020-03-01', 2),
        ('STA1', 'W1', 'Copper', '2020-08-01', 5),
        ('STA1', 'W1', 'Copper', '2021-01-01', 1),
        ('STA3', 'W2', 'Copper', '2020-05-01', 4),
        ('STA2', 'W1', 'TN', '2020-01-01', 1.0),
        ('STA2', 'W1', 'TN', '2020-06-01', 2.0),
        ('STA2', 'W1', 'TN', '2021-01-01', 3.0),
    ]
    coords = {
        'STA1': (-117.95, 33.76),
        'STA2': (-117.99, 33.80),
        'STA3': (-117.15, 32.77),
    }
    df = pd.DataFrame(rows, columns=['StationCode', 'Watershed', 'Parameter', 'Date', 'Result'])
    df['Longitude'] = df['StationCode'].map(lambda s: coords[s][0])
    df['Latitude'] = df['StationCode'].map(lambda s: coords[s][1])
    df['Date'] = pd.to_datetime(df['Date'])
    return df


def create_test_thresholds() -> pd.DataFrame:
    return pd.DataFrame({'Parameter': ['ENT', 'Copper'], 'Threshold': [104.0, 3.1]})


def create_test_tmdl() -> pd.DataFrame:
    return pd.DataFrame({
        'ParameterGroup': ['Pathogens', 'Pathogens', 'Metals'],
        'StationCode': ['STA1', 'STA3', 'STA3'],
        'Receiving': ['R1', 'R2', 'R3'],
    })


@pytest.fixture
def observations():
    return create_test_observations()


@pytest.fixture
def thresholds():
    return create_test_thresholds()


@pytest.fixture
def tmdl():
    return create_test_tmdl()


@pytest.fixture
def store():
    return DatasetStore(create_test_observations(), create_test_thresholds(), create_test_tmdl())


@pytest.fixture
def full_range():
    return ('2019-01-01', '2021-12-31')
