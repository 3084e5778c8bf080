"""
Dataset Store for the hotspot dashboard

Holds the observation, threshold and TMDL association tables for the life of
the process and precomputes the summaries used to populate the report
controls.
"""

import logging
import os
import sqlite3
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .models import CountBounds, DatasetError, DateRange
from ..utils.config import (
    DATASET_TABLES, NUTRIENT_PARAMETERS, OBSERVATION_COLUMNS,
    THRESHOLD_COLUMNS, TMDL_COLUMNS, TOP_PARAMETER_COUNT
)

logger = logging.getLogger(__name__)


def _require_columns(df: pd.DataFrame, required: List[str], table: str):
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise DatasetError(f"Table '{table}' is missing required columns: {missing}")


class DatasetStore:
    """Read-only container for the three input tables."""

    def __init__(self, observations: pd.DataFrame, thresholds: pd.DataFrame,
                 tmdl: pd.DataFrame):
        """
        Validate and normalise the input tables, then precompute summaries.

        Parameters:
        -----------
        observations : pd.DataFrame
            One row per sample: StationCode, Watershed, Parameter, Date,
            Result, Longitude, Latitude
        thresholds : pd.DataFrame
            Parameter, Threshold (at most one row per parameter)
        tmdl : pd.DataFrame
            ParameterGroup, StationCode, Receiving
        """
        _require_columns(observations, OBSERVATION_COLUMNS, 'observations')
        _require_columns(thresholds, THRESHOLD_COLUMNS, 'thresholds')
        _require_columns(tmdl, TMDL_COLUMNS, 'tmdl')

        self._observations = self._clean_observations(observations)
        self._thresholds = self._clean_thresholds(thresholds)
        self._tmdl = (
            tmdl[TMDL_COLUMNS]
            .dropna()
            .astype(str)
            .drop_duplicates()
            .reset_index(drop=True)
        )

        self._stations = self._compute_stations()
        self._date_range = self._compute_date_range()
        self._count_range = self._compute_count_range()
        self._parameter_choices = self._compute_parameter_choices()

        logger.info(
            f"Dataset loaded: {len(self._observations):,} observations, "
            f"{len(self._stations):,} stations, {len(self._thresholds)} thresholds, "
            f"{len(self._tmdl)} TMDL associations"
        )

    # ------------------------------------------------------------------
    # Loaders
    # ------------------------------------------------------------------

    @classmethod
    def from_csv_dir(cls, path: str) -> 'DatasetStore':
        """Load ``observations.csv``, ``thresholds.csv`` and ``tmdl.csv`` from a directory."""
        tables = {}
        for key, name in DATASET_TABLES.items():
            csv_path = os.path.join(path, f"{name}.csv")
            if not os.path.exists(csv_path):
                raise DatasetError(f"Dataset file not found: {csv_path}")
            tables[key] = pd.read_csv(csv_path, dtype={'StationCode': str})
            logger.debug(f"Read {len(tables[key])} rows from {csv_path}")

        return cls(tables['observations'], tables['thresholds'], tables['tmdl'])

    @classmethod
    def from_sqlite(cls, db_path: str) -> 'DatasetStore':
        """Load the three tables from a SQLite database."""
        if not os.path.exists(db_path):
            raise DatasetError(f"Database not found at {db_path}")

        try:
            conn = sqlite3.connect(db_path)
            try:
                cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
                tables = {row[0] for row in cursor.fetchall()}
                missing_tables = set(DATASET_TABLES.values()) - tables
                if missing_tables:
                    raise DatasetError(f"Database is missing required tables: {sorted(missing_tables)}")

                frames = {
                    key: pd.read_sql_query(f'SELECT * FROM {name}', conn)
                    for key, name in DATASET_TABLES.items()
                }
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise DatasetError(f"Database connection error: {e}") from e

        return cls(frames['observations'], frames['thresholds'], frames['tmdl'])

    @classmethod
    def from_settings(cls, data_settings: Dict) -> 'DatasetStore':
        source = data_settings.get('source', 'csv')
        path = data_settings['path']
        if source == 'csv':
            return cls.from_csv_dir(path)
        if source == 'sqlite':
            return cls.from_sqlite(path)
        raise DatasetError(f"Unsupported data source: {source!r}")

    # ------------------------------------------------------------------
    # Normalisation
    # ------------------------------------------------------------------

    @staticmethod
    def _clean_observations(df: pd.DataFrame) -> pd.DataFrame:
        obs = df[OBSERVATION_COLUMNS].copy()
        obs['StationCode'] = obs['StationCode'].astype(str)
        obs['Watershed'] = obs['Watershed'].astype(str)
        obs['Parameter'] = obs['Parameter'].astype(str)
        obs['Date'] = pd.to_datetime(obs['Date'], errors='coerce').dt.normalize()
        obs['Result'] = pd.to_numeric(obs['Result'], errors='coerce')
        obs['Longitude'] = pd.to_numeric(obs['Longitude'], errors='coerce')
        obs['Latitude'] = pd.to_numeric(obs['Latitude'], errors='coerce')

        bad = obs['Date'].isna() | obs['Result'].isna()
        if bad.any():
            logger.warning(f"Dropping {int(bad.sum())} observations with unparseable Date or Result")
            obs = obs[~bad]

        return obs.reset_index(drop=True)

    @staticmethod
    def _clean_thresholds(df: pd.DataFrame) -> pd.DataFrame:
        thresholds = df[THRESHOLD_COLUMNS].copy()
        thresholds['Parameter'] = thresholds['Parameter'].astype(str)
        thresholds['Threshold'] = pd.to_numeric(thresholds['Threshold'], errors='coerce')
        thresholds = thresholds.dropna(subset=['Threshold'])

        duplicated = thresholds['Parameter'].duplicated(keep='first')
        if duplicated.any():
            logger.warning(
                f"Multiple thresholds defined for {sorted(thresholds.loc[duplicated, 'Parameter'].unique())}; "
                "keeping the first of each"
            )
            thresholds = thresholds[~duplicated]

        return thresholds.reset_index(drop=True)

    # ------------------------------------------------------------------
    # Precomputed summaries
    # ------------------------------------------------------------------

    def _compute_stations(self) -> pd.DataFrame:
        return (
            self._observations[['StationCode', 'Watershed', 'Longitude', 'Latitude']]
            .drop_duplicates(subset=['StationCode'])
            .sort_values('StationCode')
            .reset_index(drop=True)
        )

    def _compute_date_range(self) -> Optional[DateRange]:
        if self._observations.empty:
            return None
        return DateRange(self._observations['Date'].min(), self._observations['Date'].max())

    def _compute_count_range(self) -> CountBounds:
        if self._observations.empty:
            return CountBounds(0, 0)
        counts = self._observations.groupby(['StationCode', 'Parameter']).size()
        return CountBounds(int(counts.min()), int(counts.max()))

    def _compute_parameter_choices(self) -> Tuple[List[str], List[str]]:
        counts = self._observations['Parameter'].value_counts()
        top = list(counts.index[:TOP_PARAMETER_COUNT])
        with_threshold = list(self._thresholds['Parameter'])

        observed = set(counts.index)
        constituents = sorted(
            p for p in set(top) | set(with_threshold)
            if p in observed and p not in NUTRIENT_PARAMETERS
        )
        nutrients = [p for p in NUTRIENT_PARAMETERS if p in observed]
        return constituents, nutrients

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def observations(self) -> pd.DataFrame:
        return self._observations.copy()

    def thresholds(self) -> pd.DataFrame:
        return self._thresholds.copy()

    def tmdl_associations(self) -> pd.DataFrame:
        return self._tmdl.copy()

    def stations(self) -> pd.DataFrame:
        """Distinct stations with coordinates."""
        return self._stations.copy()

    @property
    def date_range(self) -> Optional[DateRange]:
        """Global (min, max) observation date; ``None`` for an empty dataset."""
        return self._date_range

    @property
    def count_range(self) -> CountBounds:
        """Range of per-station, per-parameter observation counts."""
        return self._count_range

    @property
    def parameter_choices(self) -> Tuple[List[str], List[str]]:
        """(constituents, nutrients) offered by the constituent dropdown."""
        constituents, nutrients = self._parameter_choices
        return list(constituents), list(nutrients)

    @property
    def allowed_parameters(self) -> List[str]:
        constituents, nutrients = self._parameter_choices
        return constituents + nutrients

    def parameter_observations(self, parameter: str) -> pd.DataFrame:
        """All observations for one parameter."""
        return self._observations[self._observations['Parameter'] == parameter].copy()


_store: Optional[DatasetStore] = None


def get_dataset_store(data_settings: Optional[Dict] = None) -> DatasetStore:
    """Get the process-wide dataset store, loading it on first use."""
    global _store
    if _store is None:
        if data_settings is None:
            raise DatasetError("Dataset store has not been initialised")
        _store = DatasetStore.from_settings(data_settings)
    return _store
