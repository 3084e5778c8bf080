"""
Runtime settings loader.

Reads ``config/settings.json``, merges ``config/settings.local.json`` over it
when present, then applies environment variable overrides.

Usage:
    from hotspot_dashboard.utils.settings import load_settings, setup_logging

    settings = load_settings()
    setup_logging(settings['logging']['level'])
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[2] / 'config'

DEFAULT_SETTINGS = {
    'data': {
        'source': 'csv',
        'path': 'data/sample',
    },
    'map': {
        'style': 'open-street-map',
        'height': 650,
    },
    'logging': {
        'level': 'INFO',
    },
    'server': {
        'host': '0.0.0.0',
        'port': 8050,
        'debug': False,
    },
}


def setup_logging(level: str = 'INFO'):
    """Configure root logging for the dashboard process."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format=LOG_FORMAT
    )


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge two dictionaries (override wins)"""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_with_overrides(base_file: Path, local_file: Path) -> Dict:
    """
    Load JSON file with local overrides

    Priority: local_file > base_file. A missing base file yields an empty dict.
    """
    data = {}
    if base_file.exists():
        with open(base_file, 'r') as f:
            data = json.load(f)

    if local_file.exists():
        logger.info(f"Found local override: {local_file.name}")
        with open(local_file, 'r') as f:
            local_data = json.load(f)
        data = _deep_merge(data, local_data)

    return data


def apply_env_overrides(settings: Dict, environ: Optional[Dict] = None) -> Dict:
    """Apply environment variable overrides to settings"""
    environ = os.environ if environ is None else environ
    overrides_applied = 0

    if 'HOTSPOT_DATA_SOURCE' in environ:
        settings['data']['source'] = environ['HOTSPOT_DATA_SOURCE']
        overrides_applied += 1
        logger.info(f"  HOTSPOT_DATA_SOURCE: {environ['HOTSPOT_DATA_SOURCE']}")

    if 'HOTSPOT_DATA_PATH' in environ:
        settings['data']['path'] = environ['HOTSPOT_DATA_PATH']
        overrides_applied += 1
        logger.info(f"  HOTSPOT_DATA_PATH: {environ['HOTSPOT_DATA_PATH']}")

    if 'HOTSPOT_LOG_LEVEL' in environ:
        settings['logging']['level'] = environ['HOTSPOT_LOG_LEVEL']
        overrides_applied += 1
        logger.info(f"  HOTSPOT_LOG_LEVEL: {environ['HOTSPOT_LOG_LEVEL']}")

    if 'HOST' in environ:
        settings['server']['host'] = environ['HOST']
        overrides_applied += 1

    if 'PORT' in environ:
        try:
            settings['server']['port'] = int(environ['PORT'])
            overrides_applied += 1
            logger.info(f"  PORT: {environ['PORT']}")
        except ValueError:
            logger.warning(f"Invalid PORT value: {environ['PORT']}")

    if 'DASH_DEBUG' in environ:
        settings['server']['debug'] = environ['DASH_DEBUG'].lower() == 'true'
        overrides_applied += 1

    if overrides_applied > 0:
        logger.info(f"Applied {overrides_applied} environment variable overrides")

    return settings


def load_settings(config_dir: Optional[Path] = None, environ: Optional[Dict] = None) -> Dict:
    """Load dashboard settings: defaults < settings.json < settings.local.json < environment."""
    config_dir = Path(config_dir) if config_dir else DEFAULT_CONFIG_DIR

    file_settings = load_json_with_overrides(
        config_dir / 'settings.json',
        config_dir / 'settings.local.json'
    )
    settings = _deep_merge(copy.deepcopy(DEFAULT_SETTINGS), file_settings)

    return apply_env_overrides(settings, environ)
