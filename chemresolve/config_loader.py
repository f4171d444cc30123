# chemresolve/config_loader.py

import json
import os
from collections import namedtuple

import jsonschema
import yaml

from .errors import ConfigError
from .resolver import ResolutionMode
from .tables import DEFAULT_SENTINEL_EXPONENT

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), 'config_schema.json')


# tables_path None means the packaged tables.
EngineConfig = namedtuple(
    'EngineConfig',
    ['tables_path', 'default_mode', 'decompose_ions', 'sentinel_exponent', 'memoize', 'memo_size'],
    defaults=[None, ResolutionMode.ELEMENTAL, True, DEFAULT_SENTINEL_EXPONENT, False, 256],
)


def load_schema():
    """Load the config schema from config_schema.json"""
    with open(SCHEMA_PATH, 'r') as f:
        return json.load(f)


def config_from_dict(raw, base_dir=None):
    """
    Build an EngineConfig from a plain mapping.

    Args:
        raw (dict): Config values; unknown keys are rejected.
        base_dir (str): Directory that a relative tables_path is resolved against.

    Returns:
        EngineConfig

    Raises:
        ConfigError: If the mapping does not match config_schema.json.
    """
    raw = dict(raw or {})
    try:
        jsonschema.validate(instance=raw, schema=load_schema())
    except jsonschema.ValidationError as e:
        location = ' -> '.join(str(p) for p in e.path) or '<root>'
        raise ConfigError(f"Config validation failed at {location}: {e.message}") from e

    tables_path = raw.get('tables_path')
    if tables_path and base_dir and not os.path.isabs(tables_path):
        tables_path = os.path.join(base_dir, tables_path)

    return EngineConfig(
        tables_path=tables_path,
        default_mode=ResolutionMode(raw.get('default_mode', 'elemental')),
        decompose_ions=raw.get('decompose_ions', True),
        sentinel_exponent=raw.get('sentinel_exponent', DEFAULT_SENTINEL_EXPONENT),
        memoize=raw.get('memoize', False),
        memo_size=raw.get('memo_size', 256),
    )


def load_config(config_path):
    """
    Loads an engine config YAML file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        EngineConfig, with tables_path resolved relative to the config file.
    """
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return config_from_dict(raw, base_dir=os.path.dirname(os.path.abspath(config_path)))
