from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_COLUMN_MAP,
    DEFAULT_RECORD_TYPES,
    AccountLookupConfig,
    DatabaseConfig,
    FieldKeyMap,
    ImporterConfig,
)
from ..models.release import ReleaseKind

"""Config loader.

Responsibilities:
- Load the YAML config (``config/import.yml`` by default)
- Validate it against the JSON schema shipped with the package
- Apply defaults: every key is optional; partial column / field-key maps
  are merged over the built-in ones
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_config(data: dict[str, Any]) -> ImporterConfig:
    columns = {**DEFAULT_COLUMN_MAP}
    columns.update({k: str(v).upper() for k, v in (data.get("columns") or {}).items()})

    record_types = dict(DEFAULT_RECORD_TYPES)
    for kind_name, record_type in (data.get("record_types") or {}).items():
        record_types[ReleaseKind(kind_name)] = record_type

    keys_raw = data.get("field_keys") or {}
    field_keys = FieldKeyMap.build(album=keys_raw.get("album"), single=keys_raw.get("single"))

    db_raw = data.get("database") or {}
    database = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImporterConfig(
        columns=columns,
        record_types=record_types,
        field_keys=field_keys,
        accounts=AccountLookupConfig(**(data.get("accounts") or {})),
        publish_status=data.get("publish_status", "publish"),
        log_directory=data.get("log_directory", "./logs"),
        database=database,
    )


def load_config(path: Path | None = None) -> ImporterConfig:
    """Load and validate the config at ``path``; None returns the defaults."""
    if path is None:
        return ImporterConfig()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return _build_config(data)
