"""
Configuration Loader (``oversight_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into the frozen
``oversight_config.schema`` dataclasses.  The single public entry point for
runtime config is ``oversight_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from oversight_config.schema import (
    AccessSettings,
    DatabaseSettings,
    LoggingSettings,
    OversightConfig,
)


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    return DatabaseSettings(
        url=data["url"],
        echo=bool(data.get("echo", False)),
        pool_size=int(data.get("pool_size", 20)),
        max_overflow=int(data.get("max_overflow", 10)),
        pool_timeout=int(data.get("pool_timeout", 30)),
        pool_recycle=int(data.get("pool_recycle", 1800)),
    )


def parse_config(data: dict[str, Any], database_url: str | None = None) -> OversightConfig:
    """
    Parse an ``OversightConfig`` from a dict.

    ``database_url`` replaces ``database.url`` when given; the checksum is
    computed over the source data, so the override does not change it.

    Raises:
        KeyError: if ``config_id``, ``version``, ``environment`` or
            ``database.url`` is missing.
    """
    database_data = dict(data["database"])
    if database_url:
        database_data["url"] = database_url

    logging_data = data.get("logging") or {}
    access_data = data.get("access") or {}

    return OversightConfig(
        config_id=data["config_id"],
        version=int(data["version"]),
        environment=data["environment"],
        database=parse_database(database_data),
        logging=LoggingSettings(level=str(logging_data.get("level", "INFO"))),
        access=AccessSettings(
            supervisor_can_delete=bool(access_data.get("supervisor_can_delete", False)),
        ),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
