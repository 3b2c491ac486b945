"""
oversight_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or the ``DATABASE_URL`` environment variable directly.

Architecture position:
    Configuration -- sits above ``oversight_kernel`` and below
    ``oversight_services``.  The kernel MUST NEVER import from
    ``oversight_config``; ``oversight_config.bridges`` translates a config
    into kernel arguments.

Failure modes:
    - ``FileNotFoundError`` -- no ``<environment>.yaml`` in the sets directory.
    - ``ConfigValidationError`` -- structural validation failed.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``OVERSIGHT_CONFIG_TRACE`` log entry with the config id, version,
    environment and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from oversight_config.loader import load_yaml_file, parse_config
from oversight_config.schema import ConfigValidationError, OversightConfig, validate_config
from oversight_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DATABASE_URL_ENV = "DATABASE_URL"

__all__ = [
    "ConfigValidationError",
    "OversightConfig",
    "get_active_config",
]


def get_active_config(
    environment: str = "default",
    config_dir: Path | None = None,
) -> OversightConfig:
    """The ONLY public configuration entrypoint.

    Loads ``<config_dir>/<environment>.yaml``, applies the ``DATABASE_URL``
    environment override, validates the result and logs
    ``OVERSIGHT_CONFIG_TRACE``.

    Args:
        environment: Name of the configuration set (file stem).
        config_dir: Override path to the sets directory.
            Defaults to oversight_config/sets/.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        ConfigValidationError: If validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{environment}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set not found: {path}")

    data = load_yaml_file(path)
    database_url = os.environ.get(DATABASE_URL_ENV)
    config = parse_config(data, database_url=database_url)

    errors = validate_config(config)
    if errors:
        raise ConfigValidationError(config.config_id, errors)

    _logger.info(
        "OVERSIGHT_CONFIG_TRACE",
        extra={
            "trace_type": "OVERSIGHT_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "environment": config.environment,
            "checksum": config.checksum,
            "database_url_overridden": bool(database_url),
        },
    )
    return config
