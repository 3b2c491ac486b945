"""
Oversight configuration schema.

Frozen dataclasses that a YAML configuration set is parsed into.  The kernel
never sees these types; ``oversight_config.bridges`` translates them into the
plain arguments kernel functions take.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field


class ConfigValidationError(ValueError):
    """A configuration set failed structural validation."""

    code: str = "CONFIG_INVALID"

    def __init__(self, config_id: str, errors: list[str]):
        self.config_id = config_id
        self.errors = tuple(errors)
        super().__init__(
            f"Configuration {config_id!r} failed validation:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level.upper())


@dataclass(frozen=True)
class AccessSettings:
    """Knobs of the reference role policy."""

    supervisor_can_delete: bool = False


@dataclass(frozen=True)
class OversightConfig:
    """A complete, validated configuration set."""

    config_id: str
    version: int
    environment: str
    database: DatabaseSettings
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    access: AccessSettings = field(default_factory=AccessSettings)
    checksum: str = ""


_VALID_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def validate_config(config: OversightConfig) -> list[str]:
    """Return a list of validation errors (empty when valid)."""
    errors: list[str] = []
    if not config.config_id:
        errors.append("config_id is required")
    if config.version < 1:
        errors.append(f"version must be >= 1, got {config.version}")
    if not config.database.url:
        errors.append("database.url is required")
    elif not config.database.url.startswith(("postgresql", "sqlite")):
        errors.append(
            f"database.url must be a postgresql or sqlite URL, got {config.database.url!r}"
        )
    if config.database.pool_size < 1:
        errors.append("database.pool_size must be >= 1")
    if config.database.max_overflow < 0:
        errors.append("database.max_overflow must be >= 0")
    if config.logging.level.upper() not in _VALID_LEVELS:
        errors.append(f"logging.level {config.logging.level!r} is not a logging level")
    return errors
