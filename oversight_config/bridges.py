"""
Bridges from configuration to kernel inputs.

The kernel takes plain arguments (a URL, pool sizes, a log level) and never
imports this package.  These helpers unpack an ``OversightConfig`` into
those arguments.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from oversight_config.schema import OversightConfig
from oversight_kernel.db.engine import init_engine_from_url
from oversight_kernel.logging_config import configure_logging


def configure_logging_from_config(config: OversightConfig) -> None:
    """Configure kernel logging at the configured level (idempotent)."""
    configure_logging(level=config.logging.level_number)


def init_engine_from_config(config: OversightConfig) -> Engine:
    """Initialize the kernel engine from the database section."""
    configure_logging_from_config(config)
    db = config.database
    return init_engine_from_url(
        db.url,
        echo=db.echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_recycle=db.pool_recycle,
    )
