"""Database layer - engine, base classes, and column types."""

from oversight_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from oversight_kernel.db.engine import (
    create_tables,
    get_engine,
    get_session,
    session_scope,
)
from oversight_kernel.db.types import (
    Cost,
    Note,
    Percent,
    Quantity,
    Sequence,
    ShortCode,
    WholeMoney,
)

__all__ = [
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
    "WholeMoney",
    "Cost",
    "Quantity",
    "Percent",
    "Sequence",
    "ShortCode",
    "Note",
]
