"""
Module: oversight_kernel.db.types
Responsibility: Annotated type aliases and rounding helpers for contract and
    progress columns.  Centralizes precision so that every model, service and
    selector uses identical definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Contract money is whole currency units (BigInteger).  No floats.
    - Quantities and percentages are Decimal with explicit scale.
    - round_percent() is the ONLY sanctioned rounding for derived percentages
      (2 places, ROUND_HALF_UP).
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated

from sqlalchemy import BigInteger, Numeric, String, Text

# Whole currency units (contract value, additions, reported financial value)
WholeMoney = Annotated[int, BigInteger]

# Activity cost with cents
Cost = Annotated[Decimal, Numeric(15, 2)]

# Physical quantity against an activity target
Quantity = Annotated[Decimal, Numeric(14, 2)]

# Percentage 0..100 with two places
Percent = Annotated[Decimal, Numeric(5, 2)]

# Monotonic sequence number for ordering
Sequence = Annotated[int, BigInteger]

# Short identifier strings
ShortCode = Annotated[str, String(50)]

# Free text notes
Note = Annotated[str, Text]


PERCENT_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

_PERCENT_QUANTUM = Decimal(1).scaleb(-PERCENT_DECIMAL_PLACES)


def round_percent(value: Decimal) -> Decimal:
    """
    Round a derived percentage to two places.

    Preconditions: value is a finite Decimal.
    Postconditions: Returns a Decimal quantized to 0.01 using ROUND_HALF_UP.
    """
    return value.quantize(_PERCENT_QUANTUM, rounding=DEFAULT_ROUNDING)


def to_decimal(value: int | Decimal | str | None) -> Decimal:
    """
    Normalize a numeric database or caller value to Decimal.

    Aggregates come back as int on some backends and Decimal on others;
    None (empty aggregate) becomes zero.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
