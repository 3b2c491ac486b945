"""
Progress -- pure accumulation and classification rules.

Responsibility:
    The arithmetic shared by contract-level (general) and activity-level
    progress: input validation, running totals, ceiling guard, percentage
    derivation and physical-vs-financial status classification.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Called by
    ProgressSelector (read side) and the progress services (write side).

Invariants enforced:
    - Ceiling guard: prior + requested may not exceed a hard ceiling.
    - Increments carry at most two decimal places, the scale of their
      columns, so the value the guard checks is the value stored.
    - Percentages are accumulated / ceiling * 100, rounded to 0.01 HALF_UP.
    - Status thresholds are fixed: delta < -5 DELAYED, delta > 5 AHEAD,
      otherwise ON_TRACK.  Not configurable per contract.
"""

from collections.abc import Iterable
from decimal import Decimal
from enum import Enum

from oversight_kernel.db.types import PERCENT_DECIMAL_PLACES, round_percent, to_decimal
from oversight_kernel.exceptions import (
    CeilingExceededError,
    InvalidAmountError,
    InvalidPercentError,
    InvalidQuantityError,
)

HUNDRED = Decimal("100")

DELAYED_THRESHOLD = Decimal("-5")
AHEAD_THRESHOLD = Decimal("5")

# Scale of the Quantity, Percent and Cost columns
MAX_DECIMAL_PLACES = PERCENT_DECIMAL_PLACES


class ProgressStatus(str, Enum):
    """Physical progress relative to financial progress."""

    DELAYED = "DELAYED"
    ON_TRACK = "ON_TRACK"
    AHEAD = "AHEAD"


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def _decimal_places(value: Decimal) -> int:
    """Significant fractional digits; trailing zeros do not count."""
    exponent = value.normalize().as_tuple().exponent
    return max(0, -exponent)


def validate_positive_quantity(field: str, value: int | Decimal) -> None:
    value = to_decimal(value)
    if not value.is_finite() or value <= 0:
        raise InvalidQuantityError(field, str(value), "must be greater than zero")
    if _decimal_places(value) > MAX_DECIMAL_PLACES:
        raise InvalidQuantityError(
            field, str(value), f"at most {MAX_DECIMAL_PLACES} decimal places"
        )


def validate_non_negative_amount(field: str, value: int | Decimal) -> None:
    value = to_decimal(value)
    if not value.is_finite() or value < 0:
        raise InvalidAmountError(field, str(value), "must not be negative")
    if _decimal_places(value) > MAX_DECIMAL_PLACES:
        raise InvalidAmountError(
            field, str(value), f"at most {MAX_DECIMAL_PLACES} decimal places"
        )


def validate_percent(field: str, value: int | Decimal) -> None:
    value = to_decimal(value)
    if (
        not value.is_finite()
        or value < 0
        or value > HUNDRED
        or _decimal_places(value) > MAX_DECIMAL_PLACES
    ):
        raise InvalidPercentError(field, str(value))


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


def running_totals(values: Iterable[int | Decimal]) -> list[Decimal]:
    """
    Running sums of values in the given (ascending report) order.

    running_totals([80, 20]) == [80, 100].
    """
    totals: list[Decimal] = []
    total = Decimal("0")
    for value in values:
        total += to_decimal(value)
        totals.append(total)
    return totals


def check_ceiling(
    owner_id: str,
    field: str,
    prior: Decimal,
    requested: Decimal,
    ceiling: Decimal,
) -> Decimal:
    """
    Return prior + requested, or raise CeilingExceededError if it passes ceiling.

    Reaching the ceiling exactly is allowed.
    """
    projected = prior + requested
    if projected > ceiling:
        raise CeilingExceededError(
            owner_id=owner_id,
            field=field,
            accumulated=str(prior),
            requested=str(requested),
            ceiling=str(ceiling),
        )
    return projected


# ---------------------------------------------------------------------------
# Derived fields
# ---------------------------------------------------------------------------


def percentage(accumulated: int | Decimal, ceiling: int | Decimal) -> Decimal | None:
    """
    accumulated / ceiling * 100 rounded to two places.

    Returns None when the ceiling is not positive; there is no meaningful
    percentage of a zero or negative target.
    """
    ceiling_dec = to_decimal(ceiling)
    if ceiling_dec <= 0:
        return None
    return round_percent(to_decimal(accumulated) / ceiling_dec * HUNDRED)


def progress_delta(
    physical_percent: Decimal | None, financial_percent: Decimal | None
) -> Decimal | None:
    """Accumulated physical % minus accumulated financial %."""
    if physical_percent is None or financial_percent is None:
        return None
    return round_percent(physical_percent - financial_percent)


def classify_status(delta: Decimal | None) -> ProgressStatus | None:
    if delta is None:
        return None
    if delta < DELAYED_THRESHOLD:
        return ProgressStatus.DELAYED
    if delta > AHEAD_THRESHOLD:
        return ProgressStatus.AHEAD
    return ProgressStatus.ON_TRACK
