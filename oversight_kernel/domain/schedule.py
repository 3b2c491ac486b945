"""
Schedule -- pure date math for contract schedule changes.

Responsibility:
    Inclusive day counts, inclusive range intersection, and end-date shifting
    used by the modification engine and the ledger verification selector.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Duration law: duration_days(start, end) == (end - start).days + 1 >= 1.
    - Overlap law: two inclusive ranges intersect iff
      start1 <= end2 AND end1 >= start2 (symmetric; covers containment,
      partial overlap and exact match).
"""

from dataclasses import dataclass
from datetime import date, timedelta

from oversight_kernel.exceptions import InvalidDateRangeError


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] calendar range."""

    start: date
    end: date

    def __post_init__(self) -> None:
        validate_range(self.start, self.end)

    @property
    def duration_days(self) -> int:
        return duration_days(self.start, self.end)

    def overlaps(self, other: "DateRange") -> bool:
        return ranges_overlap(self.start, self.end, other.start, other.end)

    def intersection(self, other: "DateRange") -> "DateRange | None":
        """Return the shared sub-range, or None when disjoint."""
        if not self.overlaps(other):
            return None
        return DateRange(max(self.start, other.start), min(self.end, other.end))


def validate_range(start: date, end: date) -> None:
    """
    Raise InvalidDateRangeError unless start <= end.

    A single-day range (start == end) is valid.
    """
    if start > end:
        raise InvalidDateRangeError(str(start), str(end))


def duration_days(start: date, end: date) -> int:
    """Inclusive day count of [start, end]; the end day counts."""
    validate_range(start, end)
    return (end - start).days + 1


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """True if inclusive ranges [start1, end1] and [start2, end2] share a day."""
    return start1 <= end2 and end1 >= start2


def shift_end_date(current_end: date, days: int) -> date:
    """Move a contract end date by a signed number of days."""
    return current_end + timedelta(days=days)
