"""
Module: oversight_kernel.models.modification
Responsibility: ORM persistence for schedule modifications (suspensions and
    extensions) that move a contract's current end date.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - start_date <= end_date, both inclusive (service layer).
    - duration_days == (end_date - start_date).days + 1 (service layer).
    - No two SUSPENSION rows of one contract share a calendar day
      (ModificationService, under the contract row lock).
    - contract.current_end_date moves by +duration_days on insert, by the
      duration delta on update, and by -duration_days on delete.

Failure modes:
    - None at ORM level; overlap is a business rule, not a constraint.
"""

from datetime import date
from enum import Enum
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from oversight_kernel.db.base import TrackedBase, UUIDString


class ModificationKind(str, Enum):
    """Kind of schedule modification."""

    SUSPENSION = "SUSPENSION"
    EXTENSION = "EXTENSION"


class Modification(TrackedBase):
    """
    Schedule modification of a contract.

    Both kinds push the current end date out by their inclusive duration;
    only suspensions are subject to the overlap rule.
    """

    __tablename__ = "modifications"

    __table_args__ = (
        Index("idx_modification_contract_kind", "contract_id", "kind"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=False,
    )

    kind: Mapped[ModificationKind] = mapped_column(
        String(20),
        nullable=False,
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    duration_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Inclusive day count of [start_date, end_date]",
    )

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Modification {self.kind} {self.start_date}..{self.end_date}>"
