"""
Module: oversight_kernel.models.addition
Responsibility: ORM persistence for budget additions -- signed adjustments to
    a contract's committed value.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - amount is a signed whole-unit integer and never zero (service layer).
    - The owning contract's committed_value changes by exactly the amount
      inserted, the delta updated, or the amount deleted, in the same
      savepoint as this row (AdditionService).

Audit relevance:
    Additions are the only legitimate source of change to committed_value.
"""

from datetime import date
from uuid import UUID

from sqlalchemy import Date, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from oversight_kernel.db.base import TrackedBase, UUIDString
from oversight_kernel.db.types import WholeMoney


class Addition(TrackedBase):
    """Budget addition against a contract."""

    __tablename__ = "additions"

    __table_args__ = (
        Index("idx_addition_contract", "contract_id", "effective_date"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=False,
    )

    amount: Mapped[WholeMoney] = mapped_column(
        nullable=False,
        doc="Signed change to the committed value",
    )

    effective_date: Mapped[date] = mapped_column(Date, nullable=False)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Addition {self.amount} on {self.effective_date}>"
