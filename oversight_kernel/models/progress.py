"""
Module: oversight_kernel.models.progress
Responsibility: ORM persistence for append-only progress reports at contract
    level (general) and activity level.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Each row stores only its own increment.  Accumulated totals, percentages
      and status are never stored; ProgressSelector recomputes them from the
      history on every read.
    - Reports are ordered by (reported_at, sequence).  sequence is allocated
      from SequenceService so equal timestamps still have a total order.
    - Append-only: no service updates or deletes report rows.

Audit relevance:
    Because nothing is denormalized, a late correction to a contract's
    committed value is reflected in every historical financial percentage.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from oversight_kernel.db.base import TrackedBase, UUIDString
from oversight_kernel.db.types import Cost, Percent, Quantity, Sequence, WholeMoney


class GeneralProgressReport(TrackedBase):
    """Contract-level progress increment: money spent and physical % gained."""

    __tablename__ = "general_progress_reports"

    __table_args__ = (
        Index(
            "idx_general_progress_order",
            "contract_id",
            "reported_at",
            "sequence",
        ),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=False,
    )

    financial_value: Mapped[WholeMoney] = mapped_column(nullable=False)

    physical_percent: Mapped[Percent] = mapped_column(nullable=False)

    reported_at: Mapped[datetime] = mapped_column(nullable=False)

    sequence: Mapped[Sequence] = mapped_column(nullable=False, unique=True)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<GeneralProgressReport #{self.sequence} {self.physical_percent}%>"


class ActivityProgressReport(TrackedBase):
    """Activity-level progress increment: quantity executed and its cost."""

    __tablename__ = "activity_progress_reports"

    __table_args__ = (
        Index(
            "idx_activity_progress_order",
            "activity_id",
            "reported_at",
            "sequence",
        ),
    )

    activity_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("activities.id"),
        nullable=False,
    )

    quantity: Mapped[Quantity] = mapped_column(nullable=False)

    cost: Mapped[Cost] = mapped_column(nullable=False)

    reported_at: Mapped[datetime] = mapped_column(nullable=False)

    sequence: Mapped[Sequence] = mapped_column(nullable=False, unique=True)

    work_done: Mapped[str] = mapped_column(Text, nullable=False)

    next_steps: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<ActivityProgressReport #{self.sequence} qty={self.quantity}>"
