"""
Module: oversight_kernel.models.work_point
Responsibility: ORM persistence for work points (CUO, a specific intervention
    location under a contract) and the activities grouped under them.
    Activities provide the physical target that caps activity-level progress.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - Activity.physical_target > 0 (enforced at service layer).
    - Coordinates are stored as given; no geographic validation.
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oversight_kernel.db.base import TrackedBase, UUIDString
from oversight_kernel.db.types import Quantity, WholeMoney

if TYPE_CHECKING:
    from oversight_kernel.models.contract import Contract


class WorkPoint(TrackedBase):
    """Intervention location under a contract."""

    __tablename__ = "work_points"

    __table_args__ = (
        Index("idx_work_point_contract", "contract_id"),
    )

    contract_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("contracts.id"),
        nullable=False,
    )

    number: Mapped[str] = mapped_column(String(20), nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    district: Mapped[str | None] = mapped_column(String(50), nullable=True)

    neighborhood: Mapped[str | None] = mapped_column(String(100), nullable=True)

    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)

    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    contract: Mapped["Contract"] = relationship(
        "Contract",
        back_populates="work_points",
    )

    activities: Mapped[list["Activity"]] = relationship(
        "Activity",
        back_populates="work_point",
    )

    def __repr__(self) -> str:
        return f"<WorkPoint {self.number}>"


class Activity(TrackedBase):
    """
    Unit of work with a physical and a financial target.

    The physical target is the hard ceiling for accumulated reported
    quantity; the projected financial value is the reference for cost
    execution percentage.
    """

    __tablename__ = "activities"

    __table_args__ = (
        Index("idx_activity_work_point", "work_point_id"),
    )

    work_point_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("work_points.id"),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(String(255), nullable=False)

    physical_target: Mapped[Quantity] = mapped_column(nullable=False)

    projected_financial: Mapped[WholeMoney] = mapped_column(nullable=False)

    unit: Mapped[str] = mapped_column(String(50), nullable=False)

    work_point: Mapped["WorkPoint"] = relationship(
        "WorkPoint",
        back_populates="activities",
    )

    @property
    def contract_id(self) -> UUID:
        return self.work_point.contract_id

    def __repr__(self) -> str:
        return f"<Activity {self.description!r} target={self.physical_target} {self.unit}>"
