"""
Module: oversight_kernel.models.contract
Responsibility: ORM persistence for public-works contracts -- the Contract
    Ledger aggregate root.  Each Contract carries identification, its
    supervising user, and the two ledger fields that the lifecycle engines
    mutate: committed_value and current_end_date.
Architecture position: Kernel > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, domain/, or outer layers.

Invariants enforced:
    Derived ledger -- committed_value == initial_value + sum(surviving
           addition amounts) and current_end_date == initial_end_date +
           sum(surviving modification durations).  Maintained by
           AdditionService and ModificationService inside one savepoint
           each, after a row lock on the contract (enforced at service
           layer, not ORM).
    initial_value and initial_end_date never change after creation.

Failure modes:
    - IntegrityError on duplicate contract_number (uq_contract_number).

Audit relevance:
    The ledger fields are what the oversight office reports as "current
    value" and "current end date".  LedgerSelector.reconcile() recomputes
    them from the line items to prove they have not drifted.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oversight_kernel.db.base import TrackedBase, UUIDString
from oversight_kernel.db.types import WholeMoney

if TYPE_CHECKING:
    from oversight_kernel.models.work_point import WorkPoint


class ContractStatus(str, Enum):
    """Contract lifecycle status."""

    ACTIVE = "active"
    FINISHED = "finished"
    SUSPENDED = "suspended"
    LIQUIDATED = "liquidated"


class Contract(TrackedBase):
    """
    Public-works contract and its mutable ledger.

    Guarantees:
        - contract_number is globally unique (uq_contract_number).
        - current_end_date starts equal to initial_end_date.
        - committed_value starts equal to initial_value.

    Non-goals:
        - This model does NOT apply additions or modifications; the engines
          in services/ do, so that both writes share one savepoint.
    """

    __tablename__ = "contracts"

    __table_args__ = (
        UniqueConstraint("contract_number", name="uq_contract_number"),
        Index("idx_contract_supervisor", "supervisor_id"),
        Index("idx_contract_status", "status"),
    )

    # =========================================================================
    # Identification
    # =========================================================================

    contract_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="Unique contract number",
    )

    short_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Short identifier for quick reference",
    )

    scope: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Contract object / scope of works",
    )

    contractor: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        doc="Contractor legal name",
    )

    supervisor_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        nullable=True,
        doc="User supervising the contract",
    )

    status: Mapped[ContractStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ContractStatus.ACTIVE,
    )

    # =========================================================================
    # Schedule
    # =========================================================================

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    initial_end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="End date as signed; never changes",
    )

    current_end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="End date after suspensions and extensions",
    )

    # =========================================================================
    # Value
    # =========================================================================

    initial_value: Mapped[WholeMoney] = mapped_column(
        nullable=False,
        doc="Value as signed; never changes",
    )

    committed_value: Mapped[WholeMoney] = mapped_column(
        nullable=False,
        doc="Value after budget additions",
    )

    work_points: Mapped[list["WorkPoint"]] = relationship(
        "WorkPoint",
        back_populates="contract",
    )

    def __repr__(self) -> str:
        return f"<Contract {self.contract_number}: {self.committed_value} until {self.current_end_date}>"
