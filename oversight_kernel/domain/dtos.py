"""
DTOs -- Immutable results returned across the kernel boundary.

Responsibility:
    Frozen dataclasses handed back by services, selectors and the lifecycle
    facade.  Callers never receive ORM instances, so nothing they hold can
    be flushed back to the database by accident.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Services and selectors convert ORM
    rows to these via their ``_to_dto`` helpers; the domain itself never
    touches ORM models.

Invariants enforced:
    - Every progress DTO carries values recomputed from history at read
      time; none of its accumulated fields are persisted.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from oversight_kernel.domain.progress import ProgressStatus


@dataclass(frozen=True)
class ContractInfo:
    """Contract identification and current ledger state."""

    id: UUID
    contract_number: str
    short_name: str
    scope: str
    contractor: str | None
    supervisor_id: UUID | None
    status: str
    start_date: date
    initial_end_date: date
    current_end_date: date
    initial_value: int
    committed_value: int


@dataclass(frozen=True)
class WorkPointInfo:
    id: UUID
    contract_id: UUID
    number: str
    description: str
    district: str | None
    neighborhood: str | None
    latitude: Decimal | None
    longitude: Decimal | None


@dataclass(frozen=True)
class ActivityInfo:
    id: UUID
    work_point_id: UUID
    contract_id: UUID
    description: str
    physical_target: Decimal
    projected_financial: int
    unit: str


@dataclass(frozen=True)
class AdditionInfo:
    """A budget addition and the contract value it produced."""

    id: UUID
    contract_id: UUID
    amount: int
    effective_date: date
    note: str | None
    committed_value: int


@dataclass(frozen=True)
class ModificationInfo:
    """A schedule modification and the contract end date it produced."""

    id: UUID
    contract_id: UUID
    kind: str
    start_date: date
    end_date: date
    duration_days: int
    note: str | None
    current_end_date: date


@dataclass(frozen=True)
class GeneralProgressInfo:
    """
    Contract-level progress report as of its own position in history.

    financial_percent is measured against the contract's current committed
    value; physical_percent_accumulated is already a percentage.  delta and
    status are None when the committed value is not positive.
    """

    id: UUID
    contract_id: UUID
    financial_value: int
    physical_percent: Decimal
    reported_at: datetime
    sequence: int
    note: str | None
    financial_accumulated: int
    physical_percent_accumulated: Decimal
    financial_percent: Decimal | None
    delta: Decimal | None
    status: ProgressStatus | None


@dataclass(frozen=True)
class ActivityProgressInfo:
    """
    Activity-level progress report as of its own position in history.

    physical_percent is accumulated quantity over the activity's physical
    target; financial_execution_percent is accumulated cost over its
    projected financial value.
    """

    id: UUID
    activity_id: UUID
    quantity: Decimal
    cost: Decimal
    reported_at: datetime
    sequence: int
    work_done: str
    next_steps: str | None
    quantity_accumulated: Decimal
    cost_accumulated: Decimal
    physical_percent: Decimal | None
    financial_execution_percent: Decimal | None


@dataclass(frozen=True)
class LedgerReconciliation:
    """Stored ledger fields compared with their recomputation from line items."""

    contract_id: UUID
    stored_value: int
    expected_value: int
    stored_end_date: date
    expected_end_date: date
    addition_count: int
    modification_count: int

    @property
    def is_consistent(self) -> bool:
        return (
            self.stored_value == self.expected_value
            and self.stored_end_date == self.expected_end_date
        )
