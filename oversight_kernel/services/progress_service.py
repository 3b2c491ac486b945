"""
Progress services -- append-only progress reports with a ceiling guard.

Responsibility:
    One accumulation algorithm, two instances.  ``ProgressAccumulator``
    validates a report increment, locks its owner, reads the accumulated
    total from ProgressSelector, applies the ceiling guard and appends the
    report with a clock timestamp and a monotonic sequence number.

        +------------------------+------------------+------------------------+
        |                        | General          | Activity               |
        +------------------------+------------------+------------------------+
        | owner                  | Contract         | Activity               |
        | guarded quantity       | physical_percent | quantity               |
        | hard ceiling           | 100              | activity target        |
        | reported alongside     | financial_value  | cost                   |
        +------------------------+------------------+------------------------+

Architecture position:
    Kernel > Services -- imperative shell.  Reads via ProgressSelector, so a
    freshly created report is returned exactly as a later read would see it.

Invariants enforced:
    - Ceiling guard: accumulated + increment <= ceiling, else
      CeilingExceededError and nothing is persisted.
    - Append-only: no update or delete of reports.
    - Owner row is locked before the total is read, so two concurrent
      reports against one owner cannot both pass the guard.

Failure modes:
    - ValidationError subclasses for malformed increments (before any read).
    - ContractNotFoundError / ActivityNotFoundError.
    - CeilingExceededError.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import Any, ClassVar, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from oversight_kernel.db.types import to_decimal
from oversight_kernel.domain.clock import Clock, SystemClock
from oversight_kernel.domain.dtos import ActivityProgressInfo, GeneralProgressInfo
from oversight_kernel.domain.progress import (
    HUNDRED,
    check_ceiling,
    validate_non_negative_amount,
    validate_percent,
    validate_positive_quantity,
)
from oversight_kernel.exceptions import ActivityNotFoundError, CeilingExceededError
from oversight_kernel.logging_config import get_logger
from oversight_kernel.models.progress import (
    ActivityProgressReport,
    GeneralProgressReport,
)
from oversight_kernel.models.work_point import Activity
from oversight_kernel.selectors.progress_selector import ProgressSelector
from oversight_kernel.services.base import BaseService
from oversight_kernel.services.contract_service import ContractService
from oversight_kernel.services.sequence_service import SequenceService

logger = get_logger("services.progress")

ReportT = TypeVar("ReportT", GeneralProgressReport, ActivityProgressReport)


class ProgressAccumulator(BaseService[ReportT]):
    """
    Shared write path for progress reports.

    Subclasses name their owner, how to lock it, which running total is
    guarded and against what ceiling, and how to build the report row.
    """

    sequence_name: ClassVar[str]
    guarded_field: ClassVar[str]

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequences = SequenceService(session)
        self._selector = ProgressSelector(session)

    @abstractmethod
    def _lock_owner(self, owner_id: UUID) -> Any:
        """Lock and return the owner row."""

    @abstractmethod
    def _guarded_total(self, owner_id: UUID) -> Decimal:
        """Accumulated guarded quantity over existing reports."""

    @abstractmethod
    def _ceiling(self, owner: Any) -> Decimal:
        """Hard ceiling of the guarded quantity."""

    def _append(
        self,
        owner_id: UUID,
        increment: Decimal,
        build_report: Any,
    ) -> ReportT:
        """
        Lock, guard, sequence and insert one report inside a savepoint.

        ``build_report(reported_at, sequence)`` returns the unsaved row.
        """
        with self.session.begin_nested():
            owner = self._lock_owner(owner_id)
            prior = self._guarded_total(owner_id)
            ceiling = self._ceiling(owner)
            try:
                projected = check_ceiling(
                    str(owner_id), self.guarded_field, prior, increment, ceiling
                )
            except CeilingExceededError:
                logger.warning(
                    "ceiling_exceeded",
                    extra={
                        "owner_id": str(owner_id),
                        "field": self.guarded_field,
                        "accumulated": prior,
                        "requested": increment,
                        "ceiling": ceiling,
                    },
                )
                raise

            sequence = self._sequences.next_value(self.sequence_name)
            report = build_report(self._clock.now(), sequence)
            self.session.add(report)
            self.session.flush()

        logger.info(
            "progress_reported",
            extra={
                "owner_id": str(owner_id),
                "report_id": str(report.id),
                "field": self.guarded_field,
                "increment": increment,
                "accumulated": projected,
                "sequence": sequence,
            },
        )
        return report


class GeneralProgressService(ProgressAccumulator[GeneralProgressReport]):
    """
    Contract-level progress.

    The accumulated physical percentage may not pass 100.  Financial value
    is not guarded; spending beyond the committed value shows up as a
    financial percentage above 100 and a DELAYED status.

    The physical cap is stricter than the reporting rules it replaces, which
    accepted any accumulated percentage.  A report that would carry the
    contract past 100% is refused with CeilingExceededError.
    """

    sequence_name = SequenceService.GENERAL_PROGRESS
    guarded_field = "physical_percent"

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session, clock)
        self._contracts = ContractService(session)

    def _lock_owner(self, owner_id: UUID) -> Any:
        return self._contracts.get_for_update(owner_id)

    def _guarded_total(self, owner_id: UUID) -> Decimal:
        _, physical = self._selector.general_totals(owner_id)
        return physical

    def _ceiling(self, owner: Any) -> Decimal:
        return HUNDRED

    def create_general_progress(
        self,
        contract_id: UUID,
        financial_value: int,
        physical_percent: Decimal,
        actor_id: UUID,
        note: str | None = None,
    ) -> GeneralProgressInfo:
        """
        Append a contract-level progress report.

        Preconditions:
            - ``financial_value >= 0`` (this report only).
            - ``0 <= physical_percent <= 100`` (this report only).

        Raises:
            InvalidAmountError / InvalidPercentError: Malformed increment.
            ContractNotFoundError: If the contract doesn't exist.
            CeilingExceededError: If accumulated physical % would pass 100.
        """
        validate_non_negative_amount("financial_value", financial_value)
        validate_percent("physical_percent", physical_percent)
        physical_percent = to_decimal(physical_percent)

        def build(reported_at, sequence):
            return GeneralProgressReport(
                contract_id=contract_id,
                financial_value=financial_value,
                physical_percent=physical_percent,
                reported_at=reported_at,
                sequence=sequence,
                note=note,
                created_by_id=actor_id,
            )

        report = self._append(contract_id, physical_percent, build)
        return self._selector.get_general(report.id)

    def list_general_progress(self, contract_id: UUID) -> list[GeneralProgressInfo]:
        return self._selector.list_general(contract_id)

    def get_general_progress(self, report_id: UUID) -> GeneralProgressInfo:
        return self._selector.get_general(report_id)


class ActivityProgressService(ProgressAccumulator[ActivityProgressReport]):
    """
    Activity-level progress.

    Accumulated quantity may not pass the activity's physical target.  Cost
    is reported against the projected financial value without a guard.
    """

    sequence_name = SequenceService.ACTIVITY_PROGRESS
    guarded_field = "quantity"

    def _lock_owner(self, owner_id: UUID) -> Any:
        activity = self.session.execute(
            select(Activity)
            .where(Activity.id == owner_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if activity is None:
            raise ActivityNotFoundError(str(owner_id))
        return activity

    def _guarded_total(self, owner_id: UUID) -> Decimal:
        quantity, _ = self._selector.activity_totals(owner_id)
        return quantity

    def _ceiling(self, owner: Any) -> Decimal:
        return to_decimal(owner.physical_target)

    def create_activity_progress(
        self,
        activity_id: UUID,
        quantity: Decimal,
        cost: Decimal,
        work_done: str,
        actor_id: UUID,
        next_steps: str | None = None,
    ) -> ActivityProgressInfo:
        """
        Append an activity progress report.

        Preconditions:
            - ``quantity > 0`` and ``cost >= 0`` (this report only).

        Raises:
            InvalidQuantityError / InvalidAmountError: Malformed increment.
            ActivityNotFoundError: If the activity doesn't exist.
            CeilingExceededError: If accumulated quantity would pass the
                activity's physical target.
        """
        validate_positive_quantity("quantity", quantity)
        validate_non_negative_amount("cost", cost)
        quantity = to_decimal(quantity)
        cost = to_decimal(cost)

        def build(reported_at, sequence):
            return ActivityProgressReport(
                activity_id=activity_id,
                quantity=quantity,
                cost=cost,
                reported_at=reported_at,
                sequence=sequence,
                work_done=work_done,
                next_steps=next_steps,
                created_by_id=actor_id,
            )

        report = self._append(activity_id, quantity, build)
        return self._selector.get_activity(report.id)

    def list_activity_progress(self, activity_id: UUID) -> list[ActivityProgressInfo]:
        return self._selector.list_activity(activity_id)

    def get_activity_progress(self, report_id: UUID) -> ActivityProgressInfo:
        return self._selector.get_activity(report_id)
