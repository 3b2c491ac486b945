"""
ContractLifecycleService -- transaction-owning facade over the kernel engines.

Responsibility:
    The single entry point an outer layer (HTTP controller, batch job, test)
    calls.  For every operation it:

        1. Binds a correlation id, the caller and the operation name into
           LogContext.
        2. Resolves the target contract (directly, or through the addition,
           modification, activity or report being touched).
        3. Asks the injected AccessGate; a refusal raises AccessDeniedError
           before any engine runs.
        4. Delegates to the kernel engine or selector.
        5. Commits on success / rolls back on failure (when auto_commit),
           logging operation_completed or operation_failed.

Architecture position:
    Services layer.  Composes oversight_kernel services and selectors; owns
    the transaction boundary the kernel services deliberately leave open.

Invariants enforced:
    - No engine runs for an unauthorized caller.
    - Every write operation is all-or-nothing at the transaction level.
    - Failures are never swallowed: the typed kernel exception propagates
      unchanged after rollback and logging.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import TypeVar
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from oversight_kernel.domain.access import AccessGate, Caller, GateOperation
from oversight_kernel.domain.clock import Clock, SystemClock
from oversight_kernel.domain.dtos import (
    ActivityInfo,
    ActivityProgressInfo,
    AdditionInfo,
    ContractInfo,
    GeneralProgressInfo,
    LedgerReconciliation,
    ModificationInfo,
    WorkPointInfo,
)
from oversight_kernel.exceptions import OversightKernelError
from oversight_kernel.logging_config import LogContext, get_logger
from oversight_kernel.models.modification import ModificationKind
from oversight_kernel.selectors.ledger_selector import LedgerSelector
from oversight_kernel.selectors.progress_selector import ProgressSelector
from oversight_kernel.services.addition_service import AdditionService
from oversight_kernel.services.contract_service import ContractService
from oversight_kernel.services.modification_service import ModificationService
from oversight_kernel.services.progress_service import (
    ActivityProgressService,
    GeneralProgressService,
)

logger = get_logger("services.lifecycle")

T = TypeVar("T")


class ContractLifecycleService:
    """
    Authorized, transactional access to contract lifecycle and progress.

    Args:
        session: Session whose transaction this facade commits/rolls back.
        access_gate: Injected authorization policy.
        clock: Timestamp source for progress reports.  Defaults to
            SystemClock.
        auto_commit: When False, the caller owns commit/rollback (e.g. inside
            ``session_scope()``).
    """

    def __init__(
        self,
        session: Session,
        access_gate: AccessGate,
        clock: Clock | None = None,
        auto_commit: bool = True,
    ):
        self._session = session
        self._gate = access_gate
        self._clock = clock or SystemClock()
        self._auto_commit = auto_commit

        self._contracts = ContractService(session)
        self._additions = AdditionService(session)
        self._modifications = ModificationService(session)
        self._general = GeneralProgressService(session, self._clock)
        self._activity = ActivityProgressService(session, self._clock)
        self._progress = ProgressSelector(session)
        self._ledger = LedgerSelector(session)

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _run(
        self,
        caller: Caller,
        operation: str,
        gate_operation: GateOperation,
        resolve_contract: Callable[[], UUID | None],
        action: Callable[[], T],
        write: bool,
    ) -> T:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=str(caller.caller_id),
            operation=operation,
        ):
            t0 = time.monotonic()
            try:
                contract_id = resolve_contract()
                with LogContext.bind(
                    contract_id=str(contract_id) if contract_id else None
                ):
                    self._gate.authorize(caller, contract_id, gate_operation)
                    result = action()

                    if write and self._auto_commit:
                        self._session.commit()

                    logger.info(
                        "operation_completed",
                        extra={
                            "caller_role": caller.role.value,
                            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                        },
                    )
                return result

            except Exception as exc:
                if self._auto_commit:
                    self._session.rollback()
                # Domain refusals are expected traffic; anything else is a fault.
                level = logger.warning if isinstance(exc, OversightKernelError) else logger.error
                level(
                    "operation_failed",
                    extra={
                        "caller_role": caller.role.value,
                        "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                    },
                    exc_info=True,
                )
                raise

    def _contract_of_activity(self, activity_id: UUID) -> UUID:
        return self._contracts.get_activity(activity_id).contract_id

    # =========================================================================
    # Contracts
    # =========================================================================

    def create_contract(
        self,
        caller: Caller,
        contract_number: str,
        short_name: str,
        scope: str,
        start_date: date,
        end_date: date,
        initial_value: int,
        contractor: str | None = None,
        supervisor_id: UUID | None = None,
    ) -> ContractInfo:
        return self._run(
            caller,
            "create_contract",
            GateOperation.CREATE,
            lambda: None,
            lambda: self._contracts.create_contract(
                contract_number=contract_number,
                short_name=short_name,
                scope=scope,
                start_date=start_date,
                end_date=end_date,
                initial_value=initial_value,
                actor_id=caller.caller_id,
                contractor=contractor,
                supervisor_id=supervisor_id,
            ),
            write=True,
        )

    def get_contract(self, caller: Caller, contract_id: UUID) -> ContractInfo:
        return self._run(
            caller,
            "get_contract",
            GateOperation.READ,
            lambda: contract_id,
            lambda: self._contracts.get_contract(contract_id),
            write=False,
        )

    def verify_ledger(self, caller: Caller, contract_id: UUID) -> LedgerReconciliation:
        """Recompute the contract ledger; raises LedgerInconsistencyError on drift."""
        return self._run(
            caller,
            "verify_ledger",
            GateOperation.READ,
            lambda: contract_id,
            lambda: self._ledger.verify(contract_id),
            write=False,
        )

    def create_work_point(
        self,
        caller: Caller,
        contract_id: UUID,
        number: str,
        description: str,
        district: str | None = None,
        neighborhood: str | None = None,
        latitude: Decimal | None = None,
        longitude: Decimal | None = None,
    ) -> WorkPointInfo:
        return self._run(
            caller,
            "create_work_point",
            GateOperation.CREATE,
            lambda: contract_id,
            lambda: self._contracts.create_work_point(
                contract_id=contract_id,
                number=number,
                description=description,
                actor_id=caller.caller_id,
                district=district,
                neighborhood=neighborhood,
                latitude=latitude,
                longitude=longitude,
            ),
            write=True,
        )

    def create_activity(
        self,
        caller: Caller,
        work_point_id: UUID,
        description: str,
        physical_target: Decimal,
        projected_financial: int,
        unit: str,
    ) -> ActivityInfo:
        return self._run(
            caller,
            "create_activity",
            GateOperation.CREATE,
            lambda: self._contracts.get_work_point(work_point_id).contract_id,
            lambda: self._contracts.create_activity(
                work_point_id=work_point_id,
                description=description,
                physical_target=physical_target,
                projected_financial=projected_financial,
                unit=unit,
                actor_id=caller.caller_id,
            ),
            write=True,
        )

    # =========================================================================
    # Modifications
    # =========================================================================

    def create_modification(
        self,
        caller: Caller,
        contract_id: UUID,
        kind: ModificationKind,
        start_date: date,
        end_date: date,
        note: str | None = None,
    ) -> ModificationInfo:
        return self._run(
            caller,
            "create_modification",
            GateOperation.CREATE,
            lambda: contract_id,
            lambda: self._modifications.create_modification(
                contract_id=contract_id,
                kind=kind,
                start_date=start_date,
                end_date=end_date,
                actor_id=caller.caller_id,
                note=note,
            ),
            write=True,
        )

    def update_modification(
        self,
        caller: Caller,
        modification_id: UUID,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        note: str | None = None,
    ) -> ModificationInfo:
        return self._run(
            caller,
            "update_modification",
            GateOperation.UPDATE,
            lambda: self._modifications.contract_id_of(modification_id),
            lambda: self._modifications.update_modification(
                modification_id,
                actor_id=caller.caller_id,
                start_date=start_date,
                end_date=end_date,
                note=note,
            ),
            write=True,
        )

    def delete_modification(self, caller: Caller, modification_id: UUID) -> None:
        self._run(
            caller,
            "delete_modification",
            GateOperation.DELETE,
            lambda: self._modifications.contract_id_of(modification_id),
            lambda: self._modifications.delete_modification(
                modification_id, actor_id=caller.caller_id
            ),
            write=True,
        )

    def get_modification(self, caller: Caller, modification_id: UUID) -> ModificationInfo:
        return self._run(
            caller,
            "get_modification",
            GateOperation.READ,
            lambda: self._modifications.contract_id_of(modification_id),
            lambda: self._modifications.get_modification(modification_id),
            write=False,
        )

    def list_modifications(
        self, caller: Caller, contract_id: UUID
    ) -> list[ModificationInfo]:
        return self._run(
            caller,
            "list_modifications",
            GateOperation.READ,
            lambda: contract_id,
            lambda: self._modifications.list_for_contract(contract_id),
            write=False,
        )

    # =========================================================================
    # Additions
    # =========================================================================

    def create_addition(
        self,
        caller: Caller,
        contract_id: UUID,
        amount: int,
        effective_date: date,
        note: str | None = None,
    ) -> AdditionInfo:
        return self._run(
            caller,
            "create_addition",
            GateOperation.CREATE,
            lambda: contract_id,
            lambda: self._additions.create_addition(
                contract_id=contract_id,
                amount=amount,
                effective_date=effective_date,
                actor_id=caller.caller_id,
                note=note,
            ),
            write=True,
        )

    def update_addition(
        self,
        caller: Caller,
        addition_id: UUID,
        *,
        amount: int | None = None,
        effective_date: date | None = None,
        note: str | None = None,
    ) -> AdditionInfo:
        return self._run(
            caller,
            "update_addition",
            GateOperation.UPDATE,
            lambda: self._additions.contract_id_of(addition_id),
            lambda: self._additions.update_addition(
                addition_id,
                actor_id=caller.caller_id,
                amount=amount,
                effective_date=effective_date,
                note=note,
            ),
            write=True,
        )

    def delete_addition(self, caller: Caller, addition_id: UUID) -> None:
        self._run(
            caller,
            "delete_addition",
            GateOperation.DELETE,
            lambda: self._additions.contract_id_of(addition_id),
            lambda: self._additions.delete_addition(addition_id, actor_id=caller.caller_id),
            write=True,
        )

    def get_addition(self, caller: Caller, addition_id: UUID) -> AdditionInfo:
        return self._run(
            caller,
            "get_addition",
            GateOperation.READ,
            lambda: self._additions.contract_id_of(addition_id),
            lambda: self._additions.get_addition(addition_id),
            write=False,
        )

    def list_additions(self, caller: Caller, contract_id: UUID) -> list[AdditionInfo]:
        return self._run(
            caller,
            "list_additions",
            GateOperation.READ,
            lambda: contract_id,
            lambda: self._additions.list_for_contract(contract_id),
            write=False,
        )

    # =========================================================================
    # Progress
    # =========================================================================

    def create_general_progress(
        self,
        caller: Caller,
        contract_id: UUID,
        financial_value: int,
        physical_percent: Decimal,
        note: str | None = None,
    ) -> GeneralProgressInfo:
        return self._run(
            caller,
            "create_general_progress",
            GateOperation.CREATE,
            lambda: contract_id,
            lambda: self._general.create_general_progress(
                contract_id=contract_id,
                financial_value=financial_value,
                physical_percent=physical_percent,
                actor_id=caller.caller_id,
                note=note,
            ),
            write=True,
        )

    def list_general_progress(
        self, caller: Caller, contract_id: UUID
    ) -> list[GeneralProgressInfo]:
        return self._run(
            caller,
            "list_general_progress",
            GateOperation.READ,
            lambda: contract_id,
            lambda: self._general.list_general_progress(contract_id),
            write=False,
        )

    def get_general_progress(self, caller: Caller, report_id: UUID) -> GeneralProgressInfo:
        return self._run(
            caller,
            "get_general_progress",
            GateOperation.READ,
            lambda: self._progress.contract_id_of_general(report_id),
            lambda: self._general.get_general_progress(report_id),
            write=False,
        )

    def create_activity_progress(
        self,
        caller: Caller,
        activity_id: UUID,
        quantity: Decimal,
        cost: Decimal,
        work_done: str,
        next_steps: str | None = None,
    ) -> ActivityProgressInfo:
        return self._run(
            caller,
            "create_activity_progress",
            GateOperation.CREATE,
            lambda: self._contract_of_activity(activity_id),
            lambda: self._activity.create_activity_progress(
                activity_id=activity_id,
                quantity=quantity,
                cost=cost,
                work_done=work_done,
                actor_id=caller.caller_id,
                next_steps=next_steps,
            ),
            write=True,
        )

    def list_activity_progress(
        self, caller: Caller, activity_id: UUID
    ) -> list[ActivityProgressInfo]:
        return self._run(
            caller,
            "list_activity_progress",
            GateOperation.READ,
            lambda: self._contract_of_activity(activity_id),
            lambda: self._activity.list_activity_progress(activity_id),
            write=False,
        )

    def get_activity_progress(
        self, caller: Caller, report_id: UUID
    ) -> ActivityProgressInfo:
        return self._run(
            caller,
            "get_activity_progress",
            GateOperation.READ,
            lambda: self._contract_of_activity(self._progress.activity_id_of(report_id)),
            lambda: self._activity.get_activity_progress(report_id),
            write=False,
        )
