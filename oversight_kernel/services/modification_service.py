"""
ModificationService -- suspensions, extensions and the contract end date.

Responsibility:
    Creates, updates and deletes schedule modifications while keeping the
    owning contract's current_end_date equal to initial_end_date plus the
    inclusive durations of the surviving modifications.  Rejects suspensions
    whose window shares a day with another suspension of the same contract.

Architecture position:
    Kernel > Services -- imperative shell.
    Uses the pure date math in ``domain.schedule``.

Invariants enforced:
    - Duration law: duration_days == (end - start).days + 1.
    - Overlap law: suspensions [s1, e1] and [s2, e2] of one contract may not
      satisfy s1 <= e2 AND e1 >= s2.  Checked under the contract row lock so
      two concurrent suspensions cannot both pass.
    - current_end_date == initial_end_date + sum(duration_days).  Both kinds
      push the end date out by their duration.
    - Row and ledger write happen in one SAVEPOINT.  Flush-only.

Failure modes:
    - InvalidDateRangeError: start after end (checked before any read).
    - ContractNotFoundError / ModificationNotFoundError.
    - OverlappingSuspensionError: carries the conflicting modification id and
      the shared date window.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from oversight_kernel.domain.dtos import ModificationInfo
from oversight_kernel.domain.schedule import (
    DateRange,
    duration_days,
    shift_end_date,
    validate_range,
)
from oversight_kernel.exceptions import (
    ModificationNotFoundError,
    OverlappingSuspensionError,
)
from oversight_kernel.logging_config import get_logger
from oversight_kernel.models.contract import Contract
from oversight_kernel.models.modification import Modification, ModificationKind
from oversight_kernel.services.base import BaseService
from oversight_kernel.services.contract_service import ContractService

logger = get_logger("services.modification")


class ModificationService(BaseService[Modification]):
    """
    Modification engine.

    Contract:
        Each public method is atomic on its own: the modification row and the
        contract's current_end_date change together or not at all.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._contracts = ContractService(session)

    @staticmethod
    def _to_dto(modification: Modification, contract: Contract) -> ModificationInfo:
        return ModificationInfo(
            id=modification.id,
            contract_id=modification.contract_id,
            kind=ModificationKind(modification.kind).value,
            start_date=modification.start_date,
            end_date=modification.end_date,
            duration_days=modification.duration_days,
            note=modification.note,
            current_end_date=contract.current_end_date,
        )

    def _get_by_id(self, modification_id: UUID) -> Modification:
        modification = self.session.get(Modification, modification_id)
        if modification is None:
            raise ModificationNotFoundError(str(modification_id))
        return modification

    def _lock_with_contract(
        self, modification_id: UUID
    ) -> tuple[Modification, Contract]:
        """Lock the owning contract, then re-read the modification under it."""
        contract_id = self._get_by_id(modification_id).contract_id
        contract = self._contracts.get_for_update(contract_id)
        modification = self.session.execute(
            select(Modification)
            .where(Modification.id == modification_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if modification is None:
            raise ModificationNotFoundError(str(modification_id))
        return modification, contract

    def _check_suspension_overlap(
        self,
        contract_id: UUID,
        start_date: date,
        end_date: date,
        exclude_id: UUID | None = None,
    ) -> None:
        """
        Raise OverlappingSuspensionError if [start_date, end_date] shares a
        day with any other suspension of the contract.
        """
        stmt = (
            select(Modification)
            .where(
                Modification.contract_id == contract_id,
                Modification.kind == ModificationKind.SUSPENSION.value,
                Modification.start_date <= end_date,
                Modification.end_date >= start_date,
            )
            .order_by(Modification.start_date)
        )
        if exclude_id is not None:
            stmt = stmt.where(Modification.id != exclude_id)

        existing = self.session.execute(stmt).scalars().first()
        if existing is None:
            return

        shared = DateRange(start_date, end_date).intersection(
            DateRange(existing.start_date, existing.end_date)
        )
        logger.warning(
            "suspension_overlap_rejected",
            extra={
                "contract_id": str(contract_id),
                "existing_modification_id": str(existing.id),
                "requested_start": start_date.isoformat(),
                "requested_end": end_date.isoformat(),
            },
        )
        raise OverlappingSuspensionError(
            contract_id=str(contract_id),
            existing_modification_id=str(existing.id),
            overlap_start=str(shared.start),
            overlap_end=str(shared.end),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def get_modification(self, modification_id: UUID) -> ModificationInfo:
        """
        Get a single modification with its contract's current end date.

        Raises:
            ModificationNotFoundError: If the modification doesn't exist.
        """
        modification = self._get_by_id(modification_id)
        contract = self._contracts.get_contract_model(modification.contract_id)
        return self._to_dto(modification, contract)

    def contract_id_of(self, modification_id: UUID) -> UUID:
        """Owning contract of a modification (used for access checks)."""
        return self._get_by_id(modification_id).contract_id

    def list_for_contract(
        self,
        contract_id: UUID,
        kind: ModificationKind | None = None,
    ) -> list[ModificationInfo]:
        """Modifications of a contract, latest start date first."""
        contract = self._contracts.get_contract_model(contract_id)
        stmt = select(Modification).where(Modification.contract_id == contract_id)
        if kind is not None:
            stmt = stmt.where(Modification.kind == ModificationKind(kind).value)
        stmt = stmt.order_by(Modification.start_date.desc(), Modification.end_date.desc())
        return [
            self._to_dto(m, contract)
            for m in self.session.execute(stmt).scalars().all()
        ]

    # =========================================================================
    # Commands
    # =========================================================================

    def create_modification(
        self,
        contract_id: UUID,
        kind: ModificationKind,
        start_date: date,
        end_date: date,
        actor_id: UUID,
        note: str | None = None,
    ) -> ModificationInfo:
        """
        Record a suspension or extension and push the end date out.

        Postconditions:
            - New Modification row flushed with its inclusive duration.
            - contract.current_end_date moved by +duration_days.

        Raises:
            InvalidDateRangeError: If start_date > end_date.
            ContractNotFoundError: If the contract doesn't exist.
            OverlappingSuspensionError: If a SUSPENSION overlaps another.
        """
        kind = ModificationKind(kind)
        validate_range(start_date, end_date)
        days = duration_days(start_date, end_date)

        with self.session.begin_nested():
            contract = self._contracts.get_for_update(contract_id)
            if kind is ModificationKind.SUSPENSION:
                self._check_suspension_overlap(contract_id, start_date, end_date)

            modification = Modification(
                contract_id=contract_id,
                kind=kind.value,
                start_date=start_date,
                end_date=end_date,
                duration_days=days,
                note=note,
                created_by_id=actor_id,
            )
            self.session.add(modification)
            contract.current_end_date = shift_end_date(contract.current_end_date, days)
            contract.updated_by_id = actor_id
            self.session.flush()

        logger.info(
            "modification_created",
            extra={
                "contract_id": str(contract_id),
                "modification_id": str(modification.id),
                "kind": kind.value,
                "duration_days": days,
                "current_end_date": contract.current_end_date.isoformat(),
            },
        )
        return self._to_dto(modification, contract)

    def update_modification(
        self,
        modification_id: UUID,
        actor_id: UUID,
        start_date: date | None = None,
        end_date: date | None = None,
        note: str | None = None,
    ) -> ModificationInfo:
        """
        Edit a modification.

        A change to either date re-validates the range, re-checks suspension
        overlap excluding this modification, recomputes the duration and
        moves the end date by ``new_duration - old_duration``.  A note-only
        edit skips all date logic.

        Raises:
            ModificationNotFoundError: If the modification doesn't exist.
            InvalidDateRangeError: If the resulting start is after the end.
            OverlappingSuspensionError: If the new window overlaps another
                suspension.
        """
        with self.session.begin_nested():
            modification, contract = self._lock_with_contract(modification_id)

            shift = 0
            if start_date is not None or end_date is not None:
                new_start = start_date if start_date is not None else modification.start_date
                new_end = end_date if end_date is not None else modification.end_date
                validate_range(new_start, new_end)

                if ModificationKind(modification.kind) is ModificationKind.SUSPENSION:
                    self._check_suspension_overlap(
                        modification.contract_id,
                        new_start,
                        new_end,
                        exclude_id=modification.id,
                    )

                new_days = duration_days(new_start, new_end)
                shift = new_days - modification.duration_days
                modification.start_date = new_start
                modification.end_date = new_end
                modification.duration_days = new_days

            if note is not None:
                modification.note = note
            modification.updated_by_id = actor_id

            if shift:
                contract.current_end_date = shift_end_date(
                    contract.current_end_date, shift
                )
                contract.updated_by_id = actor_id
            self.session.flush()

        logger.info(
            "modification_updated",
            extra={
                "contract_id": str(contract.id),
                "modification_id": str(modification_id),
                "shift_days": shift,
                "current_end_date": contract.current_end_date.isoformat(),
            },
        )
        return self._to_dto(modification, contract)

    def delete_modification(self, modification_id: UUID, actor_id: UUID) -> None:
        """
        Remove a modification and pull the end date back by its duration.

        Raises:
            ModificationNotFoundError: If the modification doesn't exist.
        """
        with self.session.begin_nested():
            modification, contract = self._lock_with_contract(modification_id)
            days = modification.duration_days
            contract.current_end_date = shift_end_date(contract.current_end_date, -days)
            contract.updated_by_id = actor_id
            self.session.delete(modification)
            self.session.flush()

        logger.info(
            "modification_deleted",
            extra={
                "contract_id": str(contract.id),
                "modification_id": str(modification_id),
                "duration_days": days,
                "current_end_date": contract.current_end_date.isoformat(),
            },
        )
