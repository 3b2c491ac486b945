"""
AdditionService -- budget additions and their effect on committed value.

Responsibility:
    Creates, updates and deletes budget additions while keeping the owning
    contract's committed_value equal to initial_value plus the sum of the
    surviving addition amounts.

Architecture position:
    Kernel > Services -- imperative shell.
    Called by ContractLifecycleService after the AccessGate has authorized
    the caller.

Invariants enforced:
    - committed_value == initial_value + sum(amount over surviving additions).
    - Every operation locks the contract row first, then writes the addition
      row and the ledger field inside one SAVEPOINT.  A failure rolls back
      both; the caller's outer transaction is left untouched.
    - Flush-only: never commits.

Failure modes:
    - ContractNotFoundError / AdditionNotFoundError.
    - InvalidAmountError: zero amount.

Audit relevance:
    addition_created / addition_updated / addition_deleted are logged with
    the amount, the delta applied and the resulting committed value.
"""

from __future__ import annotations

from datetime import date
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from oversight_kernel.domain.dtos import AdditionInfo
from oversight_kernel.exceptions import AdditionNotFoundError, InvalidAmountError
from oversight_kernel.logging_config import get_logger
from oversight_kernel.models.addition import Addition
from oversight_kernel.models.contract import Contract
from oversight_kernel.services.base import BaseService
from oversight_kernel.services.contract_service import ContractService

logger = get_logger("services.addition")


def _validate_amount(amount: int) -> None:
    if amount == 0:
        raise InvalidAmountError("amount", str(amount), "addition amount cannot be zero")


class AdditionService(BaseService[Addition]):
    """
    Addition engine.

    Contract:
        Each public method is atomic on its own: it either persists both the
        addition change and the matching committed_value change, or neither.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._contracts = ContractService(session)

    @staticmethod
    def _to_dto(addition: Addition, contract: Contract) -> AdditionInfo:
        return AdditionInfo(
            id=addition.id,
            contract_id=addition.contract_id,
            amount=addition.amount,
            effective_date=addition.effective_date,
            note=addition.note,
            committed_value=contract.committed_value,
        )

    def _get_by_id(self, addition_id: UUID) -> Addition:
        addition = self.session.get(Addition, addition_id)
        if addition is None:
            raise AdditionNotFoundError(str(addition_id))
        return addition

    def _lock_with_contract(self, addition_id: UUID) -> tuple[Addition, Contract]:
        """
        Lock the owning contract, then re-read the addition under that lock.

        The first read only discovers the contract; the second picks up any
        change committed while this transaction waited for the lock.
        """
        contract_id = self._get_by_id(addition_id).contract_id
        contract = self._contracts.get_for_update(contract_id)
        addition = self.session.execute(
            select(Addition)
            .where(Addition.id == addition_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if addition is None:
            raise AdditionNotFoundError(str(addition_id))
        return addition, contract

    # =========================================================================
    # Queries
    # =========================================================================

    def get_addition(self, addition_id: UUID) -> AdditionInfo:
        """
        Get a single addition with its contract's current committed value.

        Raises:
            AdditionNotFoundError: If the addition doesn't exist.
        """
        addition = self._get_by_id(addition_id)
        contract = self._contracts.get_contract_model(addition.contract_id)
        return self._to_dto(addition, contract)

    def contract_id_of(self, addition_id: UUID) -> UUID:
        """Owning contract of an addition (used for access checks)."""
        return self._get_by_id(addition_id).contract_id

    def list_for_contract(self, contract_id: UUID) -> list[AdditionInfo]:
        """All additions of a contract, newest effective date first."""
        contract = self._contracts.get_contract_model(contract_id)
        stmt = (
            select(Addition)
            .where(Addition.contract_id == contract_id)
            .order_by(Addition.effective_date.desc(), Addition.created_at.desc())
        )
        return [
            self._to_dto(a, contract)
            for a in self.session.execute(stmt).scalars().all()
        ]

    # =========================================================================
    # Commands
    # =========================================================================

    def create_addition(
        self,
        contract_id: UUID,
        amount: int,
        effective_date: date,
        actor_id: UUID,
        note: str | None = None,
    ) -> AdditionInfo:
        """
        Record an addition and raise (or lower) the committed value by it.

        Preconditions:
            - ``amount`` is a non-zero whole-unit integer.

        Postconditions:
            - New Addition row flushed.
            - contract.committed_value increased by ``amount``.

        Raises:
            InvalidAmountError: If amount is zero.
            ContractNotFoundError: If the contract doesn't exist.
        """
        _validate_amount(amount)

        with self.session.begin_nested():
            contract = self._contracts.get_for_update(contract_id)
            addition = Addition(
                contract_id=contract_id,
                amount=amount,
                effective_date=effective_date,
                note=note,
                created_by_id=actor_id,
            )
            self.session.add(addition)
            contract.committed_value = contract.committed_value + amount
            contract.updated_by_id = actor_id
            self.session.flush()

        logger.info(
            "addition_created",
            extra={
                "contract_id": str(contract_id),
                "addition_id": str(addition.id),
                "amount": amount,
                "committed_value": contract.committed_value,
            },
        )
        return self._to_dto(addition, contract)

    def update_addition(
        self,
        addition_id: UUID,
        actor_id: UUID,
        amount: int | None = None,
        effective_date: date | None = None,
        note: str | None = None,
    ) -> AdditionInfo:
        """
        Edit an addition, applying ``new_amount - old_amount`` to the ledger.

        Fields left as None keep their stored values.

        Raises:
            AdditionNotFoundError: If the addition doesn't exist.
            InvalidAmountError: If the new amount is zero.
        """
        if amount is not None:
            _validate_amount(amount)

        with self.session.begin_nested():
            addition, contract = self._lock_with_contract(addition_id)

            delta = 0
            if amount is not None:
                delta = amount - addition.amount
                addition.amount = amount
            if effective_date is not None:
                addition.effective_date = effective_date
            if note is not None:
                addition.note = note
            addition.updated_by_id = actor_id

            if delta:
                contract.committed_value = contract.committed_value + delta
                contract.updated_by_id = actor_id
            self.session.flush()

        logger.info(
            "addition_updated",
            extra={
                "contract_id": str(contract.id),
                "addition_id": str(addition_id),
                "delta": delta,
                "committed_value": contract.committed_value,
            },
        )
        return self._to_dto(addition, contract)

    def delete_addition(self, addition_id: UUID, actor_id: UUID) -> None:
        """
        Remove an addition and take its amount back off the committed value.

        Raises:
            AdditionNotFoundError: If the addition doesn't exist.
        """
        with self.session.begin_nested():
            addition, contract = self._lock_with_contract(addition_id)
            amount = addition.amount
            contract.committed_value = contract.committed_value - amount
            contract.updated_by_id = actor_id
            self.session.delete(addition)
            self.session.flush()

        logger.info(
            "addition_deleted",
            extra={
                "contract_id": str(contract.id),
                "addition_id": str(addition_id),
                "amount": amount,
                "committed_value": contract.committed_value,
            },
        )
