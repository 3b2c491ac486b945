"""
Module: oversight_kernel.selectors.ledger_selector
Responsibility: Read-only verification of the contract ledger.  Recomputes
    committed value and current end date from the surviving additions and
    modifications and compares them with the stored ledger fields.
Architecture position: Kernel > Selectors.  May import from models/,
    selectors/base.py and the pure domain/.

Invariants enforced:
    - committed_value == initial_value + sum(addition amounts).
    - current_end_date == initial_end_date + sum(modification durations).
    The engines keep these true by construction; this selector is how an
    auditor proves they still hold.

Failure modes:
    - ContractNotFoundError for an unknown contract.
    - LedgerInconsistencyError from verify() when the stored fields drifted.
"""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from oversight_kernel.db.types import to_decimal
from oversight_kernel.domain.dtos import LedgerReconciliation
from oversight_kernel.domain.schedule import shift_end_date
from oversight_kernel.exceptions import (
    ContractNotFoundError,
    LedgerInconsistencyError,
)
from oversight_kernel.models.addition import Addition
from oversight_kernel.models.contract import Contract
from oversight_kernel.models.modification import Modification
from oversight_kernel.selectors.base import BaseSelector


class LedgerSelector(BaseSelector[Contract]):
    """Recomputes and checks contract ledger fields."""

    def __init__(self, session: Session):
        super().__init__(session)

    def reconcile(self, contract_id: UUID) -> LedgerReconciliation:
        """
        Compare stored ledger fields with their recomputation.

        Returns the comparison whether or not it matches; see verify().
        """
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise ContractNotFoundError(str(contract_id))

        addition_total, addition_count = self.session.execute(
            select(func.sum(Addition.amount), func.count(Addition.id)).where(
                Addition.contract_id == contract_id
            )
        ).one()
        duration_total, modification_count = self.session.execute(
            select(
                func.sum(Modification.duration_days), func.count(Modification.id)
            ).where(Modification.contract_id == contract_id)
        ).one()

        return LedgerReconciliation(
            contract_id=contract.id,
            stored_value=contract.committed_value,
            expected_value=contract.initial_value + int(to_decimal(addition_total)),
            stored_end_date=contract.current_end_date,
            expected_end_date=shift_end_date(
                contract.initial_end_date, int(to_decimal(duration_total))
            ),
            addition_count=addition_count,
            modification_count=modification_count,
        )

    def verify(self, contract_id: UUID) -> LedgerReconciliation:
        """
        Reconcile and raise if the ledger drifted.

        Raises:
            LedgerInconsistencyError: If either stored field disagrees.
        """
        result = self.reconcile(contract_id)
        if not result.is_consistent:
            raise LedgerInconsistencyError(
                contract_id=str(contract_id),
                stored_value=str(result.stored_value),
                expected_value=str(result.expected_value),
                stored_end_date=str(result.stored_end_date),
                expected_end_date=str(result.expected_end_date),
            )
        return result

    def contracts_with_drift(self) -> list[LedgerReconciliation]:
        """Reconciliations of every contract whose ledger does not match."""
        contract_ids = self.session.execute(
            select(Contract.id).order_by(Contract.contract_number)
        ).scalars().all()
        drifted = []
        for contract_id in contract_ids:
            result = self.reconcile(contract_id)
            if not result.is_consistent:
                drifted.append(result)
        return drifted
