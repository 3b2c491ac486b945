"""
ContractService -- contract, work point and activity registration.

Responsibility:
    Creates contracts with their initial ledger (committed value and current
    end date equal to the signed values), registers work points and
    activities under them, and provides the locked contract load that the
    addition and modification engines build on.

Architecture position:
    Kernel > Services -- imperative shell.
    Used by AdditionService and ModificationService (row lock) and by the
    lifecycle facade.

Invariants enforced:
    - Returns frozen ``ContractInfo`` / ``WorkPointInfo`` / ``ActivityInfo``
      DTOs, never ORM entities.
    - Flush-only: never commits or rolls back the session.
    - A new contract starts with committed_value == initial_value and
      current_end_date == initial_end_date.

Failure modes:
    - ContractNotFoundError / WorkPointNotFoundError / ActivityNotFoundError.
    - DuplicateContractNumberError: contract_number already registered.
    - InvalidDateRangeError: start_date after initial end date.
    - InvalidAmountError: negative initial value or projected financial.
    - InvalidQuantityError: non-positive activity physical target.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from oversight_kernel.domain.dtos import ActivityInfo, ContractInfo, WorkPointInfo
from oversight_kernel.domain.progress import (
    validate_non_negative_amount,
    validate_positive_quantity,
)
from oversight_kernel.domain.schedule import validate_range
from oversight_kernel.exceptions import (
    ActivityNotFoundError,
    ContractNotFoundError,
    DuplicateContractNumberError,
    WorkPointNotFoundError,
)
from oversight_kernel.logging_config import get_logger
from oversight_kernel.models.contract import Contract, ContractStatus
from oversight_kernel.models.work_point import Activity, WorkPoint
from oversight_kernel.services.base import BaseService

logger = get_logger("services.contract")


class ContractService(BaseService[Contract]):
    """
    Service for contract registration and ledger row access.

    Contract:
        Receives a SQLAlchemy Session; flushes but never commits.

    Non-goals:
        - Does NOT change committed_value or current_end_date after creation;
          see AdditionService and ModificationService.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    # =========================================================================
    # DTO conversion
    # =========================================================================

    @staticmethod
    def to_dto(contract: Contract) -> ContractInfo:
        """Convert ORM Contract to ContractInfo DTO."""
        return ContractInfo(
            id=contract.id,
            contract_number=contract.contract_number,
            short_name=contract.short_name,
            scope=contract.scope,
            contractor=contract.contractor,
            supervisor_id=contract.supervisor_id,
            status=ContractStatus(contract.status).value,
            start_date=contract.start_date,
            initial_end_date=contract.initial_end_date,
            current_end_date=contract.current_end_date,
            initial_value=contract.initial_value,
            committed_value=contract.committed_value,
        )

    @staticmethod
    def _work_point_to_dto(work_point: WorkPoint) -> WorkPointInfo:
        return WorkPointInfo(
            id=work_point.id,
            contract_id=work_point.contract_id,
            number=work_point.number,
            description=work_point.description,
            district=work_point.district,
            neighborhood=work_point.neighborhood,
            latitude=work_point.latitude,
            longitude=work_point.longitude,
        )

    @staticmethod
    def _activity_to_dto(activity: Activity) -> ActivityInfo:
        return ActivityInfo(
            id=activity.id,
            work_point_id=activity.work_point_id,
            contract_id=activity.contract_id,
            description=activity.description,
            physical_target=activity.physical_target,
            projected_financial=activity.projected_financial,
            unit=activity.unit,
        )

    # =========================================================================
    # Loading
    # =========================================================================

    def get_contract_model(self, contract_id: UUID) -> Contract:
        """Get contract by ID, raising if not found."""
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise ContractNotFoundError(str(contract_id))
        return contract

    def get_for_update(self, contract_id: UUID) -> Contract:
        """
        Load a contract with a row lock (``SELECT ... FOR UPDATE``).

        The lock is held until the caller's transaction ends, serializing
        every read-modify-write of the ledger fields.  populate_existing
        refreshes an identity-map copy with the values read under the lock.

        Raises:
            ContractNotFoundError: If the contract doesn't exist.
        """
        contract = self.session.execute(
            select(Contract)
            .where(Contract.id == contract_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if contract is None:
            raise ContractNotFoundError(str(contract_id))
        return contract

    def get_activity_model(self, activity_id: UUID) -> Activity:
        """Get activity by ID, raising if not found."""
        activity = self.session.get(Activity, activity_id)
        if activity is None:
            raise ActivityNotFoundError(str(activity_id))
        return activity

    # =========================================================================
    # Queries
    # =========================================================================

    def get_contract(self, contract_id: UUID) -> ContractInfo:
        """
        Get contract by ID.

        Raises:
            ContractNotFoundError: If contract doesn't exist.
        """
        return self.to_dto(self.get_contract_model(contract_id))

    def find_by_number(self, contract_number: str) -> ContractInfo | None:
        """Find contract by number, returning None if not found."""
        stmt = select(Contract).where(Contract.contract_number == contract_number)
        contract = self.session.execute(stmt).scalar_one_or_none()
        return self.to_dto(contract) if contract else None

    def list_supervised_by(self, supervisor_id: UUID) -> list[ContractInfo]:
        """Contracts supervised by a user, ordered by contract number."""
        stmt = (
            select(Contract)
            .where(Contract.supervisor_id == supervisor_id)
            .order_by(Contract.contract_number)
        )
        return [self.to_dto(c) for c in self.session.execute(stmt).scalars().all()]

    def get_work_point(self, work_point_id: UUID) -> WorkPointInfo:
        work_point = self.session.get(WorkPoint, work_point_id)
        if work_point is None:
            raise WorkPointNotFoundError(str(work_point_id))
        return self._work_point_to_dto(work_point)

    def get_activity(self, activity_id: UUID) -> ActivityInfo:
        """
        Get activity by ID.

        Raises:
            ActivityNotFoundError: If activity doesn't exist.
        """
        return self._activity_to_dto(self.get_activity_model(activity_id))

    def list_activities(self, work_point_id: UUID) -> list[ActivityInfo]:
        stmt = (
            select(Activity)
            .where(Activity.work_point_id == work_point_id)
            .order_by(Activity.description)
        )
        return [
            self._activity_to_dto(a)
            for a in self.session.execute(stmt).scalars().all()
        ]

    # =========================================================================
    # Registration
    # =========================================================================

    def create_contract(
        self,
        contract_number: str,
        short_name: str,
        scope: str,
        start_date: date,
        end_date: date,
        initial_value: int,
        actor_id: UUID,
        contractor: str | None = None,
        supervisor_id: UUID | None = None,
    ) -> ContractInfo:
        """
        Create a new contract.

        Preconditions:
            - ``contract_number`` is not already registered.
            - ``start_date <= end_date``.
            - ``initial_value >= 0``.

        Postconditions:
            - A new ACTIVE Contract row is flushed with
              committed_value == initial_value and
              current_end_date == initial_end_date == end_date.

        Raises:
            DuplicateContractNumberError: If the number is taken.
            InvalidDateRangeError: If start_date > end_date.
            InvalidAmountError: If initial_value is negative.
        """
        validate_range(start_date, end_date)
        validate_non_negative_amount("initial_value", initial_value)

        if self.find_by_number(contract_number) is not None:
            raise DuplicateContractNumberError(contract_number)

        contract = Contract(
            contract_number=contract_number,
            short_name=short_name,
            scope=scope,
            contractor=contractor,
            supervisor_id=supervisor_id,
            status=ContractStatus.ACTIVE.value,
            start_date=start_date,
            initial_end_date=end_date,
            current_end_date=end_date,
            initial_value=initial_value,
            committed_value=initial_value,
            created_by_id=actor_id,
        )
        self.session.add(contract)
        self.session.flush()
        logger.info(
            "contract_created",
            extra={
                "contract_id": str(contract.id),
                "contract_number": contract_number,
                "initial_value": initial_value,
                "end_date": end_date.isoformat(),
            },
        )
        return self.to_dto(contract)

    def create_work_point(
        self,
        contract_id: UUID,
        number: str,
        description: str,
        actor_id: UUID,
        district: str | None = None,
        neighborhood: str | None = None,
        latitude: Decimal | None = None,
        longitude: Decimal | None = None,
    ) -> WorkPointInfo:
        """
        Register a work point under a contract.

        Coordinates are stored as given.

        Raises:
            ContractNotFoundError: If the contract doesn't exist.
        """
        self.get_contract_model(contract_id)
        work_point = WorkPoint(
            contract_id=contract_id,
            number=number,
            description=description,
            district=district,
            neighborhood=neighborhood,
            latitude=latitude,
            longitude=longitude,
            created_by_id=actor_id,
        )
        self.session.add(work_point)
        self.session.flush()
        logger.info(
            "work_point_created",
            extra={"contract_id": str(contract_id), "work_point_number": number},
        )
        return self._work_point_to_dto(work_point)

    def create_activity(
        self,
        work_point_id: UUID,
        description: str,
        physical_target: Decimal,
        projected_financial: int,
        unit: str,
        actor_id: UUID,
    ) -> ActivityInfo:
        """
        Register an activity under a work point.

        Raises:
            WorkPointNotFoundError: If the work point doesn't exist.
            InvalidQuantityError: If physical_target is not positive.
            InvalidAmountError: If projected_financial is negative.
        """
        validate_positive_quantity("physical_target", physical_target)
        validate_non_negative_amount("projected_financial", projected_financial)

        work_point = self.session.get(WorkPoint, work_point_id)
        if work_point is None:
            raise WorkPointNotFoundError(str(work_point_id))

        activity = Activity(
            work_point_id=work_point_id,
            description=description,
            physical_target=physical_target,
            projected_financial=projected_financial,
            unit=unit,
            created_by_id=actor_id,
        )
        activity.work_point = work_point
        self.session.add(activity)
        self.session.flush()
        logger.info(
            "activity_created",
            extra={
                "contract_id": str(work_point.contract_id),
                "activity_id": str(activity.id),
                "physical_target": physical_target,
            },
        )
        return self._activity_to_dto(activity)
