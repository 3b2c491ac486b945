"""
Module: oversight_kernel.selectors.progress_selector
Responsibility: Recompute-on-read views of progress history.  Every
    accumulated total, percentage and status is derived from the stored
    report increments at query time; nothing accumulated is persisted.
Architecture position: Kernel > Selectors.  Uses domain.progress for the
    arithmetic.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Accumulated value of report R = sum over the same owner's reports with
      (reported_at, sequence) <= (R.reported_at, R.sequence).  The ordering
      comparison runs in SQL against the stored row, never against a Python
      datetime, so backends that drop timezone information still agree.
    - list_* and get_* agree: a report's accumulated values are the same
      whether read singly or as part of the list.
    - Financial percentages use the contract's committed value as of the
      read, not as of the report.

Failure modes:
    - ContractNotFoundError / ActivityNotFoundError for unknown owners.
    - ProgressReportNotFoundError for unknown report ids.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session, aliased

from oversight_kernel.db.types import to_decimal
from oversight_kernel.domain.dtos import ActivityProgressInfo, GeneralProgressInfo
from oversight_kernel.domain.progress import (
    classify_status,
    percentage,
    progress_delta,
    running_totals,
)
from oversight_kernel.exceptions import (
    ActivityNotFoundError,
    ContractNotFoundError,
    ProgressReportNotFoundError,
)
from oversight_kernel.models.contract import Contract
from oversight_kernel.models.progress import (
    ActivityProgressReport,
    GeneralProgressReport,
)
from oversight_kernel.models.work_point import Activity
from oversight_kernel.selectors.base import BaseSelector


class ProgressSelector(BaseSelector[GeneralProgressReport]):
    """
    Read-side accumulator for general and activity progress.

    Contract:
        Read-only.  Returns frozen DTOs with derived fields filled in.
    """

    def __init__(self, session: Session):
        super().__init__(session)

    # =========================================================================
    # Owner loading
    # =========================================================================

    def _contract(self, contract_id: UUID) -> Contract:
        contract = self.session.get(Contract, contract_id)
        if contract is None:
            raise ContractNotFoundError(str(contract_id))
        return contract

    def _activity(self, activity_id: UUID) -> Activity:
        activity = self.session.get(Activity, activity_id)
        if activity is None:
            raise ActivityNotFoundError(str(activity_id))
        return activity

    # =========================================================================
    # Totals
    # =========================================================================

    def general_totals(self, contract_id: UUID) -> tuple[Decimal, Decimal]:
        """
        Accumulated (financial_value, physical_percent) over all reports of a
        contract.  Zeroes when there are none.
        """
        financial, physical = self.session.execute(
            select(
                func.sum(GeneralProgressReport.financial_value),
                func.sum(GeneralProgressReport.physical_percent),
            ).where(GeneralProgressReport.contract_id == contract_id)
        ).one()
        return to_decimal(financial), to_decimal(physical)

    def activity_totals(self, activity_id: UUID) -> tuple[Decimal, Decimal]:
        """Accumulated (quantity, cost) over all reports of an activity."""
        quantity, cost = self.session.execute(
            select(
                func.sum(ActivityProgressReport.quantity),
                func.sum(ActivityProgressReport.cost),
            ).where(ActivityProgressReport.activity_id == activity_id)
        ).one()
        return to_decimal(quantity), to_decimal(cost)

    # =========================================================================
    # General progress
    # =========================================================================

    def _general_info(
        self,
        report: GeneralProgressReport,
        contract: Contract,
        financial_accumulated: Decimal,
        physical_accumulated: Decimal,
    ) -> GeneralProgressInfo:
        financial_percent = percentage(financial_accumulated, contract.committed_value)
        delta = progress_delta(physical_accumulated, financial_percent)
        return GeneralProgressInfo(
            id=report.id,
            contract_id=report.contract_id,
            financial_value=report.financial_value,
            physical_percent=to_decimal(report.physical_percent),
            reported_at=report.reported_at,
            sequence=report.sequence,
            note=report.note,
            financial_accumulated=int(financial_accumulated),
            physical_percent_accumulated=physical_accumulated,
            financial_percent=financial_percent,
            delta=delta,
            status=classify_status(delta),
        )

    def list_general(self, contract_id: UUID) -> list[GeneralProgressInfo]:
        """General progress reports of a contract, newest first."""
        contract = self._contract(contract_id)
        reports = (
            self.session.execute(
                select(GeneralProgressReport)
                .where(GeneralProgressReport.contract_id == contract_id)
                .order_by(
                    GeneralProgressReport.reported_at,
                    GeneralProgressReport.sequence,
                )
            )
            .scalars()
            .all()
        )
        financial = running_totals(r.financial_value for r in reports)
        physical = running_totals(r.physical_percent for r in reports)
        infos = [
            self._general_info(report, contract, fin, phys)
            for report, fin, phys in zip(reports, financial, physical)
        ]
        infos.reverse()
        return infos

    def get_general(self, report_id: UUID) -> GeneralProgressInfo:
        """
        A single general progress report with totals as of its position.

        Raises:
            ProgressReportNotFoundError: If the report doesn't exist.
        """
        report = self.session.get(GeneralProgressReport, report_id)
        if report is None:
            raise ProgressReportNotFoundError(str(report_id), "general")

        target = aliased(GeneralProgressReport)
        prior = GeneralProgressReport
        financial, physical = self.session.execute(
            select(
                func.sum(prior.financial_value),
                func.sum(prior.physical_percent),
            )
            .join(target, target.id == report_id)
            .where(
                prior.contract_id == target.contract_id,
                or_(
                    prior.reported_at < target.reported_at,
                    and_(
                        prior.reported_at == target.reported_at,
                        prior.sequence <= target.sequence,
                    ),
                ),
            )
        ).one()
        return self._general_info(
            report,
            self._contract(report.contract_id),
            to_decimal(financial),
            to_decimal(physical),
        )

    # =========================================================================
    # Activity progress
    # =========================================================================

    def _activity_info(
        self,
        report: ActivityProgressReport,
        activity: Activity,
        quantity_accumulated: Decimal,
        cost_accumulated: Decimal,
    ) -> ActivityProgressInfo:
        return ActivityProgressInfo(
            id=report.id,
            activity_id=report.activity_id,
            quantity=to_decimal(report.quantity),
            cost=to_decimal(report.cost),
            reported_at=report.reported_at,
            sequence=report.sequence,
            work_done=report.work_done,
            next_steps=report.next_steps,
            quantity_accumulated=quantity_accumulated,
            cost_accumulated=cost_accumulated,
            physical_percent=percentage(quantity_accumulated, activity.physical_target),
            financial_execution_percent=percentage(
                cost_accumulated, activity.projected_financial
            ),
        )

    def list_activity(self, activity_id: UUID) -> list[ActivityProgressInfo]:
        """Activity progress reports, newest first."""
        activity = self._activity(activity_id)
        reports = (
            self.session.execute(
                select(ActivityProgressReport)
                .where(ActivityProgressReport.activity_id == activity_id)
                .order_by(
                    ActivityProgressReport.reported_at,
                    ActivityProgressReport.sequence,
                )
            )
            .scalars()
            .all()
        )
        quantities = running_totals(r.quantity for r in reports)
        costs = running_totals(r.cost for r in reports)
        infos = [
            self._activity_info(report, activity, qty, cost)
            for report, qty, cost in zip(reports, quantities, costs)
        ]
        infos.reverse()
        return infos

    def get_activity(self, report_id: UUID) -> ActivityProgressInfo:
        """
        A single activity progress report with totals as of its position.

        Raises:
            ProgressReportNotFoundError: If the report doesn't exist.
        """
        report = self.session.get(ActivityProgressReport, report_id)
        if report is None:
            raise ProgressReportNotFoundError(str(report_id), "activity")

        target = aliased(ActivityProgressReport)
        prior = ActivityProgressReport
        quantity, cost = self.session.execute(
            select(func.sum(prior.quantity), func.sum(prior.cost))
            .join(target, target.id == report_id)
            .where(
                prior.activity_id == target.activity_id,
                or_(
                    prior.reported_at < target.reported_at,
                    and_(
                        prior.reported_at == target.reported_at,
                        prior.sequence <= target.sequence,
                    ),
                ),
            )
        ).one()
        return self._activity_info(
            report,
            self._activity(report.activity_id),
            to_decimal(quantity),
            to_decimal(cost),
        )

    def contract_id_of_general(self, report_id: UUID) -> UUID:
        report = self.session.get(GeneralProgressReport, report_id)
        if report is None:
            raise ProgressReportNotFoundError(str(report_id), "general")
        return report.contract_id

    def activity_id_of(self, report_id: UUID) -> UUID:
        report = self.session.get(ActivityProgressReport, report_id)
        if report is None:
            raise ProgressReportNotFoundError(str(report_id), "activity")
        return report.activity_id
