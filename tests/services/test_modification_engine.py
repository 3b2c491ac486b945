"""
Tests for ModificationService: inclusive durations, suspension overlap and
the current end date.
"""

from datetime import date
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from oversight_kernel.exceptions import (
    BusinessRuleDeniedError,
    InvalidDateRangeError,
    ModificationNotFoundError,
    OverlappingSuspensionError,
)
from oversight_kernel.models.modification import Modification, ModificationKind


class TestSuspensionScenario:
    def test_suspension_moves_end_date_and_blocks_overlap(
        self, modification_service, contract_service, contract, test_actor_id
    ):
        created = modification_service.create_modification(
            contract.id,
            ModificationKind.SUSPENSION,
            date(2024, 2, 1),
            date(2024, 2, 15),
            test_actor_id,
        )
        assert created.duration_days == 15
        assert created.current_end_date == date(2025, 1, 15)

        with pytest.raises(OverlappingSuspensionError) as exc_info:
            modification_service.create_modification(
                contract.id,
                ModificationKind.SUSPENSION,
                date(2024, 2, 10),
                date(2024, 2, 20),
                test_actor_id,
            )
        err = exc_info.value
        assert isinstance(err, BusinessRuleDeniedError)
        assert err.existing_modification_id == str(created.id)
        assert err.overlap_start == "2024-02-10"
        assert err.overlap_end == "2024-02-15"

        assert contract_service.get_contract(contract.id).current_end_date == date(2025, 1, 15)

    def test_adjacent_suspension_allowed(self, modification_service, contract, test_actor_id):
        modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        second = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 16), date(2024, 2, 20), test_actor_id
        )
        assert second.current_end_date == date(2025, 1, 20)

    def test_extension_may_overlap_suspension(self, modification_service, contract, test_actor_id):
        modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        extension = modification_service.create_modification(
            contract.id, ModificationKind.EXTENSION, date(2024, 2, 10), date(2024, 2, 19), test_actor_id
        )
        assert extension.duration_days == 10
        assert extension.current_end_date == date(2025, 1, 25)

    def test_other_contract_suspension_does_not_conflict(
        self, modification_service, create_contract, test_actor_id
    ):
        first = create_contract()
        second = create_contract()
        modification_service.create_modification(
            first.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        info = modification_service.create_modification(
            second.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        assert info.current_end_date == date(2025, 1, 15)

    def test_reversed_range_rejected_before_any_change(
        self, modification_service, contract_service, contract, test_actor_id
    ):
        with pytest.raises(InvalidDateRangeError):
            modification_service.create_modification(
                contract.id, ModificationKind.EXTENSION, date(2024, 3, 2), date(2024, 3, 1), test_actor_id
            )
        assert contract_service.get_contract(contract.id).current_end_date == date(2024, 12, 31)


class TestModificationUpdate:
    def test_date_change_shifts_by_duration_delta(self, modification_service, contract, test_actor_id):
        created = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        updated = modification_service.update_modification(
            created.id, test_actor_id, end_date=date(2024, 2, 10)
        )
        assert updated.duration_days == 10
        assert updated.current_end_date == date(2025, 1, 10)

    def test_update_does_not_conflict_with_itself(self, modification_service, contract, test_actor_id):
        created = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        updated = modification_service.update_modification(
            created.id, test_actor_id, start_date=date(2024, 2, 5), end_date=date(2024, 2, 20)
        )
        assert updated.duration_days == 16
        assert updated.current_end_date == date(2025, 1, 16)

    def test_update_into_other_suspension_rejected(
        self, modification_service, contract_service, contract, test_actor_id
    ):
        modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        later = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 3, 1), date(2024, 3, 5), test_actor_id
        )
        with pytest.raises(OverlappingSuspensionError):
            modification_service.update_modification(
                later.id, test_actor_id, start_date=date(2024, 2, 14)
            )
        unchanged = modification_service.get_modification(later.id)
        assert unchanged.start_date == date(2024, 3, 1)
        assert contract_service.get_contract(contract.id).current_end_date == date(2025, 1, 20)

    def test_update_producing_reversed_range_rejected(
        self, modification_service, contract, test_actor_id
    ):
        created = modification_service.create_modification(
            contract.id, ModificationKind.EXTENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        with pytest.raises(InvalidDateRangeError):
            modification_service.update_modification(
                created.id, test_actor_id, start_date=date(2024, 2, 20)
            )

    def test_note_only_update_skips_date_logic(self, modification_service, contract, test_actor_id):
        created = modification_service.create_modification(
            contract.id, ModificationKind.EXTENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        updated = modification_service.update_modification(created.id, test_actor_id, note="approved")
        assert updated.note == "approved"
        assert updated.duration_days == 15
        assert updated.current_end_date == date(2025, 1, 15)


class TestModificationDelete:
    def test_delete_restores_end_date(
        self, modification_service, contract_service, contract, test_actor_id
    ):
        created = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        modification_service.delete_modification(created.id, test_actor_id)
        assert contract_service.get_contract(contract.id).current_end_date == date(2024, 12, 31)

        with pytest.raises(ModificationNotFoundError):
            modification_service.get_modification(created.id)

    def test_deleted_suspension_frees_window(self, modification_service, contract, test_actor_id):
        created = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 15), test_actor_id
        )
        modification_service.delete_modification(created.id, test_actor_id)
        again = modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 10), date(2024, 2, 20), test_actor_id
        )
        assert again.current_end_date == date(2025, 1, 11)

    def test_delete_unknown(self, modification_service, test_actor_id):
        with pytest.raises(ModificationNotFoundError):
            modification_service.delete_modification(uuid4(), test_actor_id)


class TestModificationQueries:
    def test_list_latest_first_and_filter_by_kind(self, modification_service, contract, test_actor_id):
        modification_service.create_modification(
            contract.id, ModificationKind.SUSPENSION, date(2024, 2, 1), date(2024, 2, 2), test_actor_id
        )
        modification_service.create_modification(
            contract.id, ModificationKind.EXTENSION, date(2024, 5, 1), date(2024, 5, 2), test_actor_id
        )
        listed = modification_service.list_for_contract(contract.id)
        assert [m.kind for m in listed] == ["EXTENSION", "SUSPENSION"]

        suspensions = modification_service.list_for_contract(
            contract.id, kind=ModificationKind.SUSPENSION
        )
        assert len(suspensions) == 1
        assert suspensions[0].current_end_date == date(2025, 1, 4)


class TestModificationAtomicity:
    """A storage failure after validation leaves neither the row nor the end-date change."""

    @staticmethod
    def _modification_rows(session, contract_id) -> int:
        return session.execute(
            select(func.count())
            .select_from(Modification)
            .where(Modification.contract_id == contract_id)
        ).scalar_one()

    @pytest.mark.parametrize("kind", list(ModificationKind))
    def test_failed_create_leaves_end_date_untouched(
        self, session, modification_service, contract_service, contract, failing_flush, test_actor_id, kind
    ):
        with failing_flush(), pytest.raises(OperationalError):
            modification_service.create_modification(
                contract.id, kind, date(2024, 3, 1), date(2024, 3, 10), test_actor_id
            )

        assert contract_service.get_contract(contract.id).current_end_date == contract.initial_end_date
        assert self._modification_rows(session, contract.id) == 0

    def test_failed_update_keeps_window_and_end_date(
        self, session, modification_service, contract_service, contract, failing_flush, test_actor_id
    ):
        created = modification_service.create_modification(
            contract.id,
            ModificationKind.SUSPENSION,
            date(2024, 3, 1),
            date(2024, 3, 10),
            test_actor_id,
        )
        with failing_flush(), pytest.raises(OperationalError):
            modification_service.update_modification(
                created.id, test_actor_id, end_date=date(2024, 3, 31)
            )

        reread = modification_service.get_modification(created.id)
        assert (reread.end_date, reread.duration_days) == (date(2024, 3, 10), 10)
        assert contract_service.get_contract(contract.id).current_end_date == created.current_end_date
        assert self._modification_rows(session, contract.id) == 1

    def test_failed_delete_keeps_row_and_end_date(
        self, session, modification_service, contract_service, contract, failing_flush, test_actor_id
    ):
        created = modification_service.create_modification(
            contract.id,
            ModificationKind.EXTENSION,
            date(2024, 3, 1),
            date(2024, 3, 10),
            test_actor_id,
        )
        with failing_flush(), pytest.raises(OperationalError):
            modification_service.delete_modification(created.id, test_actor_id)

        assert contract_service.get_contract(contract.id).current_end_date == created.current_end_date
        assert self._modification_rows(session, contract.id) == 1
