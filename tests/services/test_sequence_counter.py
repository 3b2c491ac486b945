"""
Tests for SequenceService: monotonic, per-name counters.
"""


class TestSequenceService:
    def test_first_value_is_one(self, sequence_service):
        assert sequence_service.current_value("general_progress") is None
        assert sequence_service.next_value("general_progress") == 1
        assert sequence_service.current_value("general_progress") == 1

    def test_strictly_increasing(self, sequence_service):
        values = [sequence_service.next_value("activity_progress") for _ in range(5)]
        assert values == sorted(set(values))
        assert values[-1] - values[0] == 4

    def test_names_are_independent(self, sequence_service):
        sequence_service.next_value("general_progress")
        sequence_service.next_value("general_progress")
        assert sequence_service.next_value("activity_progress") == 1
