"""
Тесты для PooledValueTracker и ReleasedBatch

total_pooled_value = buffered + external; release переносит value из
buffered в external, не меняя total.
"""

import pytest
from pydantic import ValidationError

from rebase_pool.accounting.pooled_value import PooledValueTracker, ReleasedBatch
from rebase_pool.core.domain.pool_state import PoolState
from rebase_pool.core.errors import ArithmeticOverflow, InsufficientBuffer, InvalidAmount
from rebase_pool.core.math.checked_math import UINT256_MAX


@pytest.fixture
def tracker() -> PooledValueTracker:
    tracker = PooledValueTracker()
    tracker.buffer_value(100)
    return tracker


class TestBuffer:
    def test_buffer_value(self, tracker: PooledValueTracker) -> None:
        tracker.buffer_value(20)
        assert tracker.buffered == 120
        assert tracker.total_pooled_value() == 120

    def test_buffer_negative_rejected(self, tracker: PooledValueTracker) -> None:
        with pytest.raises(InvalidAmount):
            tracker.buffer_value(-1)

    def test_buffer_overflow_checks_total(self) -> None:
        tracker = PooledValueTracker(PoolState(buffered=10, external=UINT256_MAX - 10))
        with pytest.raises(ArithmeticOverflow):
            tracker.buffer_value(1)
        assert tracker.buffered == 10

    def test_withdraw_buffered(self, tracker: PooledValueTracker) -> None:
        tracker.withdraw_buffered(100)
        assert tracker.buffered == 0

    def test_withdraw_more_than_buffered(self, tracker: PooledValueTracker) -> None:
        with pytest.raises(InsufficientBuffer) as exc_info:
            tracker.withdraw_buffered(101)
        assert exc_info.value.requested == 101
        assert exc_info.value.buffered == 100
        assert tracker.buffered == 100


class TestRelease:
    def test_release_moves_value(self, tracker: PooledValueTracker) -> None:
        batch = tracker.release_units(3, 32)

        assert batch.unit_count == 3
        assert batch.amount == 96
        assert tracker.buffered == 4
        assert tracker.external == 96
        assert tracker.released_units == 3
        assert tracker.total_pooled_value() == 100

    def test_release_more_than_buffered(self, tracker: PooledValueTracker) -> None:
        with pytest.raises(InsufficientBuffer):
            tracker.release_units(4, 32)
        assert tracker.released_units == 0
        assert tracker.buffered == 100

    def test_restore_release(self, tracker: PooledValueTracker) -> None:
        batch = tracker.release_units(2, 32)
        tracker.restore_release(batch)

        assert tracker.buffered == 100
        assert tracker.external == 0
        assert tracker.released_units == 0

    def test_batch_cannot_be_forged(self) -> None:
        with pytest.raises(TypeError):
            ReleasedBatch(unit_count=1, unit_size=32)


class TestReports:
    def test_report_replaces_external(self, tracker: PooledValueTracker) -> None:
        tracker.release_units(3, 32)
        tracker.report_external_value(90)
        assert tracker.external == 90
        assert tracker.total_pooled_value() == 94

    def test_report_may_decrease_to_zero(self, tracker: PooledValueTracker) -> None:
        tracker.release_units(3, 32)
        tracker.report_external_value(0)
        assert tracker.total_pooled_value() == 4

    def test_report_overflow(self, tracker: PooledValueTracker) -> None:
        with pytest.raises(ArithmeticOverflow):
            tracker.report_external_value(UINT256_MAX)
        assert tracker.external == 0

    def test_record_reported_units(self, tracker: PooledValueTracker) -> None:
        tracker.record_reported_units(2)
        assert tracker.reported_units == 2


class TestSnapshot:
    def test_round_trip(self, tracker: PooledValueTracker) -> None:
        tracker.release_units(1, 32)
        state = tracker.snapshot()
        tracker.buffer_value(1000)
        tracker.restore(state)

        assert tracker.snapshot() == state
        assert state.total_pooled_value == 100

    def test_round_trip_keeps_in_flight(self, tracker: PooledValueTracker) -> None:
        tracker.release_units(2, 32)
        state = tracker.snapshot()
        assert state.in_flight_units == 2
        assert state.confirmed_units == 0

        restored = PooledValueTracker(state)
        assert restored.in_flight_units == 2

    def test_in_flight_above_released_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PoolState(released_units=1, in_flight_units=2)


# =============================================================================
# ТЕСТЫ: units in flight
# =============================================================================


class TestInFlight:
    def test_release_is_in_flight(self, tracker: PooledValueTracker) -> None:
        tracker.release_units(3, 32)
        assert tracker.in_flight_units == 3
        assert tracker.snapshot().confirmed_units == 0

    def test_confirm_release(self, tracker: PooledValueTracker) -> None:
        first = tracker.release_units(1, 32)
        tracker.release_units(2, 32)
        tracker.confirm_release(first)

        assert tracker.in_flight_units == 2
        assert tracker.snapshot().confirmed_units == 1

    def test_restore_release_clears_in_flight(self, tracker: PooledValueTracker) -> None:
        batch = tracker.release_units(3, 32)
        tracker.restore_release(batch)

        assert tracker.in_flight_units == 0
        assert tracker.released_units == 0
        assert tracker.buffered == 100

    def test_confirm_twice_underflows(self, tracker: PooledValueTracker) -> None:
        batch = tracker.release_units(1, 32)
        tracker.confirm_release(batch)
        with pytest.raises(ArithmeticOverflow):
            tracker.confirm_release(batch)
        assert tracker.in_flight_units == 0
