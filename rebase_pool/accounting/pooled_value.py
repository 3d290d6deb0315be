"""
PooledValueTracker — buffered и externally-reported value

Пул держит два числа:
- buffered: value, ещё не переданная external facility
- external: value, которую facility сообщает как находящуюся под управлением

total_pooled_value = buffered + external

release_units переносит value из buffered в external целыми units и выдаёт
ReleasedBatch: единственный объект, который принимает external facility.
Batch создаётся только после commit уменьшения buffered и остаётся in flight,
пока facility его не подтвердит (confirm_release) или не отклонит
(restore_release). Oracle report не может покрывать units in flight.
"""

import logging
from dataclasses import dataclass, field

from rebase_pool.core.domain.pool_state import PoolState
from rebase_pool.core.errors import InsufficientBuffer
from rebase_pool.core.math.checked_math import (
    checked_add,
    checked_mul,
    checked_sub,
    validate_uint,
)

logger = logging.getLogger(__name__)

# Выдаётся только PooledValueTracker.release_units
_RELEASE_TOKEN = object()


@dataclass(frozen=True)
class ReleasedBatch:
    """Receipt закоммиченного release: count units по unit_size."""

    unit_count: int
    unit_size: int
    _token: object = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if self._token is not _RELEASE_TOKEN:
            raise TypeError("ReleasedBatch is issued only by PooledValueTracker.release_units")

    @property
    def amount(self) -> int:
        return self.unit_count * self.unit_size


class PooledValueTracker:
    """Разбиение pooled value на buffered/external плюс счётчики units."""

    def __init__(self, state: PoolState | None = None):
        self._buffered = 0
        self._external = 0
        self._released_units = 0
        self._reported_units = 0
        self._in_flight_units = 0
        if state is not None:
            self.restore(state)

    @property
    def buffered(self) -> int:
        return self._buffered

    @property
    def external(self) -> int:
        return self._external

    @property
    def released_units(self) -> int:
        return self._released_units

    @property
    def reported_units(self) -> int:
        return self._reported_units

    @property
    def in_flight_units(self) -> int:
        return self._in_flight_units

    def total_pooled_value(self) -> int:
        return self._buffered + self._external

    def buffer_value(self, amount: int) -> None:
        """buffered += amount. Отказ возможен только при overflow."""
        validate_uint(amount, "amount")
        # total_pooled_value тоже обязан помещаться в uint256
        checked_add(self.total_pooled_value(), amount)
        self._buffered += amount

    def withdraw_buffered(self, amount: int) -> None:
        """
        Выплата из buffered value (withdraw ограничен ликвидностью буфера).

        Raises:
            InsufficientBuffer: Если amount > buffered
        """
        validate_uint(amount, "amount")
        if amount > self._buffered:
            raise InsufficientBuffer(amount, self._buffered)
        self._buffered -= amount

    def release_units(self, count: int, unit_size: int) -> ReleasedBatch:
        """
        Перенос count * unit_size из buffered в external.

        Args:
            count: Количество units
            unit_size: Размер одного unit

        Returns:
            ReleasedBatch для передачи facility (in flight до подтверждения)

        Raises:
            InsufficientBuffer: Если count * unit_size > buffered
        """
        validate_uint(count, "count")
        validate_uint(unit_size, "unit_size")

        amount = checked_mul(count, unit_size)
        if amount > self._buffered:
            raise InsufficientBuffer(amount, self._buffered)

        new_external = checked_add(self._external, amount)
        new_released = checked_add(self._released_units, count)

        self._buffered -= amount
        self._external = new_external
        self._released_units = new_released
        self._in_flight_units += count
        logger.debug(f"Released {count} units ({amount}), buffered={self._buffered}")
        return ReleasedBatch(unit_count=count, unit_size=unit_size, _token=_RELEASE_TOKEN)

    def confirm_release(self, batch: ReleasedBatch) -> None:
        """Facility приняла batch: его units больше не in flight."""
        self._in_flight_units = checked_sub(self._in_flight_units, batch.unit_count)

    def restore_release(self, batch: ReleasedBatch) -> None:
        """Компенсация release, отклонённого facility: value возвращается в buffer."""
        new_external = checked_sub(self._external, batch.amount)
        new_released = checked_sub(self._released_units, batch.unit_count)
        new_in_flight = checked_sub(self._in_flight_units, batch.unit_count)
        new_buffered = checked_add(self._buffered, batch.amount)

        self._external = new_external
        self._released_units = new_released
        self._in_flight_units = new_in_flight
        self._buffered = new_buffered

    def report_external_value(self, new_value: int) -> None:
        """external = new_value безусловно (oracle report авторитетен, может уменьшать)."""
        validate_uint(new_value, "new_value")
        checked_add(self._buffered, new_value)
        self._external = new_value

    def record_reported_units(self, count: int) -> None:
        validate_uint(count, "count")
        self._reported_units = count

    def snapshot(self) -> PoolState:
        return PoolState(
            buffered=self._buffered,
            external=self._external,
            released_units=self._released_units,
            reported_units=self._reported_units,
            in_flight_units=self._in_flight_units,
        )

    def restore(self, state: PoolState) -> None:
        self._buffered = state.buffered
        self._external = state.external
        self._released_units = state.released_units
        self._reported_units = state.reported_units
        self._in_flight_units = state.in_flight_units
