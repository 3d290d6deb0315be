"""
DepositBatcher — release buffered value целыми units

ФОРМУЛА:
    available = buffered // unit_size
    count     = min(available, max_units)

Порядок строго фиксирован:
1. prepare(): уменьшение buffered коммитится в tracker, выдаётся ReleasedBatch
2. dispatch(): batch передаётся external facility

Reentrant вызов из facility видит уже уменьшенный buffer, поэтому одна и та же
value не может быть отправлена дважды.
"""

import logging

from rebase_pool.accounting.facility import ExternalFacility
from rebase_pool.accounting.pooled_value import PooledValueTracker, ReleasedBatch
from rebase_pool.core.domain.config import DEFAULT_MAX_UNITS_PER_FLUSH
from rebase_pool.core.math.checked_math import validate_uint

logger = logging.getLogger(__name__)


class DepositBatcher:
    """Release buffered value в facility блоками по unit_size."""

    def __init__(
        self,
        tracker: PooledValueTracker,
        facility: ExternalFacility,
        unit_size: int,
        max_units_per_flush: int = DEFAULT_MAX_UNITS_PER_FLUSH,
    ):
        """
        Args:
            tracker: PooledValueTracker пула
            facility: приёмник released units
            unit_size: гранулярность release
            max_units_per_flush: лимит units, если flush вызван без max_units
        """
        self.tracker = tracker
        self.facility = facility
        self.unit_size = validate_uint(unit_size, "unit_size")
        self.max_units_per_flush = max_units_per_flush

    def eligible_units(self, max_units: int | None = None) -> int:
        """Сколько units будет released при flush(max_units)."""
        if max_units is None:
            max_units = self.max_units_per_flush
        validate_uint(max_units, "max_units")
        available = self.tracker.buffered // self.unit_size
        return min(available, max_units)

    def prepare(self, max_units: int | None = None) -> ReleasedBatch | None:
        """Commit release в tracker. None, если release нечего."""
        count = self.eligible_units(max_units)
        if count == 0:
            return None
        return self.tracker.release_units(count, self.unit_size)

    def dispatch(self, batch: ReleasedBatch) -> None:
        """Передача закоммиченного batch в facility."""
        logger.info(f"Dispatching {batch.unit_count} units ({batch.amount}) to facility")
        self.facility.deposit(batch)

    def flush(self, max_units: int | None = None) -> ReleasedBatch | None:
        """
        prepare() + dispatch() + confirm. No-op (None), если count == 0.

        Исключение facility компенсирует release и пробрасывается дальше.
        """
        batch = self.prepare(max_units)
        if batch is None:
            return None
        try:
            self.dispatch(batch)
        except Exception:
            self.tracker.restore_release(batch)
            raise
        self.tracker.confirm_release(batch)
        return batch
