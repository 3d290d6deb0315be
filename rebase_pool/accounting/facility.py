"""
External facility — приёмник released units

Реальная staking facility вне области движка. Она принимает депозиты
фиксированного размера и позже сообщает агрегированный value через oracle.
"""

import logging
from typing import Protocol

from rebase_pool.accounting.pooled_value import ReleasedBatch

logger = logging.getLogger(__name__)


class ExternalFacility(Protocol):
    """Sink для ReleasedBatch. Исключение из deposit() означает отказ от batch."""

    def deposit(self, batch: ReleasedBatch) -> None: ...


class RecordingFacility:
    """
    In-memory facility: запоминает принятые batches.

    units и balance считают принятый principal; rewards и потери приходят в
    пул только через oracle report.
    """

    def __init__(self):
        self.batches: list[ReleasedBatch] = []
        self.units = 0
        self.balance = 0

    def deposit(self, batch: ReleasedBatch) -> None:
        if not isinstance(batch, ReleasedBatch):
            raise TypeError(f"Expected ReleasedBatch, got {type(batch).__name__}")
        self.batches.append(batch)
        self.units += batch.unit_count
        self.balance += batch.amount
        logger.info(f"Facility accepted {batch.unit_count} units, balance={self.balance}")
