"""
RewardDistributor — oracle report, growth и fee shares

ФОРМУЛЫ:
    growth     = reported_external_value - expected_principal   (может быть < 0)
    fee_value  = growth * fee_rate_basis_points // 1000          (только growth > 0)
    new_total  = buffered + reported_external_value
    fee_shares = floor(fee_value * total_shares / (new_total - fee_value))

fee_shares подобраны так, что после mint доля fee recipient в new_total равна
fee_value (с точностью до усечения), а все прежние holders разбавляются
пропорционально.

Порядок: сначала mint fee shares, затем tracker принимает reported value.
Авторизация oracle выполняется вне этого компонента.
"""

import logging
from dataclasses import dataclass

from rebase_pool.accounting.pooled_value import PooledValueTracker
from rebase_pool.accounting.share_ledger import ShareLedger
from rebase_pool.core.domain.config import FeeConfig
from rebase_pool.core.math.checked_math import checked_add, mul_div, validate_uint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewardDistribution:
    """Результат применения oracle report."""

    reported_external_value: int
    expected_principal: int
    growth: int
    fee_value: int
    fee_shares: int
    fee_recipient: str
    previous_external_value: int

    # Состояние после report
    total_pooled_value: int
    total_shares: int

    @property
    def fee_minted(self) -> bool:
        return self.fee_shares > 0


class RewardDistributor:
    """Применение oracle report к ledger и tracker."""

    def __init__(self, ledger: ShareLedger, tracker: PooledValueTracker, fee: FeeConfig):
        self.ledger = ledger
        self.tracker = tracker
        self.fee = fee

    def apply_oracle_report(
        self,
        reported_external_value: int,
        expected_principal: int,
    ) -> RewardDistribution:
        """
        Применение oracle report.

        Args:
            reported_external_value: Value, сообщённая facility
            expected_principal: Principal, соответствующий released units

        Returns:
            RewardDistribution с growth, fee и новым состоянием
        """
        validate_uint(reported_external_value, "reported_external_value")
        validate_uint(expected_principal, "expected_principal")

        growth = reported_external_value - expected_principal
        fee_value = self.fee.fee_for_growth(growth)

        fee_shares = 0
        if fee_value > 0:
            fee_shares = self._fee_shares(fee_value, reported_external_value)
            if fee_shares > 0:
                self.ledger.mint(self.fee.fee_recipient, fee_shares)

        previous_external = self.tracker.external
        self.tracker.report_external_value(reported_external_value)

        logger.info(
            f"Oracle report applied: external {previous_external} -> {reported_external_value}, "
            f"growth={growth}, fee_value={fee_value}, fee_shares={fee_shares}"
        )
        return RewardDistribution(
            reported_external_value=reported_external_value,
            expected_principal=expected_principal,
            growth=growth,
            fee_value=fee_value,
            fee_shares=fee_shares,
            fee_recipient=self.fee.fee_recipient,
            previous_external_value=previous_external,
            total_pooled_value=self.tracker.total_pooled_value(),
            total_shares=self.ledger.total_shares(),
        )

    def _fee_shares(self, fee_value: int, reported_external_value: int) -> int:
        total_shares = self.ledger.total_shares()
        # Знаменатель от total после report (buffered + reported), не до него:
        # только так fee recipient получает ровно fee_value
        new_total = checked_add(self.tracker.buffered, reported_external_value)
        denominator = new_total - fee_value

        if total_shares == 0:
            logger.warning(f"Fee of {fee_value} skipped: no shares outstanding")
            return 0
        if denominator <= 0:
            # fee покрывает весь пул: ratio-preserving формула не определена
            logger.warning(
                f"Fee of {fee_value} skipped: pooled value {new_total} leaves nothing to dilute"
            )
            return 0

        return mul_div(fee_value, total_shares, denominator)
