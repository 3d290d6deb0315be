"""
Oracle access layer

StakingPool принимает авторизацию oracle как данность. OracleGuard проверяет
caller до того, как пул будет затронут: неавторизованный report отклоняется
с Unauthorized и не повторяется.
"""

import logging
from typing import Optional

from rebase_pool.accounting.rewards import RewardDistribution
from rebase_pool.core.errors import Unauthorized
from rebase_pool.core.math.fixed_point import Numberish
from rebase_pool.pool.staking_pool import StakingPool

logger = logging.getLogger(__name__)


class OracleGuard:
    """Report-операции StakingPool, доступные только oracle identity."""

    def __init__(self, pool: StakingPool, oracle_identity: str):
        if not oracle_identity:
            raise ValueError("oracle_identity cannot be empty")
        self.pool = pool
        self.oracle_identity = oracle_identity

    def require_oracle(self, caller: str) -> None:
        """
        Raises:
            Unauthorized: Если caller не oracle identity
        """
        if caller != self.oracle_identity:
            logger.warning(f"Rejected oracle report from {caller!r}")
            raise Unauthorized(f"{caller!r} is not the authorized oracle")

    def report_external_state(
        self, caller: str, validator_count: int, reported_balance: int
    ) -> RewardDistribution:
        self.require_oracle(caller)
        return self.pool.report_external_state(validator_count, reported_balance)

    def report_external_rewards(
        self, caller: str, validator_count: int, rewards: int
    ) -> RewardDistribution:
        self.require_oracle(caller)
        return self.pool.report_external_rewards(validator_count, rewards)

    def apply_interest_rate(self, caller: str, rate: Numberish) -> Optional[RewardDistribution]:
        self.require_oracle(caller)
        return self.pool.apply_interest_rate(rate)
