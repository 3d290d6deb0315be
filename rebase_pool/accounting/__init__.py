"""Accounting: shares, pooled value, курс, batching и rewards пула."""

from .deposit_batcher import DepositBatcher
from .exchange_rate import (
    ExchangeRateEngine,
    price_per_share,
    shares_for_value,
    value_for_shares,
)
from .facility import ExternalFacility, RecordingFacility
from .pooled_value import PooledValueTracker, ReleasedBatch
from .rewards import RewardDistribution, RewardDistributor
from .share_ledger import ShareLedger

__all__ = [
    "DepositBatcher",
    "ExchangeRateEngine",
    "ExternalFacility",
    "PooledValueTracker",
    "RecordingFacility",
    "ReleasedBatch",
    "RewardDistribution",
    "RewardDistributor",
    "ShareLedger",
    "price_per_share",
    "shares_for_value",
    "value_for_shares",
]
