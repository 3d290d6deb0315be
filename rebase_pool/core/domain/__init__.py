"""
Domain models and value objects.

Contains pool configuration and the immutable ledger/pool state snapshots.
"""

from rebase_pool.core.domain.config import (
    DEFAULT_MAX_UNITS_PER_FLUSH,
    DEFAULT_UNIT_SIZE,
    ETHER,
    FEE_RATE_SCALE,
    FeeConfig,
    PoolConfig,
)
from rebase_pool.core.domain.pool_state import (
    PoolSnapshot,
    PoolState,
    ShareLedgerState,
)

__all__ = [
    # Config
    "DEFAULT_MAX_UNITS_PER_FLUSH",
    "DEFAULT_UNIT_SIZE",
    "ETHER",
    "FEE_RATE_SCALE",
    "FeeConfig",
    "PoolConfig",
    # State
    "PoolSnapshot",
    "PoolState",
    "ShareLedgerState",
]
