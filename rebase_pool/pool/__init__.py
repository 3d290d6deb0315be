"""Pool: StakingPool facade и oracle access layer.

- Single-writer: все мутации под одним lock, атомарно
- Commit-then-call-out для external facility
- Oracle reports только через OracleGuard
"""

from .access import OracleGuard
from .staking_pool import StakingPool

__all__ = [
    "OracleGuard",
    "StakingPool",
]
