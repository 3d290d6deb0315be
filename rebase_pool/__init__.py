"""
rebase-pool — share accounting для rebasing staking pool.

Пакеты:
- rebase_pool/core/        : math, domain models, contracts, errors
- rebase_pool/accounting/  : ledger, tracker, exchange rate, batcher, rewards, facility
- rebase_pool/pool/        : StakingPool facade, oracle access
"""

__version__ = "0.1.0"
