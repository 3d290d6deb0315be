"""
Contract Validation Module

Модуль для валидации JSON контрактов rebase-pool.
"""

from .validators import (
    ContractValidator,
    DecimalValidator,
    PoolSnapshotValidator,
    SchemaLoader,
    validate_decimal,
    validate_pool_snapshot,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "DecimalValidator",
    "PoolSnapshotValidator",
    # Functions
    "validate_decimal",
    "validate_pool_snapshot",
]
