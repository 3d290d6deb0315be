"""
PoolConfig — параметры развёртывания пула

Immutable Pydantic модель. Все параметры фиксируются при создании пула
и не меняются в течение его жизни.
"""

from typing import Final

from pydantic import BaseModel, Field

from rebase_pool.core.math.fixed_point import DEFAULT_DECIMAL_PRECISION


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Шкала fee rate: fee_rate_basis_points / FEE_RATE_SCALE
FEE_RATE_SCALE: Final[int] = 1000

# Один ether в минимальных единицах (wei)
ETHER: Final[int] = 10**DEFAULT_DECIMAL_PRECISION

# Размер одного депозита в external facility (32 ETH на validator)
DEFAULT_UNIT_SIZE: Final[int] = 32 * ETHER

# Лимит units за один flush
DEFAULT_MAX_UNITS_PER_FLUSH: Final[int] = 16


# =============================================================================
# CONFIG MODELS
# =============================================================================


class FeeConfig(BaseModel):
    """Комиссия с growth, минтится fee recipient в виде shares."""

    fee_rate_basis_points: int = Field(
        100,
        ge=0,
        le=FEE_RATE_SCALE,
        description="Доля growth в пользу fee recipient (шкала 1000)",
    )
    fee_recipient: str = Field(
        "treasury", min_length=1, description="Identity получателя fee shares"
    )

    model_config = {"frozen": True}

    def fee_for_growth(self, growth: int) -> int:
        """floor(growth * fee_rate_basis_points / FEE_RATE_SCALE), 0 при growth <= 0."""
        if growth <= 0:
            return 0
        return growth * self.fee_rate_basis_points // FEE_RATE_SCALE


class PoolConfig(BaseModel):
    """
    Конфигурация пула.

    unit_size и fee неизменяемы в рамках одного развёртывания.
    """

    unit_size: int = Field(
        DEFAULT_UNIT_SIZE, gt=0, description="Гранулярность release в external facility"
    )
    max_units_per_flush: int = Field(
        DEFAULT_MAX_UNITS_PER_FLUSH, ge=1, description="Default лимит units за flush"
    )
    decimals: int = Field(
        DEFAULT_DECIMAL_PRECISION, ge=0, description="Точность wire-представления value"
    )
    fee: FeeConfig = Field(default_factory=FeeConfig, description="Параметры комиссии")

    model_config = {"frozen": True}
