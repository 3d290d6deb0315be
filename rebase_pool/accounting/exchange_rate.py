"""
ExchangeRateEngine — конверсия shares ↔ value

ФОРМУЛЫ:
    value_to_shares(v) = v                          при total_shares == 0
                       = floor(v * S / T)           иначе
    shares_to_value(s) = floor(s * T / S)
    price_per_share    = T / S (FixedPointDecimal), 1.0 при S == 0

    S = total_shares, T = total_pooled_value

Обе конверсии усекают к нулю: округление никогда не идёт в пользу депозитора.
Функции модуля чистые и работают на любых (S, T), в том числе из снапшота.
"""

import logging

from rebase_pool.core.errors import DivisionByZero
from rebase_pool.core.math.checked_math import mul_div, validate_uint
from rebase_pool.core.math.fixed_point import DEFAULT_DECIMAL_PRECISION, FixedPointDecimal

logger = logging.getLogger(__name__)


# =============================================================================
# ЧИСТЫЕ КОНВЕРСИИ
# =============================================================================


def shares_for_value(value: int, total_shares: int, total_pooled_value: int) -> int:
    """
    Value → shares по текущему курсу.

    Raises:
        DivisionByZero: Если shares существуют, а pooled value равна нулю
    """
    validate_uint(value, "value")
    if total_shares == 0:
        # bootstrap: первый депозитор получает 1:1
        return value
    if total_pooled_value == 0:
        raise DivisionByZero(f"{total_shares} shares outstanding against zero pooled value")
    return mul_div(value, total_shares, total_pooled_value)


def value_for_shares(shares: int, total_shares: int, total_pooled_value: int) -> int:
    """
    Shares → value по текущему курсу.

    Raises:
        DivisionByZero: Если total_shares == 0
    """
    validate_uint(shares, "shares")
    if total_shares == 0:
        raise DivisionByZero("no shares outstanding")
    return mul_div(shares, total_pooled_value, total_shares)


def price_per_share(
    total_shares: int,
    total_pooled_value: int,
    precision: int = DEFAULT_DECIMAL_PRECISION,
) -> FixedPointDecimal:
    """Value одного целого share (pooled / shares), 1.0 на пустом пуле."""
    if total_shares == 0:
        return FixedPointDecimal(1, precision)
    return FixedPointDecimal(total_pooled_value, precision).div(total_shares)


# =============================================================================
# ENGINE
# =============================================================================


class ExchangeRateEngine:
    """Конверсии против live ledger и tracker."""

    def __init__(self, ledger, tracker):
        self._ledger = ledger
        self._tracker = tracker

    def value_to_shares(self, value: int) -> int:
        shares = shares_for_value(
            value, self._ledger.total_shares(), self._tracker.total_pooled_value()
        )
        logger.debug(f"value_to_shares({value}) = {shares}")
        return shares

    def shares_to_value(self, shares: int) -> int:
        value = value_for_shares(
            shares, self._ledger.total_shares(), self._tracker.total_pooled_value()
        )
        logger.debug(f"shares_to_value({shares}) = {value}")
        return value

    def price_per_share(self, precision: int = DEFAULT_DECIMAL_PRECISION) -> FixedPointDecimal:
        return price_per_share(
            self._ledger.total_shares(), self._tracker.total_pooled_value(), precision
        )
