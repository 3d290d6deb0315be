"""
Тесты для ExchangeRateEngine

Обе конверсии усекают к нулю; bootstrap 1:1 при total_shares == 0.
"""

import pytest

from rebase_pool.accounting.exchange_rate import (
    ExchangeRateEngine,
    price_per_share,
    shares_for_value,
    value_for_shares,
)
from rebase_pool.accounting.pooled_value import PooledValueTracker
from rebase_pool.accounting.share_ledger import ShareLedger
from rebase_pool.core.domain.config import ETHER
from rebase_pool.core.errors import DivisionByZero


class TestPureConversions:
    def test_bootstrap_one_to_one(self) -> None:
        assert shares_for_value(5 * ETHER, 0, 0) == 5 * ETHER

    def test_shares_for_value_truncates(self) -> None:
        # 10 * 32 / 33 = 9.69...
        assert shares_for_value(10, 32, 33) == 9

    def test_value_for_shares_truncates(self) -> None:
        # 10 * 33 / 32 = 10.31...
        assert value_for_shares(10, 32, 33) == 10

    def test_shares_without_value(self) -> None:
        with pytest.raises(DivisionByZero):
            shares_for_value(1, 100, 0)

    def test_value_without_shares(self) -> None:
        with pytest.raises(DivisionByZero):
            value_for_shares(1, 0, 100)

    def test_round_trip_never_gains(self) -> None:
        s, t = 3 * ETHER, 10 * ETHER + 7
        for value in (1, 999, ETHER, 12345678901234567):
            shares = shares_for_value(value, s, t)
            assert value_for_shares(shares, s, t) <= value


class TestPricePerShare:
    def test_empty_pool_is_one(self) -> None:
        assert price_per_share(0, 0).to_string() == "1.000000000000000000"

    def test_price(self) -> None:
        assert price_per_share(32 * ETHER, 33 * ETHER).to_string() == "1.031250000000000000"

    def test_precision(self) -> None:
        price = price_per_share(3, 1, precision=4)
        assert price.precision == 4
        assert price.to_string() == "0.3333"


class TestEngine:
    def test_live_state(self) -> None:
        ledger = ShareLedger()
        tracker = PooledValueTracker()
        engine = ExchangeRateEngine(ledger, tracker)

        assert engine.value_to_shares(10) == 10

        ledger.mint("alice", 32)
        tracker.buffer_value(33)
        assert engine.value_to_shares(10) == 9
        assert engine.shares_to_value(32) == 33
        assert engine.price_per_share(precision=5).to_string() == "1.03125"
