"""StakingPool — single-writer facade над ledger и pool state.

Все мутирующие операции:
- выполняются под одним lock целиком
- атомарны: при любом исключении ledger и tracker восстанавливаются из
  снапшотов, взятых в начале операции
- после commit публикуют неизменяемый PoolSnapshot для читателей

Вызов external facility выполняется после commit и вне lock. Вложенный вызов
из facility (submit, flush, ...) работает как обычная операция против уже
обновлённого состояния.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from rebase_pool.accounting.deposit_batcher import DepositBatcher
from rebase_pool.accounting.exchange_rate import (
    ExchangeRateEngine,
    price_per_share,
    shares_for_value,
    value_for_shares,
)
from rebase_pool.accounting.facility import ExternalFacility, RecordingFacility
from rebase_pool.accounting.pooled_value import PooledValueTracker
from rebase_pool.accounting.rewards import RewardDistribution, RewardDistributor
from rebase_pool.accounting.share_ledger import ShareLedger
from rebase_pool.core.domain.config import PoolConfig
from rebase_pool.core.domain.pool_state import PoolSnapshot
from rebase_pool.core.errors import (
    ExternalFacilityError,
    InvalidAmount,
    InvalidOracleReport,
    InsufficientShares,
    ZeroDeposit,
)
from rebase_pool.core.math.checked_math import checked_add, checked_mul, checked_sub, validate_uint
from rebase_pool.core.math.fixed_point import FixedPointDecimal, Numberish

logger = logging.getLogger(__name__)


def _validate_identity(identity: str) -> str:
    if not isinstance(identity, str) or not identity:
        raise InvalidAmount(f"identity must be a non-empty string, got {identity!r}")
    return identity


class StakingPool:
    """Rebasing staking pool: submit, withdraw, flush, oracle reports.

    Авторизация oracle не проверяется здесь: report_* вызываются через
    OracleGuard (rebase_pool.pool.access) или другой access layer.
    """

    def __init__(
        self,
        config: Optional[PoolConfig] = None,
        facility: Optional[ExternalFacility] = None,
    ):
        """
        Args:
            config: параметры пула (default PoolConfig())
            facility: приёмник released units (default RecordingFacility())
        """
        self.config = config or PoolConfig()
        self.facility = facility if facility is not None else RecordingFacility()

        self._lock = threading.Lock()
        self._ledger = ShareLedger()
        self._tracker = PooledValueTracker()
        self._rates = ExchangeRateEngine(self._ledger, self._tracker)
        self._batcher = DepositBatcher(
            self._tracker,
            self.facility,
            self.config.unit_size,
            self.config.max_units_per_flush,
        )
        self._rewards = RewardDistributor(self._ledger, self._tracker, self.config.fee)

        self._version = 0
        self._published = self._build_snapshot()

    # -------------------------------------------------------------------------
    # Transaction
    # -------------------------------------------------------------------------

    def _build_snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(
            version=self._version,
            unit_size=self.config.unit_size,
            decimals=self.config.decimals,
            ledger=self._ledger.snapshot(),
            pool=self._tracker.snapshot(),
        )

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[None]:
        """Commit целиком или rollback целиком.

        Ledger откатывается по undo journal затронутых identity, tracker по
        снапшоту из пяти чисел: стоимость не зависит от числа аккаунтов.
        """
        with self._lock:
            pool_state = self._tracker.snapshot()
            self._ledger.begin()
            try:
                yield
            except BaseException:
                self._ledger.rollback()
                self._tracker.restore(pool_state)
                logger.debug(f"{operation} rolled back")
                raise
            self._ledger.commit()
            self._version += 1
            self._published = self._build_snapshot()

    # -------------------------------------------------------------------------
    # Мутирующие операции
    # -------------------------------------------------------------------------

    def submit(self, identity: str, deposit_value: int) -> int:
        """Депозит value в обмен на shares по текущему курсу.

        Returns:
            Количество minted shares

        Raises:
            ZeroDeposit: Если deposit_value == 0
            InvalidAmount: Если депозит слишком мал для одного share
        """
        _validate_identity(identity)
        if deposit_value == 0:
            raise ZeroDeposit(f"{identity!r} submitted no value")
        validate_uint(deposit_value, "deposit_value")

        with self._transaction("submit"):
            shares = self._shares_for_deposit(deposit_value)
            self._ledger.mint(identity, shares)
            self._tracker.buffer_value(deposit_value)

        logger.info(f"Submit: {identity!r} deposited {deposit_value}, minted {shares} shares")
        return shares

    def _shares_for_deposit(self, deposit_value: int) -> int:
        total_shares = self._ledger.total_shares()
        if total_shares > 0 and self._tracker.total_pooled_value() == 0:
            logger.warning(
                f"Pool holds {total_shares} shares but no value, deposit sets a 1:1 basis"
            )
            return deposit_value

        shares = self._rates.value_to_shares(deposit_value)
        if shares == 0:
            raise InvalidAmount(f"deposit of {deposit_value} is too small to mint a share")
        return shares

    def withdraw(self, identity: str, share_amount: int) -> int:
        """Burn shares и возврат value по текущему курсу из buffered ликвидности.

        Returns:
            Возвращённая value

        Raises:
            InvalidAmount: Если share_amount == 0
            InsufficientShares: Если баланс меньше share_amount
            InsufficientBuffer: Если buffered value не покрывает выплату
        """
        _validate_identity(identity)
        validate_uint(share_amount, "share_amount")
        if share_amount == 0:
            raise InvalidAmount("share_amount must be positive")

        with self._transaction("withdraw"):
            balance = self._ledger.balance_of(identity)
            if share_amount > balance:
                raise InsufficientShares(identity, share_amount, balance)

            value = self._rates.shares_to_value(share_amount)
            self._ledger.burn(identity, share_amount)
            self._tracker.withdraw_buffered(value)

        logger.info(f"Withdraw: {identity!r} burned {share_amount} shares for {value}")
        return value

    def flush_buffer(self, max_units: Optional[int] = None) -> None:
        """Release buffered value в facility целыми units. No-op, если нечего release.

        Units остаются in flight, пока facility.deposit() не вернёт управление:
        oracle report, пришедший из вложенного вызова, не может их покрывать.

        Raises:
            ExternalFacilityError: Если facility отклонила batch (release скомпенсирован)
        """
        with self._transaction("flush"):
            batch = self._batcher.prepare(max_units)

        if batch is None:
            logger.debug("Flush: nothing eligible")
            return

        try:
            self._batcher.dispatch(batch)
        except Exception as exc:
            with self._transaction("flush-compensation"):
                self._tracker.restore_release(batch)
            logger.warning(f"Facility rejected {batch.unit_count} units, release compensated: {exc}")
            raise ExternalFacilityError(
                f"facility rejected batch of {batch.unit_count} units"
            ) from exc

        with self._transaction("flush-confirm"):
            self._tracker.confirm_release(batch)
        logger.info(f"Flush: released {batch.unit_count} units ({batch.amount})")

    def report_external_state(self, validator_count: int, reported_balance: int) -> RewardDistribution:
        """Oracle report: validator_count units под управлением facility с balance.

        expected_principal = validator_count * unit_size. Released units, ещё не
        попавшие в report, учитываются по номиналу с обеих сторон growth.

        Raises:
            InvalidOracleReport: Если validator_count больше подтверждённых facility
                units или меньше предыдущего report
        """
        validate_uint(validator_count, "validator_count")
        validate_uint(reported_balance, "reported_balance")

        with self._transaction("report"):
            distribution = self._apply_report(validator_count, reported_balance)
        return distribution

    def _apply_report(self, validator_count: int, reported_balance: int) -> RewardDistribution:
        # вызывается внутри _transaction
        state = self._tracker.snapshot()
        if validator_count > state.confirmed_units:
            raise InvalidOracleReport(
                f"reported {validator_count} units, only {state.confirmed_units} of "
                f"{state.released_units} released units confirmed by the facility"
            )
        if validator_count < state.reported_units:
            raise InvalidOracleReport(
                f"reported {validator_count} units, previous report had "
                f"{state.reported_units}"
            )

        unit_size = self.config.unit_size
        transient = (state.released_units - validator_count) * unit_size
        expected_principal = checked_add(checked_mul(validator_count, unit_size), transient)
        distribution = self._rewards.apply_oracle_report(
            checked_add(reported_balance, transient),
            expected_principal,
        )
        self._tracker.record_reported_units(validator_count)
        return distribution

    def report_external_rewards(self, validator_count: int, rewards: int) -> RewardDistribution:
        """Report через rewards: balance = rewards + validator_count * unit_size.

        rewards < 0 означает потери.
        """
        validate_uint(validator_count, "validator_count")
        balance = validator_count * self.config.unit_size + rewards
        validate_uint(balance, "reported_balance")
        return self.report_external_state(validator_count, balance)

    def apply_interest_rate(self, rate: Numberish) -> Optional[RewardDistribution]:
        """Report, масштабирующий текущий external value на rate.

        Все подтверждённые facility units считаются reported; units in flight
        остаются по номиналу. No-op (None) на пустом пуле.
        """
        if not isinstance(rate, FixedPointDecimal):
            rate = FixedPointDecimal(rate, self.config.decimals)

        with self._transaction("interest-rate"):
            if self._tracker.total_pooled_value() == 0:
                logger.debug("Interest rate ignored: pool is empty")
                return None

            state = self._tracker.snapshot()
            in_flight_value = checked_mul(state.in_flight_units, self.config.unit_size)
            earning = checked_sub(state.external, in_flight_value)
            new_balance = int(rate.mul(earning))
            validate_uint(new_balance, "reported_balance")
            distribution = self._apply_report(state.confirmed_units, new_balance)
        return distribution

    # -------------------------------------------------------------------------
    # Чтение (последний опубликованный снапшот, без lock)
    # -------------------------------------------------------------------------

    def snapshot(self) -> PoolSnapshot:
        return self._published

    def total_supply(self) -> int:
        """Total pooled value: buffered + external."""
        return self._published.total_pooled_value

    def total_shares(self) -> int:
        return self._published.total_shares

    def shares_of(self, identity: str) -> int:
        return self._published.shares_of(identity)

    def balance_of(self, identity: str) -> int:
        """Value, соответствующая shares identity."""
        snapshot = self._published
        shares = snapshot.shares_of(identity)
        if shares == 0:
            return 0
        return value_for_shares(shares, snapshot.total_shares, snapshot.total_pooled_value)

    def shares_to_value(self, shares: int) -> int:
        snapshot = self._published
        return value_for_shares(shares, snapshot.total_shares, snapshot.total_pooled_value)

    def value_to_shares(self, value: int) -> int:
        snapshot = self._published
        return shares_for_value(value, snapshot.total_shares, snapshot.total_pooled_value)

    def price_per_share(self) -> FixedPointDecimal:
        snapshot = self._published
        return price_per_share(
            snapshot.total_shares, snapshot.total_pooled_value, self.config.decimals
        )
