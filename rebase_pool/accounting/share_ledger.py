"""
ShareLedger — учёт shares по identity

Чистая бухгалтерия без value-семантики:
- mint/burn shares с проверкой uint256
- running total_shares
- undo journal для отката транзакции (begin/commit/rollback)

Инвариант: sum(balances) == total_shares после каждой операции.
Балансы не удаляются: нулевой баланс неотличим от отсутствующего.

Стоимость отката и snapshot() пропорциональна числу затронутых identity,
а не числу аккаунтов.
"""

import logging
from typing import Optional

from rebase_pool.core.domain.pool_state import ShareBalances, ShareLedgerState
from rebase_pool.core.errors import InsufficientShares
from rebase_pool.core.math.checked_math import checked_add, validate_uint

logger = logging.getLogger(__name__)


class ShareLedger:
    """Mapping identity → shares плюс счётчик total_shares."""

    def __init__(self, state: ShareLedgerState | None = None):
        self._balances: dict[str, int] = {}
        self._total_shares = 0

        # Последний выданный read-only вид и identity, изменённые после него
        self._view = ShareBalances()
        self._dirty: set[str] = set()

        # identity → баланс до транзакции (None: identity не было)
        self._undo: Optional[dict[str, Optional[int]]] = None
        self._undo_total = 0

        if state is not None:
            self.restore(state)

    def _touch(self, identity: str) -> None:
        # вызывается до записи нового баланса
        self._dirty.add(identity)
        if self._undo is not None and identity not in self._undo:
            self._undo[identity] = self._balances.get(identity)

    def mint(self, identity: str, amount: int) -> int:
        """
        Начисление shares.

        Политику нулевого amount определяет caller, ledger принимает 0.

        Args:
            identity: Владелец shares
            amount: Количество shares

        Returns:
            Новый баланс identity

        Raises:
            InvalidAmount: Если amount < 0
            ArithmeticOverflow: Если баланс или total выходят за uint256
        """
        validate_uint(amount, "amount")

        # Оба результата считаются до записи, чтобы overflow не оставил partial state
        new_balance = checked_add(self.balance_of(identity), amount)
        new_total = checked_add(self._total_shares, amount)

        self._touch(identity)
        self._balances[identity] = new_balance
        self._total_shares = new_total
        logger.debug(f"Minted {amount} shares to {identity!r}, total={new_total}")
        return new_balance

    def burn(self, identity: str, amount: int) -> int:
        """
        Списание shares.

        Returns:
            Новый баланс identity

        Raises:
            InsufficientShares: Если amount > баланса
        """
        validate_uint(amount, "amount")

        balance = self.balance_of(identity)
        if amount > balance:
            raise InsufficientShares(identity, amount, balance)

        self._touch(identity)
        self._balances[identity] = balance - amount
        self._total_shares -= amount
        logger.debug(f"Burned {amount} shares of {identity!r}, total={self._total_shares}")
        return balance - amount

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def total_shares(self) -> int:
        return self._total_shares

    # -------------------------------------------------------------------------
    # Транзакция
    # -------------------------------------------------------------------------

    def begin(self) -> None:
        """Начало транзакции: дальнейшие mint/burn журналируются."""
        if self._undo is not None:
            raise RuntimeError("ShareLedger transaction already open")
        self._undo = {}
        self._undo_total = self._total_shares

    def commit(self) -> None:
        self._undo = None

    def rollback(self) -> None:
        """Возврат затронутых identity и total_shares к состоянию begin()."""
        if self._undo is None:
            raise RuntimeError("No open ShareLedger transaction")
        for identity, balance in self._undo.items():
            if balance is None:
                del self._balances[identity]
                self._dirty.discard(identity)
            else:
                self._balances[identity] = balance
        self._total_shares = self._undo_total
        self._undo = None

    # -------------------------------------------------------------------------
    # Снапшоты
    # -------------------------------------------------------------------------

    def snapshot(self) -> ShareLedgerState:
        """
        Read-only снапшот закоммиченного состояния.

        Raises:
            RuntimeError: Внутри открытой транзакции
        """
        if self._undo is not None:
            raise RuntimeError("Cannot snapshot ShareLedger inside an open transaction")
        if self._dirty:
            changes = {identity: self._balances[identity] for identity in self._dirty}
            self._view = self._view.with_updates(changes)
            self._dirty.clear()
        # sum(balances) == total_shares поддерживается mint/burn
        return ShareLedgerState.model_construct(
            balances=self._view, total_shares=self._total_shares
        )

    def restore(self, state: ShareLedgerState) -> None:
        self._balances = dict(state.balances)
        self._total_shares = state.total_shares
        self._view = ShareBalances(self._balances)
        self._dirty.clear()
        self._undo = None
