"""
PoolSnapshot — снапшот состояния ledger + pool

Immutable Pydantic модели, представляющие полностью применённое состояние.
Читатели получают последний опубликованный снапшот без блокировки writer.
Совместим с JSON Schema (contracts/schema/pool_snapshot.json) через to_wire().

Балансы shares хранятся в ShareBalances: read-only mapping из неизменяемой
базы и небольшого delta последних изменений. Новый снапшот после commit
переиспользует базу предыдущего, поэтому публикация стоит O(изменений),
а не O(аккаунтов).
"""

import math
from collections.abc import Mapping
from typing import Any, Final, Iterator

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from rebase_pool.core.math.fixed_point import FixedPointDecimal

# Минимальный размер delta до слияния с базой
_MIN_DELTA_SIZE: Final[int] = 64


# =============================================================================
# SHARE BALANCES
# =============================================================================


class ShareBalances(Mapping):
    """
    Read-only mapping identity → shares.

    Lookup сначала в delta, затем в base. Ни base, ни delta не меняются после
    создания: with_updates() возвращает новый экземпляр. Delta сливается с
    базой, когда превышает max(64, isqrt(len(base))), так что и копирование
    delta, и амортизированное слияние стоят O(sqrt(n)) на commit.
    """

    __slots__ = ("_base", "_delta", "_size")

    def __init__(self, balances: Mapping | None = None):
        self._base: dict[str, int] = dict(balances or {})
        self._delta: dict[str, int] = {}
        self._size = len(self._base)

    @classmethod
    def _layered(cls, base: dict[str, int], delta: dict[str, int]) -> "ShareBalances":
        view = cls.__new__(cls)
        view._base = base
        view._delta = delta
        view._size = len(base) + sum(1 for identity in delta if identity not in base)
        return view

    def with_updates(self, changes: Mapping) -> "ShareBalances":
        """Новый вид с применёнными changes; self не меняется."""
        if not changes:
            return self
        delta = {**self._delta, **changes}
        if len(delta) > max(_MIN_DELTA_SIZE, math.isqrt(len(self._base))):
            return ShareBalances({**self._base, **delta})
        return ShareBalances._layered(self._base, delta)

    def __getitem__(self, identity: str) -> int:
        if identity in self._delta:
            return self._delta[identity]
        return self._base[identity]

    def __iter__(self) -> Iterator[str]:
        yield from self._base
        for identity in self._delta:
            if identity not in self._base:
                yield identity

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"ShareBalances({dict(self.items())!r})"


# =============================================================================
# NESTED MODELS
# =============================================================================


class ShareLedgerState(BaseModel):
    """
    Балансы shares и их сумма.

    Инвариант: sum(balances.values()) == total_shares. Проверяется при
    валидации входных данных; ShareLedger публикует состояние через
    model_construct, поддерживая инвариант сам.
    """

    balances: Mapping[str, int] = Field(
        default_factory=ShareBalances, description="identity → shares (read-only)"
    )
    total_shares: int = Field(0, ge=0, description="Сумма всех shares")

    model_config = {"frozen": True}

    @field_validator("balances", mode="after")
    @classmethod
    def freeze_balances(cls, balances: Mapping[str, int]) -> ShareBalances:
        return ShareBalances(balances)

    @model_validator(mode="after")
    def validate_conservation(self) -> "ShareLedgerState":
        if any(shares < 0 for shares in self.balances.values()):
            raise ValueError("share balances must be non-negative")
        total = sum(self.balances.values())
        if total != self.total_shares:
            raise ValueError(
                f"sum of balances {total} != total_shares {self.total_shares}"
            )
        return self

    @field_serializer("balances")
    def serialize_balances(self, balances: Mapping[str, int]) -> dict[str, int]:
        return dict(balances)

    def balance_of(self, identity: str) -> int:
        return self.balances.get(identity, 0)


class PoolState(BaseModel):
    """
    Разбиение pooled value на buffered и external.

    total_pooled_value = buffered + external
    """

    buffered: int = Field(0, ge=0, description="Value, ещё не переданная facility")
    external: int = Field(0, ge=0, description="Value под управлением external facility")
    released_units: int = Field(0, ge=0, description="Units, переданные facility")
    reported_units: int = Field(0, ge=0, description="Units в последнем oracle report")
    in_flight_units: int = Field(
        0, ge=0, description="Released units, которые facility ещё не подтвердила"
    )

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_units(self) -> "PoolState":
        if self.in_flight_units > self.released_units:
            raise ValueError(
                f"in_flight_units {self.in_flight_units} > released_units {self.released_units}"
            )
        return self

    @property
    def total_pooled_value(self) -> int:
        return self.buffered + self.external

    @property
    def confirmed_units(self) -> int:
        """Released units, принятые facility (oracle может их report)."""
        return self.released_units - self.in_flight_units


# =============================================================================
# SNAPSHOT MODEL
# =============================================================================


class PoolSnapshot(BaseModel):
    """
    Полный снапшот пула.

    Metadata (version, unit_size, decimals) + ledger + pool.
    """

    version: int = Field(0, ge=0, description="Монотонный номер commit")
    unit_size: int = Field(..., gt=0, description="Гранулярность release")
    decimals: int = Field(..., ge=0, description="Точность wire-представления")
    ledger: ShareLedgerState = Field(default_factory=ShareLedgerState)
    pool: PoolState = Field(default_factory=PoolState)

    model_config = {"frozen": True}

    @property
    def total_shares(self) -> int:
        return self.ledger.total_shares

    @property
    def total_pooled_value(self) -> int:
        return self.pool.total_pooled_value

    def shares_of(self, identity: str) -> int:
        return self.ledger.balance_of(identity)

    def _amount(self, amount: int) -> dict[str, str]:
        return FixedPointDecimal.from_scaled_integer(amount, self.decimals).to_json()

    def to_wire(self) -> dict[str, Any]:
        """
        Wire-представление: все суммы в формате {"kind": "Decimal", "value": ...}.

        Returns:
            dict, соответствующий pool_snapshot.json
        """
        return {
            "schema_version": "1",
            "version": self.version,
            "unit_size": self._amount(self.unit_size),
            "buffered": self._amount(self.pool.buffered),
            "external": self._amount(self.pool.external),
            "total_pooled_value": self._amount(self.total_pooled_value),
            "total_shares": self._amount(self.total_shares),
            "released_units": self.pool.released_units,
            "reported_units": self.pool.reported_units,
            "balances": {
                identity: self._amount(shares)
                for identity, shares in sorted(self.ledger.balances.items())
            },
        }
