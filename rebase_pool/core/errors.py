"""
Error taxonomy: типизированные отказы операций пула

Каждая ошибка отклоняет ровно одну операцию. Движок ничего не повторяет
автоматически и не проглатывает исключения: операция либо полностью
применяется, либо завершается одной из ошибок ниже без изменения состояния.
"""


class PoolAccountingError(Exception):
    """Базовый класс всех отказов share-accounting движка."""


class ZeroDeposit(PoolAccountingError):
    """submit() без value."""


class InvalidAmount(PoolAccountingError):
    """Недопустимое количество (отрицательное, нулевое там, где 0 запрещён)."""


class InsufficientShares(PoolAccountingError):
    """burn/withdraw больше, чем баланс shares."""

    def __init__(self, identity: str, requested: int, available: int):
        self.identity = identity
        self.requested = requested
        self.available = available
        super().__init__(
            f"{identity!r} holds {available} shares, cannot burn {requested}"
        )


class InsufficientBuffer(PoolAccountingError):
    """Запрошено больше buffered value, чем есть в пуле."""

    def __init__(self, requested: int, buffered: int):
        self.requested = requested
        self.buffered = buffered
        super().__init__(f"requested {requested} from buffer holding {buffered}")


class DivisionByZero(PoolAccountingError, ZeroDivisionError):
    """Конверсия shares/value при нулевом знаменателе."""


class ArithmeticOverflow(PoolAccountingError, OverflowError):
    """Результат вышел за пределы uint256. Операция отменяется целиком."""


class Unauthorized(PoolAccountingError, PermissionError):
    """Oracle report от неавторизованного caller."""


class InvalidOracleReport(PoolAccountingError):
    """Oracle report противоречит учтённым released units."""


class ExternalFacilityError(PoolAccountingError):
    """External facility отклонила batch; release скомпенсирован."""
