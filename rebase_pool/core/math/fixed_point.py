"""
FixedPointDecimal — десятичное число с фиксированной точностью

Представляет вещественное число точно как scaled_value / 10**precision.
Используется как числовой субстрат для rate-вычислений пула
(price per share, interest rate) и как инструмент верификации в тестах.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Лишние дробные цифры ВСЕГДА усекаются, никогда не округляются
2. Деление усекает к нулю (не floor) для любых знаков
3. Float не принимается ни в каком виде
4. Экземпляр неизменяем после создания

ФОРМУЛЫ:
    ONE(p) = 10**p
    mul(a, b) = (a * b) / ONE
    div(a, b) = (a * ONE) / b
"""

import re
from decimal import Decimal
from typing import Final, Union

from rebase_pool.core.errors import DivisionByZero

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Точность большинства 18-decimals активов (ETH, wETH, stETH)
DEFAULT_DECIMAL_PRECISION: Final[int] = 18

# Канонический тег wire-формата
WIRE_KIND: Final[str] = "Decimal"

_NUMBER_RE = re.compile(r"^([+-]?)(\d*)(?:\.(\d*))?$")

# Кэш 10**p по значению точности
_ONE_CACHE: dict[int, int] = {
    6: 10**6,
    18: 10**18,
}

Numberish = Union[int, str, Decimal, "FixedPointDecimal"]


# =============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# =============================================================================


def _one(precision: int) -> int:
    """1.0 в виде scaled integer заданной точности."""
    one = _ONE_CACHE.get(precision)
    if one is None:
        one = 10**precision
        _ONE_CACHE[precision] = one
    return one


def _validate_precision(precision: int) -> int:
    if isinstance(precision, bool) or not isinstance(precision, int):
        raise TypeError(f"precision must be an int, got {type(precision).__name__}")
    if precision < 0:
        raise ValueError(f"precision must be non-negative, got {precision}")
    return precision


def _trunc_div(numerator: int, denominator: int) -> int:
    """Целочисленное деление с усечением к нулю (Python // делает floor)."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def _parse_text(text: str, precision: int) -> int:
    """
    Разбор десятичной строки в scaled integer.

    "123.456" при precision 2 → 12345 (усечение)
    "1.5" при precision 4 → 15000 (дополнение нулями)
    """
    match = _NUMBER_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Not a decimal number: {text!r}")

    sign, whole, fract = match.group(1), match.group(2), match.group(3) or ""
    if not whole and not fract:
        raise ValueError(f"Not a decimal number: {text!r}")

    magnitude = int(whole or "0") * _one(precision)
    if precision > 0:
        fract = fract[:precision].ljust(precision, "0")
        magnitude += int(fract)

    return -magnitude if sign == "-" else magnitude


def to_scaled_int(value: Numberish, precision: int) -> int:
    """
    Конверсия любого numberish значения в scaled integer точности precision.

    - FixedPointDecimal: upscale умножением на 10**k, downscale с усечением
    - int: целое число (5 → 5 * 10**precision)
    - str / Decimal: разбор текста, лишние цифры усекаются

    Raises:
        TypeError: Для float, bool и прочих типов
        ValueError: Для некорректного текста или не-finite Decimal
    """
    if isinstance(value, FixedPointDecimal):
        if value.precision == precision:
            return value.scaled_value
        if value.precision > precision:
            return _trunc_div(value.scaled_value, _one(value.precision - precision))
        return value.scaled_value * _one(precision - value.precision)

    if isinstance(value, bool):
        raise TypeError("bool is not a decimal value")

    if isinstance(value, int):
        return value * _one(precision)

    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Decimal value must be finite, got {value}")
        return _parse_text(format(value, "f"), precision)

    if isinstance(value, str):
        return _parse_text(value, precision)

    raise TypeError(f"Cannot convert {type(value).__name__} to FixedPointDecimal")


# =============================================================================
# FIXED POINT DECIMAL
# =============================================================================


class FixedPointDecimal:
    """
    Fixed-point decimal со строго заданной точностью.

    Аргумент арифметики и сравнений приводится к точности левого операнда,
    результат всегда имеет точность левого операнда.

    Examples:
        >>> FixedPointDecimal("1.239999", 2).to_string()
        '1.23'
        >>> FixedPointDecimal("1.239999", 6).to_rounded(2)
        '1.24'
        >>> (FixedPointDecimal("1.5", 6) * 3).to_string()
        '4.500000'
    """

    __slots__ = ("_scaled", "_precision")

    def __init__(self, value: Numberish, precision: int = DEFAULT_DECIMAL_PRECISION):
        _validate_precision(precision)
        object.__setattr__(self, "_precision", precision)
        object.__setattr__(self, "_scaled", to_scaled_int(value, precision))

    @classmethod
    def from_scaled_integer(cls, scaled_value: int, precision: int) -> "FixedPointDecimal":
        """Создание из сырого scaled integer без масштабирования."""
        _validate_precision(precision)
        if isinstance(scaled_value, bool) or not isinstance(scaled_value, int):
            raise TypeError(f"scaled_value must be an int, got {type(scaled_value).__name__}")
        instance = cls.__new__(cls)
        object.__setattr__(instance, "_precision", precision)
        object.__setattr__(instance, "_scaled", scaled_value)
        return instance

    @classmethod
    def from_json(cls, payload: dict, precision: int | None = None) -> "FixedPointDecimal":
        """
        Разбор wire-формата {"kind": "Decimal", "value": "1.500000"}.

        Если precision не задана, она равна количеству дробных цифр в value.
        """
        if payload.get("kind") != WIRE_KIND:
            raise ValueError(f"Expected kind={WIRE_KIND!r}, got {payload.get('kind')!r}")
        text = payload.get("value")
        if not isinstance(text, str):
            raise ValueError("Decimal payload value must be a string")
        if precision is None:
            _, _, fract = text.partition(".")
            precision = len(fract)
        return cls(text, precision)

    def __setattr__(self, name, value):
        raise AttributeError("FixedPointDecimal is immutable")

    def __delattr__(self, name):
        raise AttributeError("FixedPointDecimal is immutable")

    # -------------------------------------------------------------------------
    # Доступ и конверсии
    # -------------------------------------------------------------------------

    @property
    def scaled_value(self) -> int:
        return self._scaled

    @property
    def precision(self) -> int:
        return self._precision

    def to_scaled_integer(self, precision: int | None = None) -> int:
        """Scaled integer этой или заданной точности."""
        if precision is None or precision == self._precision:
            return self._scaled
        return to_scaled_int(self, _validate_precision(precision))

    def to_decimal(self, value: Numberish) -> "FixedPointDecimal":
        """Numberish → FixedPointDecimal точности self."""
        return FixedPointDecimal(value, self._precision)

    def to_precision(self, precision: int) -> "FixedPointDecimal":
        """self в другой точности (усечение при сужении)."""
        return FixedPointDecimal(self, precision)

    def _scaled_arg(self, value: Numberish) -> int:
        return to_scaled_int(value, self._precision)

    def _new(self, scaled_value: int) -> "FixedPointDecimal":
        return FixedPointDecimal.from_scaled_integer(scaled_value, self._precision)

    # -------------------------------------------------------------------------
    # Арифметика
    # -------------------------------------------------------------------------

    def add(self, value: Numberish) -> "FixedPointDecimal":
        return self._new(self._scaled + self._scaled_arg(value))

    def sub(self, value: Numberish) -> "FixedPointDecimal":
        return self._new(self._scaled - self._scaled_arg(value))

    def mul(self, value: Numberish) -> "FixedPointDecimal":
        # mulf = (a * b) / ONE
        return self._new(_trunc_div(self._scaled * self._scaled_arg(value), _one(self._precision)))

    def div(self, value: Numberish) -> "FixedPointDecimal":
        """
        divf = (a * ONE) / b

        Raises:
            DivisionByZero: Если b == 0 в точности self
        """
        divisor = self._scaled_arg(value)
        if divisor == 0:
            raise DivisionByZero(f"{self} / 0")
        return self._new(_trunc_div(self._scaled * _one(self._precision), divisor))

    def abs(self) -> "FixedPointDecimal":
        return self._new(abs(self._scaled))

    def neg(self) -> "FixedPointDecimal":
        return self._new(-self._scaled)

    __add__ = add
    __radd__ = add
    __sub__ = sub
    __mul__ = mul
    __rmul__ = mul
    __truediv__ = div
    __abs__ = abs
    __neg__ = neg

    def __rsub__(self, value: Numberish) -> "FixedPointDecimal":
        return self.to_decimal(value).sub(self)

    def __rtruediv__(self, value: Numberish) -> "FixedPointDecimal":
        return self.to_decimal(value).div(self)

    # -------------------------------------------------------------------------
    # Сравнения
    # -------------------------------------------------------------------------

    def gt(self, value: Numberish) -> bool:
        return self._scaled > self._scaled_arg(value)

    def lt(self, value: Numberish) -> bool:
        return self._scaled < self._scaled_arg(value)

    def gte(self, value: Numberish) -> bool:
        return self._scaled >= self._scaled_arg(value)

    def lte(self, value: Numberish) -> bool:
        return self._scaled <= self._scaled_arg(value)

    def equals(self, value: Numberish) -> bool:
        """Равенство после приведения value к точности self."""
        return self._scaled == self._scaled_arg(value)

    __gt__ = gt
    __lt__ = lt
    __ge__ = gte
    __le__ = lte

    def __eq__(self, other: object) -> bool:
        # Строгое равенство: точность и scaled value
        if not isinstance(other, FixedPointDecimal):
            return NotImplemented
        return self._precision == other._precision and self._scaled == other._scaled

    def __hash__(self) -> int:
        return hash((self._scaled, self._precision))

    def __bool__(self) -> bool:
        return self._scaled != 0

    def __int__(self) -> int:
        """Целая часть (усечение к нулю)."""
        return _trunc_div(self._scaled, _one(self._precision))

    # -------------------------------------------------------------------------
    # Текстовое представление
    # -------------------------------------------------------------------------

    def _render(self, max_decimals: int, rounded: bool = False) -> str:
        if max_decimals < 0:
            raise ValueError(f"max_decimals must be non-negative, got {max_decimals}")

        negative = self._scaled < 0
        magnitude = -self._scaled if negative else self._scaled

        digits = min(max_decimals, self._precision)
        drop = self._precision - digits
        kept = magnitude
        if drop > 0:
            unit = _one(drop)
            kept, remainder = divmod(magnitude, unit)
            # round half away from zero по модулю
            if rounded and remainder * 2 >= unit:
                kept += 1

        whole, fract = divmod(kept, _one(digits))
        text = str(whole)
        if digits > 0:
            text += "." + str(fract).rjust(digits, "0")

        if negative and kept != 0:
            return "-" + text
        return text

    def to_string(self) -> str:
        """Полная точность: '1.500000' при precision 6."""
        return self._render(self._precision)

    def to_truncated(self, max_decimals: int = 0) -> str:
        """Дробная часть усечена до max_decimals цифр."""
        return self._render(max_decimals)

    def to_rounded(self, max_decimals: int) -> str:
        """Дробная часть округлена (half away from zero) до max_decimals цифр."""
        return self._render(max_decimals, rounded=True)

    def to_json(self) -> dict[str, str]:
        """Канонический wire-формат."""
        return {"kind": WIRE_KIND, "value": self.to_string()}

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FixedPointDecimal('{self.to_string()}', precision={self._precision})"


def decimal(value: Numberish, precision: int = DEFAULT_DECIMAL_PRECISION) -> FixedPointDecimal:
    """
    Создание FixedPointDecimal (default precision 18).

    ВНИМАНИЕ: лишние цифры ВСЕГДА усекаются, не округляются.
    """
    return FixedPointDecimal(value, precision)
