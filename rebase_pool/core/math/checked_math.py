"""
Checked Math — uint256 арифметика без переполнений

Модуль обеспечивает детерминированную целочисленную арифметику для всех
операций учёта пула:
- Сложение/вычитание/умножение с проверкой ширины uint256
- Деление с усечением (floor для неотрицательных операндов)
- mul_div: (a * b) // d без промежуточного переполнения результата
- Валидация входов (int, не bool, не отрицательный)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Float никогда не используется
2. Переполнение → ArithmeticOverflow (операция отменяется целиком)
3. Деление на ноль → DivisionByZero
4. Все операции детерминированы и воспроизводимы
"""

from typing import Final

from rebase_pool.core.errors import ArithmeticOverflow, DivisionByZero, InvalidAmount

# =============================================================================
# ШИРИНА ЦЕЛЫХ
# =============================================================================

# Ширина целых: uint256, как у on-chain token контрактов
UINT256_BITS: Final[int] = 256

UINT256_MAX: Final[int] = 2**UINT256_BITS - 1


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_uint(value: int, name: str) -> int:
    """
    Валидация беззнакового целого в пределах uint256.

    Args:
        value: Проверяемое значение
        name: Имя параметра (для сообщения об ошибке)

    Returns:
        value без изменений

    Raises:
        TypeError: Если value не int (bool и float отвергаются)
        InvalidAmount: Если value < 0
        ArithmeticOverflow: Если value > UINT256_MAX
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")

    if value < 0:
        raise InvalidAmount(f"{name} must be non-negative, got {value}")

    if value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name} exceeds uint256: {value}")

    return value


def _check_width(result: int, op: str) -> int:
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"uint256 overflow in {op}")
    return result


# =============================================================================
# CHECKED ОПЕРАЦИИ
# =============================================================================


def checked_add(a: int, b: int) -> int:
    """
    a + b с проверкой переполнения.

    Examples:
        >>> checked_add(1, 2)
        3

    Raises:
        ArithmeticOverflow: Если a + b > UINT256_MAX
    """
    return _check_width(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    """
    a - b, результат не может быть отрицательным.

    Raises:
        ArithmeticOverflow: Если b > a (underflow)
    """
    if b > a:
        raise ArithmeticOverflow(f"uint256 underflow in sub: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    """a * b с проверкой переполнения."""
    return _check_width(a * b, "mul")


def checked_div(a: int, b: int) -> int:
    """
    Целочисленное деление с усечением.

    Для неотрицательных операндов усечение к нулю совпадает с floor.

    Raises:
        DivisionByZero: Если b == 0
    """
    if b == 0:
        raise DivisionByZero(f"division of {a} by zero")
    return a // b


def mul_div(a: int, b: int, denominator: int) -> int:
    """
    floor(a * b / denominator).

    Промежуточное произведение считается в произвольной точности, ширина
    uint256 проверяется только для результата.

    Examples:
        >>> mul_div(32, 10, 33)
        9
        >>> mul_div(UINT256_MAX, 2, 2) == UINT256_MAX
        True
    """
    if denominator == 0:
        raise DivisionByZero(f"mul_div of {a} * {b} by zero")
    return _check_width((a * b) // denominator, "mul_div")
