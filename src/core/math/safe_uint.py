"""
Safe UInt — Checked uint256 арифметика

Модуль обеспечивает целочисленную арифметику без молчаливого переполнения:
- checked_add / checked_mul: Overflow при выходе за UINT256_MAX
- checked_sub: ValueError при уходе ниже нуля

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Никаких float: все операции над int
2. Результат всегда в [0, UINT256_MAX], иначе исключение
"""

from src.core.domain.errors import Overflow
from src.core.domain.units import UINT256_MAX, validate_amount


# =============================================================================
# CHECKED ARITHMETIC
# =============================================================================


def checked_add(a: int, b: int) -> int:
    """
    Сложение с проверкой переполнения uint256.

    Raises:
        Overflow: Если a + b > UINT256_MAX

    Examples:
        >>> checked_add(2, 3)
        5
    """
    validate_amount(a, "a")
    validate_amount(b, "b")
    result = a + b
    if result > UINT256_MAX:
        raise Overflow(f"uint256 overflow: {a} + {b}")
    return result


def checked_sub(a: int, b: int) -> int:
    """
    Вычитание без ухода в отрицательную область.

    Raises:
        ValueError: Если b > a
    """
    validate_amount(a, "a")
    validate_amount(b, "b")
    if b > a:
        raise ValueError(f"uint256 underflow: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    """
    Умножение с проверкой переполнения uint256.

    Raises:
        Overflow: Если a * b > UINT256_MAX
    """
    validate_amount(a, "a")
    validate_amount(b, "b")
    result = a * b
    if result > UINT256_MAX:
        raise Overflow(f"uint256 overflow: {a} * {b}")
    return result

