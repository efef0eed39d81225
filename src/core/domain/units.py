"""
Units — Централизованный модуль конверсии валютных единиц

Единственный допустимый способ преобразований между:
- paid_value (wei, наименьшая единица базовой валюты)
- cents (USD cents, стабильная единица для цен тиров)
- token quantity (целое число токенов)

Все конверсии целочисленные, с floor-делением в обе стороны.
Округление НЕ "улучшается": усечение — часть наблюдаемого поведения продажи.
"""

from typing import Final


# =============================================================================
# КОНСТАНТЫ
# =============================================================================
# Количество wei в одной целой единице базовой валюты
ONE_UNIT: Final[int] = 10**18

# Верхняя граница целочисленного представления балансов (uint256)
UINT256_MAX: Final[int] = 2**256 - 1

# Задержка повторного запроса цены после успешного callback (секунды)
QUERY_DELAY_SECONDS: Final[int] = 3600

# Количество дробных знаков в ответе оракула (доллары → центы)
PRICE_RESULT_DECIMALS: Final[int] = 2


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_amount(amount: int, name: str = "amount") -> int:
    """
    Проверка, что величина — неотрицательное целое в диапазоне uint256.

    Args:
        amount: Проверяемое значение
        name: Имя параметра для сообщения об ошибке

    Returns:
        amount без изменений

    Raises:
        ValueError: Если значение не int, отрицательное или больше UINT256_MAX
    """
    # bool — подкласс int, но количеством не является
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"{name} must be an integer, got {type(amount).__name__}")

    if amount < 0:
        raise ValueError(f"{name} cannot be negative: {amount}")

    if amount > UINT256_MAX:
        raise ValueError(f"{name} exceeds uint256 range: {amount}")

    return amount


# =============================================================================
# БАЗОВЫЕ КОНВЕРТЕРЫ
# =============================================================================


def value_to_cents(paid_value: int, rate_cents: int) -> int:
    """
    Конверсия: wei → USD cents по текущему курсу.

    cents = paid_value * rate_cents // ONE_UNIT

    Остаток меньше цента теряется (rounding loss), не возвращается плательщику.

    Args:
        paid_value: Сумма платежа в wei
        rate_cents: Курс (центов за одну целую единицу базовой валюты)

    Returns:
        Стоимость платежа в центах (floor)

    Examples:
        >>> value_to_cents(10**18, 30000)
        30000
        >>> value_to_cents(1, 30000)
        0
    """
    validate_amount(paid_value, "paid_value")
    validate_amount(rate_cents, "rate_cents")
    return paid_value * rate_cents // ONE_UNIT


def cents_to_value(cents: int, rate_cents: int) -> int:
    """
    Обратная конверсия: USD cents → wei по тому же курсу.

    value = cents * ONE_UNIT // rate_cents

    Args:
        cents: Сумма в центах
        rate_cents: Курс (центов за одну целую единицу), строго > 0

    Returns:
        Сумма в wei (floor)

    Raises:
        ValueError: Если rate_cents == 0
    """
    validate_amount(cents, "cents")
    validate_amount(rate_cents, "rate_cents")
    if rate_cents == 0:
        raise ValueError("rate_cents must be positive for cents → value conversion")
    return cents * ONE_UNIT // rate_cents


def parse_price_result(result: str, decimals: int = PRICE_RESULT_DECIMALS) -> int:
    """
    Разбор ответа оракула ("312.459") в целые центы (31245).

    Сохраняются только первые `decimals` дробных знаков, остальные отбрасываются.
    Недостающие дробные знаки дополняются нулями ("312.4" → 31240).

    Args:
        result: Десятичная строка цены в долларах
        decimals: Сколько дробных знаков сохранить

    Returns:
        Цена в центах

    Raises:
        ValueError: Если строка не является неотрицательным десятичным числом
    """
    text = result.strip()
    whole, _, fraction = text.partition(".")

    if not whole and not fraction:
        raise ValueError(f"Price result is empty: {result!r}")
    if (whole and not whole.isdigit()) or (fraction and not fraction.isdigit()):
        raise ValueError(f"Price result is not a decimal number: {result!r}")

    fraction = (fraction + "0" * decimals)[:decimals]
    return int(whole or "0") * 10**decimals + int(fraction or "0")
