"""
Тесты для Units — конверсия wei ↔ cents и разбор ответа оракула

Проверяемые инварианты:
1. Конверсии целочисленные, floor в обе стороны
2. Sub-cent остаток теряется, не округляется вверх
3. validate_amount отсекает не-int, отрицательные и > uint256
4. Ответ оракула сохраняет ровно два дробных знака
"""

import pytest

from src.core.domain.units import (
    ONE_UNIT,
    QUERY_DELAY_SECONDS,
    UINT256_MAX,
    cents_to_value,
    parse_price_result,
    validate_amount,
    value_to_cents,
)


# =============================================================================
# ТЕСТЫ: Константы
# =============================================================================


class TestConstants:
    """Константы модуля."""

    def test_one_unit_is_ten_to_eighteen(self):
        assert ONE_UNIT == 10**18

    def test_uint256_max(self):
        assert UINT256_MAX == 2**256 - 1

    def test_query_delay_is_one_hour(self):
        assert QUERY_DELAY_SECONDS == 3600


# =============================================================================
# ТЕСТЫ: validate_amount
# =============================================================================


class TestValidateAmount:
    """Проверка допустимых количеств."""

    def test_valid_amounts(self):
        assert validate_amount(0) == 0
        assert validate_amount(1) == 1
        assert validate_amount(UINT256_MAX) == UINT256_MAX

    def test_negative_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            validate_amount(-1)

    def test_above_uint256_rejected(self):
        with pytest.raises(ValueError, match="uint256"):
            validate_amount(UINT256_MAX + 1)

    def test_float_rejected(self):
        with pytest.raises(ValueError, match="integer"):
            validate_amount(1.0)

    def test_bool_rejected(self):
        """bool — подкласс int, но не количество."""
        with pytest.raises(ValueError):
            validate_amount(True)

    def test_name_in_message(self):
        with pytest.raises(ValueError, match="paid_value"):
            validate_amount(-5, "paid_value")


# =============================================================================
# ТЕСТЫ: value_to_cents / cents_to_value
# =============================================================================


class TestConversions:
    """Floor-конверсии между wei и центами."""

    def test_whole_unit(self):
        assert value_to_cents(ONE_UNIT, 30000) == 30000

    def test_sub_cent_truncated(self):
        """Остаток меньше цента теряется."""
        assert value_to_cents(1, 30000) == 0
        # 0.999... цента → 0
        assert value_to_cents(ONE_UNIT // 300 - 1, 300) == 0

    def test_truncation_not_rounding(self):
        """9.333... * 300 = 2799.9999... → 2799, не 2800."""
        value = 28 * ONE_UNIT // 3
        assert value_to_cents(value, 300) == 2799
        assert value_to_cents(value + 1, 300) == 2800

    def test_cents_to_value_floor(self):
        assert cents_to_value(2800, 300) == 9333333333333333333
        assert cents_to_value(2800, 200) == 14 * ONE_UNIT

    def test_cents_to_value_zero_rate(self):
        with pytest.raises(ValueError, match="positive"):
            cents_to_value(100, 0)

    def test_round_trip_never_exceeds_input(self):
        """Обратная конверсия стоимости никогда не превышает платёж."""
        for value in (1, 999, ONE_UNIT - 1, ONE_UNIT, 7 * ONE_UNIT + 12345):
            for rate in (1, 3, 299, 30000):
                cents = value_to_cents(value, rate)
                assert cents_to_value(cents, rate) <= value


# =============================================================================
# ТЕСТЫ: parse_price_result
# =============================================================================


class TestParsePriceResult:
    """Разбор десятичной строки цены в центы."""

    def test_two_decimals(self):
        assert parse_price_result("312.45") == 31245

    def test_extra_decimals_truncated(self):
        assert parse_price_result("312.459") == 31245

    def test_missing_decimals_padded(self):
        assert parse_price_result("312") == 31200
        assert parse_price_result("312.4") == 31240

    def test_leading_dot(self):
        assert parse_price_result(".5") == 50

    def test_whitespace_stripped(self):
        assert parse_price_result(" 2.00 ") == 200

    @pytest.mark.parametrize("raw", ["", ".", "abc", "-1", "1.2.3", "1e3", "+5"])
    def test_invalid(self, raw):
        with pytest.raises(ValueError):
            parse_price_result(raw)
