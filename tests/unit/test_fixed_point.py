"""
Тесты для FixedPointDecimal

Проверяемые инварианты:
1. Лишние цифры усекаются, не округляются
2. Rescale: усечение к нулю при сужении, дополнение нулями при расширении
3. mul/div усекают к нулю для любых знаков
4. to_rounded округляет half away from zero с переносом в целую часть
5. Wire-формат {"kind": "Decimal", "value": ...}
6. Round-trip scaled integer
"""

from decimal import Decimal

import pytest

from rebase_pool.core.errors import DivisionByZero
from rebase_pool.core.math.fixed_point import (
    DEFAULT_DECIMAL_PRECISION,
    FixedPointDecimal,
    decimal,
)


# =============================================================================
# ТЕСТЫ: Construction
# =============================================================================


class TestConstruction:
    """Создание из текста, int, Decimal и другого FixedPointDecimal."""

    def test_excess_digits_truncated(self):
        """'1.239999' при precision 2 → '1.23', никогда '1.24'."""
        assert FixedPointDecimal("1.239999", 2).to_string() == "1.23"

    def test_negative_excess_digits_truncated_toward_zero(self):
        assert FixedPointDecimal("-1.239999", 2).to_string() == "-1.23"

    def test_short_fraction_padded(self):
        assert FixedPointDecimal("1.5", 4).scaled_value == 15000

    def test_int_is_whole_number(self):
        assert FixedPointDecimal(5, 6).scaled_value == 5_000_000

    def test_precision_zero_discards_fraction(self):
        assert FixedPointDecimal("12.99", 0).to_string() == "12"
        assert FixedPointDecimal("-12.99", 0).to_string() == "-12"

    def test_stdlib_decimal_source(self):
        assert FixedPointDecimal(Decimal("1.239"), 2).to_string() == "1.23"
        assert FixedPointDecimal(Decimal("1E+2"), 2).to_string() == "100.00"

    def test_leading_sign_and_bare_fraction(self):
        assert FixedPointDecimal("+1.5", 1).to_string() == "1.5"
        assert FixedPointDecimal(".25", 2).to_string() == "0.25"
        assert FixedPointDecimal("3.", 1).to_string() == "3.0"

    def test_default_precision(self):
        assert decimal("1").precision == DEFAULT_DECIMAL_PRECISION
        assert decimal("1").scaled_value == 10**18

    @pytest.mark.parametrize("value", [1.5, True, None, [1]])
    def test_rejects_non_decimal_types(self, value):
        with pytest.raises(TypeError):
            FixedPointDecimal(value, 6)

    @pytest.mark.parametrize("text", ["", ".", "abc", "1.2.3", "1e5", "--1"])
    def test_rejects_malformed_text(self, text):
        with pytest.raises(ValueError):
            FixedPointDecimal(text, 6)

    def test_rejects_non_finite_decimal(self):
        with pytest.raises(ValueError):
            FixedPointDecimal(Decimal("NaN"), 6)

    def test_rejects_negative_precision(self):
        with pytest.raises(ValueError):
            FixedPointDecimal("1", -1)

    def test_immutable(self):
        d = FixedPointDecimal("1.5", 2)
        with pytest.raises(AttributeError):
            d._scaled = 0
        with pytest.raises(AttributeError):
            d.precision = 4


class TestRescale:
    """Конверсия между точностями."""

    def test_narrowing_truncates(self):
        d = FixedPointDecimal(FixedPointDecimal("1.999", 3), 1)
        assert d.to_string() == "1.9"

    def test_narrowing_negative_truncates_toward_zero(self):
        """Усечение к нулю: -1.999 → -1.9, а не floor -2.0."""
        d = FixedPointDecimal("-1.999", 3).to_precision(1)
        assert d.to_string() == "-1.9"

    def test_widening_pads(self):
        assert FixedPointDecimal("1.5", 1).to_precision(4).scaled_value == 15000

    def test_to_scaled_integer_other_precision(self):
        assert FixedPointDecimal("2.5", 1).to_scaled_integer(3) == 2500
        assert FixedPointDecimal("2.5", 1).to_scaled_integer() == 25

    def test_to_decimal_uses_own_precision(self):
        d = FixedPointDecimal("0", 4).to_decimal("1.23456")
        assert d.precision == 4
        assert d.to_string() == "1.2345"


class TestScaledRoundTrip:
    """to_scaled_integer(from_scaled_integer(x, p), p) == x."""

    @pytest.mark.parametrize(
        "scaled,precision",
        [
            (0, 0),
            (1, 0),
            (-1, 6),
            (10**30, 18),
            (-(10**18) + 1, 18),
            (123456789, 27),
        ],
    )
    def test_round_trip(self, scaled, precision):
        d = FixedPointDecimal.from_scaled_integer(scaled, precision)
        assert d.to_scaled_integer(precision) == scaled

    def test_from_scaled_integer_rejects_bool(self):
        with pytest.raises(TypeError):
            FixedPointDecimal.from_scaled_integer(True, 6)


# =============================================================================
# ТЕСТЫ: Arithmetic
# =============================================================================


class TestArithmetic:
    """add/sub/mul/div с точностью левого операнда."""

    def test_add_rescales_argument(self):
        result = FixedPointDecimal("1.25", 2) + FixedPointDecimal("0.555", 3)
        assert result.to_string() == "1.80"
        assert result.precision == 2

    def test_sub(self):
        assert FixedPointDecimal("1.25", 2).sub("2").to_string() == "-0.75"

    def test_mul(self):
        assert (FixedPointDecimal("1.5", 6) * "2.5").to_string() == "3.750000"

    def test_mul_truncates(self):
        assert (FixedPointDecimal("0.000001", 6) * "0.5").scaled_value == 0

    def test_mul_negative_truncates_toward_zero(self):
        assert (FixedPointDecimal("-0.000003", 6) * "0.5").scaled_value == -1

    def test_div(self):
        assert (FixedPointDecimal("1", 6) / 3).to_string() == "0.333333"
        assert (FixedPointDecimal("-1", 6) / 3).to_string() == "-0.333333"

    def test_div_by_zero(self):
        with pytest.raises(DivisionByZero):
            FixedPointDecimal("1", 6).div(0)

    def test_div_by_zero_is_zero_division_error(self):
        with pytest.raises(ZeroDivisionError):
            FixedPointDecimal("1", 6) / "0.0000001"

    def test_reflected_operators(self):
        assert (1 + FixedPointDecimal("0.5", 1)).to_string() == "1.5"
        assert (2 - FixedPointDecimal("0.5", 1)).to_string() == "1.5"
        assert (3 * FixedPointDecimal("0.5", 1)).to_string() == "1.5"
        assert (1 / FixedPointDecimal("4", 2)).to_string() == "0.25"

    def test_abs_and_neg(self):
        assert abs(FixedPointDecimal("-2.5", 1)).to_string() == "2.5"
        assert (-FixedPointDecimal("2.5", 1)).to_string() == "-2.5"

    def test_int_truncates(self):
        assert int(FixedPointDecimal("-2.7", 1)) == -2
        assert int(FixedPointDecimal("2.7", 1)) == 2

    def test_float_operand_rejected(self):
        with pytest.raises(TypeError):
            FixedPointDecimal("1", 2) + 0.5


class TestComparisons:
    """Сравнения при совпадающей точности."""

    def test_ordering(self):
        d = FixedPointDecimal("1.5", 2)
        assert d.gt("1.49")
        assert d.lt("1.51")
        assert d.gte("1.5")
        assert d.lte("1.50")
        assert d > FixedPointDecimal("1.4", 1)
        assert d <= 2

    def test_equals_rescales(self):
        assert FixedPointDecimal("1.50", 2).equals(FixedPointDecimal("1.5", 1))
        assert FixedPointDecimal("1.50", 2).equals("1.5")

    def test_strict_equality(self):
        assert FixedPointDecimal("1.5", 2) == FixedPointDecimal("1.50", 2)
        assert FixedPointDecimal("1.5", 2) != FixedPointDecimal("1.5", 1)
        assert len({FixedPointDecimal("1.5", 2), FixedPointDecimal("1.50", 2)}) == 1

    def test_truthiness(self):
        assert not FixedPointDecimal("0.001", 2)
        assert FixedPointDecimal("0.01", 2)


# =============================================================================
# ТЕСТЫ: Rendering
# =============================================================================


class TestRendering:
    """to_string, to_truncated, to_rounded, wire-формат."""

    def test_rounded_vs_truncated(self):
        d = FixedPointDecimal("1.239999", 6)
        assert d.to_truncated(2) == "1.23"
        assert d.to_rounded(2) == "1.24"

    def test_truncated_default_is_whole(self):
        d = FixedPointDecimal("12.75", 2)
        assert d.to_truncated() == "12"
        assert d.to_rounded(0) == "13"

    def test_rounding_carries_into_whole(self):
        assert FixedPointDecimal("0.95", 2).to_rounded(1) == "1.0"
        assert FixedPointDecimal("9.999", 3).to_rounded(2) == "10.00"

    def test_rounding_half_away_from_zero(self):
        assert FixedPointDecimal("1.25", 2).to_rounded(1) == "1.3"
        assert FixedPointDecimal("-1.25", 2).to_rounded(1) == "-1.3"
        assert FixedPointDecimal("-1.24", 2).to_rounded(1) == "-1.2"

    def test_more_digits_than_precision(self):
        assert FixedPointDecimal("1.5", 2).to_truncated(5) == "1.50"

    def test_negative_sign_separate_from_magnitude(self):
        assert FixedPointDecimal("-0.5", 2).to_string() == "-0.50"
        assert str(FixedPointDecimal("-0.05", 2)) == "-0.05"

    def test_leading_fraction_zeros(self):
        assert FixedPointDecimal.from_scaled_integer(1, 18).to_string() == "0.000000000000000001"

    def test_to_json(self):
        assert FixedPointDecimal("1.5", 6).to_json() == {"kind": "Decimal", "value": "1.500000"}

    def test_to_json_precision_zero_has_no_fraction(self):
        assert FixedPointDecimal("7.9", 0).to_json() == {"kind": "Decimal", "value": "7"}

    def test_from_json_infers_precision(self):
        d = FixedPointDecimal.from_json({"kind": "Decimal", "value": "1.250"})
        assert d.precision == 3
        assert d.scaled_value == 1250

    def test_from_json_explicit_precision(self):
        d = FixedPointDecimal.from_json({"kind": "Decimal", "value": "1.259"}, precision=2)
        assert d.to_string() == "1.25"

    def test_from_json_rejects_wrong_kind(self):
        with pytest.raises(ValueError, match="kind"):
            FixedPointDecimal.from_json({"kind": "Number", "value": "1"})

    def test_repr(self):
        assert repr(FixedPointDecimal("1.5", 2)) == "FixedPointDecimal('1.50', precision=2)"
