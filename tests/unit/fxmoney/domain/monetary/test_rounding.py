from decimal import Decimal

import pytest

from fxmoney.domain.monetary.currency_registry import BHD, JPY, MRU, USD
from fxmoney.domain.monetary.rounding import (
    TRUNCATE,
    CallableRounding,
    ModeRounding,
    RoundingMode,
    as_rounding_strategy,
    resolve_rounding,
    round_to_subunit,
)


@pytest.mark.parametrize("value", [RoundingMode.HALF_UP, "HALF_UP", "half_up", "ROUND_HALF_UP", " Half_Up "])
def test_parse_rounding_mode(value):
    assert RoundingMode.parse(value) is RoundingMode.HALF_UP


@pytest.mark.parametrize("value", ["HALFWAY", "", 5, None])
def test_parse_invalid_rounding_mode(value):
    with pytest.raises(ValueError):
        RoundingMode.parse(value)


@pytest.mark.parametrize(
    "value, currency, mode, expected",
    [
        ("0.025", USD, RoundingMode.HALF_UP, "0.03"),
        ("0.025", USD, RoundingMode.HALF_EVEN, "0.02"),
        ("0.035", USD, RoundingMode.HALF_EVEN, "0.04"),
        ("-0.025", USD, RoundingMode.HALF_UP, "-0.03"),
        ("0.011", USD, RoundingMode.CEILING, "0.02"),
        ("-0.019", USD, RoundingMode.FLOOR, "-0.02"),
        ("-0.019", USD, RoundingMode.DOWN, "-0.01"),
        ("1.5", JPY, RoundingMode.HALF_EVEN, "2"),
        ("1.0005", BHD, RoundingMode.HALF_UP, "1.001"),
        ("1.3", MRU, RoundingMode.HALF_UP, "1.4"),
        ("1.3", MRU, RoundingMode.HALF_EVEN, "1.2"),
        ("1.05", MRU, RoundingMode.DOWN, "1.0"),
    ],
)
def test_round_to_subunit(value, currency, mode, expected):
    result = round_to_subunit(Decimal(value), currency, mode)
    assert result == Decimal(expected)
    assert result.as_tuple().exponent == -currency.decimal_places


def test_truncate_drops_digits_below_smallest_unit():
    assert TRUNCATE.apply(Decimal("0.019"), USD) == Decimal("0.01")
    assert TRUNCATE.apply(Decimal("-0.019"), USD) == Decimal("-0.01")


def test_mode_rounding_equality():
    assert ModeRounding("floor") == ModeRounding(RoundingMode.FLOOR)
    assert ModeRounding("floor") != ModeRounding("ceiling")
    assert ModeRounding(RoundingMode.UP).mode is RoundingMode.UP


def test_callable_rounding_converts_result_to_decimal():
    rounding = CallableRounding(lambda value, currency: 7)
    assert rounding.apply(Decimal("1.23"), USD) == Decimal(7)

    with pytest.raises(TypeError):
        CallableRounding("not callable")


def test_as_rounding_strategy():
    assert as_rounding_strategy(None) is None
    assert as_rounding_strategy(RoundingMode.CEILING) == ModeRounding(RoundingMode.CEILING)
    assert as_rounding_strategy(TRUNCATE) is TRUNCATE
    assert isinstance(as_rounding_strategy(lambda value, currency: value), CallableRounding)

    with pytest.raises(TypeError):
        as_rounding_strategy(42)


def test_resolve_rounding_uses_first_candidate():
    assert resolve_rounding(None, None) is None
    assert resolve_rounding(None, "floor", "ceiling") == ModeRounding(RoundingMode.FLOOR)
    assert resolve_rounding("up", "floor") == ModeRounding(RoundingMode.UP)


@pytest.mark.parametrize("value", ["ceil", "CEIL", " Ceil "])
def test_parse_ceil_alias(value):
    assert RoundingMode.parse(value) is RoundingMode.CEILING


def test_round_to_subunit_beyond_context_precision():
    value = Decimal("1" * 70 + ".005")

    result = round_to_subunit(value, USD, RoundingMode.HALF_UP)

    assert result == Decimal("1" * 70 + ".01")
    assert round_to_subunit(Decimal(10**60), BHD, RoundingMode.DOWN) == Decimal(10**60)
