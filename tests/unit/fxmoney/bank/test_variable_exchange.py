import io
import json
import pickle
from decimal import Decimal

import pytest
import yaml

from fxmoney.bank.base import BaseBank
from fxmoney.bank.variable_exchange import VariableExchange, rate_key, split_rate_key
from fxmoney.config import get_default_bank, reset_default_bank, set_default_bank
from fxmoney.domain.monetary.currency_registry import EUR, JPY, USD
from fxmoney.domain.monetary.money import Money
from fxmoney.domain.monetary.rounding import ModeRounding, RoundingMode
from fxmoney.errors import BankError, UnknownCurrency, UnknownRate, UnknownRateFormat
from fxmoney.rates_store import MemoryRateStore
from tests.helpers.helper_bank import create_bank


class SpecialMoney(Money):
    pass


# region Exchange


def test_exchange_with_known_rate():
    bank = create_bank({("USD", "EUR"): "1.33"})

    result = bank.exchange_with(Money(100, USD, bank=bank), "EUR")

    assert result == Money(133, EUR)
    assert result.currency is EUR
    assert result.bank is bank


def test_exchange_same_currency_returns_same_value():
    bank = create_bank()
    money = Money(10, USD, bank=bank)
    assert bank.exchange_with(money, "usd") is money


def test_exchange_without_rate_raises_unknown_rate():
    bank = create_bank({("EUR", "USD"): "1.1"})

    with pytest.raises(UnknownRate):
        bank.exchange_with(Money(1, USD, bank=bank), EUR)

    # UnknownRate is a BankError
    with pytest.raises(BankError):
        bank.exchange_with(Money(1, USD, bank=bank), EUR)


def test_exchange_to_unknown_currency_raises():
    bank = create_bank()
    with pytest.raises(UnknownCurrency):
        bank.exchange_with(Money(1, USD, bank=bank), "XYZ")


def test_exchange_preserves_subclass():
    bank = create_bank({("USD", "EUR"): "0.5"})
    assert isinstance(bank.exchange_with(SpecialMoney(10, USD, bank=bank), EUR), SpecialMoney)


def test_exchange_large_amount_is_exact():
    bank = create_bank({("USD", "EUR"): "1.33"})

    result = bank.exchange_with(Money(10**20, USD, bank=bank), EUR)

    assert result.amount == Decimal("133000000000000000000.00")
    assert result == Money(Decimal("1.33") * 10**20, EUR)


def test_exchange_amount_beyond_configured_precision():
    bank = create_bank({("USD", "EUR"): "1.333333333333333333333333333333"})

    result = bank.exchange_with(Money(10**60, USD, bank=bank), EUR)

    assert result.amount == Decimal("1333333333333333333333333333333" + "0" * 30 + ".00")


def test_exchange_accepts_ceil_rounding_mode():
    bank = create_bank({("USD", "EUR"): "0.333"})
    assert bank.exchange_with(Money("0.10", USD, bank=bank), EUR, "ceil") == Money("0.04", EUR)


def test_exchange_to_zero_decimal_currency():
    bank = create_bank({("USD", "JPY"): "149.875"})
    assert bank.exchange_with(Money(1, USD, bank=bank), JPY) == Money(150, JPY)


# endregion

# region Rounding precedence


def test_exchange_uses_default_rounding_without_bank_rounding():
    bank = create_bank({("USD", "EUR"): "0.333"})
    assert bank.exchange_with(Money("0.10", USD, bank=bank), EUR) == Money("0.03", EUR)


def test_exchange_uses_bank_rounding_method():
    bank = create_bank({("USD", "EUR"): "0.333"}, rounding_method=RoundingMode.CEILING)
    assert bank.exchange_with(Money("0.10", USD, bank=bank), EUR) == Money("0.04", EUR)


def test_rounder_wins_over_bank_rounding_method():
    bank = create_bank({("USD", "EUR"): "0.333"}, rounding_method=RoundingMode.CEILING)
    result = bank.exchange_with(Money("0.10", USD, bank=bank), EUR, rounder=RoundingMode.FLOOR)
    assert result == Money("0.03", EUR)


def test_rounding_mode_wins_over_rounder():
    bank = create_bank({("USD", "EUR"): "0.333"})
    result = bank.exchange_with(
        Money("0.10", USD, bank=bank),
        EUR,
        rounding_mode=RoundingMode.UP,
        rounder=lambda value, currency: Decimal(0),
    )
    assert result == Money("0.04", EUR)


def test_exchange_with_callable_rounder():
    bank = create_bank({("USD", "EUR"): "0.9"})
    result = bank.exchange_with(Money(10, USD, bank=bank), EUR, rounder=lambda value, currency: value + 1)
    assert result == Money(10, EUR)


def test_rounding_method_accepts_mode_names():
    bank = VariableExchange(rounding_method="half_up")
    assert bank.rounding_method == ModeRounding(RoundingMode.HALF_UP)

    bank.rounding_method = None
    assert bank.rounding_method is None


# endregion

# region Rates


def test_add_and_get_rate():
    bank = VariableExchange()

    assert bank.add_rate("usd", "eur", 1.33) == Decimal("1.33")
    assert bank.get_rate("USD", "EUR") == Decimal("1.33")
    assert bank.get_rate(USD, EUR) == Decimal("1.33")


def test_set_rate_is_alias_of_add_rate():
    bank = VariableExchange()
    bank.set_rate("USD", "EUR", "0.9")
    assert bank.get_rate("USD", "EUR") == Decimal("0.9")


def test_get_missing_rate_returns_none():
    bank = VariableExchange()
    assert bank.get_rate("USD", "EUR") is None


def test_add_rate_validates_input():
    bank = VariableExchange()
    with pytest.raises(UnknownCurrency):
        bank.add_rate("USD", "XYZ", 1)
    with pytest.raises(ValueError):
        bank.add_rate("USD", "EUR", -1)


def test_rates_property():
    bank = create_bank({("USD", "EUR"): "1.33", ("EUR", "USD"): "0.75"})
    assert bank.rates == {"USD_TO_EUR": Decimal("1.33"), "EUR_TO_USD": Decimal("0.75")}


def test_bank_uses_injected_store():
    store = MemoryRateStore({("USD", "EUR"): "0.9"})
    bank = VariableExchange(store=store)

    assert bank.store is store
    assert bank.get_rate("USD", "EUR") == Decimal("0.9")

    bank.add_rate("EUR", "USD", "1.1")
    assert store.get_rate("EUR", "USD") == Decimal("1.1")


def test_rate_key_helpers():
    assert rate_key("usd", "eur") == "USD_TO_EUR"
    assert split_rate_key("USD_TO_EUR") == ("USD", "EUR")

    with pytest.raises(ValueError):
        split_rate_key("USDEUR")
    with pytest.raises(ValueError):
        split_rate_key("USD_TO_")


# endregion

# region Export / import


def test_export_json():
    bank = create_bank({("USD", "EUR"): "1.33", ("EUR", "USD"): "0.75"})

    data = bank.export_rates("json")

    assert json.loads(data) == {"USD_TO_EUR": 1.33, "EUR_TO_USD": 0.75}


def test_export_yaml():
    bank = create_bank({("USD", "EUR"): "1.33"})
    assert yaml.safe_load(bank.export_rates("yaml")) == {"USD_TO_EUR": 1.33}


def test_export_empty_bank():
    assert json.loads(VariableExchange().export_rates("json")) == {}


def test_export_to_path(tmp_path):
    bank = create_bank({("USD", "EUR"): "1.33"})
    path = tmp_path / "rates.json"

    data = bank.export_rates("json", path)

    assert path.read_text(encoding="utf-8") == data


def test_export_pickle_to_path(tmp_path):
    bank = create_bank({("USD", "EUR"): "1.33"})
    path = tmp_path / "rates.pickle"

    bank.export_rates("pickle", str(path))

    assert pickle.loads(path.read_bytes()) == {"USD_TO_EUR": Decimal("1.33")}


def test_export_to_file_object():
    bank = create_bank({("USD", "EUR"): "1.33"})
    buffer = io.StringIO()

    data = bank.export_rates("yaml", buffer)

    assert buffer.getvalue() == data


@pytest.mark.parametrize("format_name", ["json", "yaml", "pickle", "csv"])
def test_export_and_import_between_banks(format_name):
    source = create_bank({("USD", "EUR"): "1.33", ("EUR", "USD"): "0.751879699248120300751879699"})
    target = VariableExchange()

    imported = target.import_rates(format_name, source.export_rates(format_name))

    assert imported == 2
    assert target.rates == source.rates


def test_import_merges_with_existing_rates():
    bank = create_bank({("USD", "EUR"): "1.1", ("USD", "GBP"): "0.8"})

    bank.import_rates("json", '{"USD_TO_EUR": 1.33, "EUR_TO_USD": 0.75}')

    assert bank.rates == {
        "USD_TO_EUR": Decimal("1.33"),
        "USD_TO_GBP": Decimal("0.8"),
        "EUR_TO_USD": Decimal("0.75"),
    }


def test_import_yaml():
    bank = VariableExchange()
    bank.import_rates("yaml", "USD_TO_EUR: 1.33\nEUR_TO_USD: 0.75\n")
    assert bank.get_rate("EUR", "USD") == Decimal("0.75")


@pytest.mark.parametrize(
    "data",
    [
        '{"USD_TO_EUR": 1.5, "USDEUR": 2}',
        '{"USD_TO_EUR": 1.5, "USD_TO_XYZ": 2}',
        '{"USD_TO_EUR": 1.5, "EUR_TO_USD": -2}',
        '{"USD_TO_EUR": 1.5, "EUR_TO_USD": "abc"}',
    ],
)
def test_malformed_import_leaves_rates_unchanged(data):
    bank = create_bank({("USD", "EUR"): "1.1"})

    with pytest.raises(ValueError):
        bank.import_rates("json", data)

    assert bank.rates == {"USD_TO_EUR": Decimal("1.1")}


def test_unknown_format_raises():
    bank = create_bank({("USD", "EUR"): "1.1"})

    with pytest.raises(UnknownRateFormat):
        bank.export_rates("xml")
    with pytest.raises(UnknownRateFormat):
        bank.import_rates("xml", "<rates/>")

    assert bank.rates == {"USD_TO_EUR": Decimal("1.1")}


def test_format_names_are_case_insensitive():
    bank = create_bank({("USD", "EUR"): "1.1"})
    assert json.loads(bank.export_rates("JSON")) == {"USD_TO_EUR": 1.1}


# endregion

# region Shared instance and default bank


def test_instance_returns_shared_bank():
    assert VariableExchange.instance() is VariableExchange.instance()

    VariableExchange.reset_instance()
    first = VariableExchange.instance()
    VariableExchange.reset_instance()
    assert VariableExchange.instance() is not first


def test_default_bank_is_shared_instance():
    assert get_default_bank() is VariableExchange.instance()


def test_set_default_bank():
    bank = create_bank()
    previous = set_default_bank(bank)

    assert get_default_bank() is bank
    assert Money(1, USD).bank is bank
    assert previous is None or isinstance(previous, BaseBank)

    with pytest.raises(TypeError):
        set_default_bank("bank")

    reset_default_bank()
    assert get_default_bank() is not bank


def test_base_bank_requires_exchange_implementation():
    bank = BaseBank()
    with pytest.raises(NotImplementedError):
        bank.exchange_with(Money(1, USD, bank=bank), EUR)


def test_setup_hook_runs_on_init():
    class CountingBank(VariableExchange):
        def setup(self):
            self.setup_calls = 1

    assert CountingBank().setup_calls == 1


def test_same_currency():
    bank = VariableExchange()
    assert bank.same_currency("usd", USD)
    assert not bank.same_currency("usd", EUR)


# endregion


def test_pickle_bank_round_trip():
    bank = create_bank({("USD", "EUR"): "1.33"}, rounding_method=RoundingMode.FLOOR)

    restored = pickle.loads(pickle.dumps(bank))

    assert restored.get_rate("USD", "EUR") == Decimal("1.33")
    assert restored.rounding_method == ModeRounding(RoundingMode.FLOOR)
    assert restored.exchange_with(Money(1, USD, bank=restored), EUR) == Money("1.33", EUR)
