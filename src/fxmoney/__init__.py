__version__ = "0.1.0"

from fxmoney.errors import BankError, DifferentCurrency, MoneyError, UnknownCurrency, UnknownRate, UnknownRateFormat
from fxmoney.domain.monetary.currency import Currency, CurrencyType
from fxmoney.domain.monetary.rounding import RoundingMode
from fxmoney.config import MoneySettings, configure, get_settings, reset_settings, settings_override, with_rounding_mode
from fxmoney.domain.monetary.money import Money
from fxmoney.bank import BaseBank, VariableExchange
from fxmoney.rates_store import MemoryRateStore

__all__ = [
    "BankError",
    "BaseBank",
    "Currency",
    "CurrencyType",
    "DifferentCurrency",
    "MemoryRateStore",
    "Money",
    "MoneyError",
    "MoneySettings",
    "RoundingMode",
    "UnknownCurrency",
    "UnknownRate",
    "UnknownRateFormat",
    "VariableExchange",
    "configure",
    "get_settings",
    "reset_settings",
    "settings_override",
    "with_rounding_mode",
]
