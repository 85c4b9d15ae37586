from __future__ import annotations

from collections.abc import Mapping

from fxmoney.bank.variable_exchange import VariableExchange
from fxmoney.config import set_default_bank
from fxmoney.domain.monetary.rounding import RoundingLike


def create_bank(rates: Mapping[tuple[str, str], str] | None = None, rounding_method: RoundingLike | None = None) -> VariableExchange:
    """Create a standalone bank holding $rates, keyed by `(from, to)` currency codes."""
    bank = VariableExchange(rounding_method=rounding_method)
    for (from_code, to_code), rate in (rates or {}).items():
        bank.add_rate(from_code, to_code, rate)
    return bank


def install_default_bank(rates: Mapping[tuple[str, str], str] | None = None) -> VariableExchange:
    """Create a bank holding $rates and make it the default bank for new Money values."""
    bank = create_bank(rates)
    set_default_bank(bank)
    return bank
