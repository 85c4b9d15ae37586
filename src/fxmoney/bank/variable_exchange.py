from __future__ import annotations

import logging
import os
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, IO, Union

from fxmoney.bank.base import BaseBank
from fxmoney.bank.rate_formats import EncodedRates, get_rate_format
from fxmoney.config import decimal_context
from fxmoney.domain.monetary.currency import CurrencyDirectory, CurrencyLike
from fxmoney.domain.monetary.rounding import RoundingLike
from fxmoney.errors import UnknownRate
from fxmoney.rates_store.memory import MemoryRateStore
from fxmoney.rates_store.protocol import RateStore
from fxmoney.utils.decimal_tools import DecimalLike

if TYPE_CHECKING:
    from fxmoney.domain.monetary.money import Money

logger = logging.getLogger(__name__)

# Separates the currency codes in exported rate keys: "USD_TO_EUR"
SERIALIZER_SEPARATOR = "_TO_"

RatesTarget = Union[str, os.PathLike, IO]


def rate_key(from_code: str, to_code: str) -> str:
    """Build the exported key for a currency pair, e.g. `rate_key("USD", "EUR") == "USD_TO_EUR"`."""
    return f"{from_code.upper()}{SERIALIZER_SEPARATOR}{to_code.upper()}"


def split_rate_key(key: str) -> tuple[str, str]:
    """Split an exported key like "USD_TO_EUR" into `("USD", "EUR")`.

    Raises:
        ValueError: If $key does not contain exactly two currency codes.
    """
    parts = str(key).split(SERIALIZER_SEPARATOR)

    # Raise: key must be "<FROM>_TO_<TO>"
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise ValueError(f"$key must have format '<FROM>{SERIALIZER_SEPARATOR}<TO>', but provided value is: '{key}'")

    return parts[0].strip(), parts[1].strip()


class VariableExchange(BaseBank):
    """Bank converting money with rates kept in a `RateStore`.

    Example:
        bank = VariableExchange()
        bank.add_rate("USD", "EUR", "1.33")
        bank.exchange_with(Money(100, USD, bank=bank), "EUR")  # Money(133.00, EUR)

    Rates are not inverted automatically: USD -> EUR and EUR -> USD are separate entries.
    """

    def __init__(
        self,
        store: RateStore | None = None,
        rounding_method: RoundingLike | None = None,
        directory: CurrencyDirectory | None = None,
    ):
        """Initialize the bank.

        Args:
            store: Rate store to use. Defaults to a new `MemoryRateStore`.
            rounding_method: Rounding used when no per-call rounding is given.
            directory: Resolves currency identifiers. Defaults to the `Currency` registry.
        """
        self._store: RateStore = store if store is not None else MemoryRateStore(directory=directory)
        super().__init__(rounding_method=rounding_method, directory=directory)

    @property
    def store(self) -> RateStore:
        return self._store

    # region Exchange

    def exchange_with(
        self,
        money: Money,
        to_currency: CurrencyLike,
        rounding_mode: RoundingLike | None = None,
        rounder: RoundingLike | None = None,
    ) -> Money:
        """Implements: BaseBank.exchange_with

        The amount is multiplied by the stored rate at full precision and then rounded by
        precedence: $rounding_mode, $rounder, the bank's `rounding_method`, and finally the
        configured default applied by `Money` itself.

        Returns:
            $money itself when it already is in $to_currency, otherwise a new instance of
            `type(money)` in the target currency, sharing the bank of $money.

        Raises:
            UnknownCurrency: If $to_currency cannot be resolved.
            UnknownRate: If no rate is stored for the pair.
        """
        target = self.resolve_currency(to_currency)

        if money.currency == target:
            return money

        rate = self.get_rate(money.currency, target)

        # Raise: conversion needs a known rate
        if rate is None:
            raise UnknownRate(f"No conversion rate known for '{money.currency.code}' -> '{target.code}'")

        with decimal_context(money.amount, rate):
            exchanged = self.round(money.amount * rate, target, rounding_mode=rounding_mode, rounder=rounder)
            result = money.__class__(exchanged, target, bank=money.bank)

        logger.debug(f"Exchanged {money!r} into {result!r} at rate {rate}")
        return result

    # endregion

    # region Rates

    def add_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike, rate: DecimalLike) -> Decimal:
        """Store the conversion rate from $from_currency to $to_currency.

        Currency identifiers are case-insensitive: `add_rate("usd", "eur", 1.33)` stores
        the USD -> EUR rate.

        Returns:
            The stored rate as Decimal.

        Raises:
            UnknownCurrency: If either currency cannot be resolved.
            ValueError: If $rate is not a positive finite number.
        """
        return self._store.add_rate(self.resolve_currency(from_currency).code, self.resolve_currency(to_currency).code, rate)

    def set_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike, rate: DecimalLike) -> Decimal:
        """Alias of `add_rate`."""
        return self.add_rate(from_currency, to_currency, rate)

    def get_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike) -> Decimal | None:
        """Return the stored rate, or None if the pair has no rate.

        Raises:
            UnknownCurrency: If either currency cannot be resolved.
        """
        return self._store.get_rate(self.resolve_currency(from_currency).code, self.resolve_currency(to_currency).code)

    @property
    def rates(self) -> Dict[str, Decimal]:
        """All rates keyed like the exported data: `{"USD_TO_EUR": Decimal("1.33")}`."""
        return {rate_key(from_code, to_code): rate for from_code, to_code, rate in self._store.each_rate()}

    # endregion

    # region Import / export

    def export_rates(self, format: str, file: RatesTarget | None = None, **options) -> EncodedRates:
        """Serialize all rates with the codec named $format.

        Args:
            format: Rate format name, e.g. "json", "yaml", "pickle", "csv".
            file: Optional path or writable file object receiving the serialized data.
            **options: Accepted for extension; ignored by the built-in formats.

        Returns:
            The serialized rates (`str`, or `bytes` for "pickle").

        Raises:
            UnknownRateFormat: If $format is not registered.
        """
        codec = get_rate_format(format)

        with self._store.transaction():
            rates = self.rates
            data = codec.encode(rates)
            if file is not None:
                _write_rates(file, data)

        logger.info(f"Exported {len(rates)} rate(s) in format '{format}'")
        return data

    def import_rates(self, format: str, data: EncodedRates, **options) -> int:
        """Load rates serialized with the codec named $format.

        Imported rates are merged into the store inside one transaction: when any entry is
        malformed, none of them is applied.

        Args:
            format: Rate format name, e.g. "json", "yaml", "pickle", "csv".
            data: Serialized rates.
            **options: Accepted for extension; ignored by the built-in formats.

        Returns:
            Number of imported rates.

        Raises:
            UnknownRateFormat: If $format is not registered.
            UnknownCurrency: If a key names an unknown currency.
            ValueError: If a key or rate is malformed.
        """
        codec = get_rate_format(format)

        with self._store.transaction():
            decoded = codec.decode(data)
            for key, rate in decoded.items():
                from_code, to_code = split_rate_key(key)
                self.add_rate(from_code, to_code, rate)

        logger.info(f"Imported {len(decoded)} rate(s) in format '{format}'")
        return len(decoded)

    # endregion

    # region Pickling

    def __getstate__(self) -> dict:
        return {"store": self._store, "rounding_method": self._rounding_method, "directory": self._directory}

    def __setstate__(self, state: dict) -> None:
        self._store = state["store"]
        self._directory = state["directory"]
        self._rounding_method = state["rounding_method"]

    # endregion


def _write_rates(file: RatesTarget, data: EncodedRates) -> None:
    if hasattr(file, "write"):
        file.write(data)
        return

    mode = "wb" if isinstance(data, bytes) else "w"
    encoding = None if isinstance(data, bytes) else "utf-8"
    with open(file, mode, encoding=encoding) as f:
        f.write(data)
