from __future__ import annotations

from decimal import Decimal
from typing import ContextManager, Iterable, Protocol

from fxmoney.domain.monetary.currency import CurrencyLike
from fxmoney.utils.decimal_tools import DecimalLike


# region Interface


class RateStore(Protocol):
    """Thread-safe mapping from an ordered currency pair to a positive conversion rate.

    The store is the only shared mutable state of the exchange machinery. Banks hold no
    locks of their own and rely on the store for all synchronization.
    """

    def add_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike, rate: DecimalLike) -> Decimal:
        """Store (or overwrite) the rate for the pair and return the stored value.

        Raises:
            UnknownCurrency: If either currency cannot be resolved.
            ValueError: If $rate is not a positive finite number.
        """
        ...

    def get_rate(self, from_currency: CurrencyLike, to_currency: CurrencyLike) -> Decimal | None:
        """Return the stored rate, or None when no rate is known for the pair.

        Raises:
            UnknownCurrency: If either currency cannot be resolved.
        """
        ...

    def each_rate(self) -> Iterable[tuple[str, str, Decimal]]:
        """Return a restartable iterable of `(from_code, to_code, rate)` from one consistent snapshot."""
        ...

    def transaction(self) -> ContextManager:
        """Context manager making all writes inside it atomic for readers. Re-entrant."""
        ...


# endregion
