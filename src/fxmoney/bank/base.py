from __future__ import annotations

from decimal import Decimal
from threading import Lock
from typing import TYPE_CHECKING

from fxmoney.domain.monetary.currency import DEFAULT_DIRECTORY, Currency, CurrencyDirectory, CurrencyLike
from fxmoney.domain.monetary.rounding import RoundingLike, RoundingStrategy, as_rounding_strategy, resolve_rounding

if TYPE_CHECKING:
    from fxmoney.domain.monetary.money import Money

_instance_lock = Lock()


class BaseBank:
    """Basic interface of a bank: an object converting `Money` into other currencies.

    Subclasses implement `exchange_with`. They can override `setup` instead of `__init__`
    to prepare their own state. `VariableExchange` is the rate store backed implementation.

    A bank is an ordinary object that can be created and injected wherever it is needed.
    `instance()` additionally offers one shared instance per bank class.
    """

    # Shared instance per class, see `instance`
    _singleton: "BaseBank | None" = None

    def __init__(self, rounding_method: RoundingLike | None = None, directory: CurrencyDirectory | None = None):
        """Initialize the bank.

        Args:
            rounding_method: Rounding applied to exchanged amounts when the caller passes no
                per-call rounding. A `RoundingMode`, a `RoundingStrategy` or a callable
                `fn(amount, currency) -> amount`.
            directory: Resolves currency identifiers. Defaults to the `Currency` registry.
        """
        self._directory: CurrencyDirectory = directory if directory is not None else DEFAULT_DIRECTORY
        self.rounding_method = rounding_method
        self.setup()

    @classmethod
    def instance(cls) -> BaseBank:
        """Return the shared instance of this bank class, creating it on first use."""
        with _instance_lock:
            instance = cls.__dict__.get("_singleton")
            if instance is None:
                instance = cls()
                cls._singleton = instance
            return instance

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the shared instance of this bank class."""
        with _instance_lock:
            cls._singleton = None

    def setup(self) -> None:
        """Hook called at the end of `__init__`."""

    @property
    def directory(self) -> CurrencyDirectory:
        return self._directory

    @property
    def rounding_method(self) -> RoundingStrategy | None:
        """Rounding used by `exchange_with` when no per-call rounding is given."""
        return self._rounding_method

    @rounding_method.setter
    def rounding_method(self, rounding_method: RoundingLike | None) -> None:
        self._rounding_method = as_rounding_strategy(rounding_method)

    def exchange_with(
        self,
        money: Money,
        to_currency: CurrencyLike,
        rounding_mode: RoundingLike | None = None,
        rounder: RoundingLike | None = None,
    ) -> Money:
        """Exchange $money into $to_currency and return a new Money of the same class.

        Args:
            money: The Money to exchange.
            to_currency: Target currency object or code.
            rounding_mode: Per-call rounding mode; wins over everything else.
            rounder: Per-call rounding strategy or callable `fn(amount, currency)`.

        Raises:
            NotImplementedError: Always, subclasses implement the exchange.
        """
        raise NotImplementedError("`exchange_with` must be implemented")

    def resolve_currency(self, identifier: CurrencyLike) -> Currency:
        """Resolve $identifier with the bank's directory.

        Raises:
            UnknownCurrency: If the identifier is unknown.
        """
        return self._directory.resolve(identifier)

    def same_currency(self, currency1: CurrencyLike, currency2: CurrencyLike) -> bool:
        """Return True if both identifiers name the same currency.

        Example:
            same_currency("usd", "USD")  # True
            same_currency("usd", EUR)    # False
        """
        return self.resolve_currency(currency1) == self.resolve_currency(currency2)

    def round(
        self,
        value: Decimal,
        currency: Currency,
        rounding_mode: RoundingLike | None = None,
        rounder: RoundingLike | None = None,
    ) -> Decimal:
        """Round an exchanged $value for $currency.

        Precedence: $rounding_mode, then $rounder, then `rounding_method`. Without any of
        them $value is returned unchanged, and `Money` applies the configured default.
        """
        strategy = resolve_rounding(rounding_mode, rounder, self._rounding_method)
        if strategy is None:
            return value
        return strategy.apply(value, currency)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rounding_method={self._rounding_method!r})"
