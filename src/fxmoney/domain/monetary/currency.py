from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, Protocol, Union

from fxmoney.errors import UnknownCurrency


class CurrencyType(Enum):
    """Enumeration of currency types."""

    FIAT = "FIAT"
    CRYPTO = "CRYPTO"
    COMMODITY = "COMMODITY"


class Currency:
    """Represents a currency with code, decimal places, subunit ratio and metadata.

    Attributes:
        code (str): Currency code (e.g., "USD", "BTC").
        decimal_places (int): Number of fractional digits implied by the subunit (0-18).
        name (str): Full currency name.
        currency_type (CurrencyType): Type of currency (FIAT, CRYPTO, COMMODITY).
        subunit_to_unit (int): How many subunits make one unit. Usually `10 ** decimal_places`,
            but some currencies use other ratios (e.g. 5 for the Mauritanian ouguiya).
    """

    # Class-level registry for predefined currencies
    _registry: Dict[str, "Currency"] = {}

    def __init__(
        self,
        code: str,
        decimal_places: int,
        name: str,
        currency_type: CurrencyType,
        subunit_to_unit: int | None = None,
    ):
        """Create a currency; see the class docstring for the meaning of each argument.

        Raises:
            ValueError: If an argument is out of range or empty.
            TypeError: If $currency_type is not a `CurrencyType`.
        """
        if not isinstance(code, str) or not code.strip():
            raise ValueError(f"$code must be a non-empty string, but provided value is: '{code}'")

        if not isinstance(decimal_places, int) or decimal_places < 0 or decimal_places > 18:
            raise ValueError(f"$decimal_places must be an integer between 0 and 18, but provided value is: {decimal_places}")

        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"$name must be a non-empty string, but provided value is: '{name}'")

        if not isinstance(currency_type, CurrencyType):
            raise TypeError(f"$currency_type must be a CurrencyType instance, but provided value is: {currency_type}")

        if subunit_to_unit is None:
            subunit_to_unit = 10**decimal_places

        # Raise: subunit ratio must be a positive integer
        if not isinstance(subunit_to_unit, int) or subunit_to_unit <= 0:
            raise ValueError(f"$subunit_to_unit must be a positive integer, but provided value is: {subunit_to_unit}")

        self._code = code.upper().strip()
        self._decimal_places = decimal_places
        self._name = name.strip()
        self._currency_type = currency_type
        self._subunit_to_unit = subunit_to_unit

    @property
    def code(self) -> str:
        """Get the currency code."""
        return self._code

    @property
    def decimal_places(self) -> int:
        """Get the number of decimal places."""
        return self._decimal_places

    @property
    def subunit_to_unit(self) -> int:
        """Get the number of subunits in one unit."""
        return self._subunit_to_unit

    @property
    def smallest_unit(self) -> Decimal:
        """Value of one subunit expressed in units (e.g. `Decimal("0.01")` for USD)."""
        return Decimal(1) / Decimal(self._subunit_to_unit)

    @property
    def name(self) -> str:
        """Get the currency name."""
        return self._name

    @property
    def currency_type(self) -> CurrencyType:
        """Get the currency type."""
        return self._currency_type

    @classmethod
    def register(cls, currency: "Currency", overwrite: bool = False) -> None:
        """Make $currency resolvable by its code.

        Raises:
            ValueError: If the code is taken and $overwrite is False.
            TypeError: If $currency is not a `Currency`.
        """
        if not isinstance(currency, Currency):
            raise TypeError(f"$currency must be a Currency instance, but provided value is: {currency}")

        if currency.code in cls._registry and not overwrite:
            raise ValueError(f"Currency with code '{currency.code}' already exists in registry. Use overwrite=True to replace it.")

        cls._registry[currency.code] = currency

    @classmethod
    def unregister(cls, code: str) -> None:
        """Remove the currency with $code from the registry. Unknown codes are ignored."""
        cls._registry.pop(code.upper().strip(), None)

    @classmethod
    def from_str(cls, code: str) -> "Currency":
        """Look up a registered currency by $code (case-insensitive, surrounding spaces ignored).

        Raises:
            TypeError: If $code is not a string.
            UnknownCurrency: If no currency with $code is registered.
        """
        if not isinstance(code, str):
            raise TypeError(f"$code must be a string, but provided value is: {code}")

        code = code.upper().strip()
        if code not in cls._registry:
            raise UnknownCurrency(f"Currency with code '{code}' not found in registry. Available currencies: {list(cls._registry.keys())}")

        return cls._registry[code]

    @classmethod
    def wrap(cls, identifier: CurrencyLike) -> "Currency":
        """Return $identifier itself when it is a `Currency`, otherwise look it up by code."""
        if isinstance(identifier, Currency):
            return identifier
        return cls.from_str(identifier)

    @property
    def is_fiat(self) -> bool:
        return self._currency_type == CurrencyType.FIAT

    @property
    def is_crypto(self) -> bool:
        return self._currency_type == CurrencyType.CRYPTO

    @property
    def is_commodity(self) -> bool:
        return self._currency_type == CurrencyType.COMMODITY

    def __eq__(self, other) -> bool:
        if not isinstance(other, Currency):
            return False
        return self.code == other.code

    def __hash__(self) -> int:
        return hash(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        """Return string like "Currency('USD', 2, 'US Dollar', CurrencyType.FIAT)"."""
        return f"{self.__class__.__name__}('{self.code}', {self.decimal_places}, '{self.name}', {self.currency_type})"


CurrencyLike = Union[Currency, str]


# region Interface


class CurrencyDirectory(Protocol):
    """Resolves currency identifiers (codes in any letter case, or `Currency` objects) to `Currency`."""

    def resolve(self, identifier: CurrencyLike) -> Currency:
        """Return the `Currency` for $identifier.

        Raises:
            UnknownCurrency: If $identifier does not name a known currency.
        """
        ...


# endregion


class RegistryCurrencyDirectory:
    """`CurrencyDirectory` backed by the class-level registry of `Currency`."""

    def resolve(self, identifier: CurrencyLike) -> Currency:
        """Implements: CurrencyDirectory.resolve"""
        if isinstance(identifier, Currency):
            return identifier
        if not isinstance(identifier, str):
            raise UnknownCurrency(f"Cannot resolve currency from $identifier ({identifier!r})")
        return Currency.from_str(identifier)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


DEFAULT_DIRECTORY = RegistryCurrencyDirectory()
