from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from fxmoney.config import decimal_context, get_default_bank, get_settings
from fxmoney.domain.monetary.currency import Currency, CurrencyLike
from fxmoney.domain.monetary.rounding import TRUNCATE, RoundingLike, resolve_rounding
from fxmoney.errors import DifferentCurrency, UnknownRate
from fxmoney.utils.decimal_tools import DecimalLike, as_decimal, floor_divmod, is_number

if TYPE_CHECKING:
    from fxmoney.bank.base import BaseBank

logger = logging.getLogger(__name__)


class Money:
    """Represents a monetary amount with currency.

    Uses Python's Decimal for precision arithmetic. The amount is kept in units of the
    currency (`Money("1.50", USD)` is one dollar fifty) and, unless infinite precision is
    enabled in settings, is rounded to a whole number of subunits when the value is created.

    Money is immutable. Every operation returning Money builds the result with `_build`,
    so subclasses of Money get instances of their own class back.

    Cross-currency operations convert the right-hand operand into the currency of the
    left-hand operand through the operand's bank. When currency conversion is disallowed in
    settings they raise `DifferentCurrency` instead.
    """

    def __init__(self, amount: DecimalLike, currency: CurrencyLike | None = None, bank: BaseBank | None = None):
        """Initialize Money with amount and currency.

        Args:
            amount: Numeric amount in units (Decimal-like scalar).
            currency: Currency object or code. Defaults to the configured default currency.
            bank: Bank used for conversions of this value. Defaults to the default bank.

        Raises:
            ValueError: If amount is invalid or not finite.
            UnknownCurrency: If currency code is not registered.
        """
        settings = get_settings()

        if currency is None:
            currency = settings.default_currency
        currency = Currency.wrap(currency)

        # Raise: $amount must be a plain number
        if isinstance(amount, Money):
            raise TypeError(f"$amount must be a number, but provided value is Money: {amount!r}")

        # Raise: $amount must be convertible to Decimal
        try:
            decimal_amount = as_decimal(amount)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Cannot init `Money` because $amount ({amount!r}) cannot be converted to Decimal") from e

        # Raise: NaN and infinity are not amounts
        if not decimal_amount.is_finite():
            raise ValueError(f"Cannot init `Money` because $amount ({amount!r}) is not finite")

        if not settings.infinite_precision:
            rounding = resolve_rounding(settings.default_rounding_mode) or TRUNCATE
            with decimal_context(decimal_amount):
                decimal_amount = rounding.apply(decimal_amount, currency)

        self._amount = decimal_amount
        self._currency = currency
        self._bank = bank if bank is not None else get_default_bank()

    # region Factories

    @classmethod
    def from_subunits(cls, subunits: DecimalLike, currency: CurrencyLike | None = None, bank: BaseBank | None = None) -> Money:
        """Create Money from an amount of subunits (e.g. cents): `from_subunits(150, USD)` is 1.50 USD."""
        currency = Currency.wrap(currency if currency is not None else get_settings().default_currency)
        subunits = as_decimal(subunits)
        with decimal_context(subunits):
            amount = subunits / Decimal(currency.subunit_to_unit)
        return cls(amount, currency, bank=bank)

    @classmethod
    def zero(cls, currency: CurrencyLike | None = None, bank: BaseBank | None = None) -> Money:
        return cls(0, currency, bank=bank)

    @classmethod
    def usd(cls, amount: DecimalLike, bank: BaseBank | None = None) -> Money:
        return cls(amount, "USD", bank=bank)

    @classmethod
    def eur(cls, amount: DecimalLike, bank: BaseBank | None = None) -> Money:
        return cls(amount, "EUR", bank=bank)

    @classmethod
    def gbp(cls, amount: DecimalLike, bank: BaseBank | None = None) -> Money:
        return cls(amount, "GBP", bank=bank)

    def _build(self, amount: DecimalLike, currency: Currency | None = None) -> Money:
        """Create a new instance of the runtime class of $self, sharing its bank."""
        return self.__class__(amount, currency if currency is not None else self._currency, bank=self._bank)

    # endregion

    # region Properties

    @property
    def amount(self) -> Decimal:
        """Get the decimal amount in units."""
        return self._amount

    @property
    def value(self) -> Decimal:
        """Alias of `amount`."""
        return self._amount

    @property
    def currency(self) -> Currency:
        """Get the currency."""
        return self._currency

    @property
    def bank(self) -> BaseBank:
        """Get the bank used to convert this value into other currencies."""
        return self._bank

    @property
    def subunits(self) -> Decimal:
        """Amount expressed in subunits of the currency (cents for USD)."""
        subunit_to_unit = Decimal(self._currency.subunit_to_unit)
        with decimal_context(self._amount, subunit_to_unit):
            return self._amount * subunit_to_unit

    @property
    def is_zero(self) -> bool:
        return self._amount == 0

    @property
    def is_positive(self) -> bool:
        return self._amount > 0

    @property
    def is_negative(self) -> bool:
        return self._amount < 0

    # endregion

    # region Conversion

    def exchange_to(self, currency: CurrencyLike, rounding_mode: RoundingLike | None = None, rounder: RoundingLike | None = None) -> Money:
        """Convert into $currency with this value's bank.

        Raises:
            UnknownCurrency: If $currency cannot be resolved.
            UnknownRate: If the bank knows no rate for the pair.
        """
        return self._bank.exchange_with(self, currency, rounding_mode=rounding_mode, rounder=rounder)

    def _to_own_currency(self, other: Money, operation: str) -> Money:
        """Return $other expressed in `self.currency`.

        Raises:
            DifferentCurrency: If currencies differ and conversion is disallowed in settings.
            UnknownRate: If the bank of $other knows no rate for the pair.
        """
        if other.currency == self._currency:
            return other

        # Raise: conversion policy applies to every amount, zero included
        if not get_settings().allow_currency_conversion:
            raise DifferentCurrency(f"Cannot call `{operation}` because currencies differ ({self._currency} and {other.currency}) and currency conversion is disallowed")

        return other.exchange_to(self._currency)

    # endregion

    # region Comparison

    def __eq__(self, other) -> bool:
        """Equal when currencies and amounts match. Zero amounts are equal in any currency."""
        if not isinstance(other, Money):
            return False
        if self.is_zero and other.is_zero:
            return True
        return self._currency == other.currency and self._amount == other.amount

    def __hash__(self) -> int:
        """Hash consistent with `__eq__`: every zero hashes alike."""
        if self.is_zero:
            return hash(Decimal(0))
        return hash((self._amount, self._currency.code))

    def strict_equals(self, other) -> bool:
        """Like `==`, but zero amounts in different currencies are not equal."""
        if not isinstance(other, Money):
            return False
        return self._currency == other.currency and self._amount == other.amount

    def compare(self, other) -> int | None:
        """Compare with $other and return -1, 0 or 1.

        A Money in another currency is converted into `self.currency` first.

        Returns:
            None when the values cannot be compared: $other is not Money, or the bank knows
            no conversion rate for the pair.

        Raises:
            DifferentCurrency: If currencies differ and conversion is disallowed in settings.
        """
        if not isinstance(other, Money):
            return None

        if other.currency != self._currency:
            if not get_settings().allow_currency_conversion:
                raise DifferentCurrency(f"Cannot call `compare` because currencies differ ({self._currency} and {other.currency}) and currency conversion is disallowed")
            if self.is_zero and other.is_zero:
                return 0
            try:
                other = other.exchange_to(self._currency)
            except UnknownRate:
                logger.debug(f"Cannot compare {self!r} with {other!r}: no conversion rate")
                return None

        if self._amount < other.amount:
            return -1
        if self._amount > other.amount:
            return 1
        return 0

    def _ordering(self, other, operation: str) -> int:
        result = self.compare(other)

        # Raise: ordering needs comparable operands
        if result is None:
            raise ValueError(f"Cannot call `{operation}` because {other!r} cannot be compared with {self!r}")

        return result

    def __lt__(self, other) -> bool:
        return self._ordering(other, "__lt__") < 0

    def __le__(self, other) -> bool:
        return self._ordering(other, "__le__") <= 0

    def __gt__(self, other) -> bool:
        return self._ordering(other, "__gt__") > 0

    def __ge__(self, other) -> bool:
        return self._ordering(other, "__ge__") >= 0

    def nonzero(self) -> Money | None:
        """Return $self when the amount is not zero, otherwise None."""
        return None if self.is_zero else self

    def __bool__(self) -> bool:
        return not self.is_zero

    # endregion

    # region Arithmetic

    def __add__(self, other):
        """Add two Money objects. Money + number is not supported."""
        if not isinstance(other, Money):
            return NotImplemented
        other = self._to_own_currency(other, "__add__")
        with decimal_context(self._amount, other.amount):
            return self._build(self._amount + other.amount)

    def __sub__(self, other):
        """Subtract two Money objects. Money - number is not supported."""
        if not isinstance(other, Money):
            return NotImplemented
        other = self._to_own_currency(other, "__sub__")
        with decimal_context(self._amount, other.amount):
            return self._build(self._amount - other.amount)

    def __mul__(self, other):
        """Multiply Money by number (returns Money). Money * Money raises TypeError."""
        if not is_number(other):
            return NotImplemented
        factor = as_decimal(other)
        with decimal_context(self._amount, factor):
            return self._build(self._amount * factor)

    def __truediv__(self, other):
        """Divide Money by number (returns Money) or Money by Money (returns Decimal)."""
        if not isinstance(other, Money) and not is_number(other):
            return NotImplemented
        return self.divide(other)

    def divide(self, other: Money | DecimalLike, rounding_mode: RoundingLike | None = None, rounder: RoundingLike | None = None) -> Money | Decimal:
        """Divide by a number or by Money.

        Division by a number returns Money rounded to the currency's smallest unit. The
        rounding is chosen by precedence: $rounding_mode, then $rounder, then the
        configured default rounding mode, then truncation. With infinite precision enabled
        and no per-call rounding, the full-precision quotient is kept.

        Division by Money converts $other into `self.currency` and returns the ratio as
        Decimal.

        Raises:
            ZeroDivisionError: If $other is zero.
            TypeError: If $other is neither Money nor a number.
        """
        if isinstance(other, Money):
            other = self._to_own_currency(other, "divide")
            if other.is_zero:
                raise ZeroDivisionError("Cannot divide by zero Money")
            with decimal_context(self._amount, other.amount):
                return self._amount / other.amount

        # Raise: only numbers can scale an amount
        if not is_number(other):
            raise TypeError(f"Cannot call `divide` because $other must be Money or a number, but provided value is: {other!r}")

        divisor = as_decimal(other)
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide Money by zero")

        settings = get_settings()
        with decimal_context(self._amount, divisor):
            quotient = self._amount / divisor

            explicit_rounding = resolve_rounding(rounding_mode, rounder)
            if explicit_rounding is not None:
                return self._build(explicit_rounding.apply(quotient, self._currency))
            if settings.infinite_precision:
                return self._build(quotient)

            rounding = resolve_rounding(settings.default_rounding_mode) or TRUNCATE
            return self._build(rounding.apply(quotient, self._currency))

    def div(self, other: Money | DecimalLike, rounding_mode: RoundingLike | None = None, rounder: RoundingLike | None = None) -> Money | Decimal:
        """Alias of `divide`."""
        return self.divide(other, rounding_mode=rounding_mode, rounder=rounder)

    def __divmod__(self, other):
        """Floored division.

        By a number: works on subunits and returns `(Money, Money)`.
        By Money: converts $other first and returns `(int, Money)`.
        The remainder takes the sign of the divisor.
        """
        if isinstance(other, Money):
            other = self._to_own_currency(other, "divmod")
            if other.is_zero:
                raise ZeroDivisionError("Cannot divide by zero Money")
            with decimal_context(self._amount, other.amount):
                quotient, remainder = floor_divmod(self._amount, other.amount)
            return int(quotient), self._build(remainder)

        if not is_number(other):
            return NotImplemented

        divisor = as_decimal(other)
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide Money by zero")

        subunit_to_unit = Decimal(self._currency.subunit_to_unit)
        with decimal_context(self._amount, subunit_to_unit, divisor):
            quotient, remainder = floor_divmod(self.subunits, divisor)
            return self._build(quotient / subunit_to_unit), self._build(remainder / subunit_to_unit)

    def __mod__(self, other):
        result = self.__divmod__(other)
        if result is NotImplemented:
            return NotImplemented
        return result[1]

    def modulo(self, other: Money | DecimalLike) -> Money:
        """Floored modulo, same as `self % other`."""
        if not isinstance(other, Money) and not is_number(other):
            raise TypeError(f"Cannot call `modulo` because $other must be Money or a number, but provided value is: {other!r}")
        return self.__mod__(other)

    def remainder(self, other: Money | DecimalLike) -> Money:
        """Truncated-division remainder; the result takes the sign of $self.

        Number divisors work on subunits, like `divmod`.
        """
        if isinstance(other, Money):
            other = self._to_own_currency(other, "remainder")
            if other.is_zero:
                raise ZeroDivisionError("Cannot divide by zero Money")
            with decimal_context(self._amount, other.amount):
                return self._build(self._amount % other.amount)

        if not is_number(other):
            raise TypeError(f"Cannot call `remainder` because $other must be Money or a number, but provided value is: {other!r}")

        divisor = as_decimal(other)
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide Money by zero")

        subunit_to_unit = Decimal(self._currency.subunit_to_unit)
        with decimal_context(self._amount, subunit_to_unit, divisor):
            return self._build((self.subunits % divisor) / subunit_to_unit)

    def __neg__(self):
        with decimal_context(self._amount):
            return self._build(-self._amount)

    def __pos__(self):
        return self._build(self._amount)

    def __abs__(self):
        with decimal_context(self._amount):
            return self._build(abs(self._amount))

    # endregion

    # String representations
    def __str__(self) -> str:
        """Return string like '1000.50 USD'."""
        return f"{self._amount} {self._currency.code}"

    def __repr__(self) -> str:
        """Return string like 'Money(1000.50, USD)'."""
        return f"{self.__class__.__name__}({self._amount}, {self._currency.code})"
