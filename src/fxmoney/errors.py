"""Exceptions raised by `fxmoney`.

All library errors inherit from `MoneyError`. Bank related errors additionally inherit
from `BankError`, so callers can catch every exchange problem in one place.
"""


class MoneyError(Exception):
    """Base class for all `fxmoney` errors."""


class UnknownCurrency(MoneyError, ValueError):
    """Raised when a currency identifier cannot be resolved to a `Currency`."""


class BankError(MoneyError):
    """Base class for errors raised by banks and rate stores."""


class UnknownRate(BankError):
    """Raised when the bank has no conversion rate for a currency pair."""


class UnknownRateFormat(BankError, ValueError):
    """Raised when rates are imported or exported in an unsupported format."""


class DifferentCurrency(BankError):
    """Raised when currencies differ while currency conversion is disallowed."""
