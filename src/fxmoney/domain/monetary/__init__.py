"""Monetary domain package.

This package contains classes for handling monetary amounts and currencies,
including Currency definitions, rounding strategies and Money calculations
with proper precision arithmetic.

Importing the package registers the predefined currencies.
"""

from fxmoney.domain.monetary import currency_registry  # noqa: F401
