"""Process-wide settings for `fxmoney`.

Settings are an immutable `MoneySettings` value. The active value is replaced (never
mutated) by `configure`, restored by `reset_settings` and can be changed for the duration
of a `with` block by `settings_override`. Changes apply to subsequent operations only;
already created `Money` values are not touched.

Lifecycle:
    1. Import: defaults are active (`MoneySettings()`).
    2. Optional: `load_settings_from_env()` reads `FXMONEY_*` variables (and a `.env` file).
    3. Optional: `configure(...)` / `settings_override(...)` adjust single fields.
    4. `reset_settings()` and `reset_default_bank()` restore the import-time state (tests).
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, replace
from decimal import Context, Decimal, localcontext
from threading import Lock
from typing import TYPE_CHECKING, Iterator

from dotenv import load_dotenv

from fxmoney.domain.monetary.rounding import RoundingMode

if TYPE_CHECKING:
    from fxmoney.bank.base import BaseBank

logger = logging.getLogger(__name__)

ENV_PREFIX = "FXMONEY_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class MoneySettings:
    """Global policy used by `Money` arithmetic and banks.

    Attributes:
        default_currency: Currency code used when `Money` is created without a currency.
        default_rounding_mode: Rounding applied when no per-call rounding is given. `None`
            falls back to currency-native truncation to the smallest unit.
        infinite_precision: Keep full-precision amounts instead of rounding to subunits.
        allow_currency_conversion: When False, any cross-currency operation raises
            `DifferentCurrency`, even for zero amounts.
        decimal_precision: Significant digits of the `decimal` context used for money math.
    """

    default_currency: str = "USD"
    default_rounding_mode: RoundingMode | None = RoundingMode.HALF_EVEN
    infinite_precision: bool = False
    allow_currency_conversion: bool = True
    decimal_precision: int = 50

    def __post_init__(self):
        # Raise: default currency must be a code
        if not isinstance(self.default_currency, str) or not self.default_currency.strip():
            raise ValueError(f"$default_currency must be a non-empty string, but provided value is: {self.default_currency!r}")

        if self.default_rounding_mode is not None and not isinstance(self.default_rounding_mode, RoundingMode):
            object.__setattr__(self, "default_rounding_mode", RoundingMode.parse(self.default_rounding_mode))

        # Raise: too small contexts silently lose digits of large amounts
        if not isinstance(self.decimal_precision, int) or self.decimal_precision < 28:
            raise ValueError(f"$decimal_precision must be an integer >= 28, but provided value is: {self.decimal_precision!r}")

    @classmethod
    def from_env(cls, dotenv_path: str | os.PathLike | None = None) -> MoneySettings:
        """Build settings from `FXMONEY_*` environment variables.

        A `.env` file is loaded first (existing environment variables win). Missing
        variables keep their defaults. `FXMONEY_ROUNDING_MODE=none` selects truncation.

        Args:
            dotenv_path: Explicit `.env` location. When None, `python-dotenv` searches for one.

        Returns:
            MoneySettings: New settings value; the active settings are not changed.

        Raises:
            ValueError: If a variable holds a value that cannot be parsed.
        """
        load_dotenv(dotenv_path)

        changes: dict[str, object] = {}

        currency = os.environ.get(f"{ENV_PREFIX}DEFAULT_CURRENCY")
        if currency:
            changes["default_currency"] = currency.strip().upper()

        rounding = os.environ.get(f"{ENV_PREFIX}ROUNDING_MODE")
        if rounding:
            changes["default_rounding_mode"] = None if rounding.strip().lower() == "none" else RoundingMode.parse(rounding)

        infinite_precision = os.environ.get(f"{ENV_PREFIX}INFINITE_PRECISION")
        if infinite_precision:
            changes["infinite_precision"] = _parse_bool(f"{ENV_PREFIX}INFINITE_PRECISION", infinite_precision)

        allow_conversion = os.environ.get(f"{ENV_PREFIX}ALLOW_CURRENCY_CONVERSION")
        if allow_conversion:
            changes["allow_currency_conversion"] = _parse_bool(f"{ENV_PREFIX}ALLOW_CURRENCY_CONVERSION", allow_conversion)

        precision = os.environ.get(f"{ENV_PREFIX}DECIMAL_PRECISION")
        if precision:
            try:
                changes["decimal_precision"] = int(precision)
            except ValueError as e:
                raise ValueError(f"Cannot parse ${ENV_PREFIX}DECIMAL_PRECISION ('{precision}') as integer") from e

        return cls(**changes)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Cannot parse ${name} ('{raw}') as boolean. Use one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}")


# region Active settings

_settings: MoneySettings = MoneySettings()
_settings_lock = Lock()


def get_settings() -> MoneySettings:
    """Return the active settings."""
    return _settings


def set_settings(settings: MoneySettings) -> MoneySettings:
    """Replace the active settings and return the previous value."""
    global _settings

    if not isinstance(settings, MoneySettings):
        raise TypeError(f"$settings must be a MoneySettings instance, but provided value is: {settings!r}")

    with _settings_lock:
        previous = _settings
        _settings = settings

    logger.debug(f"Money settings changed to {settings}")
    return previous


def configure(**changes) -> MoneySettings:
    """Replace selected fields of the active settings.

    Example:
        configure(default_rounding_mode=RoundingMode.HALF_UP, infinite_precision=True)

    Returns:
        MoneySettings: The new active settings.
    """
    global _settings

    with _settings_lock:
        _settings = replace(_settings, **changes)
        result = _settings

    logger.debug(f"Money settings changed to {result}")
    return result


def reset_settings() -> None:
    """Restore default settings."""
    set_settings(MoneySettings())


def load_settings_from_env(dotenv_path: str | os.PathLike | None = None) -> MoneySettings:
    """Activate settings read by `MoneySettings.from_env` and return them."""
    settings = MoneySettings.from_env(dotenv_path)
    set_settings(settings)
    logger.info(f"Loaded money settings from environment: {settings}")
    return settings


@contextmanager
def settings_override(**changes) -> Iterator[MoneySettings]:
    """Apply $changes for the duration of the `with` block, then restore previous settings.

    The override is process-wide, not thread-local.
    """
    with _settings_lock:
        previous = _settings
    new_settings = replace(previous, **changes)
    set_settings(new_settings)
    try:
        yield new_settings
    finally:
        set_settings(previous)


def with_rounding_mode(mode: RoundingMode | str | None):
    """Context manager using $mode as default rounding mode inside the `with` block."""
    return settings_override(default_rounding_mode=None if mode is None else RoundingMode.parse(mode))


def disallow_currency_conversion() -> None:
    """Make every cross-currency operation raise `DifferentCurrency`."""
    configure(allow_currency_conversion=False)


def allow_currency_conversion() -> None:
    """Allow cross-currency operations (converted through the bank) again."""
    configure(allow_currency_conversion=True)


def decimal_context(*operands: Decimal):
    """Return a `localcontext` for money math on $operands.

    The precision is the configured `decimal_precision` plus the integer digits of every
    operand, so large amounts keep `decimal_precision` digits after their integer part.

    Example:
        with decimal_context(amount, rate):
            exchanged = amount * rate
    """
    precision = _settings.decimal_precision
    for operand in operands:
        if operand.is_finite() and operand:
            precision += max(operand.adjusted() + 1, 0)
    return localcontext(Context(prec=precision))


# endregion

# region Default bank

_default_bank: BaseBank | None = None
_bank_lock = Lock()


def get_default_bank() -> BaseBank:
    """Return the default bank, creating the `VariableExchange` singleton on first use."""
    global _default_bank

    bank = _default_bank
    if bank is not None:
        return bank

    # Lock only for the lazy creation
    with _bank_lock:
        if _default_bank is None:
            from fxmoney.bank.variable_exchange import VariableExchange

            _default_bank = VariableExchange.instance()
        return _default_bank


def set_default_bank(bank: BaseBank) -> BaseBank | None:
    """Use $bank for new `Money` values created without an explicit bank.

    Returns:
        The previous default bank (None if none was created yet).
    """
    global _default_bank

    from fxmoney.bank.base import BaseBank

    if not isinstance(bank, BaseBank):
        raise TypeError(f"$bank must be a BaseBank instance, but provided value is: {bank!r}")

    with _bank_lock:
        previous = _default_bank
        _default_bank = bank
    return previous


def reset_default_bank() -> None:
    """Forget the default bank and the `VariableExchange` singleton."""
    global _default_bank

    from fxmoney.bank.variable_exchange import VariableExchange

    with _bank_lock:
        _default_bank = None
        VariableExchange.reset_instance()


# endregion
