from __future__ import annotations

from decimal import (
    Decimal,
    ROUND_05UP,
    ROUND_CEILING,
    ROUND_DOWN,
    ROUND_FLOOR,
    ROUND_HALF_DOWN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    ROUND_UP,
    getcontext,
    localcontext,
)
from enum import Enum
from typing import Callable, Protocol, Union, runtime_checkable

from fxmoney.domain.monetary.currency import Currency
from fxmoney.utils.decimal_tools import DecimalLike, as_decimal


class RoundingMode(Enum):
    """Named rounding modes. Values are the matching `decimal` module constants."""

    CEILING = ROUND_CEILING
    FLOOR = ROUND_FLOOR
    UP = ROUND_UP
    DOWN = ROUND_DOWN
    HALF_UP = ROUND_HALF_UP
    HALF_DOWN = ROUND_HALF_DOWN
    HALF_EVEN = ROUND_HALF_EVEN
    ZERO_FIVE_UP = ROUND_05UP

    @classmethod
    def parse(cls, value: RoundingMode | str) -> RoundingMode:
        """Parse $value into a `RoundingMode`.

        Accepts enum members, `decimal` constants (`"ROUND_HALF_UP"`), member names in
        any letter case (`"half_up"`) and `"ceil"` for `CEILING`.

        Raises:
            ValueError: If $value does not name a rounding mode.
        """
        if isinstance(value, RoundingMode):
            return value

        if isinstance(value, str):
            normalized = value.strip().upper()
            normalized = _MODE_ALIASES.get(normalized, normalized)
            for mode in cls:
                if normalized in (mode.name, mode.value):
                    return mode

        raise ValueError(f"$value must name a rounding mode {[m.name for m in cls]}, but provided value is: {value!r}")


# Alternative spellings accepted by `RoundingMode.parse`
_MODE_ALIASES = {"CEIL": "CEILING"}


# region Interface


@runtime_checkable
class RoundingStrategy(Protocol):
    """Maps a full-precision amount onto an amount representable in $currency."""

    def apply(self, value: Decimal, currency: Currency) -> Decimal:
        """Return $value rounded for $currency."""
        ...


# endregion


RoundingCallable = Callable[[Decimal, Currency], DecimalLike]
RoundingLike = Union[RoundingMode, str, RoundingStrategy, RoundingCallable]


def round_to_subunit(value: Decimal, currency: Currency, mode: RoundingMode) -> Decimal:
    """Round $value to a whole number of $currency subunits using $mode.

    Works for currencies whose `subunit_to_unit` is not a power of ten as well: an amount
    in MRU (5 subunits per unit) is rounded to a multiple of 0.2.

    Examples:
        >>> from fxmoney.domain.monetary.currency_registry import USD
        >>> round_to_subunit(Decimal("0.025"), USD, RoundingMode.HALF_UP)
        Decimal('0.03')
    """
    subunit_to_unit = Decimal(currency.subunit_to_unit)

    # Exact product and a quantize result wide enough for the integer digits of $value
    precision = max(
        getcontext().prec,
        len(value.as_tuple().digits) + len(str(currency.subunit_to_unit)),
        value.adjusted() + currency.decimal_places + 2,
    )
    with localcontext() as context:
        context.prec = precision
        subunits = (value * subunit_to_unit).to_integral_value(rounding=mode.value)
        return (subunits / subunit_to_unit).quantize(Decimal(1).scaleb(-currency.decimal_places))


class ModeRounding:
    """Rounds to the currency's smallest unit with one of the standard `RoundingMode`s."""

    __slots__ = ("_mode",)

    def __init__(self, mode: RoundingMode | str):
        self._mode = RoundingMode.parse(mode)

    @property
    def mode(self) -> RoundingMode:
        return self._mode

    def apply(self, value: Decimal, currency: Currency) -> Decimal:
        """Implements: RoundingStrategy.apply"""
        return round_to_subunit(value, currency, self._mode)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ModeRounding):
            return False
        return self._mode == other._mode

    def __hash__(self) -> int:
        return hash(self._mode)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._mode.name})"


class CallableRounding:
    """Adapts a caller-supplied `fn(value, currency)` to the `RoundingStrategy` interface.

    The callable may return any `DecimalLike`; the result is converted back to `Decimal`.
    """

    __slots__ = ("_fn",)

    def __init__(self, fn: RoundingCallable):
        # Raise: the escape hatch only makes sense for callables
        if not callable(fn):
            raise TypeError(f"$fn must be callable, but provided value is: {fn!r}")
        self._fn = fn

    def apply(self, value: Decimal, currency: Currency) -> Decimal:
        """Implements: RoundingStrategy.apply"""
        return as_decimal(self._fn(value, currency))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._fn!r})"


# Currency-native rounding: drop digits below the smallest unit
TRUNCATE = ModeRounding(RoundingMode.DOWN)


def as_rounding_strategy(rounding: RoundingLike | None) -> RoundingStrategy | None:
    """Normalize a rounding mode, strategy or callable into a `RoundingStrategy`.

    Returns:
        None when $rounding is None, so callers can chain candidates by precedence.

    Raises:
        TypeError: If $rounding is none of the supported kinds.
        ValueError: If $rounding is a string that does not name a rounding mode.
    """
    if rounding is None:
        return None
    if isinstance(rounding, (RoundingMode, str)):
        return ModeRounding(rounding)
    if isinstance(rounding, RoundingStrategy):
        return rounding
    if callable(rounding):
        return CallableRounding(rounding)

    raise TypeError(f"$rounding must be a RoundingMode, RoundingStrategy or callable, but provided value is: {rounding!r}")


def resolve_rounding(*candidates: RoundingLike | None) -> RoundingStrategy | None:
    """Return the first non-None candidate as a `RoundingStrategy`.

    Candidates are passed highest precedence first, e.g.
    `resolve_rounding(rounding_mode, rounder, default_mode)`.
    """
    for candidate in candidates:
        strategy = as_rounding_strategy(candidate)
        if strategy is not None:
            return strategy
    return None
