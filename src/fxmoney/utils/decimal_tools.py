from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TypeAlias

# Use where optimal type is `Decimal`, but other types are also acceptable (and will be converted to `Decimal`)
DecimalLike: TypeAlias = Decimal | int | str | float


def as_decimal(value: DecimalLike) -> Decimal:
    """Converts input to `Decimal` safely.

    Ensures floats are converted via string to avoid precision noise, so `1.33` becomes
    `Decimal("1.33")` and not `Decimal(1.33000000000000007105...)`.

    Args:
        value: Input value as `DecimalLike`.

    Returns:
        Value converted to `Decimal`.

    Raises:
        TypeError: If $value is not a number or a string (`bool` is rejected too).
        ValueError: If $value is a string that does not represent a number.
    """
    if isinstance(value, Decimal):
        return value

    # Raise: bool is an int subclass, but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"$value must be Decimal, int, float or str, but provided value is: {value!r}")

    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Cannot convert $value ({value!r}) to Decimal") from e


def is_number(value: object) -> bool:
    """Return True if $value is a scalar accepted by `as_decimal` as a number (not a string)."""
    return isinstance(value, (Decimal, int, float)) and not isinstance(value, bool)


def floor_divmod(dividend: Decimal, divisor: Decimal) -> tuple[Decimal, Decimal]:
    """Floored division of two decimals.

    `divmod` on `Decimal` truncates towards zero. Here the quotient is rounded towards
    negative infinity and the remainder takes the sign of $divisor, like `divmod` on `int`.

    Examples:
        >>> floor_divmod(Decimal(13), Decimal(-4))
        (Decimal('-4'), Decimal('-3'))
    """
    quotient, remainder = divmod(dividend, divisor)
    if remainder and (remainder < 0) != (divisor < 0):
        quotient -= 1
        remainder += divisor
    return quotient, remainder
