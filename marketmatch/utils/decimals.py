"""Decimal helpers for score arithmetic.

Scores are carried as ``Decimal`` with four fractional digits and
round-half-up, matching how the marketplace reports them. Float results of
``math`` functions are converted through ``str()`` so that the quantized value
reflects the shortest decimal representation of the float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

Number = Union[int, float, Decimal]

SCORE_PLACES = 4


def quantize(value: Number, places: int = SCORE_PLACES) -> Decimal:
    """Round a number to a fixed number of fractional digits, half-up.

    Args:
        value: Number to round
        places: Number of fractional digits to keep

    Returns:
        Rounded Decimal

    Example:
        >>> quantize(0.33335)
        Decimal('0.3334')
        >>> quantize(Decimal("12.345"), 2)
        Decimal('12.35')
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def to_score(value: Number) -> Decimal:
    """Round a raw score to the four-digit score precision."""
    return quantize(value, SCORE_PLACES)


def to_decimal(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    """Convert an arbitrary value to Decimal, returning default on failure.

    Booleans are rejected even though they are ints in Python, since a
    ``true`` in external data is never meant as a number.

    Args:
        value: Value to convert (int, float, Decimal or numeric string)
        default: Value returned when conversion is not possible

    Returns:
        Converted Decimal or default
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    if not result.is_finite():
        return default
    return result
