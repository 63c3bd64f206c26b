"""Decimal helpers shared by the finance engine."""

from decimal import (
    MAX_EMAX,
    MIN_EMIN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    InvalidOperation,
)
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Engine arithmetic runs in this context: wide exponent range and no traps,
# so oversized inputs degrade instead of raising.
ENGINE_CONTEXT = Context(
    prec=100,
    rounding=ROUND_HALF_EVEN,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[],
)


def to_decimal(value: Number | None) -> Decimal:
    """Convert ``value`` to Decimal, treating anything unusable as zero.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return ZERO
    if not result.is_finite():
        return ZERO
    return result


def non_negative(value: Number | None) -> Decimal:
    """Convert and clamp to zero from below."""
    return max(ZERO, to_decimal(value))


def money(value: Decimal) -> Decimal:
    """Round to cents, half-up.

    Values with more integer digits than ``ENGINE_CONTEXT`` can hold
    alongside cents are returned unrounded.
    """
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP, context=ENGINE_CONTEXT)
    if rounded.is_nan():
        return value
    return rounded
