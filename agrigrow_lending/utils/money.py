"""Decimal helpers for currency amounts"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """
    Convert int/float/str/Decimal to Decimal via its string form.

    Floats go through str() so 0.1 becomes Decimal("0.1"), not the binary
    approximation. Raises ValueError for anything non-numeric or non-finite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"Expected a number, got {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Expected a finite number, got {value!r}")
    return result


def money(x) -> Decimal:
    """Always return 2-decimal Decimal with HALF_UP rounding."""
    if x is None:
        x = 0
    return to_decimal(x).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Currency amount -> integer minor units"""
    return int(money(amount) * 100)


def from_cents(cents: int) -> Decimal:
    """Integer minor units -> currency amount"""
    return money(Decimal(cents) / 100)
