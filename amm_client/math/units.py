"""
Conversion between decimal token amounts and raw smallest units.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation, localcontext
from typing import Union

from ..errors import ValidationError


def _to_decimal(amount: Union[str, int, Decimal]) -> Decimal:
    if isinstance(amount, bool) or isinstance(amount, float):
        raise ValidationError(f"Amount must be a decimal string, got {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValidationError(f"Amount must be finite, got {amount!r}")
    if value < 0:
        raise ValidationError(f"Amount must be non-negative, got {amount!r}")
    return value


def parse_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Decimal amount to raw units, e.g. parse_units("1.5", 18) == 1500000000000000000.

    Raises:
        ValidationError: On malformed, negative or over-precise input
    """
    value = _to_decimal(amount)
    with localcontext() as ctx:
        ctx.prec = 100
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"Amount {amount!r} has more than {decimals} decimal places")
    return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """
    Raw units to a plain decimal string without exponent notation or
    trailing zeros, e.g. format_units(1500000000000000000, 18) == "1.5".
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"Raw amount must be an integer, got {value!r}")
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10**decimals)
    if decimals == 0 or frac == 0:
        return f"{sign}{whole}"
    frac_str = str(frac).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}"


def apply_slippage(amount: int, slippage: Union[float, str, Decimal]) -> int:
    """
    Minimum acceptable amount under a slippage tolerance (percent).

    amount x (1 - slippage/100), floored to an integer.
    """
    try:
        tolerance = Decimal(str(slippage))
    except InvalidOperation as e:
        raise ValidationError(f"Invalid slippage: {slippage!r}") from e
    if not tolerance.is_finite() or tolerance < 0 or tolerance >= 100:
        raise ValidationError(f"Slippage must be in [0, 100), got {slippage!r}")
    with localcontext() as ctx:
        ctx.prec = 100
        minimum = Decimal(amount) * (Decimal(100) - tolerance) / Decimal(100)
        return int(minimum.to_integral_value(rounding=ROUND_DOWN))
