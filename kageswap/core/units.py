"""
Human-unit <-> base-unit conversion (ethers' ``parseUnits`` / ``formatUnits``).

ETH and 0KAGE both use 18 decimals: "1.5" ETH is 1_500_000_000_000_000_000 wei.
Conversion goes through ``Decimal`` so no float rounding is involved.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

DEFAULT_DECIMALS = 18


def parse_units(value: Union[str, int, Decimal], decimals: int = DEFAULT_DECIMALS) -> int:
    """
    Convert a human amount to integer base units.

    Raises:
        ValueError: if the value is negative, malformed, or has more fractional
            digits than ``decimals`` allows
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError("value must be a str, int or Decimal (floats are not exact)")
    if not isinstance(decimals, int) or decimals < 0:
        raise ValueError(f"decimals must be a non-negative int: {decimals}")
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {value!r}")

    with localcontext() as ctx:
        # uint256 has 78 digits; keep scaleb exact well beyond that.
        ctx.prec = 160 + decimals
        scaled = amount.scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{value!r} has more than {decimals} fractional digits")
        return int(scaled)


def format_units(amount: int, decimals: int = DEFAULT_DECIMALS) -> str:
    """Render integer base units as a human amount (trailing zeros trimmed, at least one decimal)."""
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    if decimals == 0:
        return str(amount)

    whole, frac = divmod(amount, 10**decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") or "0"
    return f"{whole}.{frac_str}"
