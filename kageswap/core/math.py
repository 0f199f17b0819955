"""Fixed-point integer helpers for the pool engine.

Every quantity in the pool (reserves, shares, transfer amounts) is an unsigned
integer bounded by ``MAX_UINT256``. The helpers below are explicit about
rounding: ``floor_div`` truncates, ``ceil_div`` rounds up, and nothing here ever
touches a float.
"""

from __future__ import annotations

import math

from .errors import AmountOverflow

MAX_UINT256: int = (1 << 256) - 1


def require_uint(name: str, value: int) -> None:
    """Raise unless ``value`` is a non-negative int within uint256."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > MAX_UINT256:
        raise AmountOverflow(f"{name} exceeds uint256: {value}")


def _check(result: int, op: str) -> int:
    if result > MAX_UINT256:
        raise AmountOverflow(f"uint256 overflow in {op}")
    return result


def checked_add(a: int, b: int) -> int:
    return _check(a + b, "add")


def checked_sub(a: int, b: int) -> int:
    if b > a:
        raise AmountOverflow(f"uint256 underflow in sub: {a} - {b}")
    return a - b


def checked_mul(a: int, b: int) -> int:
    return _check(a * b, "mul")


def floor_div(numerator: int, denominator: int) -> int:
    """``floor(numerator / denominator)`` for non-negative operands."""
    if denominator <= 0:
        raise ZeroDivisionError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return numerator // denominator


def ceil_div(numerator: int, denominator: int) -> int:
    """``ceil(numerator / denominator)`` for non-negative operands."""
    if denominator <= 0:
        raise ZeroDivisionError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


def mul_div_floor(a: int, b: int, denominator: int) -> int:
    """``floor(a * b / denominator)`` with an overflow-checked product."""
    return floor_div(checked_mul(a, b), denominator)


def mul_div_ceil(a: int, b: int, denominator: int) -> int:
    """``ceil(a * b / denominator)`` with an overflow-checked product."""
    return ceil_div(checked_mul(a, b), denominator)


def isqrt(value: int) -> int:
    """Largest integer whose square does not exceed ``value``.

    Backed by ``math.isqrt`` (exact on arbitrarily large ints, unlike a float
    ``sqrt``).
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("value must be an int")
    if value < 0:
        raise ValueError(f"cannot take the square root of a negative number: {value}")
    return math.isqrt(value)
