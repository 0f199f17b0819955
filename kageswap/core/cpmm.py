"""
Constant Product Market Maker (CPMM) pricing for the ETH/0KAGE pool.

This module implements the pool's pure math with deterministic rounding rules.
Nothing here knows about callers, ledgers or events; the engine in
``kageswap.core.pool`` decides which of these results is acceptable.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per operation (O(log n) for the initial square root)
- Invariant: after each swap, x' * y' >= x * y; every rounding favours the pool
"""

from __future__ import annotations

from dataclasses import dataclass

from .math import (
    checked_add,
    checked_mul,
    floor_div,
    isqrt,
    mul_div_ceil,
    mul_div_floor,
    require_uint,
)

DEFAULT_FEE_NUMERATOR = 997
DEFAULT_FEE_DENOMINATOR = 1000


@dataclass(frozen=True)
class SwapQuote:
    amount_in: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


@dataclass(frozen=True)
class DepositQuote:
    base_in: int
    token_required: int
    shares_minted: int


@dataclass(frozen=True)
class WithdrawQuote:
    shares_redeemed: int
    base_out: int
    token_out: int


def validate_fee(fee_numerator: int, fee_denominator: int) -> None:
    """
    A fee rate is the fraction of input kept for pricing: 997/1000 prices 99.7%
    of the input and retains 0.3% in the pool.
    """
    require_uint("fee_numerator", fee_numerator)
    require_uint("fee_denominator", fee_denominator)
    if fee_denominator == 0:
        raise ValueError("fee_denominator must be positive")
    if fee_numerator == 0:
        raise ValueError("fee_numerator must be positive (a zero numerator prices every input at zero)")
    if fee_numerator > fee_denominator:
        raise ValueError(
            f"fee_numerator ({fee_numerator}) must not exceed fee_denominator ({fee_denominator})"
        )


def initial_shares(token_amount: int, base_amount: int) -> int:
    """
    Shares minted by the first deposit: floor(sqrt(token_amount * base_amount)).

    The square root makes the opening share price independent of the
    base/token ratio picked by the first provider.
    """
    require_uint("token_amount", token_amount)
    require_uint("base_amount", base_amount)
    return isqrt(checked_mul(token_amount, base_amount))


def swap_exact_in(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_numerator: int = DEFAULT_FEE_NUMERATOR,
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR,
) -> SwapQuote:
    """
    Compute the output of an exact-in swap.

    This implements the fee-adjusted constant-product formula:
        amount_out = floor(reserve_out * fee_num * amount_in
                           / (reserve_in * fee_den + fee_num * amount_in))

    Post-swap reserves:
        new_reserve_in = reserve_in + amount_in  (fee stays in pool)
        new_reserve_out = reserve_out - amount_out

    The result may carry ``amount_out == 0`` (trade too small); callers decide
    whether to accept it.

    Raises:
        ValueError: if a reserve is empty or amount_in is not positive
        AmountOverflow: if an intermediate product leaves uint256
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        require_uint(name, v)
    validate_fee(fee_numerator, fee_denominator)

    if reserve_in == 0 or reserve_out == 0:
        raise ValueError("cannot swap against an empty reserve")
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive: {amount_in}")

    weighted_in = checked_mul(fee_numerator, amount_in)
    numerator = checked_mul(reserve_out, weighted_in)
    denominator = checked_add(checked_mul(reserve_in, fee_denominator), weighted_in)
    amount_out = floor_div(numerator, denominator)

    new_reserve_in = checked_add(reserve_in, amount_in)
    new_reserve_out = reserve_out - amount_out

    return SwapQuote(
        amount_in=amount_in,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=reserve_in * reserve_out,
        k_after=new_reserve_in * new_reserve_out,
    )


def compute_deposit(
    reserve_base: int,
    reserve_token: int,
    total_shares: int,
    base_in: int,
) -> DepositQuote:
    """
    Compute a proportional liquidity deposit driven by the base amount.

    Formula:
        token_required = ceil(base_in * reserve_token / reserve_base)
        shares_minted  = floor(base_in * total_shares / reserve_base)

    Rounding the token requirement up and the share issue down keeps existing
    providers' per-share value from ever decreasing.
    """
    for name, v in (
        ("reserve_base", reserve_base),
        ("reserve_token", reserve_token),
        ("total_shares", total_shares),
        ("base_in", base_in),
    ):
        require_uint(name, v)
    if reserve_base == 0:
        raise ValueError("cannot add liquidity to an empty pool")
    if base_in <= 0:
        raise ValueError(f"base_in must be positive: {base_in}")

    return DepositQuote(
        base_in=base_in,
        token_required=mul_div_ceil(base_in, reserve_token, reserve_base),
        shares_minted=mul_div_floor(base_in, total_shares, reserve_base),
    )


def compute_withdraw(
    reserve_base: int,
    reserve_token: int,
    total_shares: int,
    shares: int,
) -> WithdrawQuote:
    """
    Compute asset amounts returned for redeeming ``shares``.

    Formula:
        base_out  = floor(reserve_base * shares / total_shares)
        token_out = floor(reserve_token * shares / total_shares)
    """
    for name, v in (
        ("reserve_base", reserve_base),
        ("reserve_token", reserve_token),
        ("total_shares", total_shares),
        ("shares", shares),
    ):
        require_uint(name, v)
    if total_shares == 0:
        raise ValueError("cannot redeem from a pool with no outstanding shares")
    if shares <= 0:
        raise ValueError(f"shares must be positive: {shares}")
    if shares > total_shares:
        raise ValueError(f"cannot redeem more than the total supply: {shares} > {total_shares}")

    return WithdrawQuote(
        shares_redeemed=shares,
        base_out=mul_div_floor(reserve_base, shares, total_shares),
        token_out=mul_div_floor(reserve_token, shares, total_shares),
    )
