"""Pool-aware pricing for the engine.

Thin adapters from a ``PoolState`` to the pure kernels in ``kageswap.core.cpmm``.
Guards, updates and effects all price through these helpers so the three
never disagree. The ``quote_*`` functions are the read-only preview surface:
they raise the same ``PoolError`` kinds the corresponding operation would.
"""

from __future__ import annotations

from ..cpmm import (
    DepositQuote,
    SwapQuote,
    WithdrawQuote,
    compute_deposit,
    compute_withdraw,
    swap_exact_in,
)
from ..errors import (
    REJECTION_ERRORS,
    InsufficientOutputReserve,
    InsufficientShares,
    PoolNotInitialized,
    ZeroAmount,
)
from ..math import require_uint
from .types import Asset, PoolState


def swap_for(state: PoolState, asset_in: Asset, amount_in: int) -> SwapQuote:
    """Price ``amount_in`` of ``asset_in`` against the pre-swap reserves (no policy checks)."""
    if asset_in is Asset.BASE:
        reserve_in, reserve_out = state.reserve_base, state.reserve_token
    else:
        reserve_in, reserve_out = state.reserve_token, state.reserve_base
    return swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        fee_numerator=state.fee_numerator,
        fee_denominator=state.fee_denominator,
    )


def deposit_for(state: PoolState, base_in: int) -> DepositQuote:
    return compute_deposit(
        reserve_base=state.reserve_base,
        reserve_token=state.reserve_token,
        total_shares=state.total_shares,
        base_in=base_in,
    )


def withdraw_for(state: PoolState, shares: int) -> WithdrawQuote:
    return compute_withdraw(
        reserve_base=state.reserve_base,
        reserve_token=state.reserve_token,
        total_shares=state.total_shares,
        shares=shares,
    )


def swap_rejection(state: PoolState, asset_in: Asset, amount_in: int) -> str | None:
    """Rejection code for a swap, or None if it is acceptable."""
    if not state.is_live:
        return PoolNotInitialized.code
    if amount_in == 0:
        return ZeroAmount.code
    quote = swap_for(state, asset_in, amount_in)
    if quote.amount_out == 0:
        return ZeroAmount.code
    reserve_out = state.reserve_token if asset_in is Asset.BASE else state.reserve_base
    if quote.amount_out >= reserve_out:
        return InsufficientOutputReserve.code
    return None


def deposit_rejection(state: PoolState, base_in: int) -> str | None:
    if not state.is_live:
        return PoolNotInitialized.code
    if base_in == 0:
        return ZeroAmount.code
    if deposit_for(state, base_in).shares_minted == 0:
        return ZeroAmount.code
    return None


def withdraw_rejection(state: PoolState, shares: int, owned: int) -> str | None:
    if not state.initialized:
        return PoolNotInitialized.code
    if shares == 0:
        return ZeroAmount.code
    if shares > owned:
        return InsufficientShares.code
    return None


# -- read-only previews ------------------------------------------------------

def _raise_for(code: str | None, detail: str) -> None:
    if code is None:
        return
    raise REJECTION_ERRORS[code](detail)


def quote_swap(state: PoolState, asset_in: Asset, amount_in: int) -> SwapQuote:
    require_uint("amount_in", amount_in)
    _raise_for(swap_rejection(state, asset_in, amount_in), f"swap {amount_in} {asset_in.value} rejected")
    return swap_for(state, asset_in, amount_in)


def quote_deposit(state: PoolState, base_in: int) -> DepositQuote:
    require_uint("base_in", base_in)
    _raise_for(deposit_rejection(state, base_in), f"deposit of {base_in} base rejected")
    return deposit_for(state, base_in)


def quote_withdraw(state: PoolState, shares: int) -> WithdrawQuote:
    """Preview redeeming ``shares`` out of the whole supply (ownership is not checked)."""
    require_uint("shares", shares)
    _raise_for(withdraw_rejection(state, shares, state.total_shares), f"withdraw of {shares} shares rejected")
    return withdraw_for(state, shares)
