"""Effect functions for the pool engine.

One pure function per action, evaluated on the PRE-state. Each returns the
domain event plus the transfers the shell performs once the post-state has
been committed. Pulls are always listed before pushes. A withdraw pushes
0KAGE before base, so the token transfer (the one that can run hooks) is
the one that can still be reclaimed if the base push fails.
"""

from __future__ import annotations

from ..cpmm import initial_shares
from .quotes import deposit_for, swap_for, withdraw_for
from .types import (
    ActionParams,
    Asset,
    Direction,
    Effect,
    LiquidityAdded,
    LiquidityRemoved,
    PoolInitialized,
    PoolState,
    SwapBaseForToken,
    SwapTokenForBase,
    Transfer,
)


def _pull(asset: Asset, caller: str, amount: int) -> Transfer:
    return Transfer(Direction.PULL, asset, caller, amount)


def _push(asset: Asset, caller: str, amount: int) -> Transfer:
    return Transfer(Direction.PUSH, asset, caller, amount)


def effect_initialize(state: PoolState, params: ActionParams) -> Effect:
    return Effect(
        event=PoolInitialized(
            caller=params.caller,
            shares_minted=initial_shares(params.amount, params.value),
            base_in=params.value,
            token_in=params.amount,
        ),
        transfers=(
            _pull(Asset.BASE, params.caller, params.value),
            _pull(Asset.TOKEN, params.caller, params.amount),
        ),
    )


def effect_swap_base_for_token(state: PoolState, params: ActionParams) -> Effect:
    quote = swap_for(state, Asset.BASE, params.value)
    return Effect(
        event=SwapBaseForToken(caller=params.caller, base_in=quote.amount_in, token_out=quote.amount_out),
        transfers=(
            _pull(Asset.BASE, params.caller, quote.amount_in),
            _push(Asset.TOKEN, params.caller, quote.amount_out),
        ),
    )


def effect_swap_token_for_base(state: PoolState, params: ActionParams) -> Effect:
    quote = swap_for(state, Asset.TOKEN, params.amount)
    return Effect(
        event=SwapTokenForBase(caller=params.caller, token_in=quote.amount_in, base_out=quote.amount_out),
        transfers=(
            _pull(Asset.TOKEN, params.caller, quote.amount_in),
            _push(Asset.BASE, params.caller, quote.amount_out),
        ),
    )


def effect_deposit(state: PoolState, params: ActionParams) -> Effect:
    quote = deposit_for(state, params.value)
    return Effect(
        event=LiquidityAdded(
            caller=params.caller,
            shares_minted=quote.shares_minted,
            base_in=quote.base_in,
            token_in=quote.token_required,
        ),
        transfers=(
            _pull(Asset.BASE, params.caller, quote.base_in),
            _pull(Asset.TOKEN, params.caller, quote.token_required),
        ),
    )


def effect_withdraw(state: PoolState, params: ActionParams) -> Effect:
    quote = withdraw_for(state, params.amount)
    return Effect(
        event=LiquidityRemoved(
            caller=params.caller,
            shares_redeemed=quote.shares_redeemed,
            base_out=quote.base_out,
            token_out=quote.token_out,
        ),
        transfers=tuple(
            _push(asset, params.caller, amount)
            for asset, amount in ((Asset.TOKEN, quote.token_out), (Asset.BASE, quote.base_out))
            if amount > 0
        ),
    )
