"""State transition functions for the pool engine.

One pure function per action. Each returns a new ``PoolState`` with the
action's updates applied.

Semantics:
- updates evaluate against the PRE-state (guards have already passed),
- the share ledger is copied, never mutated in place,
- we implement updates via ``dataclasses.replace()`` on frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import replace

from ..cpmm import initial_shares
from ..math import checked_add, checked_sub
from .quotes import deposit_for, swap_for, withdraw_for
from .types import ActionParams, Asset, PoolState


def apply_initialize(state: PoolState, params: ActionParams) -> PoolState:
    shares = initial_shares(params.amount, params.value)
    ledger = state.ledger.copy()
    ledger.credit(params.caller, shares)
    return replace(
        state,
        reserve_base=params.value,
        reserve_token=params.amount,
        total_shares=shares,
        initialized=True,
        ledger=ledger,
    )


def apply_swap_base_for_token(state: PoolState, params: ActionParams) -> PoolState:
    quote = swap_for(state, Asset.BASE, params.value)
    return replace(
        state,
        reserve_base=quote.new_reserve_in,
        reserve_token=quote.new_reserve_out,
    )


def apply_swap_token_for_base(state: PoolState, params: ActionParams) -> PoolState:
    quote = swap_for(state, Asset.TOKEN, params.amount)
    return replace(
        state,
        reserve_token=quote.new_reserve_in,
        reserve_base=quote.new_reserve_out,
    )


def apply_deposit(state: PoolState, params: ActionParams) -> PoolState:
    quote = deposit_for(state, params.value)
    ledger = state.ledger.copy()
    ledger.credit(params.caller, quote.shares_minted)
    return replace(
        state,
        reserve_base=checked_add(state.reserve_base, quote.base_in),
        reserve_token=checked_add(state.reserve_token, quote.token_required),
        total_shares=checked_add(state.total_shares, quote.shares_minted),
        ledger=ledger,
    )


def apply_withdraw(state: PoolState, params: ActionParams) -> PoolState:
    quote = withdraw_for(state, params.amount)
    ledger = state.ledger.copy()
    ledger.debit(params.caller, quote.shares_redeemed)
    return replace(
        state,
        reserve_base=checked_sub(state.reserve_base, quote.base_out),
        reserve_token=checked_sub(state.reserve_token, quote.token_out),
        total_shares=checked_sub(state.total_shares, quote.shares_redeemed),
        ledger=ledger,
    )
