"""Guard functions for the pool engine.

One pure function per action. Each returns ``None`` when the action is allowed
in the given PRE-state, or the rejection code of the first violated
precondition (see ``kageswap.core.errors``).
"""

from __future__ import annotations

from ..errors import AlreadyInitialized, ZeroAmount
from .quotes import deposit_rejection, swap_rejection, withdraw_rejection
from .types import ActionParams, Asset, PoolState


def guard_initialize(state: PoolState, params: ActionParams) -> str | None:
    if state.initialized:
        return AlreadyInitialized.code
    if params.amount == 0 or params.value == 0:
        return ZeroAmount.code
    return None


def guard_swap_base_for_token(state: PoolState, params: ActionParams) -> str | None:
    return swap_rejection(state, Asset.BASE, params.value)


def guard_swap_token_for_base(state: PoolState, params: ActionParams) -> str | None:
    return swap_rejection(state, Asset.TOKEN, params.amount)


def guard_deposit(state: PoolState, params: ActionParams) -> str | None:
    return deposit_rejection(state, params.value)


def guard_withdraw(state: PoolState, params: ActionParams) -> str | None:
    return withdraw_rejection(state, params.amount, state.shares_of(params.caller))
