"""Invariant checkers for the pool engine.

State invariants take one ``PoolState``; transition invariants compare the
PRE- and POST-state of an accepted action. Each function returns True when
the invariant holds. ``check_all()`` / ``check_transition()`` return the list
of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from ..math import MAX_UINT256
from .types import Action, PoolState


def inv_quantities_in_range(s: PoolState) -> bool:
    return all(
        0 <= v <= MAX_UINT256
        for v in (s.reserve_base, s.reserve_token, s.total_shares)
    )


def inv_fee_fraction_valid(s: PoolState) -> bool:
    return 0 < s.fee_numerator <= s.fee_denominator


def inv_uninitialized_empty(s: PoolState) -> bool:
    if s.initialized:
        return True
    return s.reserve_base == 0 and s.reserve_token == 0 and s.total_shares == 0 and len(s.ledger) == 0


def inv_live_reserves_positive(s: PoolState) -> bool:
    if not s.initialized or s.total_shares == 0:
        return True
    return s.reserve_base > 0 and s.reserve_token > 0


def inv_drained_reserves_empty(s: PoolState) -> bool:
    # A fully redeemed pool holds nothing.
    if not s.initialized or s.total_shares > 0:
        return True
    return s.reserve_base == 0 and s.reserve_token == 0


def inv_share_conservation(s: PoolState) -> bool:
    return s.ledger.total() == s.total_shares


def inv_account_shares_bounded(s: PoolState) -> bool:
    return all(0 <= shares <= s.total_shares for _, shares in s.ledger.items())


def inv_fee_fixed(pre: PoolState, post: PoolState, action: Action) -> bool:
    return (pre.fee_numerator, pre.fee_denominator) == (post.fee_numerator, post.fee_denominator)


def inv_initialized_terminal(pre: PoolState, post: PoolState, action: Action) -> bool:
    return post.initialized or not pre.initialized


def inv_swap_k_non_decreasing(pre: PoolState, post: PoolState, action: Action) -> bool:
    if action not in (Action.SWAP_BASE_FOR_TOKEN, Action.SWAP_TOKEN_FOR_BASE):
        return True
    if post.total_shares != pre.total_shares or post.ledger != pre.ledger:
        return False
    return post.reserve_base * post.reserve_token >= pre.reserve_base * pre.reserve_token


def inv_share_value_non_decreasing(pre: PoolState, post: PoolState, action: Action) -> bool:
    """Across deposit/withdraw, k / total_shares**2 never decreases.

    Cross-multiplied to stay in integers:
    ``k_post * S_pre**2 >= k_pre * S_post**2``.
    """
    if action not in (Action.DEPOSIT, Action.WITHDRAW):
        return True
    k_pre = pre.reserve_base * pre.reserve_token
    k_post = post.reserve_base * post.reserve_token
    return k_post * pre.total_shares ** 2 >= k_pre * post.total_shares ** 2


def inv_ratio_preserved_on_deposit(pre: PoolState, post: PoolState, action: Action) -> bool:
    """A deposit never lowers the token-per-base price (the token side is rounded up)."""
    if action is not Action.DEPOSIT:
        return True
    return post.reserve_token * pre.reserve_base >= pre.reserve_token * post.reserve_base


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[PoolState], bool]] = {
    "inv_quantities_in_range": inv_quantities_in_range,
    "inv_fee_fraction_valid": inv_fee_fraction_valid,
    "inv_uninitialized_empty": inv_uninitialized_empty,
    "inv_live_reserves_positive": inv_live_reserves_positive,
    "inv_drained_reserves_empty": inv_drained_reserves_empty,
    "inv_share_conservation": inv_share_conservation,
    "inv_account_shares_bounded": inv_account_shares_bounded,
}

TRANSITION_REGISTRY: dict[str, Callable[[PoolState, PoolState, Action], bool]] = {
    "inv_fee_fixed": inv_fee_fixed,
    "inv_initialized_terminal": inv_initialized_terminal,
    "inv_swap_k_non_decreasing": inv_swap_k_non_decreasing,
    "inv_share_value_non_decreasing": inv_share_value_non_decreasing,
    "inv_ratio_preserved_on_deposit": inv_ratio_preserved_on_deposit,
}


def check_all(state: PoolState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def check_transition(pre: PoolState, post: PoolState, action: Action) -> list[str]:
    """Return list of violated transition invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in TRANSITION_REGISTRY.items()
        if not check_fn(pre, post, action)
    ]
