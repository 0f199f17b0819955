"""Dispatch-table engine for the pool.

``step(state, params)`` is the single entry point. It:

1. Validates parameter domains (amounts must fit in uint256).
2. Dispatches to the correct guard / update / effect functions.
3. Checks all state invariants on the post-state, and the transition
   invariants between pre- and post-state.
4. Returns a ``StepResult`` (accepted or rejected with a reason code).

``step`` never mutates its input; a rejected step leaves nothing behind.
"""

from __future__ import annotations

from typing import Callable

from ..errors import REJECTION_ERRORS, AmountOverflow, PoolError, PoolInvariantError
from ..math import MAX_UINT256
from .effects import (
    effect_deposit,
    effect_initialize,
    effect_swap_base_for_token,
    effect_swap_token_for_base,
    effect_withdraw,
)
from .guards import (
    guard_deposit,
    guard_initialize,
    guard_swap_base_for_token,
    guard_swap_token_for_base,
    guard_withdraw,
)
from .invariants import check_all, check_transition
from .types import Action, ActionParams, Effect, PoolState, StepResult
from .updates import (
    apply_deposit,
    apply_initialize,
    apply_swap_base_for_token,
    apply_swap_token_for_base,
    apply_withdraw,
)

GuardFn = Callable[[PoolState, ActionParams], "str | None"]
UpdateFn = Callable[[PoolState, ActionParams], PoolState]
EffectFn = Callable[[PoolState, ActionParams], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.INITIALIZE: (
        guard_initialize, apply_initialize, effect_initialize,
    ),
    Action.SWAP_BASE_FOR_TOKEN: (
        guard_swap_base_for_token, apply_swap_base_for_token, effect_swap_base_for_token,
    ),
    Action.SWAP_TOKEN_FOR_BASE: (
        guard_swap_token_for_base, apply_swap_token_for_base, effect_swap_token_for_base,
    ),
    Action.DEPOSIT: (
        guard_deposit, apply_deposit, effect_deposit,
    ),
    Action.WITHDRAW: (
        guard_withdraw, apply_withdraw, effect_withdraw,
    ),
}


def _validate_params(params: ActionParams) -> str | None:
    """Check parameter domain bounds. Returns rejection reason or None."""
    for field in ("amount", "value"):
        if getattr(params, field) > MAX_UINT256:
            return AmountOverflow.code
    return None


def step(state: PoolState, params: ActionParams) -> StepResult:
    """Execute one action against the given state.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` reason code.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=f"unknown_action:{params.action}")

    domain_err = _validate_params(params)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn, effect_fn = entry

    try:
        rejection = guard_fn(state, params)
        if rejection is not None:
            return StepResult(accepted=False, rejection=rejection)
        new_state = update_fn(state, params)
        effect = effect_fn(state, params)
    except AmountOverflow:
        return StepResult(accepted=False, rejection=AmountOverflow.code)

    violations = check_all(new_state) + check_transition(state, new_state, params.action)
    if violations:
        return StepResult(
            accepted=False,
            rejection=f"invariant:{','.join(violations)}",
        )

    return StepResult(accepted=True, state=new_state, effect=effect)


def step_or_raise(state: PoolState, params: ActionParams) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        PoolError: the subclass matching the rejection code
            (``AlreadyInitialized``, ``ZeroAmount``, ...).
        PoolInvariantError: Post-state violates one or more invariants.
    """
    result = step(state, params)
    if result.accepted:
        return result

    reason = result.rejection or ""
    if reason.startswith("invariant:"):
        violations = reason.removeprefix("invariant:").split(",")
        raise PoolInvariantError(violations)
    error_cls = REJECTION_ERRORS.get(reason, PoolError)
    raise error_cls(f"{params.action.value} rejected for {params.caller}: {reason}")
