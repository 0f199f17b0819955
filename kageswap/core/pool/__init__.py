"""`pool`: pure-Python state-transition engine for the ETH/0KAGE pool.

- deterministic, integer-only transitions,
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks.

Public API:
- `initial_state(fee_numerator, fee_denominator) -> PoolState`
- `step(state, params) -> StepResult`
- `step_or_raise(state, params) -> StepResult` (raises on rejection)
- `quote_swap` / `quote_deposit` / `quote_withdraw` (read-only previews)
"""

from .engine import step, step_or_raise
from .invariants import check_all, check_transition
from .quotes import quote_deposit, quote_swap, quote_withdraw
from .state import initial_state, state_from_dict, state_to_dict
from .types import (
    Action,
    ActionParams,
    Asset,
    Direction,
    Effect,
    Event,
    LiquidityAdded,
    LiquidityRemoved,
    PoolEvent,
    PoolInitialized,
    PoolState,
    StepResult,
    SwapBaseForToken,
    SwapTokenForBase,
    Transfer,
)

__all__ = [
    "step",
    "step_or_raise",
    "check_all",
    "check_transition",
    "quote_swap",
    "quote_deposit",
    "quote_withdraw",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "Action",
    "ActionParams",
    "Asset",
    "Direction",
    "Effect",
    "Event",
    "LiquidityAdded",
    "LiquidityRemoved",
    "PoolEvent",
    "PoolInitialized",
    "PoolState",
    "StepResult",
    "SwapBaseForToken",
    "SwapTokenForBase",
    "Transfer",
]
