"""State construction and serialization for the pool engine.

``initial_state()`` returns an Uninitialized pool with the given fee.

Round-trip property (tested): ``state_from_dict(state_to_dict(s)) == s`` for all
valid states.
"""

from __future__ import annotations

from typing import Any, Mapping

from ...state.shares import ShareLedger
from ..cpmm import DEFAULT_FEE_DENOMINATOR, DEFAULT_FEE_NUMERATOR, validate_fee
from ..errors import PoolInvariantError
from .invariants import check_all
from .types import PoolState

SCALAR_VAR_NAMES: tuple[str, ...] = tuple(
    name for name in PoolState.__dataclass_fields__ if name != "ledger"
)


def initial_state(
    fee_numerator: int = DEFAULT_FEE_NUMERATOR,
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR,
) -> PoolState:
    """Return an Uninitialized pool. The fee is fixed from here on."""
    validate_fee(fee_numerator, fee_denominator)
    return PoolState(fee_numerator=fee_numerator, fee_denominator=fee_denominator)


def state_to_dict(state: PoolState) -> dict[str, Any]:
    """Serialize a PoolState to a plain JSON-compatible dict (accounts sorted by owner)."""
    out: dict[str, Any] = {name: getattr(state, name) for name in SCALAR_VAR_NAMES}
    out["accounts"] = [[owner, shares] for owner, shares in state.ledger.items()]
    return out


def state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState.

    Raises KeyError on missing fields, TypeError on mistyped values and
    PoolInvariantError when the result is not a reachable pool state.
    """
    kwargs: dict[str, Any] = {}
    for name in SCALAR_VAR_NAMES:
        val = d[name]
        if name == "initialized":
            if not isinstance(val, bool):
                raise TypeError(f"state var {name!r} must be bool, got {type(val).__name__}")
            kwargs[name] = val
        elif isinstance(val, int) and not isinstance(val, bool):
            kwargs[name] = int(val)  # normalize int subclasses
        else:
            raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")

    ledger = ShareLedger()
    for entry in d["accounts"]:
        owner, shares = entry
        if not isinstance(owner, str) or not owner:
            raise TypeError("account owner must be a non-empty string")
        if owner in ledger:
            raise ValueError(f"duplicate account: {owner}")
        if not isinstance(shares, int) or isinstance(shares, bool):
            raise TypeError(f"shares of {owner} must be int, got {type(shares).__name__}")
        ledger.set(owner, int(shares))

    state = PoolState(ledger=ledger, **kwargs)
    violations = check_all(state)
    if violations:
        raise PoolInvariantError(violations)
    return state
