"""Data types for the pool engine.

All types are frozen dataclasses (immutable).

Units/conventions:
- every amount is an unsigned integer in base units (wei for ETH, 1e-18 0KAGE),
- ``value`` is base asset attached to the call (``msg.value``),
- ``amount`` is the token amount (initialize / swap_token_for_base) or the
  number of shares (withdraw).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import ClassVar, Tuple

from ...state.shares import ShareLedger
from ..cpmm import DEFAULT_FEE_DENOMINATOR, DEFAULT_FEE_NUMERATOR


@unique
class Action(Enum):
    """One member per pool operation."""
    INITIALIZE = "initialize"
    SWAP_BASE_FOR_TOKEN = "swap_base_for_token"
    SWAP_TOKEN_FOR_BASE = "swap_token_for_base"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


@unique
class Event(Enum):
    """One member per emitted domain event."""
    POOL_INITIALIZED = "PoolInitialized"
    SWAP_BASE_FOR_TOKEN = "SwapBaseForToken"
    SWAP_TOKEN_FOR_BASE = "SwapTokenForBase"
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"


@unique
class Asset(Enum):
    BASE = "base"
    TOKEN = "token"


@unique
class Direction(Enum):
    PULL = "pull"  # caller -> pool
    PUSH = "push"  # pool -> caller


@dataclass(frozen=True)
class PoolState:
    """Complete state of one pool: reserves, share supply, fee and the share ledger."""

    reserve_base: int = 0
    reserve_token: int = 0
    total_shares: int = 0

    # Fixed at construction
    fee_numerator: int = DEFAULT_FEE_NUMERATOR
    fee_denominator: int = DEFAULT_FEE_DENOMINATOR

    # Uninitialized -> Active, once
    initialized: bool = False

    # LiquidityAccounts. Never mutated once reachable from a PoolState.
    ledger: ShareLedger = field(default_factory=ShareLedger)

    def shares_of(self, owner: str) -> int:
        return self.ledger.get(owner)

    @property
    def is_live(self) -> bool:
        """Initialized and holding reserves (a fully drained pool is not live)."""
        return self.initialized and self.reserve_base > 0 and self.reserve_token > 0


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields default to 0."""

    action: Action
    caller: str
    amount: int = 0  # initialize (token) / swap_token_for_base / withdraw (shares)
    value: int = 0   # initialize / swap_base_for_token / deposit (attached base)

    def __post_init__(self) -> None:
        if not isinstance(self.action, Action):
            raise TypeError(f"action must be an Action, got {type(self.action).__name__}")
        if not isinstance(self.caller, str) or not self.caller:
            raise ValueError("caller must be a non-empty address string")
        for name in ("amount", "value"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")


@dataclass(frozen=True)
class Transfer:
    """One asset movement the shell must perform after committing a step."""

    direction: Direction
    asset: Asset
    counterparty: str
    amount: int


# -- Domain events -----------------------------------------------------------

@dataclass(frozen=True)
class PoolEvent:
    event: ClassVar[Event]
    caller: str

    @property
    def name(self) -> str:
        return self.event.value


@dataclass(frozen=True)
class PoolInitialized(PoolEvent):
    event: ClassVar[Event] = Event.POOL_INITIALIZED
    shares_minted: int
    base_in: int
    token_in: int


@dataclass(frozen=True)
class SwapBaseForToken(PoolEvent):
    event: ClassVar[Event] = Event.SWAP_BASE_FOR_TOKEN
    base_in: int
    token_out: int


@dataclass(frozen=True)
class SwapTokenForBase(PoolEvent):
    event: ClassVar[Event] = Event.SWAP_TOKEN_FOR_BASE
    token_in: int
    base_out: int


@dataclass(frozen=True)
class LiquidityAdded(PoolEvent):
    event: ClassVar[Event] = Event.LIQUIDITY_ADDED
    shares_minted: int
    base_in: int
    token_in: int


@dataclass(frozen=True)
class LiquidityRemoved(PoolEvent):
    event: ClassVar[Event] = Event.LIQUIDITY_REMOVED
    shares_redeemed: int
    base_out: int
    token_out: int


@dataclass(frozen=True)
class Effect:
    """Post-step observables: the domain event and the transfers to execute (pulls first)."""

    event: PoolEvent
    transfers: Tuple[Transfer, ...] = ()


@dataclass(frozen=True)
class StepResult:
    """Result of a single engine step."""

    accepted: bool
    state: PoolState | None = None
    effect: Effect | None = None
    rejection: str | None = None
