"""
Stateful ETH/0KAGE liquidity pool.

``LiquidityPool`` is the shell around the pure engine in ``kageswap.core.pool``:

1. ``step_or_raise`` validates the operation and computes the post-state and
   the transfers it implies (nothing is mutated on rejection),
2. the post-state becomes the operating thread's view before any external
   transfer runs, so hooks observe finalized bookkeeping,
3. transfers run in order (pulls before pushes),
4. on any transfer failure the completed transfers are compensated in reverse
   order and the pre-state is restored, then the error propagates. Transfers
   that cannot be undone are folded into the reserves and reported with
   ``CompensationFailed``,
5. otherwise the post-state is published to every thread, the domain event is
   recorded, and subscribers are notified once the pool is released.

Operations are serialized by a re-entrant lock plus an in-flight flag: another
thread blocks until the current operation finishes, while a call made from
inside a transfer (e.g. a token hook) fails with ``ReentrantCall``. Queries
from other threads never see a post-state that might still be rolled back.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from dataclasses import asdict, replace
from typing import Any, Callable, Deque, Iterable, List, Mapping, Optional, Tuple

from ..core.cpmm import DepositQuote, WithdrawQuote
from ..core.errors import CompensationFailed, PoolError, ReentrantCall, TransferFailed
from ..core.pool import (
    Action,
    ActionParams,
    Asset,
    Direction,
    LiquidityAdded,
    LiquidityRemoved,
    PoolEvent,
    PoolInitialized,
    PoolState,
    SwapBaseForToken,
    SwapTokenForBase,
    Transfer,
    initial_state,
    quote_deposit,
    quote_swap,
    quote_withdraw,
    state_from_dict,
    state_to_dict,
    step_or_raise,
)
from .config import PoolConfig, PoolConfigError
from .transfers import AssetTransfer

logger = logging.getLogger(__name__)

EventCallback = Callable[[PoolEvent], None]

DEFAULT_EVENT_LOG_SIZE = 10_000


class LiquidityPool:
    """A single constant-product pool between the native base asset and 0KAGE."""

    def __init__(
        self,
        transfers: AssetTransfer,
        config: Optional[PoolConfig] = None,
        *,
        state: Optional[PoolState] = None,
        event_log_size: int = DEFAULT_EVENT_LOG_SIZE,
    ) -> None:
        self.config = config if config is not None else PoolConfig()
        if transfers.pool_address != self.config.pool_address:
            raise PoolConfigError(
                f"transfers bound to {transfers.pool_address}, pool is {self.config.pool_address}"
            )
        if state is None:
            state = initial_state(self.config.fee_numerator, self.config.fee_denominator)
        elif (state.fee_numerator, state.fee_denominator) != self.config.fee_rate:
            raise PoolConfigError(
                f"state fee {state.fee_numerator}/{state.fee_denominator} "
                f"does not match config fee {self.config.fee_numerator}/{self.config.fee_denominator}"
            )
        if event_log_size < 1:
            raise ValueError(f"event_log_size must be positive: {event_log_size}")
        self._transfers = transfers
        self._state = state
        # Post-state of the in-flight operation, visible only to its own thread.
        self._pending: Optional[PoolState] = None
        self._owner: Optional[int] = None
        self._lock = threading.RLock()
        self._in_flight = False
        self._events: Deque[PoolEvent] = deque(maxlen=event_log_size)
        self._subscribers: List[EventCallback] = []

    # -- queries ---------------------------------------------------------------

    def _view(self) -> PoolState:
        pending = self._pending
        if pending is not None and self._owner == threading.get_ident():
            return pending
        return self._state

    @property
    def state(self) -> PoolState:
        return self._view()

    @property
    def reserve_base(self) -> int:
        return self._view().reserve_base

    @property
    def reserve_token(self) -> int:
        return self._view().reserve_token

    @property
    def total_shares(self) -> int:
        return self._view().total_shares

    def shares_of(self, owner: str) -> int:
        return self._view().shares_of(owner)

    @property
    def fee_rate(self) -> Tuple[int, int]:
        s = self._view()
        return s.fee_numerator, s.fee_denominator

    @property
    def initialized(self) -> bool:
        return self._view().initialized

    @property
    def pool_address(self) -> str:
        return self.config.pool_address

    @property
    def token_address(self) -> str:
        return self.config.token_address

    @property
    def events(self) -> Tuple[PoolEvent, ...]:
        """The most recent committed events, oldest first."""
        with self._lock:
            return tuple(self._events)

    # -- quotes ----------------------------------------------------------------

    def quote_base_for_token(self, base_in: int) -> int:
        """Token output a ``swap_base_for_token(base_in)`` would produce right now."""
        return quote_swap(self._view(), Asset.BASE, base_in).amount_out

    def quote_token_for_base(self, token_in: int) -> int:
        return quote_swap(self._view(), Asset.TOKEN, token_in).amount_out

    def quote_deposit(self, base_in: int) -> DepositQuote:
        return quote_deposit(self._view(), base_in)

    def quote_withdraw(self, shares: int) -> WithdrawQuote:
        return quote_withdraw(self._view(), shares)

    # -- operations --------------------------------------------------------------

    def initialize(self, caller: str, token_amount: int, value: int) -> PoolInitialized:
        """Seed the pool with ``value`` base and ``token_amount`` 0KAGE (needs allowance)."""
        event = self._execute(ActionParams(Action.INITIALIZE, caller, amount=token_amount, value=value))
        assert isinstance(event, PoolInitialized)
        return event

    def swap_base_for_token(self, caller: str, value: int) -> SwapBaseForToken:
        event = self._execute(ActionParams(Action.SWAP_BASE_FOR_TOKEN, caller, value=value))
        assert isinstance(event, SwapBaseForToken)
        return event

    def swap_token_for_base(self, caller: str, token_amount: int) -> SwapTokenForBase:
        event = self._execute(ActionParams(Action.SWAP_TOKEN_FOR_BASE, caller, amount=token_amount))
        assert isinstance(event, SwapTokenForBase)
        return event

    def deposit(self, caller: str, value: int) -> LiquidityAdded:
        """Add ``value`` base plus the proportional 0KAGE amount (rounded up)."""
        event = self._execute(ActionParams(Action.DEPOSIT, caller, value=value))
        assert isinstance(event, LiquidityAdded)
        return event

    def withdraw(self, caller: str, shares: int) -> LiquidityRemoved:
        event = self._execute(ActionParams(Action.WITHDRAW, caller, amount=shares))
        assert isinstance(event, LiquidityRemoved)
        return event

    # -- events ----------------------------------------------------------------

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        """Register ``callback`` for every committed event; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- persistence -------------------------------------------------------------

    def snapshot(self) -> dict[str, Any]:
        """Plain-data snapshot of config and state (events are not included)."""
        with self._lock:
            return {"config": asdict(self.config), "state": state_to_dict(self._view())}

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any], transfers: AssetTransfer) -> "LiquidityPool":
        config = PoolConfig.from_mapping(snapshot["config"])
        return cls(transfers, config, state=state_from_dict(snapshot["state"]))

    # -- internals ---------------------------------------------------------------

    def _execute(self, params: ActionParams) -> PoolEvent:
        with self._lock:
            if self._in_flight:
                logger.warning("reentrant %s by %s rejected", params.action.value, params.caller)
                raise ReentrantCall(f"{params.action.value} called while another operation is in flight")
            self._in_flight = True
            try:
                event = self._commit(params)
            finally:
                self._in_flight = False
            self._events.append(event)
        self._notify(event)
        return event

    def _commit(self, params: ActionParams) -> PoolEvent:
        pre = self._state
        try:
            result = step_or_raise(pre, params)
        except PoolError as exc:
            logger.info("%s by %s rejected: %s", params.action.value, params.caller, exc.code)
            raise
        assert result.state is not None and result.effect is not None

        self._pending = result.state
        self._owner = threading.get_ident()
        done: List[Transfer] = []
        try:
            self._run_transfers(result.effect.transfers, done)
        except Exception as exc:
            stranded = self._compensate(done)
            if not stranded:
                logger.warning("%s by %s rolled back", params.action.value, params.caller, exc_info=True)
                raise
            self._state = _reconcile(pre, stranded)
            logger.error(
                "%s by %s left %d transfer(s) in effect: reserves reconciled to (%d, %d)",
                params.action.value,
                params.caller,
                len(stranded),
                self._state.reserve_base,
                self._state.reserve_token,
            )
            raise CompensationFailed(
                f"{exc}; {len(stranded)} completed transfer(s) could not be undone",
                tuple(stranded),
            ) from exc
        else:
            self._state = result.state
        finally:
            self._pending = None
            self._owner = None

        event = result.effect.event
        logger.info(
            "%s committed: reserves=(%d, %d) shares=%d",
            event.name,
            self._state.reserve_base,
            self._state.reserve_token,
            self._state.total_shares,
        )
        return event

    def _run_transfers(self, transfers: Tuple[Transfer, ...], done: List[Transfer]) -> None:
        """Perform ``transfers`` in order, appending each completed one to ``done``."""
        for t in transfers:
            if not self._perform(t):
                raise TransferFailed(
                    f"{t.direction.value} of {t.amount} {t.asset.value} with {t.counterparty} refused"
                )
            done.append(t)

    def _perform(self, t: Transfer) -> bool:
        if t.amount == 0:
            return True
        x = self._transfers
        if t.asset is Asset.BASE:
            move = x.pull_base if t.direction is Direction.PULL else x.push_base
        else:
            move = x.pull_token if t.direction is Direction.PULL else x.push_token
        return move(t.counterparty, t.amount)

    def _compensate(self, done: List[Transfer]) -> List[Transfer]:
        """Undo ``done`` in reverse; return the transfers that stayed in effect."""
        stranded: List[Transfer] = []
        for t in reversed(done):
            inverse = Direction.PUSH if t.direction is Direction.PULL else Direction.PULL
            undo = Transfer(inverse, t.asset, t.counterparty, t.amount)
            try:
                ok = self._perform(undo)
            except Exception:
                logger.exception("compensating %s of %d %s with %s raised",
                                 inverse.value, t.amount, t.asset.value, t.counterparty)
                ok = False
            else:
                if not ok:
                    logger.error("compensating %s of %d %s with %s refused",
                                 inverse.value, t.amount, t.asset.value, t.counterparty)
            if not ok:
                stranded.append(t)
        return stranded

    def _notify(self, event: PoolEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("subscriber %r failed on %s", callback, event.name)


def _reconcile(pre: PoolState, stranded: Iterable[Transfer]) -> PoolState:
    """``pre`` with reserves moved by the transfers that could not be undone."""
    base, token = pre.reserve_base, pre.reserve_token
    for t in stranded:
        delta = t.amount if t.direction is Direction.PULL else -t.amount
        if t.asset is Asset.BASE:
            base += delta
        else:
            token += delta
    return replace(pre, reserve_base=base, reserve_token=token)
