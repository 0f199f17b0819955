"""Exception types for the pool engine.

Each engine rejection has a stable string ``code`` (the value carried by
``StepResult.rejection``). ``step_or_raise()`` in ``pool/engine.py`` maps codes
back to these classes for callers that prefer exceptions.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for every pool rejection."""

    code: str = "pool_error"


class AlreadyInitialized(PoolError):
    """``initialize`` was called on a pool that already left the Uninitialized state."""

    code = "already_initialized"


class PoolNotInitialized(PoolError):
    """The pool has no live liquidity (never initialized, or fully drained)."""

    code = "pool_not_initialized"


class ZeroAmount(PoolError):
    """An input amount is zero, or rounds down to a zero output."""

    code = "zero_amount"


class InsufficientShares(PoolError):
    """The caller tried to redeem more shares than it owns."""

    code = "insufficient_shares"


class InsufficientOutputReserve(PoolError):
    """The swap output would drain the output reserve."""

    code = "insufficient_output_reserve"


class TransferFailed(PoolError):
    """An asset transfer was refused (balance, allowance, or a failing hook)."""

    code = "transfer_failed"


class CompensationFailed(TransferFailed):
    """A transfer failed and at least one completed transfer could not be undone.

    ``stranded`` lists the transfers that stayed in effect; the pool's reserves
    are reconciled to include them.
    """

    code = "compensation_failed"

    def __init__(self, message: str, stranded: tuple = ()) -> None:
        self.stranded = stranded
        super().__init__(message)


class ReentrantCall(PoolError):
    """An operation was invoked while another one on the same pool was in flight."""

    code = "reentrant_call"


class AmountOverflow(PoolError):
    """A quantity or intermediate product left the uint256 domain."""

    code = "amount_overflow"


class PoolInvariantError(PoolError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


REJECTION_ERRORS: dict[str, type[PoolError]] = {
    cls.code: cls
    for cls in (
        AlreadyInitialized,
        PoolNotInitialized,
        ZeroAmount,
        InsufficientShares,
        InsufficientOutputReserve,
        TransferFailed,
        ReentrantCall,
        AmountOverflow,
    )
}
