"""
Core pool algorithms
"""

from .cpmm import (
    DEFAULT_FEE_DENOMINATOR,
    DEFAULT_FEE_NUMERATOR,
    compute_deposit,
    compute_withdraw,
    initial_shares,
    swap_exact_in,
    validate_fee,
)
from .errors import (
    AlreadyInitialized,
    AmountOverflow,
    CompensationFailed,
    InsufficientOutputReserve,
    InsufficientShares,
    PoolError,
    PoolInvariantError,
    PoolNotInitialized,
    ReentrantCall,
    TransferFailed,
    ZeroAmount,
)
from .math import MAX_UINT256, ceil_div, floor_div, isqrt
from .units import format_units, parse_units

__all__ = [
    "DEFAULT_FEE_DENOMINATOR",
    "DEFAULT_FEE_NUMERATOR",
    "compute_deposit",
    "compute_withdraw",
    "initial_shares",
    "swap_exact_in",
    "validate_fee",
    "AlreadyInitialized",
    "AmountOverflow",
    "CompensationFailed",
    "InsufficientOutputReserve",
    "InsufficientShares",
    "PoolError",
    "PoolInvariantError",
    "PoolNotInitialized",
    "ReentrantCall",
    "TransferFailed",
    "ZeroAmount",
    "MAX_UINT256",
    "ceil_div",
    "floor_div",
    "isqrt",
    "format_units",
    "parse_units",
]
