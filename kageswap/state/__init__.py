"""
Ledgers backing the KageSwap pool
"""

from .balances import NATIVE_ASSET, BalanceTable
from .shares import ShareLedger
from .token import InMemoryToken

__all__ = [
    "NATIVE_ASSET",
    "BalanceTable",
    "ShareLedger",
    "InMemoryToken",
]
