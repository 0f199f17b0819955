"""
Liquidity share tracking for the pool.

A ``ShareLedger`` is the set of LiquidityAccounts: address -> shares. Accounts
appear on first credit and vanish when their balance returns to zero, so an
emptied account is indistinguishable from one that never existed.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional, Tuple

from .balances import Address, Amount


class ShareLedger:
    """
    Deterministic share table mapping owner -> shares.

    Notes:
    - Share balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - The pure engine never mutates a ledger that is reachable from a
      ``PoolState``; it works on ``copy()`` and publishes the copy.
    """

    def __init__(self, balances: Optional[Mapping[Address, Amount]] = None) -> None:
        self._balances: Dict[Address, Amount] = {}
        for owner, amount in (balances or {}).items():
            self.set(owner, amount)

    def get(self, owner: Address) -> Amount:
        """Get shares held by ``owner``. Returns 0 if not found."""
        return self._balances.get(owner, 0)

    def set(self, owner: Address, amount: Amount) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise TypeError("share balance must be an int")
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(owner, None)
        else:
            self._balances[owner] = amount

    def credit(self, owner: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        self.set(owner, self.get(owner) + amount)

    def debit(self, owner: Address, amount: Amount) -> None:
        """Remove ``amount`` shares from ``owner``; never clamps."""
        if amount < 0:
            raise ValueError(f"Debit must be non-negative: {amount}")
        current = self.get(owner)
        if amount > current:
            raise ValueError(f"Insufficient shares: {owner} holds {current}, debit {amount}")
        self.set(owner, current - amount)

    def total(self) -> Amount:
        return sum(self._balances.values())

    def copy(self) -> "ShareLedger":
        return ShareLedger(self._balances)

    def items(self) -> Tuple[Tuple[Address, Amount], ...]:
        """All (owner, shares) entries, sorted by owner."""
        return tuple(sorted(self._balances.items()))

    def __iter__(self) -> Iterator[Address]:
        return iter(sorted(self._balances))

    def __contains__(self, owner: object) -> bool:
        return owner in self._balances

    def __len__(self) -> int:
        return len(self._balances)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShareLedger):
            return NotImplemented
        return self._balances == other._balances

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ShareLedger({len(self._balances)} accounts)"
