"""
Native-asset and token balances.

A ``BalanceTable`` maps (address, asset) -> amount. Local deployments keep the
native base asset in one; ``InMemoryToken`` stores its holdings in another.
"""

from typing import Dict, Tuple

Address = str  # 0x-prefixed hex
AssetId = str  # "ETH", "0KAGE", ...
Amount = int

NATIVE_ASSET = "ETH"


class BalanceTable:
    """Sparse (address, asset) -> amount table; balances never go negative."""

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, address: Address, asset: AssetId) -> Amount:
        return self._balances.get((address, asset), 0)

    def set(self, address: Address, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((address, asset), None)
        else:
            self._balances[(address, asset)] = amount

    def add(self, address: Address, asset: AssetId, amount: Amount) -> None:
        """Credit ``amount`` (must be non-negative) to ``address``."""
        if amount < 0:
            raise ValueError(f"Credit must be non-negative: {amount}")
        self.set(address, asset, self.get(address, asset) + amount)

    def move(self, sender: Address, recipient: Address, asset: AssetId, amount: Amount) -> None:
        """Move ``amount`` between two accounts. Raises ValueError (and changes nothing) if the sender is short."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        held = self.get(sender, asset)
        if held < amount:
            raise ValueError(f"Insufficient balance: {sender} holds {held} {asset}, needs {amount}")
        self.set(sender, asset, held - amount)
        self.add(recipient, asset, amount)

    def total(self, asset: AssetId) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
