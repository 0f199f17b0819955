"""
In-memory ERC20-style token.

Stands in for the 0KAGE contract (local deployments mint a fixed
1,000,000-token initial supply to the deployer). The pool only ever touches
``balance_of``, ``allowance`` and ``transfer_from``/``transfer`` through the
``AssetTransfer`` capability.

Transfer hooks model arbitrary code running inside a token transfer (the
reason the pool needs a reentrancy guard). A hook runs after balances move;
if it raises, the transfer is undone and the exception propagates, like a
revert.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Tuple

from .balances import Address, Amount, AssetId, BalanceTable

TransferHook = Callable[[Address, Address, Amount], None]


class InMemoryToken:
    def __init__(
        self,
        name: str = "Zero Kage",
        symbol: AssetId = "0KAGE",
        decimals: int = 18,
        *,
        address: Address = "0x" + "0c" * 20,
    ) -> None:
        if not isinstance(decimals, int) or decimals < 0:
            raise ValueError(f"decimals must be a non-negative int: {decimals}")
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.address = address
        self._balances = BalanceTable()
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}
        self._hooks: List[TransferHook] = []

    # -- ERC20 views ---------------------------------------------------------

    @property
    def total_supply(self) -> Amount:
        return self._balances.total(self.symbol)

    def balance_of(self, owner: Address) -> Amount:
        return self._balances.get(owner, self.symbol)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    # -- ERC20 mutations -----------------------------------------------------

    def mint(self, recipient: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"mint amount must be non-negative: {amount}")
        self._balances.add(recipient, self.symbol, amount)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> bool:
        if amount < 0:
            raise ValueError(f"allowance must be non-negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> bool:
        """Move tokens owned by ``sender``. Returns False if the balance is short."""
        return self._move(sender, recipient, amount)

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> bool:
        """Move ``owner``'s tokens on behalf of ``spender``, consuming allowance."""
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            return False
        if not self._move(owner, recipient, amount, hooks=False):
            return False
        self.approve(owner, spender, allowed - amount)
        try:
            self._run_hooks(owner, recipient, amount)
        except Exception:
            self._balances.move(recipient, owner, self.symbol, amount)
            self.approve(owner, spender, allowed)
            raise
        return True

    # -- hooks ---------------------------------------------------------------

    def add_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def remove_transfer_hook(self, hook: TransferHook) -> None:
        self._hooks.remove(hook)

    def _move(self, sender: Address, recipient: Address, amount: Amount, *, hooks: bool = True) -> bool:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative: {amount}")
        if self.balance_of(sender) < amount:
            return False
        self._balances.move(sender, recipient, self.symbol, amount)
        if hooks:
            try:
                self._run_hooks(sender, recipient, amount)
            except Exception:
                self._balances.move(recipient, sender, self.symbol, amount)
                raise
        return True

    def _run_hooks(self, sender: Address, recipient: Address, amount: Amount) -> None:
        for hook in list(self._hooks):
            hook(sender, recipient, amount)

    def __repr__(self) -> str:
        return f"InMemoryToken({self.symbol}, supply={self.total_supply})"
