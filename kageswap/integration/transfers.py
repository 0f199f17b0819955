"""
Asset transfer capability consumed by the pool.

The pool never owns a token implementation. It moves value through an
``AssetTransfer`` object bound to the pool's own address:

- ``pull_token(owner, amount)``: ``transferFrom(owner -> pool)``, needs allowance,
- ``push_token(recipient, amount)``: ``transfer(pool -> recipient)``,
- ``pull_base(owner, amount)``: accept base value attached to the call,
- ``push_base(recipient, amount)``: send base value out.

Each returns True on success and False on refusal. Exceptions raised from
inside a transfer (e.g. by a token hook) are failures too; the pool rolls the
whole operation back in both cases.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from ..state.balances import NATIVE_ASSET, Address, Amount, BalanceTable
from ..state.token import InMemoryToken

logger = logging.getLogger(__name__)


@runtime_checkable
class AssetTransfer(Protocol):
    pool_address: Address

    def pull_token(self, owner: Address, amount: Amount) -> bool: ...

    def push_token(self, recipient: Address, amount: Amount) -> bool: ...

    def balance_of_token(self, address: Address) -> Amount: ...

    def pull_base(self, owner: Address, amount: Amount) -> bool: ...

    def push_base(self, recipient: Address, amount: Amount) -> bool: ...


class LedgerTransfers:
    """
    ``AssetTransfer`` over in-memory ledgers: an ``InMemoryToken`` for 0KAGE and
    a ``BalanceTable`` for the native base asset.
    """

    def __init__(
        self,
        token: InMemoryToken,
        native: BalanceTable,
        pool_address: Address,
        *,
        base_asset: str = NATIVE_ASSET,
    ) -> None:
        self.token = token
        self.native = native
        self.pool_address = pool_address
        self.base_asset = base_asset

    def pull_token(self, owner: Address, amount: Amount) -> bool:
        ok = self.token.transfer_from(self.pool_address, owner, self.pool_address, amount)
        if not ok:
            logger.debug(
                "token pull refused: owner=%s amount=%d balance=%d allowance=%d",
                owner,
                amount,
                self.token.balance_of(owner),
                self.token.allowance(owner, self.pool_address),
            )
        return ok

    def push_token(self, recipient: Address, amount: Amount) -> bool:
        return self.token.transfer(self.pool_address, recipient, amount)

    def balance_of_token(self, address: Address) -> Amount:
        return self.token.balance_of(address)

    def balance_of_base(self, address: Address) -> Amount:
        return self.native.get(address, self.base_asset)

    def pull_base(self, owner: Address, amount: Amount) -> bool:
        return self._move_base(owner, self.pool_address, amount)

    def push_base(self, recipient: Address, amount: Amount) -> bool:
        return self._move_base(self.pool_address, recipient, amount)

    def _move_base(self, sender: Address, recipient: Address, amount: Amount) -> bool:
        if self.native.get(sender, self.base_asset) < amount:
            logger.debug("base transfer refused: sender=%s amount=%d", sender, amount)
            return False
        self.native.move(sender, recipient, self.base_asset, amount)
        return True
