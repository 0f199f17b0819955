"""
Local deployment: an in-memory token, a native ledger and a pool wired together.

Mirrors the local-chain deployment of the pool: a 0KAGE token with a fixed
initial supply minted to the deployer, then a pool bound to that token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..core.units import parse_units
from ..state.balances import Address, Amount, BalanceTable
from ..state.token import InMemoryToken
from .config import PoolConfig
from .pool import LiquidityPool
from .transfers import LedgerTransfers

DEFAULT_TOKEN_SUPPLY = parse_units("1000000")


@dataclass
class LocalDeployment:
    token: InMemoryToken
    native: BalanceTable
    transfers: LedgerTransfers
    pool: LiquidityPool

    def fund_base(self, owner: Address, amount: Amount) -> None:
        self.native.add(owner, self.transfers.base_asset, amount)

    def approve_pool(self, owner: Address, amount: Amount) -> None:
        self.token.approve(owner, self.pool.pool_address, amount)


def deploy_local(
    deployer: Address,
    config: Optional[PoolConfig] = None,
    *,
    token_supply: Amount = DEFAULT_TOKEN_SUPPLY,
    base_balances: Optional[Mapping[Address, Amount]] = None,
) -> LocalDeployment:
    """Deploy a token (``token_supply`` minted to ``deployer``) and an empty pool."""
    config = config if config is not None else PoolConfig()
    token = InMemoryToken(
        config.token_name,
        config.token_symbol,
        config.token_decimals,
        address=config.token_address,
    )
    token.mint(deployer, token_supply)
    native = BalanceTable()
    for owner, amount in (base_balances or {}).items():
        native.add(owner, config.base_symbol, amount)
    transfers = LedgerTransfers(token, native, config.pool_address, base_asset=config.base_symbol)
    pool = LiquidityPool(transfers, config)
    return LocalDeployment(token=token, native=native, transfers=transfers, pool=pool)
