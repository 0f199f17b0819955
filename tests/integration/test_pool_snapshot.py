from __future__ import annotations

import json

import pytest

from kageswap.core.errors import PoolInvariantError
from kageswap.integration import LiquidityPool, deploy_local

DEPLOYER = "0x" + "de" * 20
TRADER = "0x" + "7a" * 20

ETH = 10**18


def _busy_pool():
    d = deploy_local(DEPLOYER, base_balances={DEPLOYER: 100 * ETH, TRADER: 10 * ETH})
    d.approve_pool(DEPLOYER, 200 * ETH)
    d.pool.initialize(DEPLOYER, 100 * ETH, 10 * ETH)
    d.pool.swap_base_for_token(TRADER, ETH)
    d.pool.deposit(DEPLOYER, 2 * ETH)
    return d


def test_snapshot_is_json_roundtrippable() -> None:
    d = _busy_pool()
    snap = json.loads(json.dumps(d.pool.snapshot()))
    restored = LiquidityPool.from_snapshot(snap, d.transfers)
    assert restored.state == d.pool.state
    assert restored.config == d.pool.config
    assert restored.events == ()


def test_restored_pool_prices_identically() -> None:
    d = _busy_pool()
    restored = LiquidityPool.from_snapshot(d.pool.snapshot(), d.transfers)
    assert restored.quote_base_for_token(ETH) == d.pool.quote_base_for_token(ETH)
    assert restored.quote_withdraw(1_000) == d.pool.quote_withdraw(1_000)


def test_restored_pool_keeps_trading() -> None:
    d = _busy_pool()
    restored = LiquidityPool.from_snapshot(d.pool.snapshot(), d.transfers)
    ev = restored.swap_base_for_token(TRADER, ETH)
    assert ev.token_out > 0
    assert d.transfers.balance_of_base(restored.pool_address) == restored.reserve_base


def test_snapshot_unknown_config_key() -> None:
    d = _busy_pool()
    snap = d.pool.snapshot()
    snap["config"]["fee_bps"] = 30
    with pytest.raises(ValueError):
        LiquidityPool.from_snapshot(snap, d.transfers)


def test_snapshot_with_inconsistent_ledger_rejected() -> None:
    d = _busy_pool()
    snap = d.pool.snapshot()
    snap["state"]["accounts"] = [[DEPLOYER, 5], [TRADER, 10**30]]
    with pytest.raises(PoolInvariantError):
        LiquidityPool.from_snapshot(snap, d.transfers)


def test_snapshot_with_float_shares_rejected() -> None:
    d = _busy_pool()
    snap = d.pool.snapshot()
    owner, shares = snap["state"]["accounts"][0]
    snap["state"]["accounts"][0] = [owner, shares + 0.9]
    with pytest.raises(TypeError):
        LiquidityPool.from_snapshot(snap, d.transfers)
