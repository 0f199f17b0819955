"""Failure atomicity and reentrancy for LiquidityPool.

A failed transfer (refused or raising) must leave reserves, shares, the share
ledger and every external balance exactly as before, with no event. When a
completed transfer cannot be undone, the reserves must still match what the
pool holds.
"""

from __future__ import annotations

import logging
import threading

import pytest

from kageswap.core.errors import CompensationFailed, ReentrantCall, TransferFailed
from kageswap.core.pool import Asset, Direction, Transfer, state_to_dict
from kageswap.integration import LiquidityPool, LocalDeployment, PoolConfig, deploy_local
from kageswap.integration.transfers import AssetTransfer, LedgerTransfers

DEPLOYER = "0x" + "de" * 20
TRADER = "0x" + "7a" * 20

ETH = 10**18


def _seeded() -> LocalDeployment:
    d = deploy_local(DEPLOYER, base_balances={DEPLOYER: 100 * ETH, TRADER: 10 * ETH})
    d.token.transfer(DEPLOYER, TRADER, 100 * ETH)
    d.approve_pool(DEPLOYER, 100 * ETH)
    d.pool.initialize(DEPLOYER, 100 * ETH, 10 * ETH)
    return d


def _balances(d: LocalDeployment) -> tuple:
    holders = (DEPLOYER, TRADER, d.pool.pool_address)
    return (
        {a: d.native.get(a, "ETH") for a in holders},
        {a: d.token.balance_of(a) for a in holders},
        d.token.allowance(TRADER, d.pool.pool_address),
    )


def _holdings(d: LocalDeployment) -> tuple:
    """What the pool address actually holds, as (base, token)."""
    pool = d.pool.pool_address
    return d.native.get(pool, "ETH"), d.token.balance_of(pool)


class FlakyTransfers:
    """``AssetTransfer`` that refuses the named operations and delegates the rest."""

    def __init__(self, inner: LedgerTransfers, refuse: set[str]) -> None:
        self.inner = inner
        self.refuse = refuse
        self.pool_address = inner.pool_address

    def _call(self, name: str, who: str, amount: int) -> bool:
        if name in self.refuse:
            return False
        return getattr(self.inner, name)(who, amount)

    def pull_token(self, owner, amount):
        return self._call("pull_token", owner, amount)

    def push_token(self, recipient, amount):
        return self._call("push_token", recipient, amount)

    def balance_of_token(self, address):
        return self.inner.balance_of_token(address)

    def pull_base(self, owner, amount):
        return self._call("pull_base", owner, amount)

    def push_base(self, recipient, amount):
        return self._call("push_base", recipient, amount)


def test_flaky_transfers_satisfy_protocol():
    assert isinstance(FlakyTransfers(_seeded().transfers, set()), AssetTransfer)


class TestRollback:
    def test_deposit_without_allowance_refunds_base(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        balances_before = _balances(d)
        events_before = d.pool.events

        with pytest.raises(TransferFailed):
            d.pool.deposit(TRADER, ETH)

        assert state_to_dict(d.pool.state) == state_before
        assert _balances(d) == balances_before
        assert d.pool.events == events_before

    def test_swap_token_without_allowance(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        balances_before = _balances(d)
        with pytest.raises(TransferFailed):
            d.pool.swap_token_for_base(TRADER, ETH)
        assert state_to_dict(d.pool.state) == state_before
        assert _balances(d) == balances_before

    def test_swap_with_short_base_balance(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        with pytest.raises(TransferFailed):
            d.pool.swap_base_for_token(TRADER, 11 * ETH)
        assert state_to_dict(d.pool.state) == state_before
        assert d.native.get(TRADER, "ETH") == 10 * ETH

    def test_initialize_without_allowance(self):
        d = deploy_local(DEPLOYER, base_balances={DEPLOYER: 100 * ETH})
        with pytest.raises(TransferFailed):
            d.pool.initialize(DEPLOYER, 100 * ETH, 10 * ETH)
        assert not d.pool.initialized
        assert d.native.get(DEPLOYER, "ETH") == 100 * ETH
        assert d.pool.events == ()

    def test_raising_hook_reverts_swap(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        balances_before = _balances(d)

        def hook(sender, recipient, amount):
            if recipient == TRADER:
                raise RuntimeError("recipient rejects tokens")

        d.token.add_transfer_hook(hook)
        with pytest.raises(RuntimeError):
            d.pool.swap_base_for_token(TRADER, ETH)

        assert state_to_dict(d.pool.state) == state_before
        assert _balances(d) == balances_before

    def test_rolled_back_withdraw_restores_shares(self, caplog):
        d = _seeded()
        flaky = FlakyTransfers(d.transfers, {"push_token"})
        pool = LiquidityPool(flaky, d.pool.config, state=d.pool.state)
        shares = pool.shares_of(DEPLOYER)
        base_before = d.native.get(DEPLOYER, "ETH")

        with caplog.at_level(logging.WARNING, logger="kageswap.integration.pool"):
            with pytest.raises(TransferFailed):
                pool.withdraw(DEPLOYER, shares // 2)

        assert pool.shares_of(DEPLOYER) == shares
        assert pool.total_shares == shares
        assert d.native.get(DEPLOYER, "ETH") == base_before
        assert any("rolled back" in r.getMessage() for r in caplog.records)

    def test_failed_compensation_reconciles_reserves(self, caplog):
        d = _seeded()
        flaky = FlakyTransfers(d.transfers, {"push_base", "pull_token"})
        pool = LiquidityPool(flaky, d.pool.config, state=d.pool.state)
        shares = pool.shares_of(DEPLOYER)
        quote = pool.quote_withdraw(shares // 2)
        token_before = d.token.balance_of(DEPLOYER)

        with caplog.at_level(logging.WARNING, logger="kageswap.integration.pool"):
            with pytest.raises(CompensationFailed) as info:
                pool.withdraw(DEPLOYER, shares // 2)

        assert info.value.code == "compensation_failed"
        assert info.value.stranded == (Transfer(Direction.PUSH, Asset.TOKEN, DEPLOYER, quote.token_out),)
        assert pool.shares_of(DEPLOYER) == shares
        assert d.token.balance_of(DEPLOYER) == token_before + quote.token_out
        assert (pool.reserve_base, pool.reserve_token) == _holdings(d)
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert any("refused" in m for m in errors)
        assert any("reserves reconciled" in m for m in errors)

    def test_hook_spending_withdrawn_base_leaves_reserves_backed(self):
        d = _seeded()
        sink = "0x" + "5c" * 20
        state_before = state_to_dict(d.pool.state)

        def hook(sender, recipient, amount):
            if sender == d.pool.pool_address and recipient == DEPLOYER:
                d.native.move(DEPLOYER, sink, "ETH", d.native.get(DEPLOYER, "ETH"))
                raise RuntimeError("recipient rejects tokens")

        d.token.add_transfer_hook(hook)
        with pytest.raises(RuntimeError):
            d.pool.withdraw(DEPLOYER, d.pool.shares_of(DEPLOYER) // 2)

        assert state_to_dict(d.pool.state) == state_before
        assert (d.pool.reserve_base, d.pool.reserve_token) == _holdings(d)

    def test_compensation_error_from_hook_is_not_reconciled(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        foreign = CompensationFailed("other pool", (Transfer(Direction.PUSH, Asset.BASE, TRADER, ETH),))

        def hook(sender, recipient, amount):
            if recipient == TRADER:
                raise foreign

        d.token.add_transfer_hook(hook)
        with pytest.raises(CompensationFailed) as info:
            d.pool.swap_base_for_token(TRADER, ETH)

        assert info.value is foreign
        assert state_to_dict(d.pool.state) == state_before
        assert (d.pool.reserve_base, d.pool.reserve_token) == _holdings(d)

    def test_pool_usable_after_rollback(self):
        d = _seeded()
        with pytest.raises(TransferFailed):
            d.pool.deposit(TRADER, ETH)
        ev = d.pool.swap_base_for_token(TRADER, ETH)
        assert ev.token_out > 0


class TestReentrancy:
    def test_nested_call_rejected_outer_succeeds(self):
        d = _seeded()
        caught = []

        def hook(sender, recipient, amount):
            try:
                d.pool.swap_base_for_token(TRADER, ETH)
            except ReentrantCall as exc:
                caught.append(exc)

        d.token.add_transfer_hook(hook)
        ev = d.pool.swap_base_for_token(TRADER, ETH)
        assert ev.token_out > 0
        assert len(caught) == 1
        assert len(d.pool.events) == 2

    def test_propagated_reentrant_call_rolls_back(self):
        d = _seeded()
        state_before = state_to_dict(d.pool.state)
        balances_before = _balances(d)

        def hook(sender, recipient, amount):
            d.pool.withdraw(DEPLOYER, 1)

        d.token.add_transfer_hook(hook)
        with pytest.raises(ReentrantCall):
            d.pool.swap_base_for_token(TRADER, ETH)
        d.token.remove_transfer_hook(hook)

        assert state_to_dict(d.pool.state) == state_before
        assert _balances(d) == balances_before

    def test_hook_sees_committed_state(self):
        d = _seeded()
        seen = []
        d.token.add_transfer_hook(lambda s, r, a: seen.append((d.pool.reserve_base, d.pool.reserve_token)))
        ev = d.pool.swap_base_for_token(TRADER, ETH)
        assert seen == [(11 * ETH, 100 * ETH - ev.token_out)]

    def test_flag_cleared_after_failure(self):
        d = _seeded()
        with pytest.raises(TransferFailed):
            d.pool.deposit(TRADER, ETH)
        d.pool.swap_base_for_token(TRADER, ETH)


class TestConcurrentReads:
    def test_other_threads_see_pre_state_while_in_flight(self):
        d = _seeded()
        entered, release = threading.Event(), threading.Event()
        quote_before = d.pool.quote_base_for_token(ETH)
        failures = []

        def hook(sender, recipient, amount):
            if recipient == TRADER:
                entered.set()
                release.wait(5)
                raise RuntimeError("recipient rejects tokens")

        def run():
            try:
                d.pool.swap_base_for_token(TRADER, ETH)
            except RuntimeError as exc:
                failures.append(exc)

        d.token.add_transfer_hook(hook)
        worker = threading.Thread(target=run)
        worker.start()
        try:
            assert entered.wait(5)
            seen = (d.pool.reserve_base, d.pool.reserve_token, d.pool.quote_base_for_token(ETH))
        finally:
            release.set()
            worker.join(5)

        assert seen == (10 * ETH, 100 * ETH, quote_before)
        assert len(failures) == 1
        assert (d.pool.reserve_base, d.pool.reserve_token) == (10 * ETH, 100 * ETH)
        assert len(d.pool.events) == 1


class TestConstruction:
    def test_transfers_bound_to_other_address(self):
        d = _seeded()
        other = LedgerTransfers(d.token, d.native, "0x" + "99" * 20)
        with pytest.raises(ValueError):
            LiquidityPool(other, d.pool.config)

    def test_state_fee_mismatch(self):
        d = _seeded()
        with pytest.raises(ValueError):
            LiquidityPool(d.transfers, PoolConfig(fee_numerator=999), state=d.pool.state)
