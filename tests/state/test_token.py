from __future__ import annotations

import pytest

from kageswap.state import InMemoryToken

OWNER = "0x" + "11" * 20
SPENDER = "0x" + "22" * 20
OTHER = "0x" + "33" * 20


def _token(supply: int = 1_000) -> InMemoryToken:
    t = InMemoryToken()
    t.mint(OWNER, supply)
    return t


def test_metadata_defaults() -> None:
    t = InMemoryToken()
    assert (t.name, t.symbol, t.decimals) == ("Zero Kage", "0KAGE", 18)
    assert t.total_supply == 0


def test_transfer() -> None:
    t = _token()
    assert t.transfer(OWNER, OTHER, 400)
    assert (t.balance_of(OWNER), t.balance_of(OTHER)) == (600, 400)
    assert t.total_supply == 1_000


def test_transfer_short_returns_false() -> None:
    t = _token(10)
    assert not t.transfer(OWNER, OTHER, 11)
    assert t.balance_of(OWNER) == 10


def test_transfer_from_consumes_allowance() -> None:
    t = _token()
    t.approve(OWNER, SPENDER, 300)
    assert t.transfer_from(SPENDER, OWNER, OTHER, 200)
    assert t.allowance(OWNER, SPENDER) == 100
    assert t.balance_of(OTHER) == 200
    assert not t.transfer_from(SPENDER, OWNER, OTHER, 101)
    assert t.balance_of(OTHER) == 200


def test_transfer_from_short_balance_keeps_allowance() -> None:
    t = _token(10)
    t.approve(OWNER, SPENDER, 100)
    assert not t.transfer_from(SPENDER, OWNER, OTHER, 50)
    assert t.allowance(OWNER, SPENDER) == 100


def test_hooks_see_transfers() -> None:
    t = _token()
    seen: list[tuple[str, str, int]] = []
    t.add_transfer_hook(lambda s, r, a: seen.append((s, r, a)))
    t.transfer(OWNER, OTHER, 5)
    t.approve(OWNER, SPENDER, 5)
    t.transfer_from(SPENDER, OWNER, OTHER, 5)
    assert seen == [(OWNER, OTHER, 5), (OWNER, OTHER, 5)]


def test_raising_hook_reverts_transfer() -> None:
    t = _token()
    t.approve(OWNER, SPENDER, 50)

    def hook(sender: str, recipient: str, amount: int) -> None:
        raise RuntimeError("revert")

    t.add_transfer_hook(hook)
    with pytest.raises(RuntimeError):
        t.transfer(OWNER, OTHER, 5)
    with pytest.raises(RuntimeError):
        t.transfer_from(SPENDER, OWNER, OTHER, 5)
    assert t.balance_of(OWNER) == 1_000
    assert t.balance_of(OTHER) == 0
    assert t.allowance(OWNER, SPENDER) == 50

    t.remove_transfer_hook(hook)
    assert t.transfer(OWNER, OTHER, 5)
