from __future__ import annotations

import pytest

from kageswap.state import NATIVE_ASSET, BalanceTable, ShareLedger

A = "0x" + "11" * 20
B = "0x" + "22" * 20


class TestBalanceTable:
    def test_sparse_totals(self) -> None:
        t = BalanceTable()
        t.add(B, NATIVE_ASSET, 5)
        t.add(A, NATIVE_ASSET, 7)
        t.add(A, "0KAGE", 1)
        t.move(A, B, "0KAGE", 1)
        t.move(B, A, "0KAGE", 1)
        assert t.get(A, "0KAGE") == 1
        assert t.total(NATIVE_ASSET) == 12
        assert t.total("0KAGE") == 1
        t.set(A, "0KAGE", 0)
        assert t.total("0KAGE") == 0
        assert repr(t) == "BalanceTable(2 entries)"

    def test_move(self) -> None:
        t = BalanceTable()
        t.set(A, NATIVE_ASSET, 10)
        t.move(A, B, NATIVE_ASSET, 4)
        assert (t.get(A, NATIVE_ASSET), t.get(B, NATIVE_ASSET)) == (6, 4)

    def test_move_short_changes_nothing(self) -> None:
        t = BalanceTable()
        t.set(A, NATIVE_ASSET, 3)
        with pytest.raises(ValueError):
            t.move(A, B, NATIVE_ASSET, 4)
        assert (t.get(A, NATIVE_ASSET), t.get(B, NATIVE_ASSET)) == (3, 0)

    def test_negative_rejected(self) -> None:
        t = BalanceTable()
        with pytest.raises(ValueError):
            t.set(A, NATIVE_ASSET, -1)
        with pytest.raises(ValueError):
            t.add(A, NATIVE_ASSET, -1)
        with pytest.raises(ValueError):
            t.move(A, B, NATIVE_ASSET, -1)
        assert t.get(A, NATIVE_ASSET) == 0


class TestShareLedger:
    def test_credit_debit(self) -> None:
        ledger = ShareLedger()
        ledger.credit(A, 10)
        ledger.debit(A, 4)
        assert ledger.get(A) == 6
        assert ledger.total() == 6

    def test_emptied_account_disappears(self) -> None:
        ledger = ShareLedger({A: 3})
        ledger.debit(A, 3)
        assert A not in ledger
        assert len(ledger) == 0
        assert ledger == ShareLedger()

    def test_debit_never_clamps(self) -> None:
        ledger = ShareLedger({A: 3})
        with pytest.raises(ValueError):
            ledger.debit(A, 4)
        assert ledger.get(A) == 3

    def test_copy_is_independent(self) -> None:
        ledger = ShareLedger({A: 3})
        clone = ledger.copy()
        clone.credit(B, 1)
        assert B not in ledger
        assert clone != ledger

    def test_items_sorted(self) -> None:
        ledger = ShareLedger({B: 2, A: 1})
        assert ledger.items() == ((A, 1), (B, 2))
        assert list(ledger) == [A, B]

    def test_bool_rejected(self) -> None:
        with pytest.raises(TypeError):
            ShareLedger({A: True})

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(ShareLedger())
