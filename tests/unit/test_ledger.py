"""Unit tests for the ledger adapters and escrow helpers."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.sm_common.enums import LedgerEntryType
from src.sm_common.errors import InsufficientBalanceError, InsufficientFundsError
from src.sm_ledger.domain.escrow import lock_into_escrow, release_from_escrow
from src.sm_ledger.infrastructure.memory import InMemoryLedger
from src.sm_ledger.infrastructure.persistence import SqlLedger


class TestInMemoryLedger:
    async def test_transfer_moves_both_legs(self) -> None:
        ledger = InMemoryLedger({"alice": 100})
        await ledger.transfer("alice", "bob", 30)
        assert await ledger.balance_of("alice") == 70
        assert await ledger.balance_of("bob") == 30

    async def test_unknown_account_has_zero_balance(self) -> None:
        assert await InMemoryLedger().balance_of("nobody") == 0

    async def test_insufficient_funds_leaves_balances(self) -> None:
        ledger = InMemoryLedger({"alice": 10})
        with pytest.raises(InsufficientFundsError):
            await ledger.transfer("alice", "bob", 11)
        assert await ledger.balance_of("alice") == 10
        assert await ledger.balance_of("bob") == 0
        assert ledger.entries == []

    async def test_zero_transfer_is_noop(self) -> None:
        ledger = InMemoryLedger()
        await ledger.transfer("ghost", "bob", 0)
        assert ledger.entries == []

    async def test_negative_transfer_rejected(self) -> None:
        ledger = InMemoryLedger({"alice": 10})
        with pytest.raises(ValueError):
            await ledger.transfer("alice", "bob", -1)

    async def test_entries_record_both_sides(self) -> None:
        ledger = InMemoryLedger({"alice": 50})
        await ledger.transfer("alice", "bob", 20)
        out, inn = ledger.entries
        assert out.entry_type == LedgerEntryType.TRANSFER_OUT
        assert out.amount == -20 and out.balance_after == 30 and out.counterparty == "bob"
        assert inn.entry_type == LedgerEntryType.TRANSFER_IN
        assert inn.amount == 20 and inn.balance_after == 20 and inn.counterparty == "alice"

    async def test_snapshot_restore(self) -> None:
        ledger = InMemoryLedger({"alice": 50})
        snap = ledger.snapshot()
        await ledger.transfer("alice", "bob", 20)
        ledger.restore(snap)
        assert await ledger.balance_of("alice") == 50
        assert await ledger.balance_of("bob") == 0
        assert ledger.entries == []


class TestEscrow:
    async def test_lock_checks_balance_first(self) -> None:
        ledger = InMemoryLedger({"alice": 5})
        with pytest.raises(InsufficientBalanceError) as exc_info:
            await lock_into_escrow(ledger, "alice", "escrow", 6)
        assert exc_info.value.code == 2001
        assert await ledger.balance_of("alice") == 5

    async def test_lock_and_release(self) -> None:
        ledger = InMemoryLedger({"alice": 100})
        await lock_into_escrow(ledger, "alice", "escrow", 60)
        assert await ledger.balance_of("escrow") == 60
        await release_from_escrow(ledger, "escrow", "bob", 25)
        assert await ledger.balance_of("escrow") == 35
        assert await ledger.balance_of("bob") == 25


def _result(value: object) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    return result


class TestSqlLedger:
    async def test_balance_of_missing_account(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await SqlLedger(db).balance_of("nobody") == 0

    async def test_transfer_debits_credits_and_journals(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(70), _result(30), MagicMock(), MagicMock()]
        await SqlLedger(db).transfer("alice", "bob", 30)
        assert db.execute.await_count == 4
        out_params = db.execute.await_args_list[2].args[1]
        in_params = db.execute.await_args_list[3].args[1]
        assert out_params["amount"] == -30 and out_params["balance_after"] == 70
        assert in_params["amount"] == 30 and in_params["balance_after"] == 30

    async def test_debit_miss_raises_insufficient_funds(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        with pytest.raises(InsufficientFundsError):
            await SqlLedger(db).transfer("alice", "bob", 30)
        db.execute.assert_awaited_once()

    async def test_zero_amount_skips_sql(self) -> None:
        db = AsyncMock()
        await SqlLedger(db).transfer("alice", "bob", 0)
        db.execute.assert_not_awaited()
