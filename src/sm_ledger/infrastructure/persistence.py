"""SqlLedger — LedgerProtocol over the shared ledger_accounts table.

The debit is a single conditional UPDATE ... RETURNING: 0 rows means the
sender cannot cover the amount. The credit upserts so market-owned accounts
(escrow, treasury) spring into existence on first use.

Transaction ownership: the unit of work that built this ledger owns the
session's transaction; nothing here commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.enums import LedgerEntryType
from src.sm_common.errors import InsufficientFundsError

_GET_BALANCE_SQL = text("""
    SELECT balance FROM ledger_accounts WHERE account_id = :account_id
""")

_DEBIT_SQL = text("""
    UPDATE ledger_accounts
    SET balance = balance - :amount,
        version = version + 1
    WHERE account_id = :account_id AND balance >= :amount
    RETURNING balance
""")

_CREDIT_SQL = text("""
    INSERT INTO ledger_accounts (account_id, balance)
    VALUES (:account_id, :amount)
    ON CONFLICT (account_id) DO UPDATE
        SET balance = ledger_accounts.balance + EXCLUDED.balance,
            version = ledger_accounts.version + 1
    RETURNING balance
""")

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (account_id, entry_type, amount, balance_after, counterparty)
    VALUES
        (:account_id, :entry_type, :amount, :balance_after, :counterparty)
""")


class SqlLedger:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def balance_of(self, account: str) -> int:
        result = await self._db.execute(_GET_BALANCE_SQL, {"account_id": account})
        balance = result.scalar_one_or_none()
        return int(balance) if balance is not None else 0

    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative, got {amount}")
        if amount == 0:
            return
        debit = await self._db.execute(_DEBIT_SQL, {"account_id": sender, "amount": amount})
        sender_after = debit.scalar_one_or_none()
        if sender_after is None:
            raise InsufficientFundsError(sender, amount)
        credit = await self._db.execute(_CREDIT_SQL, {"account_id": recipient, "amount": amount})
        recipient_after = credit.scalar_one()

        await self._db.execute(
            _INSERT_ENTRY_SQL,
            {
                "account_id": sender,
                "entry_type": LedgerEntryType.TRANSFER_OUT.value,
                "amount": -amount,
                "balance_after": sender_after,
                "counterparty": recipient,
            },
        )
        await self._db.execute(
            _INSERT_ENTRY_SQL,
            {
                "account_id": recipient,
                "entry_type": LedgerEntryType.TRANSFER_IN.value,
                "amount": amount,
                "balance_after": recipient_after,
                "counterparty": sender,
            },
        )
