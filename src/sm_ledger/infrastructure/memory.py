"""InMemoryLedger — ledger double with the same atomicity as the SQL adapter.

Each transfer either applies both legs or raises before touching anything.
`snapshot` / `restore` let the in-memory unit of work roll back a whole
operation.
"""

from src.sm_common.enums import LedgerEntryType
from src.sm_common.errors import InsufficientFundsError
from src.sm_ledger.domain.models import LedgerEntry


class InMemoryLedger:
    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self.entries: list[LedgerEntry] = []

    async def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"transfer amount must be non-negative, got {amount}")
        if amount == 0:
            return
        available = self._balances.get(sender, 0)
        if available < amount:
            raise InsufficientFundsError(sender, amount)
        self._balances[sender] = available - amount
        self._balances[recipient] = self._balances.get(recipient, 0) + amount
        self.entries.append(
            LedgerEntry(
                account=sender,
                entry_type=LedgerEntryType.TRANSFER_OUT,
                amount=-amount,
                balance_after=self._balances[sender],
                counterparty=recipient,
            )
        )
        self.entries.append(
            LedgerEntry(
                account=recipient,
                entry_type=LedgerEntryType.TRANSFER_IN,
                amount=amount,
                balance_after=self._balances[recipient],
                counterparty=sender,
            )
        )

    def credit(self, account: str, amount: int) -> None:
        """Seed a balance from outside the market (tests, local demos)."""
        self._balances[account] = self._balances.get(account, 0) + amount

    def snapshot(self) -> tuple[dict[str, int], int]:
        return dict(self._balances), len(self.entries)

    def restore(self, snapshot: tuple[dict[str, int], int]) -> None:
        balances, entry_count = snapshot
        self._balances = dict(balances)
        del self.entries[entry_count:]
