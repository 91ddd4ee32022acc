"""Ledger Protocol — the only path by which market code moves value.

The ledger itself is an external collaborator; the market needs exactly two
capabilities from it. Implementations must make `transfer` all-or-nothing and
must take part in the caller's unit of work.
"""

from typing import Protocol


class LedgerProtocol(Protocol):
    async def balance_of(self, account: str) -> int: ...

    async def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Move `amount` from sender to recipient.

        Raises InsufficientFundsError if the sender cannot cover it.
        """
        ...
