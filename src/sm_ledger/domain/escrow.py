"""Escrow glue — lock caller funds into the escrow account and release them.

The balance is checked up front so the caller sees InsufficientBalanceError
with the amounts involved rather than the ledger's bare transfer failure.
"""

from src.sm_common.errors import InsufficientBalanceError
from src.sm_ledger.domain.repository import LedgerProtocol


async def lock_into_escrow(
    ledger: LedgerProtocol, account: str, escrow_account: str, amount: int
) -> None:
    available = await ledger.balance_of(account)
    if available < amount:
        raise InsufficientBalanceError(amount, available)
    await ledger.transfer(account, escrow_account, amount)


async def release_from_escrow(
    ledger: LedgerProtocol, escrow_account: str, account: str, amount: int
) -> None:
    await ledger.transfer(escrow_account, account, amount)
