"""Domain models for sm_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass


@dataclass
class LedgerEntry:
    account: str
    entry_type: str          # LedgerEntryType value
    amount: int              # positive=income negative=expense
    balance_after: int
    counterparty: str
