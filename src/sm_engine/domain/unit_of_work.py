"""Unit of work — one all-or-nothing boundary per market operation.

The ledger, the three record repositories and the event journal all live
behind one unit of work so a failure anywhere rolls every one of them back.
Entering starts the transaction; leaving without an exception commits,
leaving with one rolls back and re-raises.
"""

from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import Protocol

from src.sm_bill.domain.repository import BillRepositoryProtocol
from src.sm_challenge.domain.repository import ChallengeRepositoryProtocol
from src.sm_engine.domain.events import EventJournalProtocol
from src.sm_ledger.domain.repository import LedgerProtocol
from src.sm_order.domain.repository import OrderRepositoryProtocol


class UnitOfWork(Protocol):
    ledger: LedgerProtocol
    bills: BillRepositoryProtocol
    orders: OrderRepositoryProtocol
    challenges: ChallengeRepositoryProtocol
    journal: EventJournalProtocol

    async def __aenter__(self) -> "UnitOfWork": ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]


@dataclass(frozen=True)
class OperationContext:
    """Who is calling, when, and which market-owned accounts hold value."""

    caller: str
    now: int
    escrow_account: str
    treasury_account: str
