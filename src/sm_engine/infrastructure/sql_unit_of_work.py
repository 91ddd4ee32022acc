"""SqlUnitOfWork — one AsyncSession and one transaction per market operation.

Every repository and the ledger share the session, so the ledger transfer
and the record changes commit or roll back together.
"""

from types import TracebackType

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.sm_bill.infrastructure.persistence import BillRepository
from src.sm_challenge.infrastructure.persistence import ChallengeRepository
from src.sm_engine.infrastructure.journal import SqlEventJournal
from src.sm_ledger.infrastructure.persistence import SqlLedger
from src.sm_order.infrastructure.persistence import OrderRepository


class SqlUnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> "SqlUnitOfWork":
        session = self._session_factory()
        await session.begin()
        self._session = session
        self.ledger = SqlLedger(session)
        self.bills = BillRepository(session)
        self.orders = OrderRepository(session)
        self.challenges = ChallengeRepository(session)
        self.journal = SqlEventJournal(session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self._session
        if session is None:
            return
        try:
            if exc_type is None:
                await session.commit()
            else:
                await session.rollback()
        finally:
            await session.close()
            self._session = None
