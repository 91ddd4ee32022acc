"""Integration-test fixtures.

Requires a running PostgreSQL with migrations applied (alembic upgrade head)
and SM_INTEGRATION=1; otherwise every integration test is skipped.
"""

import uuid

import pytest_asyncio
from sqlalchemy import text

from src.sm_common.database import async_session_factory, engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_engine.infrastructure.sql_unit_of_work import SqlUnitOfWork

_SEED_SQL = text("""
    INSERT INTO ledger_accounts (account_id, balance)
    VALUES (:account_id, :balance)
    ON CONFLICT (account_id) DO UPDATE SET balance = EXCLUDED.balance
""")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def sql_engine() -> MarketEngine:  # type: ignore[misc]
    yield MarketEngine(
        uow_factory=lambda: SqlUnitOfWork(async_session_factory),
        escrow_account=f"escrow-{uuid.uuid4().hex[:8]}",
        treasury_account=f"treasury-{uuid.uuid4().hex[:8]}",
    )
    await engine.dispose()


@pytest_asyncio.fixture(loop_scope="session")
async def funded() -> dict[str, str]:
    """Fresh provider / consumer accounts with 10_000 each."""
    uid = uuid.uuid4().hex[:8]
    accounts = {"provider": f"prov-{uid}", "consumer": f"cons-{uid}"}
    async with async_session_factory() as session, session.begin():
        for account in accounts.values():
            await session.execute(_SEED_SQL, {"account_id": account, "balance": 10_000})
    return accounts
