"""Shared test fixtures."""

import os
from collections.abc import Callable

# Settings read the environment at import time; set test values first.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "0")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.sm_common.clock import ManualClock
from src.sm_engine.application.service import get_market_engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_engine.infrastructure.memory import InMemoryMarketStore, InMemoryUnitOfWork
from src.sm_gateway.auth.jwt_handler import create_access_token
from src.sm_ledger.infrastructure.memory import InMemoryLedger

PROVIDER = "provider-1"
CONSUMER = "consumer-1"
STRANGER = "stranger-1"
ESCROW = "market-escrow"
TREASURY = "market-treasury"
START_BALANCE = 10_000


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger({PROVIDER: START_BALANCE, CONSUMER: START_BALANCE, STRANGER: START_BALANCE})


@pytest.fixture
def store(ledger: InMemoryLedger) -> InMemoryMarketStore:
    return InMemoryMarketStore(ledger)


@pytest.fixture
def engine(store: InMemoryMarketStore, clock: ManualClock) -> MarketEngine:
    return MarketEngine(
        uow_factory=lambda: InMemoryUnitOfWork(store),
        clock=clock,
        escrow_account=ESCROW,
        treasury_account=TREASURY,
    )


@pytest.fixture
async def client(engine: MarketEngine) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints against the in-memory engine."""
    app.dependency_overrides[get_market_engine] = lambda: engine
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[[str], dict[str, str]]:
    """Factory: Authorization header carrying a token for `account`."""

    def _headers(account: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(account)}"}

    return _headers
