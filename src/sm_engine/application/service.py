# src/sm_engine/application/service.py
from config.settings import settings
from src.sm_common.database import async_session_factory
from src.sm_engine.engine.engine import MarketEngine
from src.sm_engine.infrastructure.sql_unit_of_work import SqlUnitOfWork

_engine: MarketEngine | None = None


def get_market_engine() -> MarketEngine:
    """Process-wide engine; also the FastAPI dependency routers resolve."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = MarketEngine(
            uow_factory=lambda: SqlUnitOfWork(async_session_factory),
            escrow_account=settings.ESCROW_ACCOUNT,
            treasury_account=settings.TREASURY_ACCOUNT,
        )
    return _engine
