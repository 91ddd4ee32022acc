"""sm_ledger REST API — balance lookup for the authenticated account."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.sm_common.response import ApiResponse, success_response
from src.sm_engine.application.service import get_market_engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_gateway.auth.dependencies import get_current_account

router = APIRouter(prefix="/account", tags=["account"])


class BalanceResponse(BaseModel):
    account: str
    balance: int


@router.get("/balance")
async def get_balance(
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    balance = await engine.balance_of(account)
    return success_response(BalanceResponse(account=account, balance=balance), request)
