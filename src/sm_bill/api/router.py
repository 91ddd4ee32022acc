"""sm_bill REST API — capacity listings. Mutations require JWT authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.sm_bill.application import service as svc
from src.sm_bill.application.schemas import CreateBillRequest
from src.sm_common.response import ApiResponse, success_response
from src.sm_engine.application.service import get_market_engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_gateway.auth.dependencies import get_current_account

router = APIRouter(prefix="/bills", tags=["bills"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_bill(
    body: CreateBillRequest,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.create_bill(engine, body, account)
    return success_response(data, request)


@router.post("/{bill_id}/cancel")
async def cancel_bill(
    bill_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.cancel_bill(engine, bill_id, account)
    return success_response(data, request)


@router.get("")
async def list_bills(
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
    cursor: int | None = Query(None, description="Last bill id of the previous page"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await svc.list_bills(engine, cursor, limit)
    return success_response(data, request)


@router.get("/{bill_id}")
async def get_bill(
    bill_id: int,
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.get_bill(engine, bill_id)
    return success_response(data, request)
