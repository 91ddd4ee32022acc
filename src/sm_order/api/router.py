"""sm_order REST API — deals between consumer and provider. All endpoints require JWT."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from src.sm_common.response import ApiResponse, success_response
from src.sm_engine.application.service import get_market_engine
from src.sm_engine.engine.engine import MarketEngine
from src.sm_gateway.auth.dependencies import get_current_account
from src.sm_order.application import service as svc
from src.sm_order.application.schemas import CreateOrderRequest, PrepareOrderRequest

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.create_order(engine, body, account)
    return success_response(data, request)


@router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.cancel_order(engine, order_id, account)
    return success_response(data, request)


@router.post("/{order_id}/prepare")
async def prepare_order(
    order_id: int,
    body: PrepareOrderRequest,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.prepare_order(engine, order_id, body, account)
    return success_response(data, request)


@router.post("/{order_id}/withdraw")
async def withdraw_order(
    order_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.withdraw_order(engine, order_id, account)
    return success_response(data, request)


@router.get("")
async def list_orders(
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
    cursor: int | None = Query(None, description="Last order id of the previous page"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await svc.list_orders(engine, account, cursor, limit)
    return success_response(data, request)


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    account: Annotated[str, Depends(get_current_account)],
    engine: Annotated[MarketEngine, Depends(get_market_engine)],
    request: Request,
) -> ApiResponse:
    data = await svc.get_order(engine, order_id)
    return success_response(data, request)
