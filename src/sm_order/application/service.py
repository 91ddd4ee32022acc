# src/sm_order/application/service.py
from src.sm_common.errors import OrderNotFoundError
from src.sm_engine.engine.engine import MarketEngine
from src.sm_order.application.schemas import (
    CancelOrderResponse,
    CreateOrderRequest,
    OrderListResponse,
    OrderResponse,
    PrepareOrderRequest,
    WithdrawResponse,
)


async def create_order(
    engine: MarketEngine, req: CreateOrderRequest, account: str
) -> OrderResponse:
    order = await engine.create_order(account, req.bill_id, req.asset, req.service_week)
    return OrderResponse.from_domain(order)


async def cancel_order(engine: MarketEngine, order_id: int, account: str) -> CancelOrderResponse:
    order = await engine.cancel_order(account, order_id)
    return CancelOrderResponse(
        order_id=order.id,
        user_refund=order.user_deposit_amount,
        storager_refund=order.storage_deposit_amount,
    )


async def prepare_order(
    engine: MarketEngine, order_id: int, req: PrepareOrderRequest, account: str
) -> OrderResponse:
    order = await engine.prepare_order(
        account, order_id, req.merkle_root, req.piece_size, req.leaf_count
    )
    return OrderResponse.from_domain(order)


async def withdraw_order(engine: MarketEngine, order_id: int, account: str) -> WithdrawResponse:
    result = await engine.withdraw_order(account, order_id)
    return WithdrawResponse.from_result(result)


async def get_order(engine: MarketEngine, order_id: int) -> OrderResponse:
    order = await engine.get_order(order_id)
    if order is None:
        raise OrderNotFoundError(order_id)
    return OrderResponse.from_domain(order)


async def list_orders(
    engine: MarketEngine, account: str, cursor: int | None, limit: int
) -> OrderListResponse:
    orders = await engine.list_orders(account, cursor, limit + 1)
    has_more = len(orders) > limit
    page = orders[:limit]
    return OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in page],
        next_cursor=page[-1].id if has_more and page else None,
        has_more=has_more,
    )
