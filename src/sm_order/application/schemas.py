# src/sm_order/application/schemas.py
from pydantic import BaseModel, Field

from src.sm_common.hexcodec import HexHash
from src.sm_common.limits import PG_BIGINT_MAX, PG_INT_MAX
from src.sm_engine.engine.engine import WithdrawalResult
from src.sm_order.domain.models import Order


class CreateOrderRequest(BaseModel):
    bill_id: int = Field(..., gt=0, le=PG_BIGINT_MAX)
    asset: int = Field(
        ...,
        gt=0,
        le=PG_BIGINT_MAX,
        description="Capacity units to buy, a multiple of the bill's capacity",
    )
    service_week: int = Field(..., ge=1, le=PG_INT_MAX)


class PrepareOrderRequest(BaseModel):
    merkle_root: HexHash
    piece_size: int = Field(..., gt=0, le=PG_BIGINT_MAX)
    leaf_count: int = Field(..., gt=0, le=PG_BIGINT_MAX)


class OrderResponse(BaseModel):
    id: int
    user: str
    storager: str
    asset: int
    price: int
    service_week: int
    user_deposit_amount: int
    storage_deposit_amount: int
    start_time: int
    last_withdraw_time: int
    bill_id: int
    phase: str
    merkle_root: str
    piece_size: int
    leaf_count: int
    first_prepare: str | None
    active_time: int

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user=order.user,
            storager=order.storager,
            asset=order.asset,
            price=order.price,
            service_week=order.service_week,
            user_deposit_amount=order.user_deposit_amount,
            storage_deposit_amount=order.storage_deposit_amount,
            start_time=order.start_time,
            last_withdraw_time=order.last_withdraw_time,
            bill_id=order.bill_id,
            phase=order.phase.value,
            merkle_root=order.merkle_root.hex(),
            piece_size=order.piece_size,
            leaf_count=order.leaf_count,
            first_prepare=order.first_prepare,
            active_time=order.active_time,
        )


class CancelOrderResponse(BaseModel):
    order_id: int
    user_refund: int
    storager_refund: int


class WithdrawResponse(BaseModel):
    order_id: int
    amount: int
    finished: bool
    remaining_deposit: int
    last_withdraw_time: int

    @classmethod
    def from_result(cls, result: WithdrawalResult) -> "WithdrawResponse":
        order = result.order
        return cls(
            order_id=order.id,
            amount=result.amount,
            finished=result.finished,
            remaining_deposit=0 if result.finished else order.user_deposit_amount,
            last_withdraw_time=order.last_withdraw_time,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: int | None
    has_more: bool
