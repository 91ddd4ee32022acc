# src/sm_bill/application/service.py
from src.sm_bill.application.schemas import (
    BillListResponse,
    BillResponse,
    CancelBillResponse,
    CreateBillRequest,
)
from src.sm_common.errors import BillNotFoundError
from src.sm_engine.engine.engine import MarketEngine


async def create_bill(
    engine: MarketEngine, req: CreateBillRequest, account: str
) -> BillResponse:
    bill = await engine.create_bill(
        account,
        asset=req.asset,
        price=req.price,
        capacity=req.capacity,
        min_service_week=req.min_service_week,
        max_service_week=req.max_service_week,
        deposit_multiplier=req.deposit_multiplier,
    )
    return BillResponse.from_domain(bill)


async def cancel_bill(engine: MarketEngine, bill_id: int, account: str) -> CancelBillResponse:
    bill = await engine.cancel_bill(account, bill_id)
    return CancelBillResponse(bill_id=bill.id, refunded_amount=bill.deposit_amount)


async def get_bill(engine: MarketEngine, bill_id: int) -> BillResponse:
    bill = await engine.get_bill(bill_id)
    if bill is None:
        raise BillNotFoundError(bill_id)
    return BillResponse.from_domain(bill)


async def list_bills(engine: MarketEngine, cursor: int | None, limit: int) -> BillListResponse:
    # Fetch limit+1 to detect has_more without a COUNT(*) query
    bills = await engine.list_bills(cursor, limit + 1)
    has_more = len(bills) > limit
    page = bills[:limit]
    return BillListResponse(
        items=[BillResponse.from_domain(b) for b in page],
        next_cursor=page[-1].id if has_more and page else None,
        has_more=has_more,
    )
