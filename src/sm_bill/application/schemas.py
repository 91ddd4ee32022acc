# src/sm_bill/application/schemas.py
from pydantic import BaseModel, Field

from src.sm_bill.domain.models import Bill
from src.sm_common.limits import PG_BIGINT_MAX, PG_INT_MAX


class CreateBillRequest(BaseModel):
    asset: int = Field(..., gt=0, le=PG_BIGINT_MAX, description="Capacity units offered")
    price: int = Field(..., gt=0, le=PG_BIGINT_MAX, description="Price per unit per week")
    capacity: int = Field(..., gt=0, le=PG_BIGINT_MAX, description="Minimum tradeable unit")
    min_service_week: int = Field(..., ge=1, le=PG_INT_MAX)
    max_service_week: int = Field(..., ge=1, le=PG_INT_MAX)
    deposit_multiplier: int = Field(
        ..., gt=0, le=PG_BIGINT_MAX, description="Collateral = asset*price*multiplier"
    )


class BillResponse(BaseModel):
    id: int
    owner: str
    asset: int
    price: int
    capacity: int
    min_service_week: int
    max_service_week: int
    deposit_amount: int
    start_time: int

    @classmethod
    def from_domain(cls, bill: Bill) -> "BillResponse":
        return cls(
            id=bill.id,
            owner=bill.owner,
            asset=bill.asset,
            price=bill.price,
            capacity=bill.capacity,
            min_service_week=bill.min_service_week,
            max_service_week=bill.max_service_week,
            deposit_amount=bill.deposit_amount,
            start_time=bill.start_time,
        )


class CancelBillResponse(BaseModel):
    bill_id: int
    refunded_amount: int


class BillListResponse(BaseModel):
    items: list[BillResponse]
    next_cursor: int | None
    has_more: bool
