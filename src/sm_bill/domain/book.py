"""ListingBook — providers post and withdraw capacity listings.

A listing locks `asset * price * deposit_multiplier` of the owner's funds as
collateral. DealBook carves proportional slices of that collateral off the
Bill as capacity sells; whatever is left goes back to the owner on cancel.
"""

import logging

from src.sm_bill.domain.models import Bill
from src.sm_common.enums import DealEventType
from src.sm_common.errors import BillNotFoundError, InvalidRangeError, PermissionDeniedError
from src.sm_engine.domain.events import DealEvent
from src.sm_engine.domain.unit_of_work import OperationContext, UnitOfWork
from src.sm_ledger.domain.escrow import lock_into_escrow, release_from_escrow

logger = logging.getLogger(__name__)


def _check_listing_terms(
    asset: int, price: int, capacity: int, min_week: int, max_week: int, multiplier: int
) -> None:
    if asset <= 0:
        raise InvalidRangeError(f"asset must be positive, got {asset}")
    if price <= 0:
        raise InvalidRangeError(f"price must be positive, got {price}")
    if capacity <= 0:
        raise InvalidRangeError(f"capacity must be positive, got {capacity}")
    if multiplier <= 0:
        raise InvalidRangeError(f"deposit multiplier must be positive, got {multiplier}")
    if not (1 <= min_week <= max_week):
        raise InvalidRangeError(f"service weeks [{min_week}, {max_week}] are not a valid range")


async def create_bill(
    uow: UnitOfWork,
    ctx: OperationContext,
    asset: int,
    price: int,
    capacity: int,
    min_service_week: int,
    max_service_week: int,
    deposit_multiplier: int,
) -> Bill:
    _check_listing_terms(
        asset, price, capacity, min_service_week, max_service_week, deposit_multiplier
    )
    deposit = asset * price * deposit_multiplier
    await lock_into_escrow(uow.ledger, ctx.caller, ctx.escrow_account, deposit)

    bill = Bill(
        id=await uow.bills.next_id(),
        owner=ctx.caller,
        asset=asset,
        price=price,
        capacity=capacity,
        min_service_week=min_service_week,
        max_service_week=max_service_week,
        deposit_amount=deposit,
        start_time=ctx.now,
    )
    await uow.bills.add(bill)
    await uow.journal.append(
        DealEvent(
            DealEventType.BILL_CREATED,
            bill.id,
            {"owner": bill.owner, "asset": asset, "price": price, "deposit_amount": deposit},
            ctx.now,
        )
    )
    logger.info("Bill %d created by %s: asset=%d deposit=%d", bill.id, bill.owner, asset, deposit)
    return bill


async def cancel_bill(uow: UnitOfWork, ctx: OperationContext, bill_id: int) -> Bill:
    bill = await uow.bills.get(bill_id, for_update=True)
    if bill is None:
        raise BillNotFoundError(bill_id)
    if bill.owner != ctx.caller:
        raise PermissionDeniedError(f"only the owner may cancel bill {bill_id}")

    await release_from_escrow(uow.ledger, ctx.escrow_account, bill.owner, bill.deposit_amount)
    await uow.bills.delete(bill_id)
    await uow.journal.append(
        DealEvent(
            DealEventType.BILL_CANCELLED,
            bill_id,
            {"owner": bill.owner, "refunded": bill.deposit_amount, "asset": bill.asset},
            ctx.now,
        )
    )
    logger.info("Bill %d cancelled, refunded %d to %s", bill_id, bill.deposit_amount, bill.owner)
    return bill
