"""DealBook — turns a slice of a Bill into a bilaterally escrowed Order.

Lifecycle:
  create   consumer escrows price*asset*weeks; a proportional slice of the
           Bill's collateral moves onto the Order
  cancel   consumer only, before activation; both deposits go home
  prepare  either party proposes (root, piece_size, leaf_count); a second
           identical submission activates the order and starts accrual
  withdraw provider meters out whole elapsed weeks; when the remaining
           prepayment cannot cover them the order finishes
"""

import logging

from src.sm_common.clock import WEEK_SECONDS
from src.sm_common.enums import DealEventType
from src.sm_common.errors import (
    BillNotFoundError,
    CommitmentMismatchError,
    InternalError,
    InvalidRangeError,
    InvalidStateError,
    OrderNotFoundError,
    PermissionDeniedError,
)
from src.sm_engine.domain.events import DealEvent
from src.sm_engine.domain.unit_of_work import OperationContext, UnitOfWork
from src.sm_ledger.domain.escrow import lock_into_escrow, release_from_escrow
from src.sm_order.domain.models import (
    Activated,
    Commitment,
    Order,
    Proposed,
    Uncommitted,
    ZERO_ROOT,
)

logger = logging.getLogger(__name__)


async def load_order(uow: UnitOfWork, order_id: int) -> Order:
    order = await uow.orders.get(order_id, for_update=True)
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


async def create_order(
    uow: UnitOfWork,
    ctx: OperationContext,
    bill_id: int,
    asset: int,
    service_week: int,
) -> Order:
    bill = await uow.bills.get(bill_id, for_update=True)
    if bill is None:
        raise BillNotFoundError(bill_id)
    if not (0 < asset <= bill.asset):
        raise InvalidRangeError(f"asset {asset} not in (0, {bill.asset}] for bill {bill_id}")
    if not bill.accepts_week(service_week):
        raise InvalidRangeError(
            f"service week {service_week} not in "
            f"[{bill.min_service_week}, {bill.max_service_week}]"
        )
    if asset % bill.capacity != 0:
        raise InvalidRangeError(f"asset {asset} is not a multiple of capacity {bill.capacity}")

    user_deposit = bill.price * asset * service_week
    await lock_into_escrow(uow.ledger, ctx.caller, ctx.escrow_account, user_deposit)

    storage_deposit = bill.collateral_for(asset)
    bill.asset -= asset
    bill.deposit_amount -= storage_deposit
    if bill.asset == 0:
        # Whole listing sold: any collateral left here is the rounding residue,
        # which is zero because the final slice takes everything.
        await uow.bills.delete(bill.id)
        await uow.journal.append(
            DealEvent(DealEventType.BILL_EXHAUSTED, bill.id, {"owner": bill.owner}, ctx.now)
        )
    else:
        await uow.bills.update(bill)

    order = Order(
        id=await uow.orders.next_id(),
        user=ctx.caller,
        storager=bill.owner,
        asset=asset,
        price=bill.price,
        service_week=service_week,
        user_deposit_amount=user_deposit,
        storage_deposit_amount=storage_deposit,
        start_time=ctx.now,
        last_withdraw_time=ctx.now,
        bill_id=bill.id,
        state=Uncommitted(),
    )
    await uow.orders.add(order)
    await uow.journal.append(
        DealEvent(
            DealEventType.ORDER_CREATED,
            order.id,
            {
                "bill_id": bill.id,
                "user": order.user,
                "storager": order.storager,
                "asset": asset,
                "service_week": service_week,
                "user_deposit_amount": user_deposit,
                "storage_deposit_amount": storage_deposit,
            },
            ctx.now,
        )
    )
    logger.info(
        "Order %d created from bill %d: asset=%d weeks=%d user_deposit=%d storage_deposit=%d",
        order.id, bill.id, asset, service_week, user_deposit, storage_deposit,
    )
    return order


async def cancel_order(uow: UnitOfWork, ctx: OperationContext, order_id: int) -> Order:
    order = await load_order(uow, order_id)
    if order.user != ctx.caller:
        raise PermissionDeniedError(f"only the consumer may cancel order {order_id}")
    if order.is_active:
        raise InvalidStateError(f"order {order_id} is already active")

    await release_from_escrow(uow.ledger, ctx.escrow_account, order.user, order.user_deposit_amount)
    await release_from_escrow(
        uow.ledger, ctx.escrow_account, order.storager, order.storage_deposit_amount
    )
    await uow.orders.delete(order_id)
    await uow.journal.append(
        DealEvent(
            DealEventType.ORDER_CANCELLED,
            order_id,
            {
                "user_refund": order.user_deposit_amount,
                "storager_refund": order.storage_deposit_amount,
            },
            ctx.now,
        )
    )
    logger.info("Order %d cancelled by consumer %s", order_id, order.user)
    return order


async def prepare_order(
    uow: UnitOfWork,
    ctx: OperationContext,
    order_id: int,
    merkle_root: bytes,
    piece_size: int,
    leaf_count: int,
) -> Order:
    order = await load_order(uow, order_id)
    if not order.is_party(ctx.caller):
        raise PermissionDeniedError(f"caller is not a party to order {order_id}")
    if order.is_active:
        raise InvalidStateError(f"order {order_id} is already active")
    if merkle_root == ZERO_ROOT:
        raise InvalidRangeError("merkle root must be non-zero")
    if len(merkle_root) != 32:
        raise InvalidRangeError(f"merkle root must be 32 bytes, got {len(merkle_root)}")
    if piece_size <= 0 or leaf_count <= 0:
        raise InvalidRangeError("piece size and leaf count must be positive")

    submitted = Commitment(merkle_root, piece_size, leaf_count)
    state = order.state
    if isinstance(state, Uncommitted):
        order.state = Proposed(submitted, ctx.caller)
        await uow.orders.update(order)
        await uow.journal.append(
            DealEvent(
                DealEventType.ORDER_PREPARED,
                order_id,
                {
                    "by": ctx.caller,
                    "merkle_root": merkle_root.hex(),
                    "piece_size": piece_size,
                    "leaf_count": leaf_count,
                },
                ctx.now,
            )
        )
        logger.info("Order %d commitment proposed by %s", order_id, ctx.caller)
        return order

    if not isinstance(state, Proposed):
        raise InternalError(f"order {order_id} has unexpected commitment state {state!r}")
    if state.commitment != submitted:
        raise CommitmentMismatchError(order_id)

    order.state = Activated(state.commitment, state.proposed_by, ctx.now)
    order.last_withdraw_time = ctx.now
    await uow.orders.update(order)
    await uow.journal.append(
        DealEvent(
            DealEventType.ORDER_ACTIVATED,
            order_id,
            {"confirmed_by": ctx.caller, "active_time": ctx.now},
            ctx.now,
        )
    )
    logger.info("Order %d activated at %d", order_id, ctx.now)
    return order


async def withdraw_order(
    uow: UnitOfWork, ctx: OperationContext, order_id: int
) -> tuple[Order, int, bool]:
    """Pay the provider for whole elapsed weeks.

    Returns (order, amount_paid, finished). A finished order has been removed.
    """
    order = await load_order(uow, order_id)
    if order.storager != ctx.caller:
        raise PermissionDeniedError(f"only the provider may withdraw from order {order_id}")
    if not order.is_active:
        raise InvalidStateError(f"order {order_id} is not active")
    if await uow.challenges.get_open_for_order(order_id) is not None:
        raise InvalidStateError(f"order {order_id} has an open challenge")

    passed_weeks = (ctx.now - order.last_withdraw_time) // WEEK_SECONDS
    amount = order.asset * order.price * passed_weeks

    if amount > order.user_deposit_amount:
        paid = order.user_deposit_amount
        await release_from_escrow(uow.ledger, ctx.escrow_account, order.storager, paid)
        await release_from_escrow(
            uow.ledger, ctx.escrow_account, order.storager, order.storage_deposit_amount
        )
        order.user_deposit_amount = 0
        await uow.orders.delete(order_id)
        await uow.journal.append(
            DealEvent(
                DealEventType.ORDER_FINISHED,
                order_id,
                {"paid": paid, "collateral_released": order.storage_deposit_amount},
                ctx.now,
            )
        )
        logger.info("Order %d finished by depletion, final payout %d", order_id, paid)
        return order, paid, True

    order.user_deposit_amount -= amount
    order.last_withdraw_time += passed_weeks * WEEK_SECONDS
    await release_from_escrow(uow.ledger, ctx.escrow_account, order.storager, amount)
    await uow.orders.update(order)
    await uow.journal.append(
        DealEvent(
            DealEventType.ORDER_WITHDRAWN,
            order_id,
            {"paid": amount, "weeks": passed_weeks, "remaining": order.user_deposit_amount},
            ctx.now,
        )
    )
    logger.info("Order %d: provider withdrew %d for %d week(s)", order_id, amount, passed_weeks)
    return order, amount, False
