"""Record invariants verified before every commit. Raise AssertionError if violated.

BILL-1: asset > 0 and deposit_amount >= 0 while the Bill exists
BILL-2: collateral per remaining unit never decreases across an order split
        (after.deposit * before.asset >= before.deposit * after.asset)
ORD-1:  an active order carries a non-zero merkle root
ORD-2:  deposits are never negative; user_deposit_amount never grows
"""

import logging

from src.sm_bill.domain.models import Bill
from src.sm_order.domain.models import ZERO_ROOT, Order

logger = logging.getLogger(__name__)


def verify_bill_invariants(bill: Bill, before: Bill | None = None) -> None:
    assert bill.asset > 0, f"BILL-1 violated: bill {bill.id} asset={bill.asset}"
    assert bill.deposit_amount >= 0, (
        f"BILL-1 violated: bill {bill.id} deposit={bill.deposit_amount}"
    )
    if before is not None:
        assert bill.deposit_amount * before.asset >= before.deposit_amount * bill.asset, (
            f"BILL-2 violated: bill {bill.id} collateral/unit fell from "
            f"{before.deposit_amount}/{before.asset} to {bill.deposit_amount}/{bill.asset}"
        )
    logger.debug(
        "Bill invariants OK: bill=%d asset=%d deposit=%d", bill.id, bill.asset, bill.deposit_amount
    )


def verify_order_invariants(order: Order, before: Order | None = None) -> None:
    if order.is_active:
        assert order.merkle_root != ZERO_ROOT, f"ORD-1 violated: order {order.id} active, root 0"
    assert order.user_deposit_amount >= 0 and order.storage_deposit_amount >= 0, (
        f"ORD-2 violated: order {order.id} deposits "
        f"{order.user_deposit_amount}/{order.storage_deposit_amount}"
    )
    if before is not None:
        assert order.user_deposit_amount <= before.user_deposit_amount, (
            f"ORD-2 violated: order {order.id} user deposit grew "
            f"{before.user_deposit_amount} -> {order.user_deposit_amount}"
        )
    logger.debug("Order invariants OK: order=%d phase=%s", order.id, order.phase.value)
