"""Slashing settlement — terminal payout when a provider fails a challenge.

The provider's collateral slice is split floor-half to the consumer, the
rest (including any odd unit) to the treasury. The consumer also gets back
every unit of prepayment still in escrow. There is no partial slash.
"""

import logging
from dataclasses import dataclass

from src.sm_challenge.domain.models import Challenge
from src.sm_common.enums import ChallengeOutcome, DealEventType
from src.sm_engine.domain.events import DealEvent
from src.sm_engine.domain.unit_of_work import OperationContext, UnitOfWork
from src.sm_ledger.domain.escrow import release_from_escrow
from src.sm_order.domain.models import Order

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlashSplit:
    user_refund: int
    user_compensation: int
    forfeited: int

    @property
    def user_payout(self) -> int:
        return self.user_refund + self.user_compensation


def split_slash(order: Order) -> SlashSplit:
    user_compensation = order.storage_deposit_amount // 2
    return SlashSplit(
        user_refund=order.user_deposit_amount,
        user_compensation=user_compensation,
        forfeited=order.storage_deposit_amount - user_compensation,
    )


async def settle_slash(
    uow: UnitOfWork,
    ctx: OperationContext,
    order: Order,
    challenge: Challenge,
    outcome: ChallengeOutcome,
) -> SlashSplit:
    split = split_slash(order)
    await release_from_escrow(uow.ledger, ctx.escrow_account, order.user, split.user_payout)
    await release_from_escrow(
        uow.ledger, ctx.escrow_account, ctx.treasury_account, split.forfeited
    )
    await uow.challenges.delete(challenge.id)
    await uow.orders.delete(order.id)
    await uow.journal.append(
        DealEvent(
            DealEventType.ORDER_SLASHED,
            order.id,
            {
                "challenge_id": challenge.id,
                "outcome": outcome.value,
                "user_payout": split.user_payout,
                "user_compensation": split.user_compensation,
                "forfeited": split.forfeited,
            },
            ctx.now,
        )
    )
    logger.warning(
        "Order %d slashed (%s, challenge %d): user=%d treasury=%d",
        order.id, outcome.value, challenge.id, split.user_payout, split.forfeited,
    )
    return split
