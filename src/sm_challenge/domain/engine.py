"""ChallengeEngine — proof-of-storage challenges against active orders.

start  the consumer names a piece and proves its mhash is a leaf of the
       order's merkle_root
prove  the provider returns one chunk of that piece plus the path opening the
       chunk's leaf digest under mhash; a bad proof slashes immediately
end    after the response window the consumer settles an unanswered
       challenge as a failure
"""

import logging
from collections.abc import Sequence

from src.sm_challenge.domain.merkle import hash_leaf, verify_proof
from src.sm_challenge.domain.models import Challenge
from src.sm_challenge.domain.settlement import SlashSplit, settle_slash
from src.sm_common.enums import ChallengeOutcome, DealEventType
from src.sm_common.errors import (
    ChallengeNotFoundError,
    ChallengeVerificationFailedError,
    InternalError,
    InvalidRangeError,
    InvalidStateError,
    PermissionDeniedError,
    TimeoutNotElapsedError,
)
from src.sm_engine.domain.events import DealEvent
from src.sm_engine.domain.unit_of_work import OperationContext, UnitOfWork
from src.sm_order.domain.book import load_order
from src.sm_order.domain.models import Order

logger = logging.getLogger(__name__)


async def _load_challenge(uow: UnitOfWork, challenge_id: int) -> tuple[Challenge, Order]:
    challenge = await uow.challenges.get(challenge_id, for_update=True)
    if challenge is None:
        raise ChallengeNotFoundError(challenge_id)
    order = await uow.orders.get(challenge.order_id, for_update=True)
    if order is None:
        # Orders with an open challenge can neither finish nor be cancelled.
        raise InternalError(f"challenge {challenge_id} references missing order")
    return challenge, order


async def start_challenge(
    uow: UnitOfWork,
    ctx: OperationContext,
    order_id: int,
    piece_index: int,
    mhash: bytes,
    proofs: Sequence[bytes],
) -> Challenge:
    order = await load_order(uow, order_id)
    if order.user != ctx.caller:
        raise PermissionDeniedError(f"only the consumer may challenge order {order_id}")
    if not order.is_active:
        raise InvalidStateError(f"order {order_id} is not active")
    if await uow.challenges.get_open_for_order(order_id) is not None:
        raise InvalidStateError(f"order {order_id} already has an open challenge")
    if not (0 <= piece_index < order.leaf_count):
        raise InvalidRangeError(
            f"piece index {piece_index} not in [0, {order.leaf_count}) for order {order_id}"
        )
    if not verify_proof(proofs, order.merkle_root, hash_leaf(mhash)):
        raise ChallengeVerificationFailedError(
            f"mhash is not a leaf of order {order_id}'s merkle root"
        )

    challenge = Challenge(
        id=await uow.challenges.next_id(),
        order_id=order_id,
        index=piece_index,
        mhash=mhash,
        start_time=ctx.now,
    )
    await uow.challenges.add(challenge)
    await uow.journal.append(
        DealEvent(
            DealEventType.CHALLENGE_STARTED,
            challenge.id,
            {"order_id": order_id, "index": piece_index, "mhash": mhash.hex()},
            ctx.now,
        )
    )
    logger.info("Challenge %d opened on order %d piece %d", challenge.id, order_id, piece_index)
    return challenge


async def prove_challenge(
    uow: UnitOfWork,
    ctx: OperationContext,
    challenge_id: int,
    chunk_data: bytes,
    subpath: Sequence[bytes],
) -> tuple[Challenge, ChallengeOutcome, SlashSplit | None]:
    challenge, order = await _load_challenge(uow, challenge_id)
    if order.storager != ctx.caller:
        raise PermissionDeniedError(f"only the provider may answer challenge {challenge_id}")

    if verify_proof(subpath, challenge.mhash, hash_leaf(chunk_data)):
        await uow.challenges.delete(challenge_id)
        await uow.journal.append(
            DealEvent(
                DealEventType.CHALLENGE_PROVED,
                challenge_id,
                {"order_id": order.id},
                ctx.now,
            )
        )
        logger.info("Challenge %d answered, order %d continues", challenge_id, order.id)
        return challenge, ChallengeOutcome.PROVED, None

    split = await settle_slash(uow, ctx, order, challenge, ChallengeOutcome.SLASHED)
    return challenge, ChallengeOutcome.SLASHED, split


async def end_challenge(
    uow: UnitOfWork, ctx: OperationContext, challenge_id: int
) -> tuple[Challenge, ChallengeOutcome, SlashSplit]:
    challenge, order = await _load_challenge(uow, challenge_id)
    if order.user != ctx.caller:
        raise PermissionDeniedError(f"only the consumer may end challenge {challenge_id}")
    if not challenge.has_expired(ctx.now):
        raise TimeoutNotElapsedError(challenge_id, challenge.deadline)

    split = await settle_slash(uow, ctx, order, challenge, ChallengeOutcome.TIMED_OUT)
    return challenge, ChallengeOutcome.TIMED_OUT, split
