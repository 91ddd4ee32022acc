"""Unit tests for ChallengeEngine: start, prove, end (timeout) and slashing settlement."""

import pytest

from src.sm_challenge.domain.merkle import TwoLevelCommitment, hash_pair, split_chunks
from src.sm_challenge.domain.settlement import split_slash
from src.sm_common.clock import CHALLENGE_WINDOW_SECONDS, WEEK_SECONDS, ManualClock
from src.sm_common.enums import ChallengeOutcome, DealEventType
from src.sm_common.errors import (
    ChallengeNotFoundError,
    ChallengeVerificationFailedError,
    InvalidRangeError,
    InvalidStateError,
    PermissionDeniedError,
    TimeoutNotElapsedError,
)
from src.sm_engine.engine.engine import MarketEngine
from src.sm_engine.infrastructure.memory import InMemoryMarketStore
from src.sm_order.domain.models import Order

PROVIDER = "provider-1"
CONSUMER = "consumer-1"
ESCROW = "market-escrow"
TREASURY = "market-treasury"

CHUNK = 16
PIECES = [bytes([i + 1]) * 48 + bytes(range(i * 4)) for i in range(4)]
DATA = TwoLevelCommitment.from_pieces(PIECES, piece_size=64, chunk_size=CHUNK)


async def _active_order(
    engine: MarketEngine, asset: int = 3, price: int = 1, multiplier: int = 1, weeks: int = 4
) -> Order:
    bill = await engine.create_bill(
        PROVIDER,
        asset=asset,
        price=price,
        capacity=1,
        min_service_week=1,
        max_service_week=10,
        deposit_multiplier=multiplier,
    )
    order = await engine.create_order(CONSUMER, bill.id, asset, weeks)
    await engine.prepare_order(PROVIDER, order.id, DATA.merkle_root, 64, DATA.leaf_count)
    return await engine.prepare_order(CONSUMER, order.id, DATA.merkle_root, 64, DATA.leaf_count)


async def _challenge(engine: MarketEngine, order: Order, piece: int = 2) -> int:
    challenge = await engine.start_challenge(
        CONSUMER, order.id, piece, DATA.mhash(piece), DATA.piece_proof(piece)
    )
    return challenge.id


class TestSplitSlash:
    def test_odd_unit_goes_to_treasury(self) -> None:
        order = Order(
            id=1, user=CONSUMER, storager=PROVIDER, asset=3, price=1, service_week=4,
            user_deposit_amount=12, storage_deposit_amount=3, start_time=0,
            last_withdraw_time=0, bill_id=1,
        )
        split = split_slash(order)
        assert split.user_compensation == 1
        assert split.forfeited == 2
        assert split.user_payout == 13

    def test_even_split(self) -> None:
        order = Order(
            id=1, user=CONSUMER, storager=PROVIDER, asset=20, price=1, service_week=4,
            user_deposit_amount=80, storage_deposit_amount=40, start_time=0,
            last_withdraw_time=0, bill_id=1,
        )
        split = split_slash(order)
        assert (split.user_refund, split.user_compensation, split.forfeited) == (80, 20, 20)


class TestStartChallenge:
    async def test_valid_inclusion_opens_challenge(
        self, engine: MarketEngine, clock: ManualClock
    ) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order)
        challenge = await engine.get_challenge(challenge_id)
        assert challenge is not None
        assert challenge.order_id == order.id
        assert challenge.index == 2
        assert challenge.mhash == DATA.mhash(2)
        assert challenge.start_time == clock.now()
        assert challenge.deadline == clock.now() + CHALLENGE_WINDOW_SECONDS

    async def test_bad_inclusion_proof(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        with pytest.raises(ChallengeVerificationFailedError):
            await engine.start_challenge(
                CONSUMER, order.id, 1, DATA.mhash(1), DATA.piece_proof(2)
            )

    async def test_internal_node_rejected_as_piece_hash(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        top = DATA.top.leaves
        left, right = hash_pair(top[0], top[1]), hash_pair(top[2], top[3])
        with pytest.raises(ChallengeVerificationFailedError):
            await engine.start_challenge(CONSUMER, order.id, 0, left, [right])

    async def test_only_consumer(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        with pytest.raises(PermissionDeniedError):
            await engine.start_challenge(
                PROVIDER, order.id, 0, DATA.mhash(0), DATA.piece_proof(0)
            )

    async def test_inactive_order(self, engine: MarketEngine) -> None:
        bill = await engine.create_bill(PROVIDER, 10, 1, 1, 1, 4, 1)
        order = await engine.create_order(CONSUMER, bill.id, 5, 2)
        with pytest.raises(InvalidStateError):
            await engine.start_challenge(CONSUMER, order.id, 0, DATA.mhash(0), [])

    async def test_index_out_of_range(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        with pytest.raises(InvalidRangeError):
            await engine.start_challenge(
                CONSUMER, order.id, DATA.leaf_count, DATA.mhash(0), DATA.piece_proof(0)
            )

    async def test_one_open_challenge_per_order(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        await _challenge(engine, order)
        with pytest.raises(InvalidStateError):
            await _challenge(engine, order, piece=1)

    async def test_open_challenge_blocks_withdraw(
        self, engine: MarketEngine, clock: ManualClock
    ) -> None:
        order = await _active_order(engine)
        await _challenge(engine, order)
        clock.advance(WEEK_SECONDS)
        with pytest.raises(InvalidStateError):
            await engine.withdraw_order(PROVIDER, order.id)


class TestProveChallenge:
    async def test_valid_chunk_clears_challenge(
        self, engine: MarketEngine, store: InMemoryMarketStore
    ) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order, piece=2)
        chunk = split_chunks(PIECES[2], CHUNK)[1]

        result = await engine.prove_challenge(
            PROVIDER, challenge_id, chunk, DATA.chunk_proof(2, 1)
        )
        assert result.outcome == ChallengeOutcome.PROVED
        assert (result.challenge_id, result.order_id) == (challenge_id, order.id)
        assert result.settlement is None
        assert await engine.get_challenge(challenge_id) is None
        assert await engine.get_order(order.id) == order
        assert store.events[-1].event_type == DealEventType.CHALLENGE_PROVED

    async def test_withdraw_resumes_after_proof(
        self, engine: MarketEngine, clock: ManualClock
    ) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order, piece=0)
        chunk = split_chunks(PIECES[0], CHUNK)[0]
        await engine.prove_challenge(PROVIDER, challenge_id, chunk, DATA.chunk_proof(0, 0))
        clock.advance(WEEK_SECONDS)
        result = await engine.withdraw_order(PROVIDER, order.id)
        assert result.amount == 3

    async def test_wrong_chunk_slashes(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order, piece=2)
        consumer_before = await engine.balance_of(CONSUMER)

        result = await engine.prove_challenge(
            PROVIDER, challenge_id, b"not the data", DATA.chunk_proof(2, 1)
        )
        assert result.outcome == ChallengeOutcome.SLASHED
        assert result.settlement is not None
        assert await engine.get_order(order.id) is None
        assert await engine.get_challenge(challenge_id) is None
        # consumer deposit 3*1*4 = 12, collateral 3 -> 1 to consumer, 2 to treasury
        assert await engine.balance_of(CONSUMER) == consumer_before + 12 + 1
        assert await engine.balance_of(TREASURY) == 2
        assert await engine.balance_of(ESCROW) == 0

    async def test_child_hashes_of_piece_root_do_not_pass_as_chunk(
        self, engine: MarketEngine
    ) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order, piece=2)
        leaves = DATA.piece_trees[2].leaves
        lo, hi = sorted([hash_pair(leaves[0], leaves[1]), hash_pair(leaves[2], leaves[3])])

        result = await engine.prove_challenge(PROVIDER, challenge_id, lo + hi, [])
        assert result.outcome == ChallengeOutcome.SLASHED
        assert await engine.get_order(order.id) is None

    async def test_only_provider(self, engine: MarketEngine) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order)
        with pytest.raises(PermissionDeniedError):
            await engine.prove_challenge(CONSUMER, challenge_id, b"", [])

    async def test_missing_challenge(self, engine: MarketEngine) -> None:
        with pytest.raises(ChallengeNotFoundError):
            await engine.prove_challenge(PROVIDER, 404, b"", [])


class TestEndChallenge:
    async def test_scenario_d_timeout(
        self, engine: MarketEngine, clock: ManualClock, store: InMemoryMarketStore
    ) -> None:
        order = await _active_order(engine, asset=20, price=1, multiplier=2)
        start = clock.now()
        challenge_id = await _challenge(engine, order)

        clock.set(start + CHALLENGE_WINDOW_SECONDS)
        with pytest.raises(TimeoutNotElapsedError):
            await engine.end_challenge(CONSUMER, challenge_id)

        clock.set(start + CHALLENGE_WINDOW_SECONDS + 1)
        consumer_before = await engine.balance_of(CONSUMER)
        result = await engine.end_challenge(CONSUMER, challenge_id)
        assert result.outcome == ChallengeOutcome.TIMED_OUT
        assert (result.challenge_id, result.order_id) == (challenge_id, order.id)
        assert result.settlement is not None
        assert result.settlement.user_compensation == 20
        assert result.settlement.forfeited == 20
        assert await engine.balance_of(CONSUMER) == consumer_before + 80 + 20
        assert await engine.balance_of(TREASURY) == 20
        assert await engine.get_order(order.id) is None
        assert store.events[-1].event_type == DealEventType.ORDER_SLASHED

    async def test_only_consumer(self, engine: MarketEngine, clock: ManualClock) -> None:
        order = await _active_order(engine)
        challenge_id = await _challenge(engine, order)
        clock.advance(CHALLENGE_WINDOW_SECONDS + 1)
        with pytest.raises(PermissionDeniedError):
            await engine.end_challenge(PROVIDER, challenge_id)

    async def test_slash_after_partial_withdraw_refunds_remaining_only(
        self, engine: MarketEngine, clock: ManualClock
    ) -> None:
        order = await _active_order(engine, asset=20, price=1, multiplier=2)
        clock.advance(2 * WEEK_SECONDS)
        await engine.withdraw_order(PROVIDER, order.id)  # pays 40, 40 left
        challenge_id = await _challenge(engine, order)
        clock.advance(CHALLENGE_WINDOW_SECONDS + 1)
        result = await engine.end_challenge(CONSUMER, challenge_id)
        assert result.settlement is not None
        assert result.settlement.user_refund == 40
        assert await engine.balance_of(ESCROW) == 0
