"""MarketEngine — single-writer orchestrator for every market operation.

Each call takes the global lock, reads the clock once, opens a unit of work,
runs the domain operation, verifies invariants and commits. Any exception
rolls the whole unit of work back (records, ledger and journal) before it
propagates.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from src.sm_bill.domain import book as listing_book
from src.sm_bill.domain.models import Bill
from src.sm_challenge.domain import engine as challenge_engine
from src.sm_challenge.domain.models import Challenge
from src.sm_challenge.domain.settlement import SlashSplit
from src.sm_common.clock import Clock, SystemClock
from src.sm_common.enums import ChallengeOutcome
from src.sm_common.errors import AppError
from src.sm_engine.domain.unit_of_work import OperationContext, UnitOfWork, UnitOfWorkFactory
from src.sm_engine.engine.invariants import verify_bill_invariants, verify_order_invariants
from src.sm_order.domain import book as deal_book
from src.sm_order.domain.models import Order

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class WithdrawalResult:
    order: Order
    amount: int
    finished: bool


@dataclass(frozen=True)
class ChallengeResolution:
    challenge_id: int
    order_id: int
    outcome: ChallengeOutcome
    settlement: SlashSplit | None


class MarketEngine:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock | None = None,
        escrow_account: str = "market-escrow",
        treasury_account: str = "market-treasury",
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()
        self._escrow_account = escrow_account
        self._treasury_account = treasury_account
        self._lock = asyncio.Lock()

    @property
    def escrow_account(self) -> str:
        return self._escrow_account

    @property
    def treasury_account(self) -> str:
        return self._treasury_account

    async def _execute(
        self,
        name: str,
        caller: str,
        operation: Callable[[UnitOfWork, OperationContext], Awaitable[T]],
    ) -> T:
        async with self._lock:
            ctx = OperationContext(
                caller=caller,
                now=self._clock.now(),
                escrow_account=self._escrow_account,
                treasury_account=self._treasury_account,
            )
            try:
                async with self._uow_factory() as uow:
                    return await operation(uow, ctx)
            except AppError as exc:
                logger.info("%s rejected for %s: [%d] %s", name, caller, exc.code, exc.message)
                raise
            except Exception:
                logger.exception("%s failed for %s, rolled back", name, caller)
                raise

    async def _read(self, operation: Callable[[UnitOfWork], Awaitable[T]]) -> T:
        async with self._lock:
            async with self._uow_factory() as uow:
                return await operation(uow)

    # ------------------------------------------------------------------
    # ListingBook
    # ------------------------------------------------------------------

    async def create_bill(
        self,
        caller: str,
        asset: int,
        price: int,
        capacity: int,
        min_service_week: int,
        max_service_week: int,
        deposit_multiplier: int,
    ) -> Bill:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Bill:
            bill = await listing_book.create_bill(
                uow, ctx, asset, price, capacity,
                min_service_week, max_service_week, deposit_multiplier,
            )
            verify_bill_invariants(bill)
            return bill

        return await self._execute("create_bill", caller, op)

    async def cancel_bill(self, caller: str, bill_id: int) -> Bill:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Bill:
            return await listing_book.cancel_bill(uow, ctx, bill_id)

        return await self._execute("cancel_bill", caller, op)

    # ------------------------------------------------------------------
    # DealBook
    # ------------------------------------------------------------------

    async def create_order(
        self, caller: str, bill_id: int, asset: int, service_week: int
    ) -> Order:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Order:
            before = await uow.bills.get(bill_id)
            order = await deal_book.create_order(uow, ctx, bill_id, asset, service_week)
            after = await uow.bills.get(bill_id)
            if before is not None and after is not None:
                verify_bill_invariants(after, before)
            verify_order_invariants(order)
            return order

        return await self._execute("create_order", caller, op)

    async def cancel_order(self, caller: str, order_id: int) -> Order:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Order:
            return await deal_book.cancel_order(uow, ctx, order_id)

        return await self._execute("cancel_order", caller, op)

    async def prepare_order(
        self,
        caller: str,
        order_id: int,
        merkle_root: bytes,
        piece_size: int,
        leaf_count: int,
    ) -> Order:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Order:
            order = await deal_book.prepare_order(
                uow, ctx, order_id, merkle_root, piece_size, leaf_count
            )
            verify_order_invariants(order)
            return order

        return await self._execute("prepare_order", caller, op)

    async def withdraw_order(self, caller: str, order_id: int) -> WithdrawalResult:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> WithdrawalResult:
            before = await uow.orders.get(order_id)
            order, amount, finished = await deal_book.withdraw_order(uow, ctx, order_id)
            if not finished:
                verify_order_invariants(order, before)
            return WithdrawalResult(order=order, amount=amount, finished=finished)

        return await self._execute("withdraw_order", caller, op)

    # ------------------------------------------------------------------
    # ChallengeEngine
    # ------------------------------------------------------------------

    async def start_challenge(
        self,
        caller: str,
        order_id: int,
        piece_index: int,
        mhash: bytes,
        proofs: Sequence[bytes],
    ) -> Challenge:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> Challenge:
            return await challenge_engine.start_challenge(
                uow, ctx, order_id, piece_index, mhash, proofs
            )

        return await self._execute("start_challenge", caller, op)

    async def prove_challenge(
        self,
        caller: str,
        challenge_id: int,
        chunk_data: bytes,
        subpath: Sequence[bytes],
    ) -> ChallengeResolution:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> ChallengeResolution:
            challenge, outcome, split = await challenge_engine.prove_challenge(
                uow, ctx, challenge_id, chunk_data, subpath
            )
            return ChallengeResolution(challenge.id, challenge.order_id, outcome, split)

        return await self._execute("prove_challenge", caller, op)

    async def end_challenge(self, caller: str, challenge_id: int) -> ChallengeResolution:
        async def op(uow: UnitOfWork, ctx: OperationContext) -> ChallengeResolution:
            challenge, outcome, split = await challenge_engine.end_challenge(
                uow, ctx, challenge_id
            )
            return ChallengeResolution(challenge.id, challenge.order_id, outcome, split)

        return await self._execute("end_challenge", caller, op)

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    async def get_bill(self, bill_id: int) -> Bill | None:
        return await self._read(lambda uow: uow.bills.get(bill_id))

    async def get_order(self, order_id: int) -> Order | None:
        return await self._read(lambda uow: uow.orders.get(order_id))

    async def get_challenge(self, challenge_id: int) -> Challenge | None:
        return await self._read(lambda uow: uow.challenges.get(challenge_id))

    async def list_bills(self, cursor_id: int | None, limit: int) -> list[Bill]:
        return await self._read(lambda uow: uow.bills.list_open(cursor_id, limit))

    async def list_orders(self, account: str, cursor_id: int | None, limit: int) -> list[Order]:
        return await self._read(lambda uow: uow.orders.list_by_account(account, cursor_id, limit))

    async def balance_of(self, account: str) -> int:
        return await self._read(lambda uow: uow.ledger.balance_of(account))
