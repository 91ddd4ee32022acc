"""In-memory market store and unit of work.

Backs unit tests and single-process runs. A unit of work snapshots the whole
store (records, id sequences, ledger, journal) on entry and restores it if
the operation raises, matching a SQL transaction rollback. Records handed
out are copies, so a caller mutating an object it has not saved changes
nothing.
"""

import copy
from types import TracebackType
from typing import Any

from src.sm_bill.domain.models import Bill
from src.sm_challenge.domain.models import Challenge
from src.sm_common.id_generator import SequenceIdGenerator
from src.sm_engine.domain.events import DealEvent
from src.sm_ledger.infrastructure.memory import InMemoryLedger
from src.sm_order.domain.models import Order


class InMemoryMarketStore:
    def __init__(self, ledger: InMemoryLedger | None = None) -> None:
        self.ledger = ledger or InMemoryLedger()
        self.bills: dict[int, Bill] = {}
        self.orders: dict[int, Order] = {}
        self.challenges: dict[int, Challenge] = {}
        self.events: list[DealEvent] = []
        self.sequences = {
            "bill": SequenceIdGenerator(),
            "order": SequenceIdGenerator(),
            "challenge": SequenceIdGenerator(),
        }

    def snapshot(self) -> dict[str, Any]:
        return {
            "ledger": self.ledger.snapshot(),
            "bills": copy.deepcopy(self.bills),
            "orders": copy.deepcopy(self.orders),
            "challenges": copy.deepcopy(self.challenges),
            "events": len(self.events),
            "sequences": {k: s.position for k, s in self.sequences.items()},
        }

    def restore(self, snap: dict[str, Any]) -> None:
        self.ledger.restore(snap["ledger"])
        self.bills = snap["bills"]
        self.orders = snap["orders"]
        self.challenges = snap["challenges"]
        del self.events[snap["events"]:]
        for kind, position in snap["sequences"].items():
            self.sequences[kind].restore(position)


class InMemoryBillRepository:
    def __init__(self, store: InMemoryMarketStore) -> None:
        self._store = store

    async def next_id(self) -> int:
        return self._store.sequences["bill"].next_id()

    async def add(self, bill: Bill) -> None:
        self._store.bills[bill.id] = copy.deepcopy(bill)

    async def get(self, bill_id: int, for_update: bool = False) -> Bill | None:
        bill = self._store.bills.get(bill_id)
        return copy.deepcopy(bill) if bill else None

    async def update(self, bill: Bill) -> None:
        self._store.bills[bill.id] = copy.deepcopy(bill)

    async def delete(self, bill_id: int) -> None:
        self._store.bills.pop(bill_id, None)

    async def list_open(self, cursor_id: int | None, limit: int) -> list[Bill]:
        ids = sorted(i for i in self._store.bills if cursor_id is None or i > cursor_id)
        return [copy.deepcopy(self._store.bills[i]) for i in ids[:limit]]


class InMemoryOrderRepository:
    def __init__(self, store: InMemoryMarketStore) -> None:
        self._store = store

    async def next_id(self) -> int:
        return self._store.sequences["order"].next_id()

    async def add(self, order: Order) -> None:
        self._store.orders[order.id] = copy.deepcopy(order)

    async def get(self, order_id: int, for_update: bool = False) -> Order | None:
        order = self._store.orders.get(order_id)
        return copy.deepcopy(order) if order else None

    async def update(self, order: Order) -> None:
        self._store.orders[order.id] = copy.deepcopy(order)

    async def delete(self, order_id: int) -> None:
        self._store.orders.pop(order_id, None)

    async def list_by_account(
        self, account: str, cursor_id: int | None, limit: int
    ) -> list[Order]:
        ids = sorted(
            (
                o.id
                for o in self._store.orders.values()
                if o.is_party(account) and (cursor_id is None or o.id > cursor_id)
            ),
        )
        return [copy.deepcopy(self._store.orders[i]) for i in ids[:limit]]


class InMemoryChallengeRepository:
    def __init__(self, store: InMemoryMarketStore) -> None:
        self._store = store

    async def next_id(self) -> int:
        return self._store.sequences["challenge"].next_id()

    async def add(self, challenge: Challenge) -> None:
        self._store.challenges[challenge.id] = copy.deepcopy(challenge)

    async def get(self, challenge_id: int, for_update: bool = False) -> Challenge | None:
        challenge = self._store.challenges.get(challenge_id)
        return copy.deepcopy(challenge) if challenge else None

    async def get_open_for_order(self, order_id: int) -> Challenge | None:
        for challenge in self._store.challenges.values():
            if challenge.order_id == order_id:
                return copy.deepcopy(challenge)
        return None

    async def delete(self, challenge_id: int) -> None:
        self._store.challenges.pop(challenge_id, None)


class InMemoryEventJournal:
    def __init__(self, store: InMemoryMarketStore) -> None:
        self._store = store

    async def append(self, event: DealEvent) -> None:
        self._store.events.append(event)


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryMarketStore) -> None:
        self._store = store
        self._snapshot: dict[str, Any] | None = None
        self.ledger = store.ledger
        self.bills = InMemoryBillRepository(store)
        self.orders = InMemoryOrderRepository(store)
        self.challenges = InMemoryChallengeRepository(store)
        self.journal = InMemoryEventJournal(store)

    async def __aenter__(self) -> "InMemoryUnitOfWork":
        self._snapshot = self._store.snapshot()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is not None and self._snapshot is not None:
            self._store.restore(self._snapshot)
        self._snapshot = None
