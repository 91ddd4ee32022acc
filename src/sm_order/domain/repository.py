"""OrderRepository Protocol — interface contract for persistence layer."""

from typing import Protocol

from src.sm_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def next_id(self) -> int: ...

    async def add(self, order: Order) -> None: ...

    async def get(self, order_id: int, for_update: bool = False) -> Order | None: ...

    async def update(self, order: Order) -> None: ...

    async def delete(self, order_id: int) -> None: ...

    async def list_by_account(
        self, account: str, cursor_id: int | None, limit: int
    ) -> list[Order]: ...
