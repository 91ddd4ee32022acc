"""BillRepository Protocol — interface contract for persistence layer."""

from typing import Protocol

from src.sm_bill.domain.models import Bill


class BillRepositoryProtocol(Protocol):
    async def next_id(self) -> int: ...

    async def add(self, bill: Bill) -> None: ...

    async def get(self, bill_id: int, for_update: bool = False) -> Bill | None: ...

    async def update(self, bill: Bill) -> None: ...

    async def delete(self, bill_id: int) -> None: ...

    async def list_open(self, cursor_id: int | None, limit: int) -> list[Bill]: ...
