"""ChallengeRepository Protocol — interface contract for persistence layer."""

from typing import Protocol

from src.sm_challenge.domain.models import Challenge


class ChallengeRepositoryProtocol(Protocol):
    async def next_id(self) -> int: ...

    async def add(self, challenge: Challenge) -> None: ...

    async def get(self, challenge_id: int, for_update: bool = False) -> Challenge | None: ...

    async def get_open_for_order(self, order_id: int) -> Challenge | None: ...

    async def delete(self, challenge_id: int) -> None: ...
