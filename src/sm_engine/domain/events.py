"""Deal events — the only history the market keeps once a record is removed.

Appended inside the same unit of work as the transition they describe, so a
rolled-back operation leaves no event behind.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.sm_common.enums import DealEventType


@dataclass
class DealEvent:
    event_type: DealEventType
    entity_id: int
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0


class EventJournalProtocol(Protocol):
    async def append(self, event: DealEvent) -> None: ...
