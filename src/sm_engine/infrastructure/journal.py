"""SQL event journal — append-only deal_events rows.

Written inside the caller's transaction; a rolled-back operation leaves no
event behind.
"""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_engine.domain.events import DealEvent

_INSERT_EVENT_SQL = text("""
    INSERT INTO deal_events (event_type, entity_id, payload, event_time)
    VALUES (:event_type, :entity_id, CAST(:payload AS JSONB), :event_time)
""")


class SqlEventJournal:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def append(self, event: DealEvent) -> None:
        await self._db.execute(
            _INSERT_EVENT_SQL,
            {
                "event_type": event.event_type.value,
                "entity_id": event.entity_id,
                "payload": json.dumps(event.payload),
                "event_time": event.created_at,
            },
        )
