"""ChallengeRepository — raw SQL persistence implementation."""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_challenge.domain.models import Challenge

_NEXT_ID_SQL = text("SELECT nextval('challenge_id_seq')")

_INSERT_CHALLENGE_SQL = text("""
    INSERT INTO challenges (id, order_id, piece_index, mhash, start_time)
    VALUES (:id, :order_id, :piece_index, :mhash, :start_time)
""")

_DELETE_CHALLENGE_SQL = text("DELETE FROM challenges WHERE id = :id")

_SELECT_COLUMNS = "id, order_id, piece_index, mhash, start_time"

_GET_CHALLENGE_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM challenges WHERE id = :id")

_GET_CHALLENGE_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM challenges WHERE id = :id FOR UPDATE"
)

_GET_BY_ORDER_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM challenges WHERE order_id = :order_id")


def _row_to_challenge(row: Any) -> Challenge:
    return Challenge(
        id=row.id,
        order_id=row.order_id,
        index=row.piece_index,
        mhash=bytes(row.mhash),
        start_time=row.start_time,
    )


class ChallengeRepository:
    """Concrete implementation of ChallengeRepositoryProtocol using raw SQL."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def next_id(self) -> int:
        result = await self._db.execute(_NEXT_ID_SQL)
        return int(result.scalar_one())

    async def add(self, challenge: Challenge) -> None:
        await self._db.execute(
            _INSERT_CHALLENGE_SQL,
            {
                "id": challenge.id,
                "order_id": challenge.order_id,
                "piece_index": challenge.index,
                "mhash": challenge.mhash,
                "start_time": challenge.start_time,
            },
        )

    async def get(self, challenge_id: int, for_update: bool = False) -> Challenge | None:
        sql = _GET_CHALLENGE_FOR_UPDATE_SQL if for_update else _GET_CHALLENGE_SQL
        row = (await self._db.execute(sql, {"id": challenge_id})).fetchone()
        return _row_to_challenge(row) if row else None

    async def get_open_for_order(self, order_id: int) -> Challenge | None:
        row = (await self._db.execute(_GET_BY_ORDER_SQL, {"order_id": order_id})).fetchone()
        return _row_to_challenge(row) if row else None

    async def delete(self, challenge_id: int) -> None:
        await self._db.execute(_DELETE_CHALLENGE_SQL, {"id": challenge_id})
