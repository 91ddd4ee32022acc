"""BillRepository — raw SQL persistence implementation.

Bound to the session of one unit of work; `for_update=True` takes the row
lock so concurrent writers (should a second process ever run) serialize on
the listing.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_bill.domain.models import Bill

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_NEXT_ID_SQL = text("SELECT nextval('bill_id_seq')")

_INSERT_BILL_SQL = text("""
    INSERT INTO bills (id, owner, asset, price, capacity,
        min_service_week, max_service_week, deposit_amount, start_time)
    VALUES (:id, :owner, :asset, :price, :capacity,
        :min_service_week, :max_service_week, :deposit_amount, :start_time)
""")

_UPDATE_BILL_SQL = text("""
    UPDATE bills
    SET asset = :asset, deposit_amount = :deposit_amount, updated_at = NOW()
    WHERE id = :id
""")

_DELETE_BILL_SQL = text("DELETE FROM bills WHERE id = :id")

_SELECT_COLUMNS = """
    id, owner, asset, price, capacity,
    min_service_week, max_service_week, deposit_amount, start_time
"""

_GET_BILL_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM bills WHERE id = :id")

_GET_BILL_FOR_UPDATE_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM bills WHERE id = :id FOR UPDATE")

_LIST_BILLS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM bills
    WHERE (CAST(:cursor_id AS BIGINT) IS NULL OR id > :cursor_id)
    ORDER BY id ASC
    LIMIT :limit
""")


def _row_to_bill(row: Any) -> Bill:
    return Bill(
        id=row.id,
        owner=row.owner,
        asset=row.asset,
        price=row.price,
        capacity=row.capacity,
        min_service_week=row.min_service_week,
        max_service_week=row.max_service_week,
        deposit_amount=row.deposit_amount,
        start_time=row.start_time,
    )


class BillRepository:
    """Concrete implementation of BillRepositoryProtocol using raw SQL."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def next_id(self) -> int:
        result = await self._db.execute(_NEXT_ID_SQL)
        return int(result.scalar_one())

    async def add(self, bill: Bill) -> None:
        await self._db.execute(
            _INSERT_BILL_SQL,
            {
                "id": bill.id,
                "owner": bill.owner,
                "asset": bill.asset,
                "price": bill.price,
                "capacity": bill.capacity,
                "min_service_week": bill.min_service_week,
                "max_service_week": bill.max_service_week,
                "deposit_amount": bill.deposit_amount,
                "start_time": bill.start_time,
            },
        )

    async def get(self, bill_id: int, for_update: bool = False) -> Bill | None:
        sql = _GET_BILL_FOR_UPDATE_SQL if for_update else _GET_BILL_SQL
        row = (await self._db.execute(sql, {"id": bill_id})).fetchone()
        return _row_to_bill(row) if row else None

    async def update(self, bill: Bill) -> None:
        await self._db.execute(
            _UPDATE_BILL_SQL,
            {"id": bill.id, "asset": bill.asset, "deposit_amount": bill.deposit_amount},
        )

    async def delete(self, bill_id: int) -> None:
        await self._db.execute(_DELETE_BILL_SQL, {"id": bill_id})

    async def list_open(self, cursor_id: int | None, limit: int) -> list[Bill]:
        rows = (
            await self._db.execute(_LIST_BILLS_SQL, {"cursor_id": cursor_id, "limit": limit})
        ).fetchall()
        return [_row_to_bill(r) for r in rows]
