"""OrderRepository — raw SQL persistence implementation.

The commitment variant is flattened into (phase, merkle_root, piece_size,
leaf_count, first_prepare, active_time) columns; the table's CHECK
constraints mirror the variant's rules and `_row_to_state` rebuilds it.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sm_common.enums import OrderPhase
from src.sm_order.domain.models import (
    Activated,
    Commitment,
    CommitmentState,
    Order,
    Proposed,
    Uncommitted,
)

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_NEXT_ID_SQL = text("SELECT nextval('order_id_seq')")

_INSERT_ORDER_SQL = text("""
    INSERT INTO orders (id, user_account, storager, asset, price, service_week,
        user_deposit_amount, storage_deposit_amount, start_time, last_withdraw_time,
        bill_id, phase, merkle_root, piece_size, leaf_count, first_prepare, active_time)
    VALUES (:id, :user_account, :storager, :asset, :price, :service_week,
        :user_deposit_amount, :storage_deposit_amount, :start_time, :last_withdraw_time,
        :bill_id, :phase, :merkle_root, :piece_size, :leaf_count, :first_prepare, :active_time)
""")

_UPDATE_ORDER_SQL = text("""
    UPDATE orders
    SET user_deposit_amount = :user_deposit_amount,
        last_withdraw_time = :last_withdraw_time,
        phase = :phase, merkle_root = :merkle_root,
        piece_size = :piece_size, leaf_count = :leaf_count,
        first_prepare = :first_prepare, active_time = :active_time,
        updated_at = NOW()
    WHERE id = :id
""")

_DELETE_ORDER_SQL = text("DELETE FROM orders WHERE id = :id")

_SELECT_COLUMNS = """
    id, user_account, storager, asset, price, service_week,
    user_deposit_amount, storage_deposit_amount, start_time, last_withdraw_time,
    bill_id, phase, merkle_root, piece_size, leaf_count, first_prepare, active_time
"""

_GET_ORDER_SQL = text(f"SELECT {_SELECT_COLUMNS} FROM orders WHERE id = :id")

_GET_ORDER_FOR_UPDATE_SQL = text(
    f"SELECT {_SELECT_COLUMNS} FROM orders WHERE id = :id FOR UPDATE"
)

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (user_account = :account OR storager = :account)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id > :cursor_id)
    ORDER BY id ASC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _row_to_state(row: Any) -> CommitmentState:
    if row.phase == OrderPhase.UNCOMMITTED.value:
        return Uncommitted()
    commitment = Commitment(bytes(row.merkle_root), row.piece_size, row.leaf_count)
    if row.phase == OrderPhase.PROPOSED.value:
        return Proposed(commitment, row.first_prepare)
    return Activated(commitment, row.first_prepare, row.active_time)


def _row_to_order(row: Any) -> Order:
    return Order(
        id=row.id,
        user=row.user_account,
        storager=row.storager,
        asset=row.asset,
        price=row.price,
        service_week=row.service_week,
        user_deposit_amount=row.user_deposit_amount,
        storage_deposit_amount=row.storage_deposit_amount,
        start_time=row.start_time,
        last_withdraw_time=row.last_withdraw_time,
        bill_id=row.bill_id,
        state=_row_to_state(row),
    )


def _state_params(order: Order) -> dict[str, Any]:
    commitment = order.commitment
    return {
        "phase": order.phase.value,
        "merkle_root": commitment.merkle_root if commitment else None,
        "piece_size": commitment.piece_size if commitment else None,
        "leaf_count": commitment.leaf_count if commitment else None,
        "first_prepare": order.first_prepare,
        "active_time": order.active_time,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def next_id(self) -> int:
        result = await self._db.execute(_NEXT_ID_SQL)
        return int(result.scalar_one())

    async def add(self, order: Order) -> None:
        await self._db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "user_account": order.user,
                "storager": order.storager,
                "asset": order.asset,
                "price": order.price,
                "service_week": order.service_week,
                "user_deposit_amount": order.user_deposit_amount,
                "storage_deposit_amount": order.storage_deposit_amount,
                "start_time": order.start_time,
                "last_withdraw_time": order.last_withdraw_time,
                "bill_id": order.bill_id,
                **_state_params(order),
            },
        )

    async def get(self, order_id: int, for_update: bool = False) -> Order | None:
        sql = _GET_ORDER_FOR_UPDATE_SQL if for_update else _GET_ORDER_SQL
        row = (await self._db.execute(sql, {"id": order_id})).fetchone()
        return _row_to_order(row) if row else None

    async def update(self, order: Order) -> None:
        await self._db.execute(
            _UPDATE_ORDER_SQL,
            {
                "id": order.id,
                "user_deposit_amount": order.user_deposit_amount,
                "last_withdraw_time": order.last_withdraw_time,
                **_state_params(order),
            },
        )

    async def delete(self, order_id: int) -> None:
        await self._db.execute(_DELETE_ORDER_SQL, {"id": order_id})

    async def list_by_account(
        self, account: str, cursor_id: int | None, limit: int
    ) -> list[Order]:
        rows = (
            await self._db.execute(
                _LIST_ORDERS_SQL, {"account": account, "cursor_id": cursor_id, "limit": limit}
            )
        ).fetchall()
        return [_row_to_order(r) for r in rows]
