"""005: create orders table

Revision ID: 005
Revises: 004
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE SEQUENCE order_id_seq START 1;")
    # bill_id carries no FK: the listing may be cancelled or exhausted while the deal lives on
    op.execute("""
        CREATE TABLE orders (
            id                      BIGINT          PRIMARY KEY,
            user_account            VARCHAR(128)    NOT NULL,
            storager                VARCHAR(128)    NOT NULL,
            asset                   BIGINT          NOT NULL,
            price                   BIGINT          NOT NULL,
            service_week            INT             NOT NULL,
            user_deposit_amount     BIGINT          NOT NULL,
            storage_deposit_amount  BIGINT          NOT NULL,
            start_time              BIGINT          NOT NULL,
            last_withdraw_time      BIGINT          NOT NULL,
            bill_id                 BIGINT          NOT NULL,
            phase                   VARCHAR(20)     NOT NULL DEFAULT 'UNCOMMITTED',
            merkle_root             BYTEA,
            piece_size              BIGINT,
            leaf_count              BIGINT,
            first_prepare           VARCHAR(128),
            active_time             BIGINT          NOT NULL DEFAULT 0,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_phase CHECK (phase IN ('UNCOMMITTED', 'PROPOSED', 'ACTIVE')),
            CONSTRAINT ck_orders_asset_gt_0 CHECK (asset > 0),
            CONSTRAINT ck_orders_deposits_gte_0 CHECK (
                user_deposit_amount >= 0 AND storage_deposit_amount >= 0
            ),
            CONSTRAINT ck_orders_uncommitted CHECK (
                phase <> 'UNCOMMITTED'
                OR (merkle_root IS NULL AND first_prepare IS NULL AND active_time = 0)
            ),
            CONSTRAINT ck_orders_commitment CHECK (
                phase = 'UNCOMMITTED' OR (
                    merkle_root IS NOT NULL
                    AND octet_length(merkle_root) = 32
                    AND merkle_root <> decode(repeat('00', 32), 'hex')
                    AND piece_size > 0
                    AND leaf_count > 0
                    AND first_prepare IS NOT NULL
                )
            ),
            CONSTRAINT ck_orders_active_time CHECK (phase <> 'ACTIVE' OR active_time > 0),
            CONSTRAINT ck_orders_withdraw_after_start CHECK (last_withdraw_time >= start_time)
        );
    """)
    op.execute("CREATE INDEX idx_orders_user ON orders (user_account, id);")
    op.execute("CREATE INDEX idx_orders_storager ON orders (storager, id);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Live storage deals; all amounts in ledger token units';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
    op.execute("DROP SEQUENCE IF EXISTS order_id_seq;")
