"""004: create bills table

Revision ID: 004
Revises: 003
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Ids are handed out from a sequence and never reused, even after delete
    op.execute("CREATE SEQUENCE bill_id_seq START 1;")
    op.execute("""
        CREATE TABLE bills (
            id                  BIGINT          PRIMARY KEY,
            owner               VARCHAR(128)    NOT NULL,
            asset               BIGINT          NOT NULL,
            price               BIGINT          NOT NULL,
            capacity            BIGINT          NOT NULL,
            min_service_week    INT             NOT NULL,
            max_service_week    INT             NOT NULL,
            deposit_amount      BIGINT          NOT NULL,
            start_time          BIGINT          NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_bills_asset_gt_0      CHECK (asset > 0),
            CONSTRAINT ck_bills_price_gt_0      CHECK (price > 0),
            CONSTRAINT ck_bills_capacity_gt_0   CHECK (capacity > 0),
            CONSTRAINT ck_bills_week_range      CHECK (
                min_service_week >= 1 AND min_service_week <= max_service_week
            ),
            CONSTRAINT ck_bills_deposit_gte_0   CHECK (deposit_amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_bills_owner ON bills (owner);")
    op.execute("""
        CREATE TRIGGER trg_bills_updated_at
            BEFORE UPDATE ON bills
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE bills IS 'Open capacity listings; rows vanish on cancel or depletion';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS bills CASCADE;")
    op.execute("DROP SEQUENCE IF EXISTS bill_id_seq;")
