"""006: create challenges table

Revision ID: 006
Revises: 005
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("CREATE SEQUENCE challenge_id_seq START 1;")
    op.execute("""
        CREATE TABLE challenges (
            id              BIGINT          PRIMARY KEY,
            order_id        BIGINT          NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
            piece_index     BIGINT          NOT NULL,
            mhash           BYTEA           NOT NULL,
            start_time      BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_challenges_order  UNIQUE (order_id),
            CONSTRAINT ck_challenges_mhash_len CHECK (octet_length(mhash) = 32),
            CONSTRAINT ck_challenges_index_gte_0 CHECK (piece_index >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE challenges IS 'Open challenges, at most one per order';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS challenges CASCADE;")
    op.execute("DROP SEQUENCE IF EXISTS challenge_id_seq;")
