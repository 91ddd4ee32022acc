"""007: create deal_events table

Revision ID: 007
Revises: 006
Create Date: 2026-10-12
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE deal_events (
            id              BIGSERIAL       PRIMARY KEY,
            event_type      VARCHAR(30)     NOT NULL,
            entity_id       BIGINT          NOT NULL,
            payload         JSONB           NOT NULL DEFAULT '{}'::jsonb,
            event_time      BIGINT          NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_deal_event_type CHECK (
                event_type IN (
                    'BILL_CREATED', 'BILL_CANCELLED', 'BILL_EXHAUSTED',
                    'ORDER_CREATED', 'ORDER_CANCELLED', 'ORDER_PREPARED',
                    'ORDER_ACTIVATED', 'ORDER_WITHDRAWN', 'ORDER_FINISHED',
                    'CHALLENGE_STARTED', 'CHALLENGE_PROVED', 'ORDER_SLASHED'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_deal_events_entity ON deal_events (entity_id, id);")
    op.execute("CREATE INDEX idx_deal_events_type_time ON deal_events (event_type, event_time);")
    op.execute("COMMENT ON TABLE deal_events IS 'Append-only market event journal, never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS deal_events CASCADE;")
