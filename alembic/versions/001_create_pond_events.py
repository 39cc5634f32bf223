"""001: create pond_events table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_EVENT_TYPES = (
    "POND_CREATED",
    "POND_REMOVED",
    "TOSS",
    "TOP_UP",
    "TOP_UP_CARRIED_OVER",
    "TOP_UP_RETURNED",
    "TOP_UP_STRANDED",
    "PARTICIPANT_LIMIT_WARNING",
    "WINNER_SELECTED",
    "SELECTION_DIAGNOSTICS",
    "SELECTION_FAILED",
    "POND_RESET",
    "POND_CLOSED",
    "PARTICIPANTS_CLEARED",
    "REFUND",
    "REFUND_FAILED",
    "EMERGENCY_RESET",
    "EMERGENCY_WITHDRAW",
    "CONFIG_UPDATED",
    "POND_LIMITS_UPDATED",
)


def upgrade() -> None:
    allowed = ", ".join(f"'{t}'" for t in _EVENT_TYPES)
    op.execute(f"""
        CREATE TABLE pond_events (
            id              BIGSERIAL       PRIMARY KEY,
            pond_id         VARCHAR(66)     NOT NULL,
            event_type      VARCHAR(40)     NOT NULL,
            event_ts        BIGINT          NOT NULL,
            payload         JSONB           NOT NULL DEFAULT '{{}}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_pond_event_type CHECK (event_type IN ({allowed}))
        );
    """)
    op.execute("CREATE INDEX idx_pond_events_pond ON pond_events (pond_id, id);")
    op.execute("CREATE INDEX idx_pond_events_type ON pond_events (event_type, id);")
    op.execute("CREATE INDEX idx_pond_events_winner ON pond_events USING GIN ((payload->'winner'));")
    op.execute("COMMENT ON TABLE pond_events IS 'Pond lifecycle journal: append-only, one row per emitted event';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS pond_events CASCADE;")
