"""SqlEventJournal: persists pond events to the pond_events table.

All queries use raw text() SQL (no ORM); the alembic migration
001_create_pond_events.py is the authoritative DDL source.
Each record() runs in its own short transaction so a journal write never
holds a session across an engine call.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pond_common.enums import PondEventType
from src.pond_events.domain.events import PondEvent

_INSERT_EVENT_SQL = text("""
    INSERT INTO pond_events (pond_id, event_type, event_ts, payload)
    VALUES (:pond_id, :event_type, :event_ts, :payload)
""")

_LIST_EVENTS_SQL = text("""
    SELECT pond_id, event_type, event_ts, payload
    FROM pond_events
    WHERE
        (CAST(:pond_id AS TEXT) IS NULL OR pond_id = CAST(:pond_id AS TEXT))
        AND (CAST(:event_type AS TEXT) IS NULL OR event_type = CAST(:event_type AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_event(row: Any) -> PondEvent:
    payload = row.payload
    if isinstance(payload, str):
        payload = json.loads(payload)
    return PondEvent(
        event_type=PondEventType(row.event_type),
        pond_id=row.pond_id,
        timestamp=row.event_ts,
        payload=payload,
    )


class SqlEventJournal:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def record(self, event: PondEvent) -> None:
        async with self._session_factory() as db:
            async with db.begin():
                await db.execute(
                    _INSERT_EVENT_SQL,
                    {
                        "pond_id": event.pond_id,
                        "event_type": event.event_type.value,
                        "event_ts": event.timestamp,
                        "payload": json.dumps(event.payload, default=str),
                    },
                )

    async def list_events(
        self,
        pond_id: str | None = None,
        event_type: PondEventType | None = None,
        limit: int = 100,
    ) -> list[PondEvent]:
        async with self._session_factory() as db:
            result = await db.execute(
                _LIST_EVENTS_SQL,
                {
                    "pond_id": pond_id,
                    "event_type": event_type.value if event_type else None,
                    "limit": limit,
                },
            )
            rows = result.fetchall()
        return [_row_to_event(r) for r in reversed(rows)]
