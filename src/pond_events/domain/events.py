"""Auditable pond events and the journal Protocol they are written to."""

from dataclasses import dataclass, field
from typing import Any, Protocol

from src.pond_common.enums import PondEventType


@dataclass(frozen=True)
class PondEvent:
    event_type: PondEventType
    pond_id: str
    timestamp: int
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "pond_id": self.pond_id,
            "timestamp": self.timestamp,
            "payload": self.payload,
        }


class EventJournal(Protocol):
    async def record(self, event: PondEvent) -> None: ...

    async def list_events(
        self,
        pond_id: str | None = None,
        event_type: PondEventType | None = None,
        limit: int = 100,
    ) -> list[PondEvent]: ...


# pond_id used for events that are not tied to a single pond
ENGINE_SCOPE = "engine"


async def emit(
    journal: EventJournal,
    event_type: PondEventType,
    pond_id: str,
    timestamp: int,
    **payload: Any,
) -> PondEvent:
    event = PondEvent(event_type=event_type, pond_id=pond_id, timestamp=timestamp, payload=payload)
    await journal.record(event)
    return event
