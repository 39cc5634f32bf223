"""In-process event journal: append-only list, newest last."""

from src.pond_common.enums import PondEventType
from src.pond_events.domain.events import PondEvent


class InMemoryEventJournal:
    def __init__(self) -> None:
        self._events: list[PondEvent] = []

    async def record(self, event: PondEvent) -> None:
        self._events.append(event)

    async def list_events(
        self,
        pond_id: str | None = None,
        event_type: PondEventType | None = None,
        limit: int = 100,
    ) -> list[PondEvent]:
        matched = [
            e
            for e in self._events
            if (pond_id is None or e.pond_id == pond_id)
            and (event_type is None or e.event_type is event_type)
        ]
        return matched[-limit:]

    @property
    def events(self) -> list[PondEvent]:
        return list(self._events)
