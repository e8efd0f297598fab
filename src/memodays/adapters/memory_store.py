"""In-memory event store."""

from memodays.core.events import Event


class InMemoryEventStore:
    """
    Event store held entirely in memory.

    Implements EventStore protocol. save() is a no-op.
    """

    def __init__(self, events: list[Event] | None = None):
        self._events: dict[str, Event] = {e.id: e for e in events or []}

    def insert(self, event: Event) -> None:
        self._events[event.id] = event

    def delete(self, event: Event) -> None:
        self._events.pop(event.id, None)

    def fetch_all(self) -> list[Event]:
        return list(self._events.values())

    def get(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    def save(self) -> None:
        pass
