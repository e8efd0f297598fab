"""Event store interface."""

from typing import Protocol

from memodays.core.events import Event


class StoreError(Exception):
    """The backing store could not be read or written."""


class EventStore(Protocol):
    """Interface for keeping events in any backend."""

    def insert(self, event: Event) -> None:
        """Add an event. Not durable until save()."""
        ...

    def delete(self, event: Event) -> None:
        """Remove an event. Not durable until save()."""
        ...

    def fetch_all(self) -> list[Event]:
        """All events currently held by the store."""
        ...

    def get(self, event_id: str) -> Event | None:
        """Look up an event by id. Returns None if not found."""
        ...

    def save(self) -> None:
        """Commit pending mutations. Raises StoreError on failure."""
        ...
