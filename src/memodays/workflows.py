"""Shared workflow layer for the add, edit, pin and delete flows.

Each flow mutates through the Event API (which invalidates the event's
cached state), then commits the store. A failed commit is logged and
reported through the return value; the in-memory events stay usable.
"""

import logging
from datetime import datetime

from .adapters.json_store import JsonEventStore
from .config import Config
from .core.events import DEFAULT_TAG, Event, EventCategory
from .ports.event_store import EventStore, StoreError

logger = logging.getLogger(__name__)


class EventNotFound(LookupError):
    """No event (or more than one) matches an id prefix."""


def get_store(config: Config) -> JsonEventStore:
    """Resolve the events file from config."""
    return JsonEventStore(config.data_path)


def commit(store: EventStore, action: str) -> bool:
    """Save the store; log and return False on failure."""
    try:
        store.save()
    except StoreError as e:
        logger.error(f"Failed to save after {action}: {e}")
        return False
    return True


def find_event(store: EventStore, id_prefix: str) -> Event:
    """Look up an event by full id or unambiguous id prefix."""
    event = store.get(id_prefix)
    if event is not None:
        return event
    candidates = [e for e in store.fetch_all() if e.id.startswith(id_prefix)]
    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise EventNotFound(f"No event with id {id_prefix!r}")
    raise EventNotFound(f"Id prefix {id_prefix!r} matches {len(candidates)} events")


def add_event(
    store: EventStore,
    title: str,
    start_date: datetime,
    category: EventCategory = EventCategory.GENERAL,
    notes: str = "",
    tag: str = DEFAULT_TAG,
    now: datetime | None = None,
) -> tuple[Event, bool]:
    """Create, insert and save a new event.

    Returns the event and whether it was saved; the event stays in the store
    even if saving failed.
    """
    if not title.strip():
        raise ValueError("Event title must not be empty")
    event = Event.create(title, start_date, category, notes=notes, tag=tag, now=now)
    store.insert(event)
    saved = commit(store, f"adding {title!r}")
    if saved:
        logger.info(f"Added event {event.id} ({title!r})")
    return event, saved


def edit_event(store: EventStore, event: Event, now: datetime | None = None, **changes) -> bool:
    """Apply edit-flow changes to an event and save."""
    if "title" in changes and not str(changes["title"]).strip():
        raise ValueError("Event title must not be empty")
    event.update(now=now, **changes)
    return commit(store, f"editing {event.title!r}")


def toggle_pin(store: EventStore, event: Event) -> bool:
    event.toggle_pin()
    return commit(store, f"pinning {event.title!r}")


def delete_event(store: EventStore, event: Event) -> bool:
    store.delete(event)
    saved = commit(store, f"deleting {event.title!r}")
    if saved:
        logger.info(f"Deleted event {event.id} ({event.title!r})")
    return saved
