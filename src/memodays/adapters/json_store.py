"""JSON file event store adapter."""

import json
import logging
import os
from pathlib import Path

from memodays.core.events import Event
from memodays.ports.event_store import StoreError

logger = logging.getLogger(__name__)


class JsonEventStore:
    """
    File-based event store.

    Implements EventStore protocol. All events live in one UTF-8 JSON file
    that is rewritten on save(). Reads pick up changes another process saved
    to the file, as long as this store has no unsaved mutations. Events whose
    stored fields did not change keep their Event object, and with it their
    cache.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self._events: dict[str, Event] | None = None
        self._loaded_stamp: tuple[int, int] | None = None
        self._dirty = False

    def _stamp(self) -> tuple[int, int] | None:
        """(mtime_ns, size) of the file, or None if it does not exist."""
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(f"Cannot stat {self.path}: {e}") from e
        return st.st_mtime_ns, st.st_size

    def _load(self) -> dict[str, Event]:
        if self._events is not None and self._dirty:
            return self._events
        stamp = self._stamp()
        if self._events is not None and stamp == self._loaded_stamp:
            return self._events

        loaded: dict[str, Event] = {}
        if stamp is not None:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
                for item in data.get("events", []):
                    event = Event.from_dict(item)
                    loaded[event.id] = event
            except (OSError, json.JSONDecodeError, KeyError, ValueError, AttributeError) as e:
                raise StoreError(f"Cannot read events from {self.path}: {e}") from e

        previous = self._events or {}
        for event_id, event in loaded.items():
            known = previous.get(event_id)
            if known is not None and known == event:
                loaded[event_id] = known

        if self._events is not None:
            logger.info(f"{self.path} changed on disk, reloaded {len(loaded)} events")
        else:
            logger.debug(f"Loaded {len(loaded)} events from {self.path}")
        self._events = loaded
        self._loaded_stamp = stamp
        return self._events

    def insert(self, event: Event) -> None:
        self._load()[event.id] = event
        self._dirty = True

    def delete(self, event: Event) -> None:
        self._load().pop(event.id, None)
        self._dirty = True

    def fetch_all(self) -> list[Event]:
        return list(self._load().values())

    def get(self, event_id: str) -> Event | None:
        return self._load().get(event_id)

    def save(self) -> None:
        """Write all events, replacing the file atomically."""
        events = self._events if self._events is not None else self._load()
        payload = json.dumps({"events": [e.to_dict() for e in events.values()]}, indent=2, ensure_ascii=False)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, UnicodeError) as e:
            if tmp.exists():
                tmp.unlink()
            raise StoreError(f"Cannot write events to {self.path}: {e}") from e
        self._dirty = False
        self._loaded_stamp = self._stamp()
        logger.debug(f"Saved {len(events)} events to {self.path}")
