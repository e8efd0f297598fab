"""Event selection and ordering for list views - pure functions."""

import locale
from dataclasses import dataclass
from typing import Iterable

from .events import DEFAULT_TAG, Event, EventCategory


def matches(event: Event, category: EventCategory | None = None, search_text: str = "") -> bool:
    """Category filter AND case-insensitive substring search on title or notes."""
    if category is not None and event.category is not category:
        return False
    if not search_text:
        return True
    needle = search_text.casefold()
    return needle in event.title.casefold() or needle in event.notes.casefold()


def _title_key(event: Event) -> str:
    return locale.strxfrm(event.title.casefold())


def select_events(
    events: Iterable[Event],
    category: EventCategory | None = None,
    search_text: str = "",
    sort_by_date: bool = True,
) -> list[Event]:
    """
    Filter events, then order them pinned-first.

    Within the same pin status events are ordered by target date, or by
    locale-aware title when `sort_by_date` is False. The sort is stable, so
    ties keep their input order.
    Pure function - no I/O.
    """
    selected = [e for e in events if matches(e, category, search_text)]
    if sort_by_date:
        return sorted(selected, key=lambda e: (not e.is_pinned, e.target_date))
    return sorted(selected, key=lambda e: (not e.is_pinned, _title_key(e)))


def filter_by_tag(events: Iterable[Event], tag: str = DEFAULT_TAG) -> list[Event]:
    """Events carrying `tag` (the "viewable events" list)."""
    return [e for e in events if e.tag == tag]


@dataclass
class EventStatistics:
    total: int
    pinned: int


def summarize(events: Iterable[Event]) -> EventStatistics:
    events = list(events)
    return EventStatistics(total=len(events), pinned=sum(1 for e in events if e.is_pinned))


@dataclass
class EventQuery:
    """The user's current filter and sort preferences for a list view."""

    category: EventCategory | None = None
    search_text: str = ""
    sort_by_date: bool = True

    def apply(self, events: Iterable[Event]) -> list[Event]:
        return select_events(events, self.category, self.search_text, self.sort_by_date)

    def toggle_sort(self) -> None:
        self.sort_by_date = not self.sort_by_date
