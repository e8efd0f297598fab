"""Event entity with memoized, date-relative derived state - no I/O dependencies."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .days import days_between
from .recurrence import (
    AnniversaryArithmeticError,
    add_years,
    next_occurrence,
    whole_years_between,
)

logger = logging.getLogger(__name__)

DEFAULT_TAG = "event"


class EventCategory(Enum):
    """What kind of day an event marks."""

    GENERAL = "general"
    WORK = "work"
    PERSONAL = "personal"
    BIRTHDAY = "birthday"

    @classmethod
    def parse(cls, value: "str | EventCategory | None") -> "EventCategory":
        """Lenient lookup by value or name; unknown values map to GENERAL."""
        if isinstance(value, cls):
            return value
        if value:
            key = str(value).strip().lower()
            for category in cls:
                if key in (category.value, category.name.lower()):
                    return category
        return cls.GENERAL


@dataclass
class DerivedCache:
    """Transient memo slots owned by a single event; never persisted."""

    next_target_date: datetime | None = None
    days_remaining: int | None = None

    def clear(self) -> None:
        self.next_target_date = None
        self.days_remaining = None


_EDITABLE_FIELDS = {"title", "start_date", "category", "notes", "tag", "is_pinned"}


@dataclass
class Event:
    """A tracked day: a one-shot deadline or a yearly anniversary."""

    title: str
    start_date: datetime
    target_date: datetime
    category: EventCategory = EventCategory.GENERAL
    is_pinned: bool = False
    notes: str = ""
    tag: str = DEFAULT_TAG
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _cache: DerivedCache = field(default_factory=DerivedCache, init=False, repr=False, compare=False)

    @property
    def is_recurring(self) -> bool:
        """Birthdays recur every year; everything else happens once."""
        return self.category is EventCategory.BIRTHDAY

    @classmethod
    def create(
        cls,
        title: str,
        start_date: datetime,
        category: EventCategory = EventCategory.GENERAL,
        notes: str = "",
        tag: str = DEFAULT_TAG,
        now: datetime | None = None,
    ) -> "Event":
        """Create an event, fixing its target date from the start date and category."""
        return cls(
            title=title,
            start_date=start_date,
            target_date=_initial_target(start_date, category, now),
            category=category,
            notes=notes,
            tag=tag,
        )

    # ---- derived state ----

    def next_target_date(self, now: datetime | None = None) -> datetime:
        """Target date, or the next yearly occurrence for recurring events (memoized)."""
        if self._cache.next_target_date is None:
            if self.is_recurring:
                value = next_occurrence(self.start_date, now or datetime.now())
            else:
                value = self.target_date
            self._cache.next_target_date = value
        return self._cache.next_target_date

    def days_remaining(self, now: datetime | None = None) -> int:
        """
        Calendar days until the next target date (memoized).

        0 means today. Negative values only happen for one-shot events whose
        target date has passed.
        """
        if self._cache.days_remaining is None:
            now = now or datetime.now()
            self._cache.days_remaining = days_between(now, self.next_target_date(now))
        return self._cache.days_remaining

    def total_days_passed(self, now: datetime | None = None) -> int:
        """Days since the start date. Not cached."""
        return days_between(self.start_date, now or datetime.now())

    def anniversary_years(self, now: datetime | None = None) -> int:
        return whole_years_between(self.start_date, now or datetime.now())

    def anniversary_days(self, now: datetime | None = None) -> int:
        """Days since the most recent anniversary (or since the start in year one)."""
        now = now or datetime.now()
        years = self.anniversary_years(now)
        if years == 0:
            return self.total_days_passed(now)
        try:
            last_anniversary = add_years(self.start_date, years)
        except AnniversaryArithmeticError as e:
            logger.warning(f"{self.title}: {e}")
            return self.total_days_passed(now)
        return days_between(last_anniversary, now)

    def days_display(self, now: datetime | None = None) -> str:
        """Human-readable countdown."""
        days = self.days_remaining(now)
        if days == 0:
            return "today"
        if days > 0:
            return f"{days} day remaining" if days == 1 else f"{days} days remaining"
        return f"elapsed {abs(days)} day" if days == -1 else f"elapsed {abs(days)} days"

    def reset_cache(self) -> None:
        """Drop memoized derived values; the next read recomputes them."""
        self._cache.clear()

    def force_refresh(self) -> None:
        self.reset_cache()
        logger.debug(f"{self.title} cache reset at {datetime.now().isoformat()}")

    # ---- mutation ----

    def toggle_pin(self) -> None:
        self.is_pinned = not self.is_pinned
        self.reset_cache()

    def update(self, now: datetime | None = None, **changes) -> None:
        """
        Edit-flow mutation.

        Changing the start date or category recomputes the target date the
        same way creation does. Always invalidates the cache.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")
        if "category" in changes:
            changes["category"] = EventCategory.parse(changes["category"])
        for name, value in changes.items():
            setattr(self, name, value)
        if "start_date" in changes or "category" in changes:
            self.target_date = _initial_target(self.start_date, self.category, now)
        self.reset_cache()

    # ---- serialization ----

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start_date": self.start_date.isoformat(),
            "target_date": self.target_date.isoformat(),
            "category": self.category.value,
            "is_pinned": self.is_pinned,
            "notes": self.notes,
            "tag": self.tag,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        start = datetime.fromisoformat(data["start_date"])
        return cls(
            id=data.get("id") or uuid.uuid4().hex,
            title=data["title"],
            start_date=start,
            target_date=datetime.fromisoformat(data["target_date"]) if data.get("target_date") else start,
            category=EventCategory.parse(data.get("category")),
            is_pinned=bool(data.get("is_pinned", False)),
            notes=data.get("notes", ""),
            tag=data.get("tag", DEFAULT_TAG),
        )


def _initial_target(start_date: datetime, category: EventCategory, now: datetime | None) -> datetime:
    if category is EventCategory.BIRTHDAY:
        return next_occurrence(start_date, now or datetime.now())
    return start_date
