"""Functional core - pure date arithmetic and selection logic with no I/O."""

from .days import REFERENCE_HOUR, days_between, next_midnight, normalize
from .recurrence import (
    AnniversaryArithmeticError,
    RecurrenceError,
    add_years,
    next_occurrence,
    project_occurrence,
)
from .events import DEFAULT_TAG, Event, EventCategory
from .selection import EventQuery, EventStatistics, filter_by_tag, select_events, summarize

__all__ = [
    # Days
    "REFERENCE_HOUR",
    "days_between",
    "next_midnight",
    "normalize",
    # Recurrence
    "AnniversaryArithmeticError",
    "RecurrenceError",
    "add_years",
    "next_occurrence",
    "project_occurrence",
    # Events
    "DEFAULT_TAG",
    "Event",
    "EventCategory",
    # Selection
    "EventQuery",
    "EventStatistics",
    "filter_by_tag",
    "select_events",
    "summarize",
]
