"""Yearly recurrence projection and anniversary arithmetic."""

import calendar
import logging
from datetime import date, datetime, time

from dateutil.relativedelta import relativedelta

from .days import start_of_day

logger = logging.getLogger(__name__)


class RecurrenceError(ValueError):
    """No next occurrence could be produced for an anchor's month/day."""


class AnniversaryArithmeticError(ValueError):
    """Adding whole years to an anchor date failed."""


def _occurrence_in(year: int, month: int, day: int) -> date:
    """The anchor's month/day in `year`, rolling Feb 29 to Mar 1 in common years."""
    if month == 2 and day == 29 and not calendar.isleap(year):
        month, day = 3, 1
    try:
        return date(year, month, day)
    except ValueError as e:
        raise RecurrenceError(f"No {month:02d}-{day:02d} in {year}: {e}") from e


def project_occurrence(anchor: date | datetime, now: date | datetime) -> datetime:
    """
    Start of the first calendar day on or after `now` matching `anchor`'s month/day.

    The anchor's day itself counts when `now` falls on it, so a birthday is
    "today" for the whole day. Raises RecurrenceError when no date exists.
    """
    today = start_of_day(now)
    for year in (today.year, today.year + 1):
        candidate = _occurrence_in(year, anchor.month, anchor.day)
        if candidate >= today.date():
            return datetime.combine(candidate, time.min, tzinfo=today.tzinfo)
    raise RecurrenceError(f"No occurrence of {anchor.month:02d}-{anchor.day:02d} after {today.date()}")


def next_occurrence(anchor: datetime, now: datetime) -> datetime:
    """Next yearly occurrence of `anchor`, or `anchor` itself if none can be computed."""
    try:
        return project_occurrence(anchor, now)
    except RecurrenceError as e:
        logger.warning(f"Falling back to anchor {anchor.isoformat()}: {e}")
        return anchor


def add_years(moment: datetime, years: int) -> datetime:
    """`moment` shifted by whole years; Feb 29 clamps to Feb 28."""
    try:
        return moment + relativedelta(years=years)
    except (ValueError, OverflowError) as e:
        raise AnniversaryArithmeticError(f"Cannot add {years} years to {moment.isoformat()}: {e}") from e


def whole_years_between(start: date | datetime, end: date | datetime) -> int:
    """Whole calendar years from `start` to `end` (0 if `end` is earlier)."""
    start_day = start_of_day(start).date()
    end_day = start_of_day(end).date()
    if end_day < start_day:
        return 0
    return relativedelta(end_day, start_day).years
