"""Calendar-day arithmetic anchored to a fixed reference hour."""

from datetime import date, datetime, time, timedelta

# Comparing at 06:00 instead of midnight keeps DST shifts and late-night
# edits from moving an instant onto a neighbouring day.
REFERENCE_HOUR = 6


def _as_datetime(moment: date | datetime) -> datetime:
    if isinstance(moment, datetime):
        return moment
    return datetime.combine(moment, time.min)


def normalize(moment: date | datetime) -> datetime:
    """Same calendar day as `moment`, at the reference hour."""
    return _as_datetime(moment).replace(hour=REFERENCE_HOUR, minute=0, second=0, microsecond=0)


def days_between(a: date | datetime, b: date | datetime) -> int:
    """
    Signed number of calendar days from `a` to `b`.

    Both instants are normalized to the reference hour first, so only the
    calendar day matters. Negative when `b` precedes `a`.
    Pure function - no I/O.
    """
    return (normalize(b).date() - normalize(a).date()).days


def start_of_day(moment: date | datetime) -> datetime:
    """Midnight at the start of `moment`'s calendar day."""
    return _as_datetime(moment).replace(hour=0, minute=0, second=0, microsecond=0)


def next_midnight(moment: datetime) -> datetime:
    """The first midnight strictly after `moment`."""
    return start_of_day(moment) + timedelta(days=1)
