"""Clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current local time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall-clock time of the local machine."""

    def now(self) -> datetime:
        return datetime.now()
