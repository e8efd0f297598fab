"""Ports - interfaces/protocols for external dependencies."""

from .event_store import EventStore, StoreError
from .clock import Clock, SystemClock

__all__ = [
    "EventStore",
    "StoreError",
    "Clock",
    "SystemClock",
]
