"""Adapters - I/O implementations of ports."""

from .memory_store import InMemoryEventStore
from .json_store import JsonEventStore

__all__ = [
    "InMemoryEventStore",
    "JsonEventStore",
]
