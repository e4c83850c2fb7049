"""Event store and its persistence adapters."""

from __future__ import annotations

from .memory import DeleteState, EventStore
from .storage import EventStorage, JsonFileStorage, MemoryStorage

__all__ = ["DeleteState", "EventStore", "EventStorage", "JsonFileStorage", "MemoryStorage"]
