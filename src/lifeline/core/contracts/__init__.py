"""Typed Pydantic contracts shared across the core, the CLI and the API."""

from __future__ import annotations

from .event import CATEGORY_COLORS, Category, EventDraft, LifeEvent
from .imports import ImportKind, ImportReport, RowIssue
from .timeline import (
    CategoryMatches,
    Container,
    EventBar,
    Snapshot,
    Tick,
    TimelineLayout,
)

__all__ = [
    "CATEGORY_COLORS",
    "Category",
    "EventDraft",
    "LifeEvent",
    "ImportKind",
    "ImportReport",
    "RowIssue",
    "CategoryMatches",
    "Container",
    "EventBar",
    "Snapshot",
    "Tick",
    "TimelineLayout",
]
