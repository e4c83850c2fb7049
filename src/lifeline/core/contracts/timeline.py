"""Timeline contracts: point-in-time snapshots and projected layout geometry.

These models are the read-side outputs of the core. Rendering collaborators
consume them as-is; nothing here refers back to a store.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from .event import Category, LifeEvent


class CategoryMatches(BaseModel):
    """Events of one category that were true on the query date."""

    category: Category
    matches: list[LifeEvent] = Field(default_factory=list)


class Snapshot(BaseModel):
    """Per-category grouping of events matching a single query date."""

    query_date: date
    executed_at: datetime = Field(description="Wall-clock instant ongoing events close at.")
    results: list[CategoryMatches] = Field(description="One entry per category, fixed order.")

    def for_category(self, category: Category) -> list[LifeEvent]:
        """Return the matches for `category` (empty list if none)."""
        for group in self.results:
            if group.category == category:
                return group.matches
        return []

    @property
    def total(self) -> int:
        return sum(len(g.matches) for g in self.results)


class Container(BaseModel):
    """Size of the drawing surface supplied by the rendering collaborator."""

    width: float = Field(default=800.0, gt=0)
    height: float = Field(default=400.0, gt=0)


class Tick(BaseModel):
    """One evenly spaced axis label point."""

    when: date
    x: float


class EventBar(BaseModel):
    """Rendered geometry for one event row."""

    event_id: str
    category: Category
    title: str
    color: str
    row: int = Field(ge=0)
    x: float
    y: float
    width: float
    height: float
    ongoing: bool = False


class TimelineLayout(BaseModel):
    """Complete geometry for one timeline draw."""

    min_date: date
    max_date: date
    container: Container
    axis_y: float = Field(description="Baseline of the tick axis.")
    ticks: list[Tick]
    bars: list[EventBar]


__all__ = [
    "CategoryMatches",
    "Snapshot",
    "Container",
    "Tick",
    "EventBar",
    "TimelineLayout",
]
