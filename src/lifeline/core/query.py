"""Point-in-time query engine: "what was true on date X".

An event matches a query date ``d`` when ``start <= d <= effective_end``. For
a bounded event the effective end is its ``end``. For an ongoing event it is
the wall-clock moment the query executes, NOT the query date: asking about a
future day therefore leaves ongoing events out, because "now" has not reached
that day yet.

The clock is injected so the behaviour is deterministic under test.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date, datetime

from lifeline.core.contracts.event import Category, LifeEvent
from lifeline.core.contracts.timeline import CategoryMatches, Snapshot
from lifeline.core.store.memory import EventStore

Clock = Callable[[], datetime]


def covers(event: LifeEvent, day: date, now: datetime) -> bool:
    """Return True if `event` was true on `day`, closing ongoing events at `now`."""
    if event.start > day:
        return False
    if event.end is not None:
        return day <= event.end
    # A calendar day starts at midnight, so it lies at or before `now`
    # exactly when it is not later than today's date.
    return day <= now.date()


def snapshot_of(events: Iterable[LifeEvent], day: date, now: datetime) -> Snapshot:
    """Group `events` true on `day` by category; one linear scan per category."""
    pool = list(events)
    results = [
        CategoryMatches(
            category=cat,
            matches=[e for e in pool if e.category == cat and covers(e, day, now)],
        )
        for cat in Category
    ]
    return Snapshot(query_date=day, executed_at=now, results=results)


class TemporalQueryEngine:
    """Pure reader over an `EventStore` answering per-date snapshots."""

    def __init__(self, store: EventStore, clock: Clock = datetime.now) -> None:
        self._store = store
        self._clock = clock

    def snapshot(self, query_date: date) -> Snapshot:
        """Return the per-category matches for `query_date`."""
        return snapshot_of(self._store.events(), query_date, self._clock())


__all__ = ["Clock", "covers", "snapshot_of", "TemporalQueryEngine"]
