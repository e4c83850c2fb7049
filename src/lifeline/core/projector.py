"""Timeline projector: map event dates onto a drawing surface.

Layout is a pure function ``(events, container) -> TimelineLayout``; the
rendering collaborator calls it again whenever it observes a size change. The
core keeps no reference to any window or resize observer.

Bounding range
--------------
- ``min_date``: earliest ``start`` minus 30 days (today when there are no events).
- ``max_date``: latest of ``end`` (or ``start`` for an ongoing event) plus
  30 days (today + 365 days when there are no events).
- If that leaves ``max_date <= min_date`` (only possible with events that end
  before they start) the range is widened to one day so ``x_pos`` stays defined.

Rows
----
Bars are sorted by ``start``; ties keep insertion order (``sorted`` is stable).
A bar spans ``x_pos(start)`` to ``x_pos(effective_end)`` where an ongoing
event ends today, and is never narrower than ``MIN_BAR_WIDTH`` so short or
inverted intervals stay visible. The floor only changes geometry, never dates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from lifeline.core.contracts.event import CATEGORY_COLORS, Category, LifeEvent
from lifeline.core.contracts.timeline import Container, EventBar, Tick, TimelineLayout
from lifeline.core.store.memory import EventStore

PADDING_DAYS = 30
EMPTY_SPAN_DAYS = 365
TICK_INTERVALS = 10
ROW_HEIGHT = 40.0
BAR_HEIGHT = 30.0
BAR_OFFSET = 5.0
MIN_BAR_WIDTH = 40.0
AXIS_MARGIN = 30.0


@dataclass(frozen=True, slots=True)
class DateRange:
    """Padded ``[min_date, max_date]`` window used for layout."""

    min_date: date
    max_date: date

    @property
    def days(self) -> int:
        """Span in whole days, never less than one."""
        return max((self.max_date - self.min_date).days, 1)

    def x_pos(self, when: date, width: float) -> float:
        """Linear position of `when` on a surface `width` units wide."""
        return (when - self.min_date).days / self.days * width

    def ticks(self) -> list[date]:
        """Eleven evenly spaced dates from `min_date` to `max_date` inclusive."""
        total = self.days
        return [
            self.min_date + timedelta(days=(total * i) // TICK_INTERVALS)
            for i in range(TICK_INTERVALS + 1)
        ]


def bounding_range(events: Sequence[LifeEvent], today: date) -> DateRange:
    """Compute the padded bounding range over all `events`."""
    if not events:
        return DateRange(today, today + timedelta(days=EMPTY_SPAN_DAYS))
    lo = min(e.start for e in events)
    hi = max(e.end if e.end is not None else e.start for e in events)
    lo -= timedelta(days=PADDING_DAYS)
    hi += timedelta(days=PADDING_DAYS)
    if hi <= lo:
        hi = lo + timedelta(days=1)
    return DateRange(lo, hi)


def project_layout(
    events: Sequence[LifeEvent],
    container: Container,
    *,
    today: date,
    category: Category | None = None,
) -> TimelineLayout:
    """Compute ticks and bar geometry for `events` on `container`.

    Parameters
    ----------
    events : Sequence[LifeEvent]
        Every event in the store, insertion order. The bounding range is
        always computed over all of them.
    container : Container
        Drawing surface size.
    today : date
        Effective end of ongoing events (and the anchor of an empty range).
    category : Category | None
        When set, only events of this category get rows.
    """
    rng = bounding_range(events, today)
    width = container.width

    shown = [e for e in events if category is None or e.category == category]
    bars: list[EventBar] = []
    for row, e in enumerate(sorted(shown, key=lambda ev: ev.start)):
        start_x = rng.x_pos(e.start, width)
        end_x = rng.x_pos(e.end if e.end is not None else today, width)
        bars.append(
            EventBar(
                event_id=e.id,
                category=e.category,
                title=e.title,
                color=CATEGORY_COLORS[e.category],
                row=row,
                x=start_x,
                y=row * ROW_HEIGHT + BAR_OFFSET,
                width=max(end_x - start_x, MIN_BAR_WIDTH),
                height=BAR_HEIGHT,
                ongoing=e.ongoing,
            )
        )

    ticks = [Tick(when=d, x=rng.x_pos(d, width)) for d in rng.ticks()]
    return TimelineLayout(
        min_date=rng.min_date,
        max_date=rng.max_date,
        container=container,
        axis_y=container.height - AXIS_MARGIN,
        ticks=ticks,
        bars=bars,
    )


class TimelineProjector:
    """Store-bound convenience wrapper around the pure layout functions."""

    def __init__(self, store: EventStore, clock: Callable[[], datetime] = datetime.now) -> None:
        self._store = store
        self._clock = clock

    def bounds(self) -> DateRange:
        return bounding_range(self._store.events(), self._clock().date())

    def x_pos(self, when: date, width: float) -> float:
        return self.bounds().x_pos(when, width)

    def ticks(self) -> list[date]:
        return self.bounds().ticks()

    def layout(self, container: Container, category: Category | None = None) -> TimelineLayout:
        return project_layout(
            self._store.events(), container, today=self._clock().date(), category=category
        )


__all__ = [
    "DateRange",
    "bounding_range",
    "project_layout",
    "TimelineProjector",
    "MIN_BAR_WIDTH",
    "ROW_HEIGHT",
]
