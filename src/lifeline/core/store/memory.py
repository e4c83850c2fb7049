"""
In-memory event store with write-through persistence and a two-phase delete.

This module owns the only shared mutable resource of the core: the ordered
list of `LifeEvent` records. Every other component either reads it
(`TemporalQueryEngine`, `TimelineProjector`) or writes to it through the
methods below (the import pipelines).

- ``create(draft)``: validate, assign an id, append.
- ``update(id, draft)``: full-record replace keyed on id (no partial patch).
- ``delete.stage(id)`` / ``delete.commit()`` / ``delete.cancel()``: the
  two-phase delete, modeled as an explicit ``Idle -> Pending(id) -> Idle``
  state machine owned by the store.
- ``events()``: the full ordered sequence, insertion order.

Persistence
-----------
The store is constructed once with an injected `EventStorage` adapter. Each
successful mutation bumps the revision counter and calls ``storage.save``
with the full list; failed calls leave both the list and the storage
untouched.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from lifeline.core.contracts.event import EventDraft, LifeEvent
from lifeline.core.errors import NotFoundError, ValidationError
from lifeline.core.settings import get_logger

from .storage import EventStorage, MemoryStorage

logger = get_logger("lifeline.store")

DraftLike = EventDraft | Mapping[str, Any]


def _new_id() -> str:
    return uuid.uuid4().hex


def _describe(exc: PydanticValidationError) -> str:
    """Flatten a Pydantic error into a single caller-facing sentence."""
    parts = []
    for e in exc.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "event"
        parts.append(f"{loc}: {e.get('msg', 'invalid value')}")
    return "; ".join(parts)


def to_draft(data: DraftLike) -> EventDraft:
    """Validate raw submitted fields into an `EventDraft`.

    Raises
    ------
    ValidationError
        A required field is empty, the category is unknown or a date does
        not parse.
    """
    if isinstance(data, EventDraft):
        return data
    try:
        return EventDraft.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


@dataclass(frozen=True, slots=True)
class DeleteState:
    """State of the two-phase delete: ``pending is None`` means Idle."""

    pending: str | None = None

    @property
    def idle(self) -> bool:
        return self.pending is None


class TwoPhaseDelete:
    """Stage → commit/cancel controller bound to one store."""

    __slots__ = ("_store", "_state")

    def __init__(self, store: EventStore) -> None:
        self._store = store
        self._state = DeleteState()

    @property
    def state(self) -> DeleteState:
        return self._state

    def stage(self, event_id: str) -> None:
        """Mark `event_id` as pending; replaces any previously staged id."""
        self._state = DeleteState(pending=event_id)
        logger.debug("Staged %s for deletion", event_id)

    def commit(self) -> LifeEvent | None:
        """Remove the staged event, if any, and return to Idle.

        Returns the removed record, or ``None`` when nothing was staged or the
        staged id no longer exists.
        """
        pending = self._state.pending
        self._state = DeleteState()
        if pending is None:
            return None
        return self._store._remove(pending)

    def cancel(self) -> None:
        """Discard the staged id without touching the store."""
        self._state = DeleteState()


class EventStore:
    """
    Ordered collection of life events with write-through persistence.

    Attributes
    ----------
    delete : TwoPhaseDelete
        The stage/commit/cancel controller for permanent deletion.
    """

    def __init__(
        self,
        storage: EventStorage | None = None,
        events: Iterable[LifeEvent] = (),
        *,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._storage: EventStorage = storage if storage is not None else MemoryStorage()
        self._events: list[LifeEvent] = list(events)
        self._rev: int = 0
        self._id_factory = id_factory
        self.delete = TwoPhaseDelete(self)
        duplicates = _duplicate_ids(self._events)
        if duplicates:
            raise ValidationError(f"Duplicate event ids: {', '.join(sorted(duplicates))}")

    # ------------------------------- Reads ----------------------------------

    def events(self) -> tuple[LifeEvent, ...]:
        """Return every event in insertion order (immutable tuple)."""
        return tuple(self._events)

    def get(self, event_id: str) -> LifeEvent:
        """Return the event with `event_id` or raise `NotFoundError`."""
        return self._events[self._index(event_id)]

    @property
    def revision(self) -> int:
        """Monotonic counter bumped by every committed mutation."""
        return self._rev

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[LifeEvent]:
        return iter(tuple(self._events))

    # ------------------------------- Commands -------------------------------

    def create(self, draft: DraftLike) -> LifeEvent:
        """Validate `draft`, assign a fresh id if none supplied, and append it."""
        data = to_draft(draft)
        event_id = data.id or self._id_factory()
        if any(e.id == event_id for e in self._events):
            raise ValidationError(f"Event id {event_id!r} already exists")
        event = LifeEvent.model_validate({**data.model_dump(), "id": event_id})
        self._events.append(event)
        self._commit(f"create {event_id}")
        return event

    def update(self, event_id: str, draft: DraftLike) -> LifeEvent:
        """Replace the record with `event_id` by `draft`; the id is preserved."""
        idx = self._index(event_id)
        data = to_draft(draft)
        event = LifeEvent.model_validate({**data.model_dump(), "id": event_id})
        self._events[idx] = event
        self._commit(f"update {event_id}")
        return event

    def extend(self, events: Iterable[LifeEvent]) -> int:
        """Append already-validated events as one mutation; return the count."""
        batch = list(events)
        if not batch:
            return 0
        duplicates = _duplicate_ids([*self._events, *batch])
        if duplicates:
            raise ValidationError(f"Duplicate event ids: {', '.join(sorted(duplicates))}")
        self._events.extend(batch)
        self._commit(f"extend +{len(batch)}")
        return len(batch)

    def replace_all(self, events: Iterable[LifeEvent]) -> int:
        """Swap the whole collection for `events`; return the new size."""
        batch = list(events)
        duplicates = _duplicate_ids(batch)
        if duplicates:
            raise ValidationError(f"Duplicate event ids: {', '.join(sorted(duplicates))}")
        self._events = batch
        self.delete.cancel()
        self._commit(f"replace_all {len(batch)}")
        return len(batch)

    def clear(self) -> None:
        """Remove every event."""
        self._events = []
        self.delete.cancel()
        self._commit("clear")

    def new_id(self) -> str:
        """Return a fresh id from the store's id factory."""
        return self._id_factory()

    # ------------------------------- Internals ------------------------------

    def _index(self, event_id: str) -> int:
        for i, e in enumerate(self._events):
            if e.id == event_id:
                return i
        raise NotFoundError(event_id)

    def _remove(self, event_id: str) -> LifeEvent | None:
        try:
            idx = self._index(event_id)
        except NotFoundError:
            logger.debug("Delete commit for unknown id %s ignored", event_id)
            return None
        removed = self._events.pop(idx)
        self._commit(f"delete {event_id}")
        return removed

    def _commit(self, note: str) -> None:
        self._rev += 1
        self._storage.save(self._events)
        logger.debug("rev %d: %s (%d events)", self._rev, note, len(self._events))


def _duplicate_ids(events: Iterable[LifeEvent]) -> set[str]:
    seen: set[str] = set()
    dupes: set[str] = set()
    for e in events:
        if e.id in seen:
            dupes.add(e.id)
        seen.add(e.id)
    return dupes


__all__ = ["DeleteState", "EventStore", "TwoPhaseDelete", "to_draft"]
