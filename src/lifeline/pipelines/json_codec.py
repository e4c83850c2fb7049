"""JSON codec: export the whole store, or replace it wholesale from a backup.

Wire format: a JSON array of ``{id, category, title, start, end, notes}``
objects, every value a string and ``end`` empty for ongoing events. Export is
pretty-printed with a two-space indent.

Import is a replace, not a merge. Any problem (not JSON, not an array, an
element that is not a valid event, two elements sharing an id) raises
`FormatError` before the store is touched. Elements without an ``id`` get a
fresh one.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from lifeline.core.contracts.event import LifeEvent
from lifeline.core.contracts.imports import ImportReport
from lifeline.core.errors import FormatError
from lifeline.core.settings import get_logger
from lifeline.core.store.memory import EventStore

logger = get_logger("lifeline.import.json")


def dump_events(events: list[LifeEvent] | tuple[LifeEvent, ...]) -> str:
    """Serialize `events` to the pretty-printed export format."""
    payload = [e.model_dump(mode="json") for e in events]
    return json.dumps(payload, ensure_ascii=False, indent=2)


class JSONCodec:
    """Round-trip the full event list of one `EventStore` through JSON."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def export(self) -> str:
        """Return the store contents as JSON text. Read-only."""
        return dump_events(self._store.events())

    def parse(self, text: str) -> list[LifeEvent]:
        """Decode `text` into events without touching the store.

        Raises
        ------
        FormatError
            Malformed JSON, a non-array document, or an invalid element.
        """
        try:
            payload: Any = json.loads(text)
        except json.JSONDecodeError as e:
            raise FormatError(f"Invalid JSON: {e.msg} (line {e.lineno})") from e
        if not isinstance(payload, list):
            raise FormatError("Invalid JSON format: expected an array of events")

        events: list[LifeEvent] = []
        seen: set[str] = set()
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise FormatError(f"Element {index} is not an object")
            if not item.get("id"):
                item = {**item, "id": self._store.new_id()}
            try:
                event = LifeEvent.model_validate(item)
            except PydanticValidationError as e:
                raise FormatError(f"Element {index} is not a valid event: {e}") from e
            if event.id in seen:
                raise FormatError(f"Element {index} repeats id {event.id!r}")
            seen.add(event.id)
            events.append(event)
        return events

    def import_(self, text: str) -> ImportReport:
        """Replace the entire store with the events in `text`."""
        events = self.parse(text)
        count = self._store.replace_all(events)
        logger.info("JSON import replaced store with %d events", count)
        return ImportReport(kind="json", imported=count)


__all__ = ["JSONCodec", "dump_events"]
