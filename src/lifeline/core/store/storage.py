"""Persistence adapters for the event store.

The store never touches disk itself. It is handed an object satisfying the
`EventStorage` protocol and calls:

- ``load()`` once at startup: the saved list, or ``None`` when nothing has
  ever been saved (first run);
- ``save(events)`` after every committed mutation.

Two adapters ship with the package:

- `JsonFileStorage`: the JSON export format in a single file. The default
  path comes from `LIFELINE_DATA_FILE` (see `lifeline.core.settings`).
- `MemoryStorage`: keeps the last saved list in memory; used by tests and by
  throwaway sessions.

There is no transactional guarantee across process restarts: the most recent
``save`` wins.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from lifeline.core.contracts.event import LifeEvent
from lifeline.core.errors import FormatError
from lifeline.core.settings import get_logger, load_settings

logger = get_logger("lifeline.storage")


class EventStorage(Protocol):
    """Opaque key-value slot the store reads at startup and writes after mutation."""

    def load(self) -> list[LifeEvent] | None: ...

    def save(self, events: Sequence[LifeEvent]) -> None: ...


def _default_path() -> Path:
    """Return the configured data file path."""
    return load_settings().data_file


class JsonFileStorage:
    """Persist the event list as a pretty-printed JSON array on disk."""

    def __init__(self, path: Path | None = None) -> None:
        self.path: Path = path if path is not None else _default_path()

    def load(self) -> list[LifeEvent] | None:
        """Read the saved list, or ``None`` if the file does not exist yet.

        Raises
        ------
        FormatError
            The file exists but is not a JSON array of events.
        """
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise FormatError(f"Data file {self.path} is not valid JSON: {e}") from e
        if not isinstance(payload, list):
            raise FormatError(f"Data file {self.path} must hold a JSON array")
        try:
            events = [LifeEvent.model_validate(item) for item in payload]
        except PydanticValidationError as e:
            raise FormatError(f"Data file {self.path} holds an invalid event: {e}") from e
        logger.debug("Loaded %d events from %s", len(events), self.path)
        return events

    def save(self, events: Sequence[LifeEvent]) -> None:
        """Write `events` to disk, creating parent directories as needed."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [e.model_dump(mode="json") for e in events]
        with self.path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)
            f.write("\n")
        logger.debug("Saved %d events to %s", len(events), self.path)


class MemoryStorage:
    """Volatile storage: remembers the last saved list for this process only."""

    def __init__(self, initial: Sequence[LifeEvent] | None = None) -> None:
        self._saved: list[LifeEvent] | None = list(initial) if initial is not None else None
        self.saves: int = 0

    def load(self) -> list[LifeEvent] | None:
        return list(self._saved) if self._saved is not None else None

    def save(self, events: Sequence[LifeEvent]) -> None:
        self._saved = list(events)
        self.saves += 1


__all__ = ["EventStorage", "JsonFileStorage", "MemoryStorage"]
