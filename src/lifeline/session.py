"""
Timeline session: the command surface the CLI and the HTTP API drive.

A session builds one `EventStore` from an injected storage adapter and hands
that same store to every component:

    storage ──load──▶ EventStore ──▶ TemporalQueryEngine   (reader)
                         │      ──▶ TimelineProjector     (reader)
                         │      ◀── CSVImportPipeline     (writer)
                         │      ◀── JSONCodec             (writer)
                         └──save──▶ storage

Commands run one at a time, synchronously. The only await point is
`import_from`, which awaits a single read yielding the file text and then
runs the chosen pipeline to completion.

First run
---------
When the storage has never been written (``load()`` returns ``None``) and
seeding is enabled, the two sample events are created so a new user sees a
populated timeline. An explicitly saved empty list is respected.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from lifeline.core.contracts.event import Category, EventDraft, LifeEvent
from lifeline.core.contracts.imports import ImportKind, ImportReport
from lifeline.core.contracts.timeline import Container, Snapshot, TimelineLayout
from lifeline.core.errors import FormatError, ValidationError
from lifeline.core.projector import TimelineProjector
from lifeline.core.query import Clock, TemporalQueryEngine
from lifeline.core.settings import get_logger, load_settings
from lifeline.core.store.memory import DeleteState, EventStore
from lifeline.core.store.storage import EventStorage, JsonFileStorage
from lifeline.pipelines.csv_import import CSVImportPipeline, csv_template
from lifeline.pipelines.json_codec import JSONCodec

logger = get_logger("lifeline.session")

SAMPLE_EVENTS: tuple[EventDraft, ...] = (
    EventDraft(
        id="1",
        category=Category.RESIDENCE,
        title="Moved to New York",
        start=date(2020, 1, 15),
        end=date(2022, 6, 30),
        notes="First apartment in the city",
    ),
    EventDraft(
        id="2",
        category=Category.JOB,
        title="Software Developer at TechCorp",
        start=date(2020, 3, 1),
        notes="Full-stack development role",
    ),
)

IMPORT_KINDS: tuple[ImportKind, ...] = ("csv", "json")


def infer_kind(filename: str | Path) -> ImportKind:
    """Guess the import kind from a file name (``.json`` → json, else csv)."""
    return "json" if Path(filename).suffix.lower() == ".json" else "csv"


def parse_query_date(value: date | str) -> date:
    """Accept a `date` or a ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise ValidationError(f'Invalid query date "{value}"') from e


class TimelineSession:
    """Owns one store and exposes every operation a UI collaborator may call."""

    def __init__(self, store: EventStore, *, clock: Clock = datetime.now) -> None:
        self.store = store
        self._clock = clock
        self.query = TemporalQueryEngine(store, clock)
        self.projector = TimelineProjector(store, clock)
        self.csv = CSVImportPipeline(store)
        self.json = JSONCodec(store)

    @classmethod
    def open(
        cls,
        storage: EventStorage | None = None,
        *,
        seed_samples: bool | None = None,
        clock: Clock = datetime.now,
    ) -> TimelineSession:
        """Load the store from `storage` (default: the configured JSON file)."""
        storage = storage if storage is not None else JsonFileStorage()
        if seed_samples is None:
            seed_samples = load_settings().seed_samples
        saved = storage.load()
        store = EventStore(storage, saved or ())
        if saved is None and seed_samples:
            for draft in SAMPLE_EVENTS:
                store.create(draft)
            logger.info("Seeded %d sample events", len(SAMPLE_EVENTS))
        logger.info("Session opened with %d events", len(store))
        return cls(store, clock=clock)

    # ------------------------------- CRUD -----------------------------------

    def create(self, draft: EventDraft | Mapping[str, Any]) -> LifeEvent:
        return self.store.create(draft)

    def update(self, event_id: str, draft: EventDraft | Mapping[str, Any]) -> LifeEvent:
        return self.store.update(event_id, draft)

    def get(self, event_id: str) -> LifeEvent:
        return self.store.get(event_id)

    def list_events(self, category: Category | None = None) -> list[LifeEvent]:
        """Return events in insertion order, optionally for one category."""
        return [e for e in self.store.events() if category is None or e.category == category]

    def clear(self) -> None:
        self.store.clear()

    # ------------------------------- Delete ---------------------------------

    def stage_delete(self, event_id: str) -> None:
        self.store.delete.stage(event_id)

    def commit_delete(self) -> LifeEvent | None:
        return self.store.delete.commit()

    def cancel_delete(self) -> None:
        self.store.delete.cancel()

    @property
    def delete_state(self) -> DeleteState:
        return self.store.delete.state

    # ------------------------------- Reads ----------------------------------

    def snapshot(self, query_date: date | str) -> Snapshot:
        return self.query.snapshot(parse_query_date(query_date))

    def project_layout(
        self, container: Container | None = None, category: Category | None = None
    ) -> TimelineLayout:
        return self.projector.layout(container or Container(), category)

    def export(self) -> str:
        return self.json.export()

    @staticmethod
    def csv_template() -> str:
        return csv_template()

    # ------------------------------- Imports --------------------------------

    def import_text(self, text: str, kind: ImportKind) -> ImportReport:
        """Dispatch `text` to the CSV or JSON pipeline."""
        if kind == "csv":
            return self.csv.run(text)
        if kind == "json":
            return self.json.import_(text)
        raise ValidationError(f"Unknown import kind {kind!r}; expected one of {IMPORT_KINDS}")

    async def import_from(
        self, read: Callable[[], Awaitable[str | bytes]], kind: ImportKind
    ) -> ImportReport:
        """Await one read of the file content, then import it synchronously.

        Raises
        ------
        FormatError
            The content is bytes that do not decode as UTF-8.
        """
        raw = await read()
        if isinstance(raw, bytes):
            try:
                text = raw.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise FormatError("File is not valid UTF-8 text") from e
        else:
            text = raw
        return self.import_text(text, kind)


__all__ = [
    "IMPORT_KINDS",
    "SAMPLE_EVENTS",
    "TimelineSession",
    "infer_kind",
    "parse_query_date",
]
