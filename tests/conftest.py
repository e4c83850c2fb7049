"""Shared fixtures: isolated data file, fixed clock, in-memory sessions."""

from __future__ import annotations

import os
from collections.abc import Generator
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

# Must be set before `lifeline.core.settings` builds its import-time singleton.
os.environ.setdefault("LIFELINE_ENV", "test")
os.environ["LIFELINE_SEED_SAMPLES"] = "false"

from lifeline.core.settings import load_settings  # noqa: E402
from lifeline.core.store.memory import EventStore  # noqa: E402
from lifeline.core.store.storage import MemoryStorage  # noqa: E402
from lifeline.session import TimelineSession  # noqa: E402

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0)


def fixed_clock() -> datetime:
    return FIXED_NOW


@pytest.fixture(autouse=True)  # type: ignore[misc]
def data_file(tmp_path: Path, monkeypatch: Any) -> Generator[Path, None, None]:
    """Point the configured data file at a per-test temp path."""
    path = tmp_path / "events.json"
    monkeypatch.setenv("LIFELINE_DATA_FILE", str(path))
    monkeypatch.setenv("LIFELINE_SEED_SAMPLES", "false")
    load_settings.cache_clear()
    yield path
    load_settings.cache_clear()


@pytest.fixture  # type: ignore[misc]
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture  # type: ignore[misc]
def store(storage: MemoryStorage) -> EventStore:
    return EventStore(storage)


@pytest.fixture  # type: ignore[misc]
def session(storage: MemoryStorage) -> TimelineSession:
    return TimelineSession.open(storage, seed_samples=False, clock=fixed_clock)


def sample_rows() -> list[dict[str, str]]:
    """The two events used throughout the scenario tests."""
    return [
        {
            "category": "Residence",
            "title": "Moved to New York",
            "start": "2020-01-15",
            "end": "2022-06-30",
            "notes": "First apartment in the city",
        },
        {
            "category": "Job",
            "title": "Software Developer at TechCorp",
            "start": "2020-03-01",
            "end": "",
            "notes": "Full-stack development role",
        },
    ]
