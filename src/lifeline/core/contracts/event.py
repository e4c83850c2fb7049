"""Life event contracts: the closed category set, the stored record and the draft.

This module defines the Pydantic v2 models the rest of the package passes
around:

- `Category`   : the four fixed life-event kinds, in display order.
- `EventDraft` : what a caller submits (form, CLI, API, import row). `id` is
                 optional; raw strings are accepted for dates and category.
- `LifeEvent`  : a persisted record. `id` is always set.

Interval semantics
------------------
`end` is an explicit optional date; `None` means the event is ongoing. At the
JSON boundary an absent end is written as ``""`` and ``""`` is read back as
``None``, which keeps exported files compatible with hand-written ones.

The models deliberately do NOT require ``start <= end``. An event that ends
before it starts is legal; it simply matches no query date and renders as a
minimum-width bar.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Category(str, Enum):
    """The closed set of life-event kinds."""

    RESIDENCE = "Residence"
    JOB = "Job"
    RELATIONSHIP = "Relationship"
    VEHICLE = "Vehicle"

    @classmethod
    def names(cls) -> list[str]:
        """Return the category labels in display order."""
        return [c.value for c in cls]


# Display colours used by the timeline bars and legends.
CATEGORY_COLORS: dict[Category, str] = {
    Category.RESIDENCE: "#4f46e5",
    Category.JOB: "#10b981",
    Category.RELATIONSHIP: "#ef4444",
    Category.VEHICLE: "#f59e0b",
}


class EventDraft(BaseModel):
    """Unsaved event fields as submitted by a caller."""

    id: str | None = Field(default=None, description="Optional caller-supplied id.")
    category: Category = Field(description="One of the four fixed categories.")
    title: str = Field(min_length=1, description="Short label, must be non-empty.")
    start: date = Field(description="First day of the interval (YYYY-MM-DD).")
    end: date | None = Field(default=None, description="Last day, or None when ongoing.")
    notes: str = Field(default="", description="Free text, may be empty.")

    @field_validator("start", mode="before")
    @classmethod
    def _start_required(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("start date is required")
        return v

    @field_validator("end", mode="before")
    @classmethod
    def _blank_end_is_ongoing(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("notes", mode="before")
    @classmethod
    def _notes_default(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_serializer("start")
    def _dump_start(self, v: date) -> str:
        return v.isoformat()

    @field_serializer("end")
    def _dump_end(self, v: date | None) -> str:
        return v.isoformat() if v is not None else ""


class LifeEvent(EventDraft):
    """A stored event; the store guarantees `id` is present and unique."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Opaque unique token assigned by the store.")

    @property
    def ongoing(self) -> bool:
        """True when the event has no end date."""
        return self.end is None

    def dedup_key(self) -> tuple[Category, str, date]:
        """Composite identity used to drop duplicate import rows."""
        return (self.category, self.title, self.start)

    def to_draft(self) -> EventDraft:
        """Return an editable draft carrying the same fields."""
        return EventDraft.model_validate(self.model_dump())


__all__ = ["Category", "CATEGORY_COLORS", "EventDraft", "LifeEvent"]
