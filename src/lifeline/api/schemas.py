"""
Request/response schemas for the HTTP API.

Event records themselves are returned as `LifeEvent` (see
``lifeline.core.contracts``); this module only adds the envelopes the routes
need. Incoming event fields are plain strings so that field validation happens
in the store and surfaces as a 400 with the store's message, the same as for
every other caller.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from lifeline.core.contracts.event import LifeEvent


class EventPayload(BaseModel):
    """Full event record as submitted by a client (create or replace)."""

    category: str = Field(description="Residence, Job, Relationship or Vehicle.")
    title: str = Field(default="")
    start: str = Field(default="", description="YYYY-MM-DD")
    end: str = Field(default="", description="YYYY-MM-DD, empty when ongoing.")
    notes: str = Field(default="")


class DeleteStatus(BaseModel):
    """Current state of the two-phase delete."""

    pending: str | None = Field(default=None, description="Staged id, or null when idle.")


class DeleteResult(BaseModel):
    """Outcome of a delete commit."""

    deleted: LifeEvent | None = None


class ClearResult(BaseModel):
    removed: int


__all__ = ["EventPayload", "DeleteStatus", "DeleteResult", "ClearResult"]
