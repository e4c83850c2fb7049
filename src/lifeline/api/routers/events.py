"""
API Routes for life events.

Endpoints
---------
- `GET /events`, `POST /events`: list and create.
- `GET /events/{event_id}`, `PUT /events/{event_id}`: read and full replace.
- `DELETE /events`: clear every event.
- `POST /events/{event_id}/delete`: stage a deletion (202, nothing removed yet).
- `POST /deletion/commit`, `POST /deletion/cancel`: finish the two-phase delete.
- `GET /snapshot?date=YYYY-MM-DD`: what was true on a day.
- `GET /layout`: projected timeline geometry for a container size.
- `GET /export`, `POST /import/{kind}`, `GET /template`: bulk data.

Design Decisions
----------------
- **No domain logic here**: every route is one call on `TimelineSession`;
  core errors are mapped to HTTP codes by the handlers in ``app.py``.
- **Async boundary**: `POST /import/{kind}` awaits the uploaded file content
  once, then the import pipeline runs synchronously.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import Response

from lifeline.api.deps import get_session
from lifeline.api.schemas import ClearResult, DeleteResult, DeleteStatus, EventPayload
from lifeline.core.contracts.event import Category, LifeEvent
from lifeline.core.contracts.imports import ImportKind, ImportReport
from lifeline.core.contracts.timeline import Container, Snapshot, TimelineLayout
from lifeline.session import TimelineSession

router = APIRouter(tags=["Events"])

SessionDep = Annotated[TimelineSession, Depends(get_session)]


# --------------------------------------------------------------------------- #
# CRUD
# --------------------------------------------------------------------------- #


@router.get("/events", response_model=list[LifeEvent], summary="List events")
async def list_events(session: SessionDep, category: Category | None = None) -> list[LifeEvent]:
    """Return every event in insertion order, optionally for one category."""
    return session.list_events(category)


@router.post(
    "/events",
    response_model=LifeEvent,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
)
async def create_event(payload: EventPayload, session: SessionDep) -> LifeEvent:
    return session.create(payload.model_dump())


@router.get("/events/{event_id}", response_model=LifeEvent, summary="Get one event")
async def get_event(event_id: str, session: SessionDep) -> LifeEvent:
    return session.get(event_id)


@router.put("/events/{event_id}", response_model=LifeEvent, summary="Replace an event")
async def replace_event(event_id: str, payload: EventPayload, session: SessionDep) -> LifeEvent:
    """Full-record replace; the id in the path is kept."""
    return session.update(event_id, payload.model_dump())


@router.delete("/events", response_model=ClearResult, summary="Remove every event")
async def clear_events(session: SessionDep) -> ClearResult:
    removed = len(session.store)
    session.clear()
    return ClearResult(removed=removed)


# --------------------------------------------------------------------------- #
# Two-phase delete
# --------------------------------------------------------------------------- #


@router.post(
    "/events/{event_id}/delete",
    response_model=DeleteStatus,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Stage an event for deletion",
)
async def stage_delete(event_id: str, session: SessionDep) -> DeleteStatus:
    """Stage `event_id`; 404 if it does not exist (staging itself never looks it up)."""
    session.get(event_id)
    session.stage_delete(event_id)
    return DeleteStatus(pending=session.delete_state.pending)


@router.post("/deletion/commit", response_model=DeleteResult, summary="Confirm the staged delete")
async def commit_delete(session: SessionDep) -> DeleteResult:
    return DeleteResult(deleted=session.commit_delete())


@router.post("/deletion/cancel", response_model=DeleteStatus, summary="Cancel the staged delete")
async def cancel_delete(session: SessionDep) -> DeleteStatus:
    session.cancel_delete()
    return DeleteStatus(pending=session.delete_state.pending)


@router.get("/deletion", response_model=DeleteStatus, summary="Show the staged delete")
async def delete_status(session: SessionDep) -> DeleteStatus:
    return DeleteStatus(pending=session.delete_state.pending)


# --------------------------------------------------------------------------- #
# Reads
# --------------------------------------------------------------------------- #


@router.get("/snapshot", response_model=Snapshot, summary="What was true on a day")
async def snapshot(
    session: SessionDep,
    date: Annotated[str, Query(description="Query date, YYYY-MM-DD.")],
) -> Snapshot:
    return session.snapshot(date)


@router.get("/layout", response_model=TimelineLayout, summary="Projected timeline geometry")
async def layout(
    session: SessionDep,
    width: Annotated[float, Query(gt=0)] = 800.0,
    height: Annotated[float, Query(gt=0)] = 400.0,
    category: Category | None = None,
) -> TimelineLayout:
    return session.project_layout(Container(width=width, height=height), category)


# --------------------------------------------------------------------------- #
# Import / export
# --------------------------------------------------------------------------- #


@router.get("/export", summary="Download a JSON backup")
async def export(session: SessionDep) -> Response:
    return Response(
        content=session.export(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="life-timeline-backup.json"'},
    )


@router.post("/import/{kind}", response_model=ImportReport, summary="Import a CSV or JSON file")
async def import_file(
    kind: ImportKind,
    session: SessionDep,
    file: Annotated[UploadFile, File(description="CSV to merge or JSON backup to restore.")],
) -> ImportReport:
    """
    Import an uploaded file.

    - `csv`: rows are validated first and merged only if every row is valid.
    - `json`: the whole dataset is replaced.
    """
    return await session.import_from(file.read, kind)


@router.get("/template", summary="Download the CSV template")
async def template() -> Response:
    return Response(
        content=TimelineSession.csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="life_events_template.csv"'},
    )


__all__ = ["router"]
