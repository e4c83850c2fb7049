"""Dependency providers for the API routes."""

from __future__ import annotations

from fastapi import Request

from lifeline.session import TimelineSession


def get_session(request: Request) -> TimelineSession:
    """Return the session owned by the running application.

    The session is created once per application (see ``app.lifespan``) and
    lives on ``app.state``; routes never build their own.
    """
    session: TimelineSession | None = getattr(request.app.state, "session", None)
    if session is None:
        raise RuntimeError("Lifeline session is not initialized")
    return session


__all__ = ["get_session"]
