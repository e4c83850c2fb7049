"""HTTP API for Lifeline (FastAPI application factory and routers)."""

from __future__ import annotations

from .app import create_app

__all__ = ["create_app"]
