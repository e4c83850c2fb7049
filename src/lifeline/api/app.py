"""
FastAPI Application Factory & Configuration.

This module initializes the FastAPI application instance. It is responsible for:
1.  **Middleware Setup**: CORS so a browser front-end can call the API.
2.  **Exception Handling**: mapping the core error taxonomy to HTTP codes.
3.  **Routing**: mounting the events router and the health probe.
4.  **Lifecycle**: opening the `TimelineSession` (loading the store) at startup.

Design Pattern
--------------
We use an **Application Factory** pattern (`create_app`). Tests pass their
own session (e.g. backed by `MemoryStorage`); in production the lifespan hook
opens one on the configured data file.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lifeline import __version__
from lifeline.api.routers import events
from lifeline.core.errors import FormatError, NotFoundError, ValidationError
from lifeline.core.settings import get_logger, load_settings
from lifeline.pipelines.csv_import import RowValidationError
from lifeline.session import TimelineSession

logger = get_logger("lifeline.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    ASGI Lifespan context manager.

    - **Startup**: open the session unless one was injected by the factory.
    - **Shutdown**: nothing to release; every mutation is already saved.
    """
    if getattr(app.state, "session", None) is None:
        app.state.session = TimelineSession.open()
    logger.info("Lifeline API ready (%d events)", len(app.state.session.store))
    yield
    logger.info("Lifeline API shutting down")


def create_app(session: TimelineSession | None = None) -> FastAPI:
    """
    Construct and configure the Lifeline FastAPI application.

    Parameters
    ----------
    session : TimelineSession | None
        Pre-built session to serve. When omitted, one is opened at startup.
    """
    app = FastAPI(
        title="Lifeline API",
        description="Record life events and query what was true on a given day.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.session = session

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this to specific domains.
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(RowValidationError)
    async def row_error_handler(request: Request, exc: RowValidationError) -> JSONResponse:
        """CSV row failures carry the offending line and value."""
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request",
                "detail": str(exc),
                "line": exc.issue.line,
                "value": exc.issue.value,
            },
        )

    @app.exception_handler(ValidationError)
    @app.exception_handler(FormatError)
    async def bad_input_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map invalid input and malformed imports to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={"error": "Bad Request", "detail": str(exc)},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all so unexpected failures still return structured JSON."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(events.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
