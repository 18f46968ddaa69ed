"""FastAPI server for DocuGuard."""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from docuguard import __version__
from docuguard.core.constants import DEFAULT_HOST, DEFAULT_PORT
from docuguard.core.exceptions import (
    AnalysisInProgressError,
    AnalyzerError,
    ConfigurationError,
    DocuGuardError,
    DuplicateIdError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from docuguard.daemon.deps import get_workspace
from docuguard.daemon.routes.analysis import router as analysis_router
from docuguard.daemon.routes.conflicts import router as conflicts_router
from docuguard.daemon.routes.documents import router as documents_router
from docuguard.graph.viewport import ViewportController
from docuguard.graph.visualization.renderer import GraphRenderer, RenderConfig
from docuguard.workspace import Workspace


logger = logging.getLogger(__name__)


class ProfileUpdateModel(BaseModel):
    """API request model for profile updates."""

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None)
    phone: Optional[str] = Field(None)
    notifications_enabled: Optional[bool] = Field(None)
    theme: Optional[str] = Field(None, description="light or dark")


def error_status(error: DocuGuardError) -> int:
    """Map a domain error to an HTTP status code."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, DuplicateIdError):
        return 409
    if isinstance(error, AnalysisInProgressError):
        return 409
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, AnalyzerError):
        return 502
    if isinstance(error, ConfigurationError):
        return 503
    if isinstance(error, PersistenceError):
        return 500
    return 500


def create_app(
    workspace: Workspace | None = None,
    base_path: Path | None = None,
) -> FastAPI:
    """Create the API app.

    Args:
        workspace: Workspace to serve; opened from ``base_path`` on startup
            when omitted.
        base_path: Project directory holding ``.docuguard/``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """FastAPI lifespan handler for startup/shutdown."""
        app.state.start_time = datetime.now()
        if app.state.workspace is None:
            app.state.workspace = Workspace.open(base_path)
        logger.info(f"DocuGuard API started (pid {os.getpid()})")
        yield
        app.state.workspace.close()
        logger.info("DocuGuard API stopped")

    app = FastAPI(
        title="DocuGuard",
        description="Document conflict tracking API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.workspace = workspace
    app.state.start_time = None

    @app.exception_handler(DocuGuardError)
    async def handle_domain_error(request: Request, exc: DocuGuardError) -> JSONResponse:
        status_code = error_status(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error": type(exc).__name__,
                "detail": exc.message,
                "details": exc.details,
            },
        )

    @app.get("/health")
    async def health() -> JSONResponse:
        """Health check endpoint."""
        started = app.state.start_time
        uptime = (datetime.now() - started).total_seconds() if started else 0.0
        return JSONResponse(content={
            "status": "healthy",
            "version": __version__,
            "pid": os.getpid(),
            "uptime_seconds": uptime,
        })

    @app.get("/status")
    async def status(workspace: Workspace = Depends(get_workspace)) -> JSONResponse:
        """Dashboard numbers, analysis state and pending notifications."""
        return JSONResponse(content={
            "dashboard": workspace.dashboard().to_dict(),
            "is_analyzing": workspace.is_analyzing,
            "stats": workspace.store.get_stats().to_dict(),
            "notifications": [n.to_dict() for n in workspace.drain_notifications()],
        })

    @app.get("/graph")
    async def graph(
        format: str = Query("json", description="json, svg, html, dot or mermaid"),
        hover: Optional[str] = Query(None, description="Node to highlight"),
        workspace: Workspace = Depends(get_workspace),
    ) -> Response:
        """Render the relationship graph."""
        viewport = ViewportController(workspace.graph(), workspace.config.graph)
        if hover:
            viewport.hover(hover)
        result = GraphRenderer(
            viewport,
            RenderConfig(
                output_format=format,
                width=workspace.config.graph.width,
                height=workspace.config.graph.height,
            ),
        ).render()
        media_types = {
            "json": "application/json",
            "svg": "image/svg+xml",
            "html": "text/html",
        }
        return Response(
            content=result.content,
            media_type=media_types.get(result.format, "text/plain"),
        )

    @app.get("/history")
    async def history(
        limit: int = Query(100, ge=1, le=1000),
        workspace: Workspace = Depends(get_workspace),
    ) -> JSONResponse:
        """Activity log, newest first."""
        events = workspace.store.history
        return JSONResponse(content={
            "events": [e.to_dict() for e in events[:limit]],
            "total": len(events),
        })

    @app.get("/profile")
    async def get_profile(workspace: Workspace = Depends(get_workspace)) -> JSONResponse:
        """Get the user profile."""
        return JSONResponse(content=workspace.profile.to_dict())

    @app.put("/profile")
    async def update_profile(
        request: ProfileUpdateModel,
        workspace: Workspace = Depends(get_workspace),
    ) -> JSONResponse:
        """Update profile fields."""
        changes = request.model_dump(exclude_none=True)
        profile = workspace.update_profile(**changes)
        return JSONResponse(content=profile.to_dict())

    @app.post("/profile/theme")
    async def toggle_theme(workspace: Workspace = Depends(get_workspace)) -> JSONResponse:
        """Switch between the light and dark theme."""
        theme = workspace.toggle_theme()
        return JSONResponse(content={"theme": theme.value})

    app.include_router(documents_router)
    app.include_router(conflicts_router)
    app.include_router(analysis_router)

    return app


def run_server(
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    base_path: Path | None = None,
    log_level: str = "info",
) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        create_app(base_path=base_path),
        host=host,
        port=port,
        log_level=log_level,
    )
