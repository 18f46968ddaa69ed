"""Shared request dependencies."""

from fastapi import HTTPException, Request

from docuguard.workspace import Workspace


def get_workspace(request: Request) -> Workspace:
    """Get the workspace attached to the running app."""
    workspace = getattr(request.app.state, "workspace", None)
    if workspace is None:
        raise HTTPException(status_code=503, detail="Workspace not initialized")
    return workspace
