"""API routes for the conflict inbox, resolution and reports."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from docuguard.conflicts.inbox import ConflictFilter
from docuguard.core.exceptions import ConflictNotFoundError, ValidationError
from docuguard.daemon.deps import get_workspace
from docuguard.workspace import Workspace


router = APIRouter(prefix="/conflicts", tags=["conflicts"])


class ResolutionRequestModel(BaseModel):
    """Request model for conflict resolution."""

    resolution: str = Field(..., description="Resolution: accept_doc1, accept_doc2, ignore")


class ReportRequestModel(BaseModel):
    """Request model for report export."""

    status: Optional[str] = Field(default="unresolved", description="Status filter or 'All'")
    severity: Optional[str] = Field(default=None, description="Severity filter or 'All'")
    sort: str = Field(default="severity-desc", description="severity-desc or severity-asc")


def _parse_filter(status: str | None, severity: str | None, sort: str) -> ConflictFilter:
    try:
        return ConflictFilter.parse(status=status, severity=severity, sort=sort)
    except ValueError as e:
        raise ValidationError(f"Invalid filter: {e}", field="filter") from e


@router.get("")
async def list_conflicts(
    status: Optional[str] = Query("unresolved", description="Filter by status, or 'All'"),
    severity: Optional[str] = Query(None, description="Filter by severity, or 'All'"),
    sort: str = Query("severity-desc", description="severity-desc or severity-asc"),
    workspace: Workspace = Depends(get_workspace),
):
    """List conflicts with the inbox filter applied."""
    conflict_filter = _parse_filter(status, severity, sort)
    conflicts = workspace.list_conflicts(conflict_filter)
    return {
        "conflicts": [c.to_dict() for c in conflicts],
        "total": len(conflicts),
        "filter": conflict_filter.to_dict(),
        "stats": workspace.store.get_stats().to_dict(),
    }


@router.get("/stats")
async def get_stats(workspace: Workspace = Depends(get_workspace)):
    """Get conflict statistics."""
    return workspace.store.get_stats().to_dict()


@router.get("/{conflict_id}")
async def get_conflict(conflict_id: str, workspace: Workspace = Depends(get_workspace)):
    """Get a conflict by ID."""
    conflict = workspace.store.get(conflict_id)
    if conflict is None:
        raise ConflictNotFoundError(f"Conflict not found: {conflict_id}", conflict_id=conflict_id)
    return conflict.to_dict()


@router.post("/{conflict_id}/resolve")
async def resolve_conflict(
    conflict_id: str,
    request: ResolutionRequestModel,
    workspace: Workspace = Depends(get_workspace),
):
    """Resolve a conflict."""
    conflict = workspace.resolve_conflict(conflict_id, request.resolution)
    return {"success": True, "conflict": conflict.to_dict()}


@router.post("/report")
async def export_report(
    request: ReportRequestModel,
    workspace: Workspace = Depends(get_workspace),
):
    """Generate the conflict report and write it under .docuguard/reports."""
    conflict_filter = _parse_filter(request.status, request.severity, request.sort)
    report, path = workspace.generate_report(conflict_filter)
    return {
        "filename": report.filename,
        "path": str(path),
        "conflict_count": report.conflict_count,
        "content": report.content,
    }
