"""API routes for documents."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from docuguard.daemon.deps import get_workspace
from docuguard.workspace import Workspace


router = APIRouter(prefix="/documents", tags=["documents"])


class SaveDocumentRequestModel(BaseModel):
    """Request model for saving a document's content."""

    content: str = Field(..., description="Full replacement content")


@router.get("")
async def list_documents(workspace: Workspace = Depends(get_workspace)):
    """List documents in store order, without their content."""
    documents = workspace.store.documents
    counts = workspace.graph().node_conflict_counts
    return {
        "documents": [
            {"id": d.id, "title": d.title, "length": len(d.content), "conflicts": counts.get(d.id, 0)}
            for d in documents
        ],
        "total": len(documents),
    }


@router.get("/{document_id}")
async def get_document(document_id: str, workspace: Workspace = Depends(get_workspace)):
    """Get a document with its content and conflicts."""
    document = workspace.store.require_document(document_id)
    return {
        **document.to_dict(),
        "conflicts": [c.to_dict() for c in workspace.store.get_by_document(document_id)],
    }


@router.put("/{document_id}")
async def save_document(
    document_id: str,
    request: SaveDocumentRequestModel,
    workspace: Workspace = Depends(get_workspace),
):
    """Replace a document's content."""
    document = workspace.save_document(document_id, request.content)
    return {"success": True, "document": document.to_dict()}
