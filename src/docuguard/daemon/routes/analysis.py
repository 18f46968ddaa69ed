"""API routes for running analyses."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from docuguard.daemon.deps import get_workspace
from docuguard.ingestion.files import IngestedFile, to_documents
from docuguard.workspace import Workspace


router = APIRouter(prefix="/analysis", tags=["analysis"])


class DocumentInputModel(BaseModel):
    """A plain-text document submitted for analysis."""

    title: str = Field(..., min_length=1, description="Document title (usually the file name)")
    content: str = Field(..., description="Text content")


class BatchAnalysisRequestModel(BaseModel):
    """Request model for batch analysis."""

    documents: list[DocumentInputModel] = Field(..., description="At least two documents")


class PairAnalysisRequestModel(BaseModel):
    """Request model for targeted pair analysis."""

    first_id: str = Field(..., description="First document ID")
    second_id: str = Field(..., description="Second document ID")


@router.get("")
async def analysis_status(workspace: Workspace = Depends(get_workspace)):
    """Get whether a run is in flight and the last run summary."""
    last_run = workspace.orchestrator.last_run
    return {
        "is_analyzing": workspace.is_analyzing,
        "last_run": last_run.to_dict() if last_run else None,
    }


@router.post("/batch")
async def analyze_batch(
    request: BatchAnalysisRequestModel,
    workspace: Workspace = Depends(get_workspace),
):
    """Ingest documents and analyze them against the workspace."""
    documents = to_documents(
        [IngestedFile(name=d.title, text_content=d.content) for d in request.documents],
        workspace.id_factory,
    )
    run = await workspace.analyze_documents(documents)
    return {
        "run": run.to_dict(),
        "documents": [{"id": d.id, "title": d.title} for d in documents],
    }


@router.post("/pair")
async def analyze_pair(
    request: PairAnalysisRequestModel,
    workspace: Workspace = Depends(get_workspace),
):
    """Re-analyze one pair of stored documents."""
    run = await workspace.analyze_pair(request.first_id, request.second_id)
    return {"run": run.to_dict()}
