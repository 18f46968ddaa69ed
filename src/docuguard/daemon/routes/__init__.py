"""API route modules."""
from docuguard.daemon.routes.analysis import router as analysis_router
from docuguard.daemon.routes.conflicts import router as conflicts_router
from docuguard.daemon.routes.documents import router as documents_router

__all__ = ["analysis_router", "conflicts_router", "documents_router"]
