"""DocuGuard - track textual contradictions across a growing set of documents.

Documents are analyzed pairwise for conflicting statements; conflicts move
through an unresolved/resolved/ignored lifecycle and are projected into a
relationship graph that can be explored with pan, zoom and hover.
"""

__version__ = "1.0.0"

from docuguard.core import (
    DocuGuardConfig,
    DocuGuardError,
)

__all__ = [
    "__version__",
    "DocuGuardConfig",
    "DocuGuardError",
]
