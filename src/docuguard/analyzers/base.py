"""Analyzer port: pairwise conflict detection."""

from typing import Protocol, runtime_checkable

from docuguard.models.conflict import ConflictCandidate
from docuguard.models.document import Document


@runtime_checkable
class ConflictAnalyzer(Protocol):
    """Finds contradictions between two documents.

    Implementations must only return candidates whose ``document_ids`` are
    the ids of the two documents they were given, and should raise
    ``AnalyzerError`` on failure.
    """

    async def analyze(self, first: Document, second: Document) -> list[ConflictCandidate]:
        """Analyze one document pair."""
        ...
