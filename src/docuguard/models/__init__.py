"""DocuGuard data models."""
from docuguard.models.conflict import (
    Conflict,
    ConflictCandidate,
    ConflictStats,
    ConflictStatus,
    Resolution,
    Severity,
    expected_status,
    pair_key,
)
from docuguard.models.document import Document
from docuguard.models.history import HistoryEvent, HistoryEventType
from docuguard.models.profile import Theme, UserProfile
from docuguard.models.snapshot import Snapshot

__all__ = [
    # Conflict models
    "Conflict",
    "ConflictCandidate",
    "ConflictStats",
    "ConflictStatus",
    "Resolution",
    "Severity",
    "expected_status",
    "pair_key",
    # Document models
    "Document",
    # History models
    "HistoryEvent",
    "HistoryEventType",
    # Profile models
    "Theme",
    "UserProfile",
    # Snapshot models
    "Snapshot",
]
