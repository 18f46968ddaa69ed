"""History event data model."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class HistoryEventType(str, Enum):
    """Kinds of events recorded in the activity log."""

    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETE = "analysis_complete"
    ANALYSIS_ERROR = "analysis_error"
    CONFLICT_RESOLVED = "conflict_resolved"
    DOCUMENT_SAVED = "document_saved"
    PROFILE_UPDATED = "profile_updated"
    REPORT_GENERATED = "report_generated"


@dataclass(frozen=True)
class HistoryEvent:
    """An append-only activity log entry."""

    id: str
    type: HistoryEventType
    details: str
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "type": self.type.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEvent":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            type=HistoryEventType(data["type"]),
            details=str(data["details"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )
