"""Persisted workspace snapshot model."""

from dataclasses import dataclass, field
from typing import Any

from docuguard.models.conflict import Conflict
from docuguard.models.document import Document
from docuguard.models.history import HistoryEvent
from docuguard.models.profile import UserProfile


SNAPSHOT_VERSION = 1


@dataclass
class Snapshot:
    """Everything needed to restore a workspace session."""

    documents: list[Document] = field(default_factory=list)
    conflicts: list[Conflict] = field(default_factory=list)
    history: list[HistoryEvent] = field(default_factory=list)
    profile: UserProfile = field(default_factory=UserProfile)
    reports_generated_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": SNAPSHOT_VERSION,
            "documents": [d.to_dict() for d in self.documents],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "history": [e.to_dict() for e in self.history],
            "profile": self.profile.to_dict(),
            "reports_generated_count": self.reports_generated_count,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Snapshot":
        """Create from dictionary, rejecting anything malformed.

        Absent sections fall back to defaults; a present but malformed
        section invalidates the whole snapshot.

        Raises:
            ValueError: If any part of the payload is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot must be a JSON object")

        documents = [Document.from_dict(d) for d in _list_section(data, "documents")]
        conflicts = [Conflict.from_dict(c) for c in _list_section(data, "conflicts")]
        history = [HistoryEvent.from_dict(e) for e in _list_section(data, "history")]

        profile_data = data.get("profile")
        if profile_data is None:
            profile = UserProfile()
        elif isinstance(profile_data, dict):
            profile = UserProfile.from_dict(profile_data)
        else:
            raise ValueError("profile must be an object")

        count = data.get("reports_generated_count", 0)
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError("reports_generated_count must be a non-negative integer")

        document_ids = [d.id for d in documents]
        if len(set(document_ids)) != len(document_ids):
            raise ValueError("Snapshot contains duplicate document ids")
        known = set(document_ids)
        for conflict in conflicts:
            missing = [i for i in conflict.document_ids if i not in known]
            if missing:
                raise ValueError(
                    f"Conflict {conflict.id} references unknown documents: {missing}"
                )
        conflict_ids = [c.id for c in conflicts]
        if len(set(conflict_ids)) != len(conflict_ids):
            raise ValueError("Snapshot contains duplicate conflict ids")

        return cls(
            documents=documents,
            conflicts=conflicts,
            history=history,
            profile=profile,
            reports_generated_count=count,
        )


def _list_section(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list")
    for item in value:
        if not isinstance(item, dict):
            raise ValueError(f"{key} entries must be objects")
    return value
