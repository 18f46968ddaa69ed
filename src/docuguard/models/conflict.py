"""Conflict data models.

This module defines the conflict record, the candidate conflicts returned by
an analyzer, and the severity, status and resolution enums tying them
together.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docuguard.core.constants import SEVERITY_RANKS


class Severity(str, Enum):
    """Severity assigned to a conflict by the analyzer."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @property
    def rank(self) -> int:
        """Get the sort rank (High sorts above Low)."""
        return SEVERITY_RANKS[self.value]

    @classmethod
    def parse(cls, value: str) -> "Severity":
        """Parse a severity case-insensitively ("high" -> HIGH)."""
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown severity: {value!r}")


class ConflictStatus(str, Enum):
    """Lifecycle status of a conflict."""

    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class Resolution(str, Enum):
    """How a conflict was settled."""

    ACCEPT_FIRST = "accept_doc1"
    ACCEPT_SECOND = "accept_doc2"
    IGNORE = "ignore"

    @property
    def status(self) -> ConflictStatus:
        """Get the status this resolution implies."""
        if self is Resolution.IGNORE:
            return ConflictStatus.IGNORED
        return ConflictStatus.RESOLVED


def pair_key(first_id: str, second_id: str) -> tuple[str, str]:
    """Get the canonical, order-insensitive key for a document pair."""
    return (first_id, second_id) if first_id <= second_id else (second_id, first_id)


def expected_status(resolution: Resolution | None) -> ConflictStatus:
    """Get the only status consistent with a resolution value."""
    if resolution is None:
        return ConflictStatus.UNRESOLVED
    return resolution.status


@dataclass(frozen=True)
class ConflictCandidate:
    """A conflict as returned by the analyzer, before it is stored."""

    document_ids: tuple[str, str]
    document_titles: tuple[str, str]
    excerpts: tuple[str, str]
    explanation: str
    severity: Severity

    @property
    def pair_key(self) -> tuple[str, str]:
        """Get sorted tuple for deduplication."""
        return pair_key(*self.document_ids)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "document_ids": list(self.document_ids),
            "document_titles": list(self.document_titles),
            "excerpts": list(self.excerpts),
            "explanation": self.explanation,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class Conflict:
    """A stored contradiction between excerpts of two documents.

    Records are immutable. Resolution replaces the record, so the
    status/resolution pairing is checked every time one is built.
    """

    id: str
    document_ids: tuple[str, str]
    document_titles: tuple[str, str]
    excerpts: tuple[str, str]
    explanation: str
    severity: Severity
    status: ConflictStatus = ConflictStatus.UNRESOLVED
    resolution: Resolution | None = None

    def __post_init__(self) -> None:
        if len(self.document_ids) != 2 or self.document_ids[0] == self.document_ids[1]:
            raise ValueError(
                f"Conflict {self.id} must reference two distinct documents, "
                f"got {self.document_ids!r}"
            )
        if self.status is not expected_status(self.resolution):
            raise ValueError(
                f"Conflict {self.id} has status {self.status.value!r} "
                f"inconsistent with resolution {self.resolution!r}"
            )

    @property
    def pair_key(self) -> tuple[str, str]:
        """Get sorted tuple for deduplication."""
        return pair_key(*self.document_ids)

    @property
    def is_unresolved(self) -> bool:
        """Check if the conflict still needs a decision."""
        return self.status is ConflictStatus.UNRESOLVED

    def involves(self, document_id: str) -> bool:
        """Check whether the conflict references a document."""
        return document_id in self.document_ids

    def matches_pair(self, first_id: str, second_id: str) -> bool:
        """Check whether the conflict belongs to an unordered pair."""
        return self.pair_key == pair_key(first_id, second_id)

    def resolved_as(self, resolution: Resolution) -> "Conflict":
        """Return a copy carrying the resolution and its implied status."""
        return Conflict(
            id=self.id,
            document_ids=self.document_ids,
            document_titles=self.document_titles,
            excerpts=self.excerpts,
            explanation=self.explanation,
            severity=self.severity,
            status=resolution.status,
            resolution=resolution,
        )

    @classmethod
    def from_candidate(cls, candidate: ConflictCandidate, conflict_id: str) -> "Conflict":
        """Create an unresolved conflict from analyzer output."""
        return cls(
            id=conflict_id,
            document_ids=candidate.document_ids,
            document_titles=candidate.document_titles,
            excerpts=candidate.excerpts,
            explanation=candidate.explanation,
            severity=candidate.severity,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "document_ids": list(self.document_ids),
            "document_titles": list(self.document_titles),
            "excerpts": list(self.excerpts),
            "explanation": self.explanation,
            "severity": self.severity.value,
            "status": self.status.value,
            "resolution": self.resolution.value if self.resolution else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Conflict":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            document_ids=_as_pair(data["document_ids"], "document_ids"),
            document_titles=_as_pair(data["document_titles"], "document_titles"),
            excerpts=_as_pair(data["excerpts"], "excerpts"),
            explanation=str(data["explanation"]),
            severity=Severity(data["severity"]),
            status=ConflictStatus(data.get("status", ConflictStatus.UNRESOLVED.value)),
            resolution=Resolution(data["resolution"]) if data.get("resolution") else None,
        )


@dataclass
class ConflictStats:
    """Statistics about conflicts in the store."""

    total: int
    unresolved: int
    resolved: int
    ignored: int
    by_severity: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total": self.total,
            "unresolved": self.unresolved,
            "resolved": self.resolved,
            "ignored": self.ignored,
            "by_severity": self.by_severity,
        }


def _as_pair(value: Any, name: str) -> tuple[str, str]:
    if not isinstance(value, (list, tuple)) or len(value) != 2:
        raise ValueError(f"{name} must hold exactly two entries")
    return str(value[0]), str(value[1])
