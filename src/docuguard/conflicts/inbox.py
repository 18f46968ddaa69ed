"""Conflict inbox filtering and sorting."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from docuguard.models.conflict import Conflict, ConflictStatus, Severity


ALL_LABEL = "All"


class SortOrder(str, Enum):
    """Ordering of the conflict inbox."""

    SEVERITY_DESC = "severity-desc"
    SEVERITY_ASC = "severity-asc"


@dataclass(frozen=True)
class ConflictFilter:
    """Status/severity filter with a severity sort.

    A ``None`` status or severity means "All".
    """

    status: ConflictStatus | None = ConflictStatus.UNRESOLVED
    severity: Severity | None = None
    sort: SortOrder = SortOrder.SEVERITY_DESC

    def matches(self, conflict: Conflict) -> bool:
        """Check whether a conflict passes the filter."""
        if self.status is not None and conflict.status is not self.status:
            return False
        if self.severity is not None and conflict.severity is not self.severity:
            return False
        return True

    def apply(self, conflicts: Iterable[Conflict]) -> list[Conflict]:
        """Filter and sort conflicts.

        The sort is stable, so conflicts of equal severity keep store order.
        """
        selected = [c for c in conflicts if self.matches(c)]
        return sorted(
            selected,
            key=lambda c: c.severity.rank,
            reverse=self.sort is SortOrder.SEVERITY_DESC,
        )

    def describe(self) -> tuple[str, str]:
        """Get the (status, severity) labels shown in reports."""
        status = self.status.value if self.status else ALL_LABEL
        severity = self.severity.value if self.severity else ALL_LABEL
        return status, severity

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "status": self.status.value if self.status else None,
            "severity": self.severity.value if self.severity else None,
            "sort": self.sort.value,
        }

    @classmethod
    def parse(
        cls,
        status: str | None = ConflictStatus.UNRESOLVED.value,
        severity: str | None = None,
        sort: str = SortOrder.SEVERITY_DESC.value,
    ) -> "ConflictFilter":
        """Build a filter from user-facing strings ("all" selects everything).

        Raises:
            ValueError: If a value is not recognised.
        """
        parsed_status = None
        if status and status.lower() != ALL_LABEL.lower():
            parsed_status = ConflictStatus(status.lower())

        parsed_severity = None
        if severity and severity.lower() != ALL_LABEL.lower():
            parsed_severity = Severity.parse(severity)

        return cls(status=parsed_status, severity=parsed_severity, sort=SortOrder(sort))
