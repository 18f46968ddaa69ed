"""Plain-text conflict report export."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable

from docuguard.conflicts.inbox import ConflictFilter
from docuguard.core.constants import (
    REPORT_BANNER,
    REPORT_FILE_PREFIX,
    REPORT_RULE,
    REPORT_TITLE,
)
from docuguard.models.conflict import Conflict


logger = logging.getLogger(__name__)


@dataclass
class ConflictReport:
    """A rendered report and the name it is exported under."""

    content: str
    filename: str
    conflict_count: int

    def save(self, directory: Path) -> Path:
        """Write the report into a directory, creating it if needed."""
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.content)
        logger.info(f"Report written to {path}")
        return path


def report_filename(generated_at: datetime) -> str:
    """Get the export file name, e.g. ``DocuGuard_Report_2024-05-01.txt``."""
    return f"{REPORT_FILE_PREFIX}{generated_at.date().isoformat()}.txt"


def format_conflict(conflict: Conflict) -> str:
    """Render one conflict block."""
    first_title, second_title = conflict.document_titles
    first_excerpt, second_excerpt = conflict.excerpts
    lines = [
        REPORT_BANNER,
        f"Conflict between: {first_title} vs. {second_title}",
        REPORT_RULE,
        f"- Severity: {conflict.severity.value}",
        f"- Status: {conflict.status.value}",
        f"- Explanation: {conflict.explanation}",
        "",
        f'- Excerpt from "{first_title}":',
        f'  "{first_excerpt}"',
        "",
        f'- Excerpt from "{second_title}":',
        f'  "{second_excerpt}"',
        REPORT_BANNER,
    ]
    return "\n".join(lines)


def build_report(
    conflicts: Iterable[Conflict],
    conflict_filter: ConflictFilter,
    generated_at: datetime,
) -> ConflictReport:
    """Filter, sort and render conflicts as a text report.

    Args:
        conflicts: All conflicts; the filter selects and orders them.
        conflict_filter: Inbox filter whose labels are echoed in the header.
        generated_at: Timestamp printed in the title and used for the file name.

    Returns:
        The rendered report.
    """
    selected = conflict_filter.apply(conflicts)
    status_label, severity_label = conflict_filter.describe()

    title = f"{REPORT_TITLE} - {generated_at.strftime('%Y-%m-%d %H:%M:%S')}\n"
    filters = f"Filters: Status='{status_label}', Severity='{severity_label}'\n\n"
    body = "\n\n".join(format_conflict(c) for c in selected)

    return ConflictReport(
        content=title + filters + body,
        filename=report_filename(generated_at),
        conflict_count=len(selected),
    )
