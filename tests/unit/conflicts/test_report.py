"""Unit tests for conflict report export."""

from datetime import datetime

from docuguard.conflicts.inbox import ConflictFilter
from docuguard.conflicts.report import build_report, format_conflict, report_filename
from docuguard.models.conflict import Conflict, Severity


GENERATED_AT = datetime(2024, 5, 1, 14, 5, 9)


def _conflict(conflict_id: str, severity: Severity) -> Conflict:
    return Conflict(
        id=conflict_id,
        document_ids=("d1", "d2"),
        document_titles=("handbook.txt", "memo.txt"),
        excerpts=("Notice is 2 weeks.", "Notice is 4 weeks."),
        explanation="The notice periods differ.",
        severity=severity,
    )


class TestReportFilename:
    """Tests for report_filename."""

    def test_uses_date(self):
        """Test the file name carries the ISO date."""
        assert report_filename(GENERATED_AT) == "DocuGuard_Report_2024-05-01.txt"


class TestFormatConflict:
    """Tests for format_conflict."""

    def test_block_layout(self):
        """Test the full block text."""
        block = format_conflict(_conflict("c1", Severity.HIGH))

        assert block == "\n".join([
            "=" * 50,
            "Conflict between: handbook.txt vs. memo.txt",
            "-" * 50,
            "- Severity: High",
            "- Status: unresolved",
            "- Explanation: The notice periods differ.",
            "",
            '- Excerpt from "handbook.txt":',
            '  "Notice is 2 weeks."',
            "",
            '- Excerpt from "memo.txt":',
            '  "Notice is 4 weeks."',
            "=" * 50,
        ])


class TestBuildReport:
    """Tests for build_report."""

    def test_header(self):
        """Test title and filter lines."""
        report = build_report([_conflict("c1", Severity.HIGH)], ConflictFilter(), GENERATED_AT)

        assert report.content.startswith(
            "DocuGuard Conflict Report - 2024-05-01 14:05:09\n"
            "Filters: Status='unresolved', Severity='All'\n\n"
        )
        assert report.filename == "DocuGuard_Report_2024-05-01.txt"

    def test_uses_filter_and_sort(self):
        """Test only matching conflicts are included, in inbox order."""
        conflicts = [
            _conflict("low", Severity.LOW),
            _conflict("high", Severity.HIGH),
            _conflict("medium", Severity.MEDIUM),
        ]
        report = build_report(
            conflicts,
            ConflictFilter(status=None, severity=None),
            GENERATED_AT,
        )

        assert report.conflict_count == 3
        body = report.content
        assert body.index("Severity: High") < body.index("Severity: Medium") < body.index("Severity: Low")
        assert "Filters: Status='All', Severity='All'" in body

    def test_blocks_separated_by_blank_line(self):
        """Test blocks are joined by one empty line."""
        report = build_report(
            [_conflict("a", Severity.HIGH), _conflict("b", Severity.HIGH)],
            ConflictFilter(),
            GENERATED_AT,
        )

        assert ("=" * 50 + "\n\n" + "=" * 50) in report.content

    def test_empty_selection(self):
        """Test no matching conflicts yields header only."""
        report = build_report(
            [_conflict("a", Severity.HIGH)],
            ConflictFilter(severity=Severity.LOW),
            GENERATED_AT,
        )

        assert report.conflict_count == 0
        assert report.content.endswith("Severity='Low'\n\n")

    def test_save(self, temp_dir):
        """Test writing into a new directory."""
        report = build_report([_conflict("a", Severity.HIGH)], ConflictFilter(), GENERATED_AT)

        path = report.save(temp_dir / "reports")
        assert path == temp_dir / "reports" / "DocuGuard_Report_2024-05-01.txt"
        assert path.read_text(encoding="utf-8") == report.content
