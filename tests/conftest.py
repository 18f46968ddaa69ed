"""Pytest configuration and fixtures for DocuGuard tests."""

import shutil
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

from docuguard.conflicts.store import ConflictRecordStore
from docuguard.core.config import DocuGuardConfig, StorageConfig
from docuguard.core.ids import SequentialIds
from docuguard.models.conflict import Conflict, ConflictCandidate, Severity, pair_key
from docuguard.models.document import Document


class FixedClock:
    """Clock returning a fixed time that tests can advance."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class ScriptedAnalyzer:
    """Analyzer returning canned findings per unordered document pair.

    Findings are ``(excerpt1, excerpt2, explanation, severity)`` tuples keyed
    by document titles. A pair mapped to an exception raises it.
    """

    def __init__(self, script: dict[tuple[str, str], object] | None = None) -> None:
        self.script = script or {}
        self.calls: list[tuple[str, str]] = []

    def set(self, first_title: str, second_title: str, findings: object) -> None:
        self.script[pair_key(first_title, second_title)] = findings

    async def analyze(self, first: Document, second: Document) -> list[ConflictCandidate]:
        self.calls.append((first.id, second.id))
        findings = self.script.get(pair_key(first.title, second.title), [])
        if isinstance(findings, Exception):
            raise findings
        return [
            ConflictCandidate(
                document_ids=(first.id, second.id),
                document_titles=(first.title, second.title),
                excerpts=(excerpt1, excerpt2),
                explanation=explanation,
                severity=severity,
            )
            for excerpt1, excerpt2, explanation, severity in findings
        ]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def ids() -> SequentialIds:
    """Deterministic id factory."""
    return SequentialIds("id")


@pytest.fixture
def clock() -> FixedClock:
    """Fixed clock at 2024-05-01 09:30:00 UTC."""
    return FixedClock()


@pytest.fixture
def config() -> DocuGuardConfig:
    """Default configuration with a short save debounce."""
    return DocuGuardConfig(storage=StorageConfig(save_debounce_ms=10))


@pytest.fixture
def store(ids: SequentialIds, clock: FixedClock) -> ConflictRecordStore:
    """Empty conflict record store."""
    return ConflictRecordStore(id_factory=ids, clock=clock)


@pytest.fixture
def analyzer() -> ScriptedAnalyzer:
    """Analyzer with no findings until a test scripts some."""
    return ScriptedAnalyzer()


@pytest.fixture
def docs() -> list[Document]:
    """Three documents d1, d2, d3."""
    return [
        Document(id="d1", title="Policy A", content="Vacation requests need 2 weeks notice."),
        Document(id="d2", title="Policy B", content="Vacation requests need 4 weeks notice."),
        Document(id="d3", title="Policy C", content="Expenses are reimbursed monthly."),
    ]


def make_conflict(
    conflict_id: str,
    first: str = "d1",
    second: str = "d2",
    severity: Severity = Severity.HIGH,
    titles: tuple[str, str] | None = None,
) -> Conflict:
    """Build an unresolved conflict between two document ids."""
    return Conflict(
        id=conflict_id,
        document_ids=(first, second),
        document_titles=titles or (f"{first}.txt", f"{second}.txt"),
        excerpts=(f"excerpt from {first}", f"excerpt from {second}"),
        explanation=f"{first} and {second} disagree",
        severity=severity,
    )


@pytest.fixture
def conflict_factory():
    """Factory building unresolved conflicts between two document ids."""
    return make_conflict
