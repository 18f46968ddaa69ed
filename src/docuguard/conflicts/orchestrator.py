"""Pairwise analysis orchestration.

This module turns a set of documents into pairwise analyzer calls and merges
the results into the conflict record store. A run either commits every
conflict it found or, if any analyzer call fails, commits none of them.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Sequence

from docuguard.conflicts.pairs import DocumentPair, generate_pairs
from docuguard.core.constants import MIN_BATCH_DOCUMENTS
from docuguard.core.exceptions import (
    AnalysisInProgressError,
    AnalyzerError,
    DocuGuardError,
    ValidationError,
)
from docuguard.core.ids import Clock, IdFactory, new_id, utc_now
from docuguard.models.conflict import Conflict, ConflictCandidate, pair_key
from docuguard.models.document import Document
from docuguard.models.history import HistoryEventType

if TYPE_CHECKING:
    from docuguard.analyzers.base import ConflictAnalyzer
    from docuguard.conflicts.store import ConflictRecordStore


logger = logging.getLogger(__name__)


@dataclass
class AnalysisRun:
    """Summary of a completed analysis run."""

    run_id: str
    mode: str
    started_at: datetime
    completed_at: datetime
    documents_ingested: int
    pairs_analyzed: int
    conflicts_created: int
    conflicts_replaced: int

    @property
    def duration_ms(self) -> float:
        """Get the run duration in milliseconds."""
        return (self.completed_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_id": self.run_id,
            "mode": self.mode,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "duration_ms": self.duration_ms,
            "documents_ingested": self.documents_ingested,
            "pairs_analyzed": self.pairs_analyzed,
            "conflicts_created": self.conflicts_created,
            "conflicts_replaced": self.conflicts_replaced,
        }


class AnalysisOrchestrator:
    """Runs batch and targeted pair analyses against the store.

    Only one run may be in flight at a time; overlapping requests are
    rejected rather than queued.
    """

    def __init__(
        self,
        store: "ConflictRecordStore",
        analyzer: "ConflictAnalyzer",
        id_factory: IdFactory = new_id,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            store: The conflict record store runs commit into.
            analyzer: The pairwise analyzer.
            id_factory: Source of conflict and run ids.
            clock: Source of run timestamps.
        """
        self._store = store
        self._analyzer = analyzer
        self._id_factory = id_factory
        self._clock = clock
        self._is_analyzing = False
        self._last_run: AnalysisRun | None = None

    @property
    def is_analyzing(self) -> bool:
        """Check if a run is in flight."""
        return self._is_analyzing

    @property
    def last_run(self) -> AnalysisRun | None:
        """Get the summary of the last successful run."""
        return self._last_run

    async def analyze_batch(self, new_documents: Sequence[Document]) -> AnalysisRun:
        """Ingest a batch and analyze it against itself and the store.

        Args:
            new_documents: At least two documents with fresh ids.

        Returns:
            Summary of the run.

        Raises:
            ValidationError: If fewer than two documents are given.
            AnalysisInProgressError: If another run is in flight.
            DuplicateIdError: If a document id is already taken.
            AnalyzerError: If any analyzer call failed. The batch stays
                ingested but no conflicts are merged.
        """
        batch = list(new_documents)
        if len(batch) < MIN_BATCH_DOCUMENTS:
            raise ValidationError(
                f"At least {MIN_BATCH_DOCUMENTS} documents are required for analysis, "
                f"got {len(batch)}",
                field="documents",
            )
        self._ensure_idle()

        self._is_analyzing = True
        try:
            started_at = self._clock()
            existing = self._store.documents
            self._store.upsert_documents(batch)
            self._store.record(
                HistoryEventType.ANALYSIS_STARTED,
                f"Started analysis on {len(batch)} documents.",
            )
            pairs = generate_pairs(batch, existing)
            logger.info(
                f"Batch analysis started: {len(batch)} new, "
                f"{len(existing)} existing, {len(pairs)} pairs"
            )

            try:
                conflicts = await self._analyze_pairs(pairs)
                replaced = self._commit(pairs, conflicts)
            except DocuGuardError as e:
                logger.error(f"Batch analysis failed: {e}")
                self._store.record(
                    HistoryEventType.ANALYSIS_ERROR,
                    "Analysis failed due to an error.",
                )
                raise

            self._store.record(
                HistoryEventType.ANALYSIS_COMPLETE,
                f"Analysis complete. Found {len(conflicts)} new conflicts.",
            )
            return self._finish(
                "batch", started_at, len(batch), len(pairs), len(conflicts), replaced
            )
        finally:
            self._is_analyzing = False

    async def analyze_pair(self, first_id: str, second_id: str) -> AnalysisRun:
        """Re-analyze exactly one pair of stored documents.

        Raises:
            ValidationError: If both ids are the same.
            DocumentNotFoundError: If either id is unknown.
            AnalysisInProgressError: If another run is in flight.
            AnalyzerError: If the analyzer call failed. Nothing is merged.
        """
        if first_id == second_id:
            raise ValidationError(
                "Cannot analyze a document against itself",
                field="document_ids",
            )
        first = self._store.require_document(first_id)
        second = self._store.require_document(second_id)
        self._ensure_idle()

        self._is_analyzing = True
        try:
            started_at = self._clock()
            self._store.record(
                HistoryEventType.ANALYSIS_STARTED,
                f'Analyzing "{first.title}" and "{second.title}".',
            )
            pairs = [(first, second)]

            try:
                conflicts = await self._analyze_pairs(pairs)
                replaced = self._commit(pairs, conflicts)
            except DocuGuardError as e:
                logger.error(f"Pair analysis failed: {e}")
                self._store.record(
                    HistoryEventType.ANALYSIS_ERROR,
                    f'Analysis failed between "{first.title}" and "{second.title}".',
                )
                raise

            self._store.record(
                HistoryEventType.ANALYSIS_COMPLETE,
                f'Found {len(conflicts)} new conflicts between '
                f'"{first.title}" and "{second.title}".',
            )
            return self._finish("pair", started_at, 0, 1, len(conflicts), replaced)
        finally:
            self._is_analyzing = False

    def _ensure_idle(self) -> None:
        if self._is_analyzing:
            raise AnalysisInProgressError("An analysis is already in progress")

    async def _analyze_pairs(self, pairs: list[DocumentPair]) -> list[Conflict]:
        """Call the analyzer for every pair and build unresolved conflicts.

        All calls settle before any failure is reported.
        """
        results = await asyncio.gather(
            *(self._analyzer.analyze(first, second) for first, second in pairs),
            return_exceptions=True,
        )

        failures: list[tuple[DocumentPair, BaseException]] = []
        candidates: list[ConflictCandidate] = []
        for (first, second), result in zip(pairs, results):
            if isinstance(result, BaseException):
                failures.append(((first, second), result))
                continue
            if not isinstance(result, (list, tuple)):
                raise AnalyzerError(
                    f"Analyzer returned {type(result).__name__} instead of a list of conflicts",
                    document_ids=(first.id, second.id),
                )
            for candidate in result:
                if not isinstance(candidate, ConflictCandidate):
                    raise AnalyzerError(
                        f"Analyzer returned malformed conflict: {type(candidate).__name__}",
                        document_ids=(first.id, second.id),
                    )
                if candidate.pair_key != pair_key(first.id, second.id):
                    raise AnalyzerError(
                        f"Analyzer returned a conflict for {candidate.document_ids} "
                        f"while analyzing ({first.id}, {second.id})",
                        document_ids=(first.id, second.id),
                    )
                candidates.append(candidate)

        if failures:
            (first, second), error = failures[0]
            if len(failures) > 1:
                logger.warning(f"{len(failures)} of {len(pairs)} analyzer calls failed")
            if isinstance(error, AnalyzerError):
                raise error
            raise AnalyzerError(
                f"Analyzer call failed: {error}",
                document_ids=(first.id, second.id),
            ) from error

        return [Conflict.from_candidate(c, self._id_factory()) for c in candidates]

    def _commit(self, pairs: list[DocumentPair], conflicts: list[Conflict]) -> int:
        return self._store.replace_conflicts_for_pairs(
            [(first.id, second.id) for first, second in pairs],
            conflicts,
        )

    def _finish(
        self,
        mode: str,
        started_at: datetime,
        documents_ingested: int,
        pairs_analyzed: int,
        conflicts_created: int,
        conflicts_replaced: int,
    ) -> AnalysisRun:
        run = AnalysisRun(
            run_id=self._id_factory(),
            mode=mode,
            started_at=started_at,
            completed_at=self._clock(),
            documents_ingested=documents_ingested,
            pairs_analyzed=pairs_analyzed,
            conflicts_created=conflicts_created,
            conflicts_replaced=conflicts_replaced,
        )
        self._last_run = run
        logger.info(
            f"Analysis {run.run_id} ({mode}) completed: {pairs_analyzed} pairs, "
            f"{conflicts_created} conflicts, {conflicts_replaced} replaced"
        )
        return run
