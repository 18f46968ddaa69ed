"""Workspace session.

A workspace ties the conflict record store, the analysis orchestrator, the
user profile and snapshot persistence together into the application service
the CLI and the HTTP API drive.
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from docuguard.analyzers import ConflictAnalyzer, create_analyzer
from docuguard.conflicts.inbox import ConflictFilter
from docuguard.conflicts.orchestrator import AnalysisOrchestrator, AnalysisRun
from docuguard.conflicts.report import ConflictReport, build_report
from docuguard.conflicts.store import ConflictRecordStore
from docuguard.core.config import DocuGuardConfig
from docuguard.core.constants import MIN_BATCH_DOCUMENTS, get_docuguard_root, get_reports_dir
from docuguard.core.exceptions import AnalyzerError, PersistenceError, ValidationError
from docuguard.core.ids import Clock, IdFactory, new_id, utc_now
from docuguard.graph.builder import GraphProjection, RelationshipGraph
from docuguard.ingestion.files import read_text_files, to_documents
from docuguard.models.conflict import Conflict, Resolution
from docuguard.models.document import Document
from docuguard.models.history import HistoryEventType
from docuguard.models.profile import Theme, UserProfile
from docuguard.models.snapshot import Snapshot
from docuguard.persistence.snapshot import DebouncedSaver, JsonSnapshotStore, SnapshotStore


logger = logging.getLogger(__name__)


MAX_NOTIFICATIONS = 50


class NotificationLevel(str, Enum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A transient user-facing message."""

    message: str
    level: NotificationLevel
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "message": self.message,
            "level": self.level.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers of the workspace."""

    documents_processed: int
    reports_generated: int
    unresolved_conflicts: int

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "documents_processed": self.documents_processed,
            "reports_generated": self.reports_generated,
            "unresolved_conflicts": self.unresolved_conflicts,
        }


class Workspace:
    """Application service over one persisted workspace."""

    def __init__(
        self,
        analyzer: ConflictAnalyzer,
        config: DocuGuardConfig | None = None,
        snapshot_store: SnapshotStore | None = None,
        base_path: Path | None = None,
        id_factory: IdFactory = new_id,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize an empty workspace.

        Use ``Workspace.open`` to restore a persisted one.

        Args:
            analyzer: Pairwise conflict analyzer.
            config: Configuration.
            snapshot_store: Where state is persisted; None disables persistence.
            base_path: Project directory holding ``.docuguard/``.
            id_factory: Source of document, conflict and event ids.
            clock: Source of timestamps.
        """
        self._config = config or DocuGuardConfig()
        self._base_path = base_path or Path.cwd()
        self._id_factory = id_factory
        self._clock = clock

        self.store = ConflictRecordStore(id_factory=id_factory, clock=clock)
        self.orchestrator = AnalysisOrchestrator(
            self.store, analyzer, id_factory=id_factory, clock=clock
        )
        self.projection = GraphProjection(self.store, self._config.graph)

        self._profile = UserProfile()
        self._reports_generated_count = 0
        self._notifications: deque[Notification] = deque(maxlen=MAX_NOTIFICATIONS)

        self._snapshot_store = snapshot_store
        self._saver: DebouncedSaver | None = None
        if snapshot_store is not None:
            self._saver = DebouncedSaver(
                snapshot_store,
                self.snapshot,
                debounce_ms=self._config.storage.save_debounce_ms,
            )
            self.store.add_listener(self._saver.schedule)

    @classmethod
    def open(
        cls,
        base_path: Path | None = None,
        analyzer: ConflictAnalyzer | None = None,
        config: DocuGuardConfig | None = None,
        id_factory: IdFactory = new_id,
        clock: Clock = utc_now,
    ) -> "Workspace":
        """Open the workspace persisted under ``base_path``.

        A corrupted snapshot is discarded and the workspace starts empty.
        """
        base_path = base_path or Path.cwd()
        config = config or DocuGuardConfig.load(base_path)
        snapshot_path = get_docuguard_root(base_path) / config.storage.snapshot_file
        snapshot_store = JsonSnapshotStore(snapshot_path)

        workspace = cls(
            analyzer=analyzer or create_analyzer(config.analyzer),
            config=config,
            snapshot_store=snapshot_store,
            base_path=base_path,
            id_factory=id_factory,
            clock=clock,
        )

        try:
            snapshot = snapshot_store.load()
        except PersistenceError as e:
            logger.warning(f"Starting with an empty workspace: {e}")
            workspace.notify("Saved state was corrupted and has been reset.", NotificationLevel.ERROR)
            snapshot = None

        if snapshot is not None:
            workspace.restore(snapshot)
        return workspace

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> DocuGuardConfig:
        return self._config

    @property
    def id_factory(self) -> IdFactory:
        return self._id_factory

    @property
    def profile(self) -> UserProfile:
        return self._profile

    @property
    def reports_generated_count(self) -> int:
        return self._reports_generated_count

    @property
    def is_analyzing(self) -> bool:
        return self.orchestrator.is_analyzing

    @property
    def notifications(self) -> list[Notification]:
        """Get pending notifications, oldest first."""
        return list(self._notifications)

    def drain_notifications(self) -> list[Notification]:
        """Get and clear pending notifications."""
        items = list(self._notifications)
        self._notifications.clear()
        return items

    def notify(self, message: str, level: NotificationLevel = NotificationLevel.SUCCESS) -> None:
        """Queue a notification unless the user turned them off."""
        if not self._profile.notifications_enabled:
            return
        self._notifications.append(Notification(message, level, self._clock()))

    def snapshot(self) -> Snapshot:
        """Capture the full persisted state."""
        documents, conflicts, history = self.store.dump()
        return Snapshot(
            documents=documents,
            conflicts=conflicts,
            history=history,
            profile=self._profile,
            reports_generated_count=self._reports_generated_count,
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the workspace state with a snapshot."""
        self._profile = snapshot.profile
        self._reports_generated_count = snapshot.reports_generated_count
        self.store.load(snapshot.documents, snapshot.conflicts, snapshot.history)
        logger.info(
            f"Restored {len(snapshot.documents)} documents, "
            f"{len(snapshot.conflicts)} conflicts"
        )

    def dashboard(self) -> DashboardStats:
        """Get the headline numbers."""
        return DashboardStats(
            documents_processed=len(self.store.documents),
            reports_generated=self._reports_generated_count,
            unresolved_conflicts=self.store.unresolved_count,
        )

    def graph(self) -> RelationshipGraph:
        """Get the relationship graph for the current state."""
        return self.projection.get()

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    async def analyze_files(self, paths: Iterable[Path]) -> AnalysisRun:
        """Read text files and run a batch analysis on them.

        Non-text files are ignored with a notification.

        Raises:
            ValidationError: If fewer than two files, or fewer than two text
                files, are given.
            AnalyzerError: If analysis failed; the documents stay ingested.
        """
        paths = [Path(p) for p in paths]
        if len(paths) < MIN_BATCH_DOCUMENTS:
            self.notify("Please select at least two files to analyze.", NotificationLevel.ERROR)
            raise ValidationError(
                "Please select at least two files to analyze.",
                field="files",
            )

        result = read_text_files(paths)
        if result.has_rejections:
            self.notify("Some files were not .txt and were ignored.", NotificationLevel.ERROR)
        if len(result.files) < MIN_BATCH_DOCUMENTS:
            self.notify("At least two .txt files are required for analysis.", NotificationLevel.ERROR)
            raise ValidationError(
                "At least two .txt files are required for analysis.",
                field="files",
                details={"rejected": ", ".join(r.path.name for r in result.rejected)},
            )

        return await self.analyze_documents(to_documents(result.files, self._id_factory))

    async def analyze_documents(self, documents: Iterable[Document]) -> AnalysisRun:
        """Ingest documents and analyze them against the workspace."""
        try:
            run = await self.orchestrator.analyze_batch(list(documents))
        except AnalyzerError:
            self.notify("An error occurred during analysis.", NotificationLevel.ERROR)
            raise
        self.notify(f"Analysis complete! Found {run.conflicts_created} new potential conflicts.")
        return run

    async def analyze_pair(self, first_id: str, second_id: str) -> AnalysisRun:
        """Re-analyze one pair of stored documents."""
        try:
            run = await self.orchestrator.analyze_pair(first_id, second_id)
        except AnalyzerError:
            self.notify("An error occurred during analysis.", NotificationLevel.ERROR)
            raise
        self.notify(f"Analysis complete! Found {run.conflicts_created} new conflicts.")
        return run

    # ------------------------------------------------------------------
    # Documents and conflicts
    # ------------------------------------------------------------------

    def save_document(self, document_id: str, content: str) -> Document:
        document = self.store.save_document(document_id, content)
        self.notify("Document saved successfully!")
        return document

    def resolve_conflict(self, conflict_id: str, resolution: Resolution | str) -> Conflict:
        conflict = self.store.resolve(conflict_id, resolution)
        self.notify("Conflict status updated.")
        return conflict

    def list_conflicts(self, conflict_filter: ConflictFilter | None = None) -> list[Conflict]:
        """Get the filtered, sorted conflict inbox."""
        return (conflict_filter or ConflictFilter()).apply(self.store.conflicts)

    def generate_report(
        self,
        conflict_filter: ConflictFilter | None = None,
        output_dir: Path | None = None,
    ) -> tuple[ConflictReport, Path]:
        """Build the conflict report and write it to disk.

        Args:
            conflict_filter: Inbox filter selecting the reported conflicts.
            output_dir: Target directory; defaults to ``.docuguard/reports``.

        Returns:
            The report and the path it was written to.

        Raises:
            ValidationError: If no conflict matches the filter.
        """
        conflict_filter = conflict_filter or ConflictFilter()
        report = build_report(self.store.conflicts, conflict_filter, self._clock())
        if report.conflict_count == 0:
            raise ValidationError(
                "No conflicts match the current filters; nothing to export",
                details=conflict_filter.to_dict(),
            )

        path = report.save(output_dir or get_reports_dir(self._base_path))
        self._reports_generated_count += 1
        self.store.record(
            HistoryEventType.REPORT_GENERATED,
            "Generated and downloaded a conflict report.",
        )
        return report, path

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def update_profile(self, **changes: Any) -> UserProfile:
        """Update profile fields (name, email, phone, notifications_enabled, theme).

        Raises:
            ValidationError: For unknown fields or invalid values.
        """
        allowed = {"name", "email", "phone", "notifications_enabled", "theme"}
        unknown = set(changes) - allowed
        if unknown:
            raise ValidationError(
                f"Unknown profile fields: {', '.join(sorted(unknown))}",
                field="profile",
            )
        if "theme" in changes:
            try:
                changes["theme"] = Theme(changes["theme"])
            except ValueError as e:
                raise ValidationError(str(e), field="theme") from e
        if "notifications_enabled" in changes and not isinstance(
            changes["notifications_enabled"], bool
        ):
            raise ValidationError(
                "notifications_enabled must be a boolean",
                field="notifications_enabled",
            )
        if "name" in changes and not str(changes["name"]).strip():
            raise ValidationError("Name cannot be empty", field="name")

        self._profile = replace(self._profile, **changes)
        self.notify("Profile updated successfully!")
        self.store.record(HistoryEventType.PROFILE_UPDATED, "User profile was updated.")
        return self._profile

    def toggle_theme(self) -> Theme:
        """Switch between the light and dark theme."""
        self._profile = self._profile.with_toggled_theme()
        self._schedule_save()
        return self._profile.theme

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Flush pending state to disk."""
        if self._saver is not None:
            self._saver.flush()

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _schedule_save(self) -> None:
        if self._saver is not None:
            self._saver.schedule()
