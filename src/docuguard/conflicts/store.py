"""Conflict record store.

This module holds the documents, conflicts and activity history of a
workspace and enforces their identity and status invariants. Every mutating
operation computes the new state off to the side and swaps it in under a
lock, so readers never see a purge without its matching insert.
"""

import logging
import threading
from collections import Counter
from typing import Callable, Iterable

from docuguard.core.exceptions import (
    ConflictNotFoundError,
    DocumentNotFoundError,
    DuplicateIdError,
    InvalidResolutionError,
)
from docuguard.core.ids import Clock, IdFactory, new_id, utc_now
from docuguard.models.conflict import (
    Conflict,
    ConflictStats,
    ConflictStatus,
    Resolution,
    pair_key,
)
from docuguard.models.document import Document
from docuguard.models.history import HistoryEvent, HistoryEventType


logger = logging.getLogger(__name__)


ChangeListener = Callable[[], None]


class ConflictRecordStore:
    """In-memory store for documents, conflicts and history events."""

    def __init__(
        self,
        id_factory: IdFactory = new_id,
        clock: Clock = utc_now,
    ) -> None:
        """Initialize an empty store.

        Args:
            id_factory: Source of ids for history events.
            clock: Source of event timestamps.
        """
        self._id_factory = id_factory
        self._clock = clock
        self._lock = threading.RLock()
        self._documents: list[Document] = []
        self._conflicts: list[Conflict] = []
        self._history: list[HistoryEvent] = []
        self._version = 0
        self._listeners: list[ChangeListener] = []

    @property
    def version(self) -> int:
        """Get the mutation counter (bumped on every change)."""
        return self._version

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback invoked after every mutation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        """Unregister a change callback."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @property
    def documents(self) -> list[Document]:
        """Get all documents in store order."""
        with self._lock:
            return list(self._documents)

    def get_document(self, document_id: str) -> Document | None:
        """Get a document by ID, or None if not found."""
        with self._lock:
            for document in self._documents:
                if document.id == document_id:
                    return document
            return None

    def require_document(self, document_id: str) -> Document:
        """Get a document by ID.

        Raises:
            DocumentNotFoundError: If no document has that id.
        """
        document = self.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(
                f"Document not found: {document_id}",
                document_id=document_id,
            )
        return document

    def upsert_documents(self, new_documents: Iterable[Document]) -> list[Document]:
        """Append new documents.

        Args:
            new_documents: Documents with externally generated unique ids.

        Returns:
            The appended documents.

        Raises:
            DuplicateIdError: If any id collides with an existing document or
                with another document of the same batch. Nothing is appended.
        """
        batch = list(new_documents)
        with self._lock:
            seen = {d.id for d in self._documents}
            for document in batch:
                if document.id in seen:
                    raise DuplicateIdError(
                        f"Document id already exists: {document.id}",
                        entity_id=document.id,
                    )
                seen.add(document.id)

            self._documents = [*self._documents, *batch]
            self._changed()

        logger.debug(f"Added {len(batch)} documents")
        return batch

    def save_document(self, document_id: str, content: str) -> Document:
        """Replace a document's content.

        Raises:
            DocumentNotFoundError: If no document has that id.
        """
        with self._lock:
            current = self.require_document(document_id)
            updated = current.with_content(content)
            self._documents = [
                updated if d.id == document_id else d for d in self._documents
            ]
            self._append_event(
                HistoryEventType.DOCUMENT_SAVED,
                f"Document with ID {document_id} was saved.",
            )
            self._changed()
            return updated

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    @property
    def conflicts(self) -> list[Conflict]:
        """Get all conflicts in insertion order."""
        with self._lock:
            return list(self._conflicts)

    def get(self, conflict_id: str) -> Conflict | None:
        """Get a conflict by ID, or None if not found."""
        with self._lock:
            for conflict in self._conflicts:
                if conflict.id == conflict_id:
                    return conflict
            return None

    def get_by_document(self, document_id: str) -> list[Conflict]:
        """Get all conflicts referencing a document."""
        with self._lock:
            return [c for c in self._conflicts if c.involves(document_id)]

    def get_by_pair(self, first_id: str, second_id: str) -> list[Conflict]:
        """Get all conflicts of an unordered document pair."""
        with self._lock:
            return [c for c in self._conflicts if c.matches_pair(first_id, second_id)]

    def get_by_status(self, status: ConflictStatus) -> list[Conflict]:
        """Get conflicts by status."""
        with self._lock:
            return [c for c in self._conflicts if c.status is status]

    @property
    def unresolved_count(self) -> int:
        """Count conflicts still awaiting a decision."""
        with self._lock:
            return sum(1 for c in self._conflicts if c.is_unresolved)

    def replace_conflicts_for_pairs(
        self,
        pairs: Iterable[tuple[str, str]],
        new_conflicts: Iterable[Conflict],
    ) -> int:
        """Purge every conflict of the given pairs, then insert new ones.

        Pairs are matched order-insensitively. Conflicts of pairs not listed
        are left untouched.

        Args:
            pairs: Document id pairs whose previous conflicts are stale.
            new_conflicts: Fresh conflicts to insert after the purge.

        Returns:
            Number of conflicts purged.

        Raises:
            DocumentNotFoundError: If a new conflict references an unknown document.
            DuplicateIdError: If a new conflict id is already taken.
        """
        stale_keys = {pair_key(a, b) for a, b in pairs}
        incoming = list(new_conflicts)

        with self._lock:
            known_documents = {d.id for d in self._documents}
            kept = [c for c in self._conflicts if c.pair_key not in stale_keys]

            taken_ids = {c.id for c in kept}
            for conflict in incoming:
                for document_id in conflict.document_ids:
                    if document_id not in known_documents:
                        raise DocumentNotFoundError(
                            f"Conflict {conflict.id} references unknown document: {document_id}",
                            document_id=document_id,
                        )
                if conflict.id in taken_ids:
                    raise DuplicateIdError(
                        f"Conflict id already exists: {conflict.id}",
                        entity_id=conflict.id,
                    )
                taken_ids.add(conflict.id)

            purged = len(self._conflicts) - len(kept)
            self._conflicts = [*kept, *incoming]
            self._changed()

        logger.debug(
            f"Replaced conflicts for {len(stale_keys)} pairs: "
            f"{purged} purged, {len(incoming)} inserted"
        )
        return purged

    def resolve(self, conflict_id: str, resolution: Resolution | str) -> Conflict:
        """Record a decision on a conflict.

        Re-resolving to the value already stored is a no-op and records no
        event. Re-resolving to a different value overwrites the previous one.

        Args:
            conflict_id: The conflict ID.
            resolution: One of the ``Resolution`` values (or its string value).

        Returns:
            The conflict as stored after the call.

        Raises:
            ConflictNotFoundError: If no conflict has that id.
            InvalidResolutionError: If the resolution value is not accepted.
        """
        with self._lock:
            conflict = self.get(conflict_id)
            if conflict is None:
                raise ConflictNotFoundError(
                    f"Conflict not found: {conflict_id}",
                    conflict_id=conflict_id,
                )

            action = _parse_resolution(resolution)
            if conflict.resolution is action:
                return conflict

            updated = conflict.resolved_as(action)
            self._conflicts = [
                updated if c.id == conflict_id else c for c in self._conflicts
            ]
            first_title, second_title = updated.document_titles
            self._append_event(
                HistoryEventType.CONFLICT_RESOLVED,
                f'Conflict between "{first_title}" and "{second_title}" was resolved.',
            )
            self._changed()

        logger.info(f"Conflict {conflict_id} resolved: {action.value}")
        return updated

    def get_stats(self) -> ConflictStats:
        """Get conflict statistics."""
        with self._lock:
            statuses = Counter(c.status for c in self._conflicts)
            severities = Counter(c.severity.value for c in self._conflicts)
            return ConflictStats(
                total=len(self._conflicts),
                unresolved=statuses[ConflictStatus.UNRESOLVED],
                resolved=statuses[ConflictStatus.RESOLVED],
                ignored=statuses[ConflictStatus.IGNORED],
                by_severity=dict(severities),
            )

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def history(self) -> list[HistoryEvent]:
        """Get history events, newest first."""
        with self._lock:
            return list(self._history)

    def append_history(self, event: HistoryEvent) -> None:
        """Insert an event at the head of the log."""
        with self._lock:
            self._history = [event, *self._history]
            self._changed()

    def record(self, event_type: HistoryEventType, details: str) -> HistoryEvent:
        """Create a history event stamped now and append it."""
        with self._lock:
            event = self._append_event(event_type, details)
            self._changed()
        return event

    # ------------------------------------------------------------------
    # Snapshot support
    # ------------------------------------------------------------------

    def load(
        self,
        documents: Iterable[Document],
        conflicts: Iterable[Conflict],
        history: Iterable[HistoryEvent],
    ) -> None:
        """Replace the entire store contents (used when restoring a snapshot)."""
        with self._lock:
            self._documents = list(documents)
            self._conflicts = list(conflicts)
            self._history = list(history)
            self._changed()

    def dump(self) -> tuple[list[Document], list[Conflict], list[HistoryEvent]]:
        """Get a consistent copy of documents, conflicts and history."""
        with self._lock:
            return list(self._documents), list(self._conflicts), list(self._history)

    def _append_event(self, event_type: HistoryEventType, details: str) -> HistoryEvent:
        event = HistoryEvent(
            id=self._id_factory(),
            type=event_type,
            details=details,
            timestamp=self._clock(),
        )
        self._history = [event, *self._history]
        return event

    def _changed(self) -> None:
        self._version += 1
        for listener in list(self._listeners):
            listener()


def _parse_resolution(value: Resolution | str) -> Resolution:
    if isinstance(value, Resolution):
        return value
    if isinstance(value, str):
        try:
            return Resolution(value)
        except ValueError:
            pass
    valid = ", ".join(r.value for r in Resolution)
    raise InvalidResolutionError(
        f"Invalid resolution {value!r}; expected one of: {valid}",
        resolution=str(value),
    )
