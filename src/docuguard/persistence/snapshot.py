"""Best-effort persistence of the workspace snapshot."""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Protocol

from docuguard.core.constants import DEFAULT_SAVE_DEBOUNCE_MS
from docuguard.core.exceptions import PersistenceError
from docuguard.models.snapshot import Snapshot


logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Durable home of a single snapshot."""

    def load(self) -> Snapshot | None:
        """Load the snapshot, or None if nothing was saved."""
        ...

    def save(self, snapshot: Snapshot) -> None:
        """Persist a snapshot, replacing the previous one."""
        ...

    def clear(self) -> None:
        """Discard the persisted snapshot."""
        ...


class JsonSnapshotStore:
    """Snapshot store backed by a JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Get the snapshot file path."""
        return self._path

    def load(self) -> Snapshot | None:
        """Load the snapshot from disk.

        Returns:
            The snapshot, or None if the file does not exist.

        Raises:
            PersistenceError: If the file is unreadable or malformed. The
                file is cleared first so the next start begins fresh.
        """
        if not self._path.exists():
            return None

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Could not load snapshot, clearing corrupted data: {e}")
            self.clear()
            raise PersistenceError(
                f"Corrupted snapshot discarded: {e}",
                operation="load",
                path=self._path,
            ) from e

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot atomically (temp file, then replace).

        Raises:
            PersistenceError: If the file cannot be written.
        """
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=".state-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot.to_dict(), f, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(
                f"Failed to save snapshot: {e}",
                operation="save",
                path=self._path,
            ) from e
        logger.debug(f"Snapshot saved to {self._path}")

    def clear(self) -> None:
        """Delete the snapshot file if present."""
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove snapshot {self._path}: {e}")


class DebouncedSaver:
    """Coalesces snapshot saves into one write per quiet period.

    Every ``schedule()`` call restarts the timer; only the snapshot taken
    when the timer fires is written. Save failures are logged, never raised.
    """

    def __init__(
        self,
        store: SnapshotStore,
        snapshot_factory: Callable[[], Snapshot],
        debounce_ms: int = DEFAULT_SAVE_DEBOUNCE_MS,
    ) -> None:
        """Initialize the saver.

        Args:
            store: Where snapshots are written.
            snapshot_factory: Builds the snapshot to write at fire time.
            debounce_ms: Debounce window in milliseconds.
        """
        self._store = store
        self._snapshot_factory = snapshot_factory
        self._debounce_seconds = debounce_ms / 1000.0
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        self._save_count = 0

    @property
    def pending(self) -> bool:
        """Check whether a save is scheduled."""
        with self._lock:
            return self._timer is not None

    @property
    def save_count(self) -> int:
        """Get the number of successful saves."""
        return self._save_count

    def schedule(self) -> None:
        """Schedule a save, restarting the debounce window."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self._debounce_seconds, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def flush(self) -> bool:
        """Cancel any pending timer and save immediately.

        Returns:
            True if the save succeeded.
        """
        self.cancel()
        return self._save()

    def cancel(self) -> None:
        """Drop a pending save without writing."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        with self._lock:
            self._timer = None
        self._save()

    def _save(self) -> bool:
        try:
            self._store.save(self._snapshot_factory())
        except Exception as e:
            logger.warning(f"Snapshot save failed: {e}")
            return False
        self._save_count += 1
        return True
