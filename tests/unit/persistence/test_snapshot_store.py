"""Tests for snapshot persistence."""

import json
import threading
from unittest.mock import MagicMock

import pytest

from docuguard.core.exceptions import PersistenceError
from docuguard.models.conflict import Resolution
from docuguard.models.document import Document
from docuguard.models.history import HistoryEvent, HistoryEventType
from docuguard.models.profile import Theme, UserProfile
from docuguard.models.snapshot import Snapshot
from docuguard.persistence.snapshot import DebouncedSaver, JsonSnapshotStore


@pytest.fixture
def snapshot(conflict_factory, clock):
    """A snapshot with one of everything."""
    return Snapshot(
        documents=[
            Document(id="d1", title="a.txt", content="alpha"),
            Document(id="d2", title="b.txt", content="beta"),
        ],
        conflicts=[conflict_factory("c1", "d1", "d2").resolved_as(Resolution.ACCEPT_FIRST)],
        history=[
            HistoryEvent(
                id="h1",
                type=HistoryEventType.CONFLICT_RESOLVED,
                details='Conflict between "a.txt" and "b.txt" was resolved.',
                timestamp=clock(),
            )
        ],
        profile=UserProfile(name="Dana", theme=Theme.LIGHT),
        reports_generated_count=3,
    )


@pytest.fixture
def snapshot_path(temp_dir):
    """Path of the snapshot file inside a fresh .docuguard directory."""
    return temp_dir / ".docuguard" / "state.json"


class TestJsonSnapshotStore:
    """Tests for JsonSnapshotStore."""

    def test_load_missing_file(self, snapshot_path):
        """Test nothing saved yet."""
        assert JsonSnapshotStore(snapshot_path).load() is None

    def test_save_then_load(self, snapshot_path, snapshot):
        """Test a saved snapshot loads back equal."""
        store = JsonSnapshotStore(snapshot_path)
        store.save(snapshot)

        loaded = store.load()
        assert loaded == snapshot

    def test_save_leaves_no_temp_files(self, snapshot_path, snapshot):
        """Test the atomic write cleans up after itself."""
        JsonSnapshotStore(snapshot_path).save(snapshot)

        assert [p.name for p in snapshot_path.parent.iterdir()] == ["state.json"]

    def test_corrupted_json_is_cleared(self, snapshot_path):
        """Test unparseable data raises and removes the file."""
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PersistenceError) as exc_info:
            JsonSnapshotStore(snapshot_path).load()

        assert exc_info.value.operation == "load"
        assert not snapshot_path.exists()

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"documents": "nope"},
            {"documents": [{"id": "d1"}]},
            {"conflicts": [{"id": "c1", "document_ids": ["d1", "d2"]}]},
            {"reports_generated_count": -1},
            {"profile": {"notifications_enabled": "yes"}},
        ],
    )
    def test_malformed_payload_is_cleared(self, snapshot_path, payload):
        """Test structurally invalid snapshots are discarded whole."""
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(json.dumps(payload), encoding="utf-8")

        with pytest.raises(PersistenceError):
            JsonSnapshotStore(snapshot_path).load()
        assert not snapshot_path.exists()

    def test_dangling_conflict_rejected(self, snapshot_path, snapshot):
        """Test a conflict referencing a missing document invalidates the snapshot."""
        data = snapshot.to_dict()
        data["documents"] = data["documents"][:1]
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(json.dumps(data), encoding="utf-8")

        with pytest.raises(PersistenceError):
            JsonSnapshotStore(snapshot_path).load()

    def test_missing_sections_default(self, snapshot_path):
        """Test an empty object is a valid, empty snapshot."""
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text("{}", encoding="utf-8")

        loaded = JsonSnapshotStore(snapshot_path).load()
        assert loaded == Snapshot()

    def test_save_failure_raises(self, temp_dir, snapshot):
        """Test an unwritable location."""
        blocker = temp_dir / "file"
        blocker.write_text("x", encoding="utf-8")

        with pytest.raises(PersistenceError) as exc_info:
            JsonSnapshotStore(blocker / "state.json").save(snapshot)
        assert exc_info.value.operation == "save"

    def test_clear(self, snapshot_path, snapshot):
        """Test clearing removes the file and is idempotent."""
        store = JsonSnapshotStore(snapshot_path)
        store.save(snapshot)

        store.clear()
        store.clear()
        assert store.load() is None


class TestDebouncedSaver:
    """Tests for DebouncedSaver."""

    def test_burst_coalesces_into_one_save(self, snapshot):
        """Test many schedules within the window write once."""
        saved = threading.Event()
        store = MagicMock()
        store.save.side_effect = lambda s: saved.set()
        saver = DebouncedSaver(store, lambda: snapshot, debounce_ms=50)

        for _ in range(10):
            saver.schedule()

        assert saved.wait(timeout=2.0)
        assert store.save.call_count == 1
        assert not saver.pending

    def test_flush_saves_immediately(self, snapshot):
        """Test flush writes now and cancels the timer."""
        store = MagicMock()
        saver = DebouncedSaver(store, lambda: snapshot, debounce_ms=10_000)
        saver.schedule()

        assert saver.flush() is True
        store.save.assert_called_once_with(snapshot)
        assert saver.save_count == 1
        assert not saver.pending

    def test_cancel(self, snapshot):
        """Test a cancelled save never happens."""
        store = MagicMock()
        saver = DebouncedSaver(store, lambda: snapshot, debounce_ms=10_000)
        saver.schedule()

        saver.cancel()
        assert not saver.pending
        store.save.assert_not_called()

    def test_snapshot_taken_at_save_time(self):
        """Test the latest state is written, not the state at schedule time."""
        state = {"count": 0}
        store = MagicMock()
        saver = DebouncedSaver(
            store,
            lambda: Snapshot(reports_generated_count=state["count"]),
            debounce_ms=10_000,
        )
        saver.schedule()
        state["count"] = 7

        saver.flush()
        assert store.save.call_args.args[0].reports_generated_count == 7

    def test_save_failure_is_swallowed(self, snapshot):
        """Test a failing store does not raise."""
        store = MagicMock()
        store.save.side_effect = PersistenceError("disk full", operation="save")
        saver = DebouncedSaver(store, lambda: snapshot)

        assert saver.flush() is False
        assert saver.save_count == 0
