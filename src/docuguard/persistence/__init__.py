"""Snapshot persistence."""

from docuguard.persistence.snapshot import DebouncedSaver, JsonSnapshotStore, SnapshotStore

__all__ = ["DebouncedSaver", "JsonSnapshotStore", "SnapshotStore"]
