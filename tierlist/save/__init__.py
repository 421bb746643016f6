"""
Save module - tier list persistence.

Provides:
- Snapshot export/import with schema validation
- One rolling auto-save slot
- Named saves with timestamps
- Dirty tracking with interval auto-save and exit hook
"""

from tierlist.save.codec import (
    ItemRecord,
    Snapshot,
    SnapshotCodec,
    SNAPSHOT_SCHEMA,
)
from tierlist.save.storage import JsonFileStore
from tierlist.save.manager import PersistenceService, SavedList, AutoSave
from tierlist.save.tracker import ChangeTracker, TrackerState

__all__ = [
    "ItemRecord",
    "Snapshot",
    "SnapshotCodec",
    "SNAPSHOT_SCHEMA",
    "JsonFileStore",
    "PersistenceService",
    "SavedList",
    "AutoSave",
    "ChangeTracker",
    "TrackerState",
]
