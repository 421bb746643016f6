"""
Persistence service - auto-save slot and named saves.

Provides:
- One rolling auto-save slot, overwritten on every flush
- A directory of named saves, last write wins on a name collision
- Listing of named saves in insertion order with their timestamps
- Event publishing for save/load operations

Storage layout (one JSON document per key):

    tierListAutoSave  {"data": <snapshot document>, "timestamp": "<ISO-8601>"}
    tierLists         {"<name>": {"data": <snapshot document>, "timestamp": "..."}, ...}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from tierengine.core.errors import NotFoundError, StorageError, ValidationError
from tierengine.core.events import EventBus, PersistenceEvent
from tierlist.save.codec import Snapshot, SnapshotCodec
from tierlist.save.storage import JsonFileStore


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class SavedList:
    """A named save: snapshot plus creation time."""
    name: str
    snapshot: Snapshot
    timestamp: str


@dataclass
class AutoSave:
    """Contents of the rolling auto-save slot."""
    snapshot: Snapshot
    timestamp: str


class PersistenceService:
    """
    Reads and writes snapshots to a durable store.

    Usage:
        persistence = PersistenceService(JsonFileStore("data/tierlists"))
        persistence.save_named("2024 favourites", codec.export(workspace))
        snapshot = persistence.load_named("2024 favourites")

        persistence.flush_auto_save(codec.export(workspace))
        persistence.load_auto_save()
    """

    AUTO_SAVE_KEY = "tierListAutoSave"
    SAVED_LISTS_KEY = "tierLists"

    def __init__(
        self,
        store: JsonFileStore,
        codec: Optional[SnapshotCodec] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.codec = codec or SnapshotCodec()
        self.event_bus = event_bus
        self._clock = clock

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    def _publish(self, event_type: PersistenceEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)

    # Auto-save slot

    def flush_auto_save(self, snapshot: Snapshot) -> str:
        """
        Overwrite the auto-save slot.

        Returns:
            The timestamp written with the snapshot

        Raises:
            StorageError: If the store cannot be written
        """
        timestamp = self._timestamp()
        try:
            self.store.write(self.AUTO_SAVE_KEY, {
                "data": self.codec.to_document(snapshot),
                "timestamp": timestamp,
            })
        except StorageError as e:
            self._publish(PersistenceEvent.AUTO_SAVE_FAILED, error=str(e))
            raise

        logger.debug(f"Auto-saved {snapshot.item_count} items")
        self._publish(PersistenceEvent.AUTO_SAVE_COMPLETED, timestamp=timestamp)
        return timestamp

    def read_auto_save(self) -> Optional[AutoSave]:
        """Return the auto-save slot with its timestamp, if present."""
        entry = self.store.read(self.AUTO_SAVE_KEY)
        if entry is None:
            return None
        snapshot, timestamp = self._decode_entry(entry, "auto-save")
        return AutoSave(snapshot=snapshot, timestamp=timestamp)

    def load_auto_save(self) -> Optional[Snapshot]:
        """Return the auto-saved snapshot, or None if nothing was flushed yet."""
        auto_save = self.read_auto_save()
        return auto_save.snapshot if auto_save else None

    def clear_auto_save(self) -> None:
        self.store.delete(self.AUTO_SAVE_KEY)
        logger.info("Auto-save cleared")

    @property
    def has_auto_save(self) -> bool:
        return self.store.exists(self.AUTO_SAVE_KEY)

    # Named saves

    def save_named(self, name: str, snapshot: Snapshot) -> SavedList:
        """
        Store a snapshot under a name, replacing any save with that name.

        Args:
            name: Save name (surrounding whitespace is ignored)
            snapshot: Snapshot to store

        Raises:
            ValidationError: If the name is empty
            StorageError: If the store cannot be read or written
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Missing name for the tier list")

        timestamp = self._timestamp()
        try:
            saved = self._read_directory()
            saved[name] = {
                "data": self.codec.to_document(snapshot),
                "timestamp": timestamp,
            }
            self.store.write(self.SAVED_LISTS_KEY, saved)
        except StorageError as e:
            logger.error(f"Saving tier list {name!r} failed: {e}")
            self._publish(PersistenceEvent.SAVE_FAILED, name=name, error=str(e))
            raise

        logger.info(f"Saved tier list {name!r} ({snapshot.item_count} items)")
        self._publish(PersistenceEvent.SAVE_COMPLETED, name=name)
        return SavedList(name=name, snapshot=snapshot, timestamp=timestamp)

    def load_named(self, name: str) -> Snapshot:
        """
        Read a named save.

        Raises:
            NotFoundError: If no save has this name
            ValidationError: If the stored snapshot is malformed
            StorageError: If the store cannot be read
        """
        name = (name or "").strip()
        try:
            entry = self._read_directory().get(name)
            if entry is None:
                raise NotFoundError(f"Tier list not found: {name!r}")
            snapshot, _ = self._decode_entry(entry, name)
        except (StorageError, ValidationError) as e:
            logger.error(f"Loading tier list {name!r} failed: {e}")
            self._publish(PersistenceEvent.LOAD_FAILED, name=name, error=str(e))
            raise

        logger.info(f"Loaded tier list {name!r}")
        self._publish(PersistenceEvent.LOAD_COMPLETED, name=name)
        return snapshot

    def delete_named(self, name: str) -> None:
        """
        Remove a named save.

        Raises:
            NotFoundError: If no save has this name
        """
        name = (name or "").strip()
        saved = self._read_directory()
        if name not in saved:
            raise NotFoundError(f"Tier list not found: {name!r}")
        del saved[name]
        self.store.write(self.SAVED_LISTS_KEY, saved)

        logger.info(f"Deleted tier list {name!r}")
        self._publish(PersistenceEvent.DELETED, name=name)

    def list_named(self) -> dict[str, str]:
        """Map of save name -> timestamp, in the order the names were first saved."""
        return {
            name: entry.get("timestamp", "") if isinstance(entry, dict) else ""
            for name, entry in self._read_directory().items()
        }

    def count_named(self) -> int:
        return len(self._read_directory())

    # Internal utilities

    def _read_directory(self) -> dict[str, Any]:
        saved = self.store.read(self.SAVED_LISTS_KEY)
        if saved is None:
            return {}
        if not isinstance(saved, dict):
            raise StorageError(f"Saved tier lists document is not an object: {type(saved).__name__}")
        return saved

    def _decode_entry(self, entry: Any, label: str) -> tuple[Snapshot, str]:
        if not isinstance(entry, dict) or "data" not in entry:
            raise ValidationError(f"Malformed save entry for {label!r}")
        return self.codec.from_document(entry["data"]), str(entry.get("timestamp", ""))
