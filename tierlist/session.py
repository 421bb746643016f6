"""
Tier list session - the composition root.

Wires one workspace to its persistence and change tracking, with an
explicit lifecycle instead of a page-wide global:

- init(): restore the auto-save slot, install the exit hook
- update(dt): drive the auto-save timer from the main loop
- dispose(): flush pending changes, remove the exit hook

Usage:
    config = SessionConfig(storage_path="data/tierlists")
    with TierListSession(config) as session:
        item = session.add_image_file("covers/okami.png")
        session.workspace.move_item(item.id, "AAA")
        session.save_named("Action adventure")
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from tierengine.core.errors import TierListError, ValidationError
from tierengine.core.events import EventBus, SessionEvent
from tierengine.resources.images import load_image_file, pasted_image
from tierlist.input.handler import InputHandler
from tierlist.model.items import Item
from tierlist.model.workspace import Workspace
from tierlist.save.codec import Snapshot, SnapshotCodec
from tierlist.save.manager import PersistenceService, utc_now
from tierlist.save.storage import JsonFileStore
from tierlist.save.tracker import ChangeTracker


logger = logging.getLogger(__name__)


class SessionConfig:
    """Configuration for a tier list session."""

    def __init__(
        self,
        storage_path: str | Path = "data/tierlists",
        auto_save_interval: float = ChangeTracker.DEFAULT_INTERVAL,
        restore_on_init: bool = True,
        install_exit_hook: bool = True,
        flush_on_dispose: bool = True,
    ):
        self.storage_path = Path(storage_path)
        self.auto_save_interval = auto_save_interval
        self.restore_on_init = restore_on_init
        self.install_exit_hook = install_exit_hook
        self.flush_on_dispose = flush_on_dispose


class TierListSession:
    """
    One live tier list: workspace, codec, persistence and tracker.

    Nothing touches storage until init() is called.
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config or SessionConfig()
        self.event_bus = event_bus or EventBus()

        self.workspace = Workspace(self.event_bus)
        self.codec = SnapshotCodec()
        self.persistence = PersistenceService(
            JsonFileStore(self.config.storage_path),
            codec=self.codec,
            event_bus=self.event_bus,
            clock=clock,
        )
        self.tracker = ChangeTracker(
            self.workspace,
            self.persistence,
            interval=self.config.auto_save_interval,
        )

        self._initialized = False

    # Lifecycle

    def init(self) -> bool:
        """
        Start the session.

        Returns:
            True if a previous auto-save was restored
        """
        if self._initialized:
            return False

        restored = self.restore() if self.config.restore_on_init else False

        try:
            logger.info(f"{self.persistence.count_named()} saved tier lists found")
        except TierListError as e:
            logger.warning(f"Cannot read saved tier lists: {e}")

        if self.config.install_exit_hook:
            self.tracker.install()

        self._initialized = True
        self.event_bus.publish(SessionEvent.SESSION_STARTED, restored=restored)
        return restored

    def dispose(self) -> None:
        """Flush pending changes and release the exit hook."""
        if not self._initialized:
            return

        if self.config.flush_on_dispose:
            self.tracker.flush_if_dirty()
        self.tracker.detach()

        self._initialized = False
        self.event_bus.publish(SessionEvent.SESSION_DISPOSED)

    def __enter__(self) -> TierListSession:
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def update(self, dt: float) -> bool:
        """Advance the auto-save timer. Returns True if it flushed."""
        return self.tracker.update(dt)

    def restore(self) -> bool:
        """
        Rehydrate the workspace from the auto-save slot.

        A missing or unreadable slot leaves the workspace as it is.
        """
        try:
            snapshot = self.persistence.load_auto_save()
            if snapshot is None:
                return False
            self.codec.import_into(self.workspace, snapshot)
        except TierListError as e:
            logger.error(f"Could not restore the auto-saved tier list: {e}")
            return False

        self.tracker.mark_clean()
        logger.info(f"Restored auto-saved tier list ({len(self.workspace)} items)")
        self.event_bus.publish(SessionEvent.SESSION_RESTORED, items=len(self.workspace))
        return True

    # Items

    def add_image(self, image_ref: str, display_name: str) -> Item:
        return self.workspace.create_item(image_ref, display_name)

    def add_image_file(self, path: str | Path) -> Item:
        """Create an item from an image file (non-images raise ValidationError)."""
        payload = load_image_file(path)
        return self.workspace.create_item(payload.image_ref, payload.file_name)

    def paste_image(self, data: bytes, mime_type: str, timestamp_ms: Optional[int] = None) -> Item:
        payload = pasted_image(data, mime_type, timestamp_ms)
        return self.workspace.create_item(payload.image_ref, payload.file_name)

    def create_input_handler(self, **kwargs) -> InputHandler:
        """Input handler bound to this workspace; dropped files become items."""
        kwargs.setdefault("on_file_dropped", self._drop_file)
        return InputHandler(self.workspace, **kwargs)

    def _drop_file(self, path: str) -> Optional[Item]:
        try:
            return self.add_image_file(path)
        except ValidationError as e:
            logger.warning(f"Ignoring dropped file: {e}")
            return None

    # Snapshots

    def export(self) -> Snapshot:
        return self.codec.export(self.workspace)

    def save_named(self, name: str) -> None:
        self.persistence.save_named(name, self.export())

    def load_named(self, name: str) -> None:
        """
        Replace the workspace with a named save.

        The workspace is untouched if the save is missing or malformed.
        The loaded state is auto-saved right away.
        """
        snapshot = self.persistence.load_named(name)
        self.codec.import_into(self.workspace, snapshot)
        self.tracker.mark_dirty()
        self.tracker.flush()

    def delete_named(self, name: str) -> None:
        self.persistence.delete_named(name)

    def list_named(self) -> dict[str, str]:
        return self.persistence.list_named()

    def clear_all(self) -> None:
        """Empty the workspace and drop the auto-save slot."""
        self.workspace.clear()
        try:
            self.persistence.clear_auto_save()
        except TierListError as e:
            logger.warning(f"Could not clear the auto-save slot: {e}")
            return
        self.tracker.mark_clean()
