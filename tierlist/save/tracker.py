"""
Change tracker - dirty flag plus interval auto-save.

The tracker listens to every WorkspaceEvent. Any mutation marks the
state dirty; the periodic tick and the process-exit hook flush a dirty
workspace to the auto-save slot and mark it clean again.

Auto-save is advisory: a StorageError while flushing is logged and the
tracker stays dirty, so the next tick retries.

Usage:
    tracker = ChangeTracker(workspace, persistence, interval=30.0)
    tracker.install()

    # In the main loop:
    tracker.update(dt)
"""

from __future__ import annotations

import atexit
import logging
from enum import Enum, auto

from tierengine.core.errors import StorageError
from tierengine.core.events import Event, WorkspaceEvent
from tierlist.model.workspace import Workspace
from tierlist.save.manager import PersistenceService


logger = logging.getLogger(__name__)


class TrackerState(Enum):
    CLEAN = auto()
    DIRTY = auto()


class ChangeTracker:
    """
    Decides when the workspace is written to the auto-save slot.

    Attributes:
        interval: Seconds between flush attempts (0 disables timed flushes)
    """

    DEFAULT_INTERVAL = 30.0

    def __init__(
        self,
        workspace: Workspace,
        persistence: PersistenceService,
        interval: float = DEFAULT_INTERVAL,
    ):
        self.workspace = workspace
        self.persistence = persistence
        self.interval = interval

        self._state = TrackerState.CLEAN
        self._timer = 0.0
        self._installed = False

        workspace.event_bus.subscribe_all(WorkspaceEvent, self._on_workspace_event)

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_dirty(self) -> bool:
        return self._state is TrackerState.DIRTY

    def mark_dirty(self) -> None:
        self._state = TrackerState.DIRTY

    def mark_clean(self) -> None:
        """Forget pending changes (e.g. right after rehydrating from storage)."""
        self._state = TrackerState.CLEAN

    def _on_workspace_event(self, event: Event) -> None:
        self.mark_dirty()

    # Timer

    def update(self, dt: float) -> bool:
        """
        Advance the timer.

        Returns:
            True if a flush happened on this tick
        """
        if self.interval <= 0:
            return False

        self._timer += dt
        if self._timer < self.interval:
            return False

        self._timer = 0.0
        return self.flush_if_dirty()

    def flush_if_dirty(self) -> bool:
        if not self.is_dirty:
            return False
        return self.flush()

    def flush(self) -> bool:
        """
        Write the workspace to the auto-save slot now.

        Returns:
            True if the write succeeded
        """
        snapshot = self.persistence.codec.export(self.workspace)
        try:
            self.persistence.flush_auto_save(snapshot)
        except StorageError as e:
            logger.warning(f"Auto-save failed, will retry: {e}")
            return False

        self._state = TrackerState.CLEAN
        return True

    # Process exit

    def install(self) -> None:
        """Register the exit hook that flushes pending changes."""
        if not self._installed:
            atexit.register(self.flush_if_dirty)
            self._installed = True

    def uninstall(self) -> None:
        if self._installed:
            atexit.unregister(self.flush_if_dirty)
            self._installed = False

    def detach(self) -> None:
        """Stop listening to the workspace and remove the exit hook."""
        self.uninstall()
        self.workspace.event_bus.unsubscribe_all(WorkspaceEvent, self._on_workspace_event)
