"""
Tier Engine

Infrastructure shared by the tier list packages: typed event bus,
error taxonomy and image payload loading.

Quick Start:
    from tierengine.core import EventBus, WorkspaceEvent

    bus = EventBus()
    bus.subscribe(WorkspaceEvent.ITEM_MOVED, on_moved)
"""

__version__ = "0.1.0"

from tierengine.core import (
    EventBus,
    Event,
    SessionEvent,
    WorkspaceEvent,
    PersistenceEvent,
    TierListError,
    ValidationError,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Events
    "EventBus",
    "Event",
    "SessionEvent",
    "WorkspaceEvent",
    "PersistenceEvent",
    # Errors
    "TierListError",
    "ValidationError",
    "NotFoundError",
    "StorageError",
]
