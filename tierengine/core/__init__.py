"""
Core engine module.

Exports:
- EventBus, Event: Event system
- SessionEvent, WorkspaceEvent, PersistenceEvent: Event types
- TierListError, ValidationError, NotFoundError, StorageError: Errors
"""

from tierengine.core.events import (
    EventBus,
    Event,
    SessionEvent,
    WorkspaceEvent,
    PersistenceEvent,
)
from tierengine.core.errors import (
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
