"""
Typed event bus for decoupled communication.

Uses Enums for event types to prevent magic strings. The workspace
publishes a WorkspaceEvent for every mutation; the change tracker
subscribes to them instead of diffing any rendered output.

Usage:
    # Subscribe
    event_bus.subscribe(WorkspaceEvent.ITEM_MOVED, on_item_moved)

    # Publish
    event_bus.publish(WorkspaceEvent.ITEM_MOVED, item_id=item.id, target="A")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable
from weakref import WeakMethod, ref


logger = logging.getLogger(__name__)


class SessionEvent(Enum):
    """Session lifecycle events."""
    SESSION_STARTED = auto()
    SESSION_RESTORED = auto()
    SESSION_DISPOSED = auto()


class WorkspaceEvent(Enum):
    """Workspace mutation events."""
    ITEM_CREATED = auto()
    ITEM_MOVED = auto()
    SUB_OPTION_CHANGED = auto()
    ITEM_RESIZED = auto()
    ITEM_DELETED = auto()
    CLEARED = auto()


class PersistenceEvent(Enum):
    """Save/load events."""
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()
    DELETED = auto()
    AUTO_SAVE_COMPLETED = auto()
    AUTO_SAVE_FAILED = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: The event type (Enum member)
        data: Dictionary of event-specific data
    """
    type: Enum
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get event data by key."""
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Get event data by key (dict-style)."""
        return self.data[key]


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """
    Central event bus for publish/subscribe messaging.

    Features:
    - Typed events (Enum-based)
    - Handlers called in subscription order
    - Weak references (auto-cleanup when handlers are deleted)
    - Events published while dispatching are queued, never interleaved
    """

    def __init__(self):
        # Map of event type -> list of handler references
        self._handlers: dict[Enum, list[Any]] = {}
        # Queue for events published during handling
        self._event_queue: list[Event] = []
        self._is_publishing = False

    def subscribe(
        self,
        event_type: Enum,
        handler: EventHandler,
        weak: bool = True,
    ) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The event type to listen for
            handler: Callback function(event: Event)
            weak: If True, use weak reference (handler auto-removed if deleted)
        """
        if weak:
            if hasattr(handler, '__self__'):
                handler_ref = WeakMethod(handler)
            else:
                handler_ref = ref(handler)
        else:
            handler_ref = handler

        self._handlers.setdefault(event_type, []).append(handler_ref)

    def subscribe_all(
        self,
        event_enum: type[Enum],
        handler: EventHandler,
        weak: bool = True,
    ) -> None:
        """Subscribe one handler to every member of an event Enum."""
        for event_type in event_enum:
            self.subscribe(event_type, handler, weak=weak)

    def unsubscribe(self, event_type: Enum, handler: EventHandler) -> None:
        """
        Unsubscribe from an event type.

        Args:
            event_type: The event type
            handler: The handler to remove
        """
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [
            h for h in self._handlers[event_type]
            if self._get_handler(h) != handler
        ]

    def unsubscribe_all(self, event_enum: type[Enum], handler: EventHandler) -> None:
        """Remove a handler from every member of an event Enum."""
        for event_type in event_enum:
            self.unsubscribe(event_type, handler)

    def publish(self, event_type: Enum, **data: Any) -> Event:
        """
        Publish an event.

        Args:
            event_type: The event type
            **data: Event data as keyword arguments

        Returns:
            The Event object
        """
        event = Event(type=event_type, data=data)

        if self._is_publishing:
            self._event_queue.append(event)
        else:
            self._dispatch(event)

        return event

    def handler_count(self, event_type: Enum) -> int:
        """Number of live handlers for an event type."""
        return sum(
            1 for h in self._handlers.get(event_type, [])
            if self._get_handler(h) is not None
        )

    def clear(self, event_type: Enum | None = None) -> None:
        """
        Clear handlers.

        Args:
            event_type: If specified, only clear handlers for this type.
                       If None, clear all handlers.
        """
        if event_type is None:
            self._handlers.clear()
        elif event_type in self._handlers:
            del self._handlers[event_type]

    def _dispatch(self, event: Event) -> None:
        """Dispatch event to handlers."""
        if event.type not in self._handlers:
            self._drain_queue()
            return

        self._is_publishing = True
        handlers = self._handlers[event.type]
        dead = []

        try:
            for handler_ref in list(handlers):
                handler = self._get_handler(handler_ref)

                if handler is None:
                    # Weak reference was garbage collected
                    dead.append(handler_ref)
                    continue

                try:
                    handler(event)
                except Exception:
                    # Log but don't crash
                    logger.exception(f"Error in event handler for {event.type}")
        finally:
            for handler_ref in dead:
                handlers.remove(handler_ref)
            self._is_publishing = False

        self._drain_queue()

    def _drain_queue(self) -> None:
        """Process events queued while dispatching."""
        while self._event_queue and not self._is_publishing:
            queued = self._event_queue.pop(0)
            self._dispatch(queued)

    def _get_handler(self, handler_ref: Any) -> EventHandler | None:
        """Resolve handler from reference."""
        if callable(handler_ref) and not isinstance(handler_ref, (ref, WeakMethod)):
            # Strong reference
            return handler_ref

        return handler_ref()
