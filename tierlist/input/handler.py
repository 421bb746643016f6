"""
Input handler for direct manipulation of tier list items.

Translates pointer, keyboard and file-drop input into workspace calls:
- drag an item and release it over a bucket -> move_item
- drag the resize handle -> resize_item (square, clamped)
- "+" / "-" / Backspace over a hovered item -> set_sub_option
- Delete over a hovered item -> delete_item
- file dropped on the window -> file drop callback

Gesture state is transient and never persisted. It is cleared on any
button release in the window and when the pointer leaves the window,
so a release missed by the item itself cannot leave a resize running.

Hit testing belongs to the renderer, which passes two lookups:
    item_at(pos) -> ItemHit | None
    bucket_at(pos) -> bucket id | None

Usage:
    handler = InputHandler(workspace, item_at=view.item_at, bucket_at=view.bucket_at)
    for event in pygame.event.get():
        handler.process_event(event)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import pygame

from tierengine.core.errors import NotFoundError
from tierlist.model.items import Item
from tierlist.model.workspace import Workspace


logger = logging.getLogger(__name__)

Position = tuple[int, int]

LEFT_BUTTON = 1

# Keys acting on the hovered item
PLUS_KEYS = (pygame.K_PLUS, pygame.K_KP_PLUS)
MINUS_KEYS = (pygame.K_MINUS, pygame.K_KP_MINUS)
CLEAR_KEYS = (pygame.K_BACKSPACE,)
DELETE_KEYS = (pygame.K_DELETE,)


@dataclass(frozen=True)
class ItemHit:
    """Result of a pointer hit test on an item."""
    item_id: str
    on_resize_handle: bool = False


@dataclass
class GestureState:
    """Transient pointer state, owned by the input handler only."""
    hovered_item: Optional[str] = None
    dragged_item: Optional[str] = None
    is_resizing: bool = False
    current_resize_item: Optional[str] = None
    start_x: int = 0
    start_y: int = 0
    start_width: int = 0
    start_height: int = 0

    def end_gesture(self) -> None:
        self.dragged_item = None
        self.is_resizing = False
        self.current_resize_item = None


class InputHandler:
    """
    Routes raw input to workspace operations.

    Supports semantic calls (hover, begin_drag, drop, begin_resize, ...)
    for renderers that do their own event decoding, and process_event()
    for pygame event loops.
    """

    def __init__(
        self,
        workspace: Workspace,
        item_at: Optional[Callable[[Position], Optional[ItemHit]]] = None,
        bucket_at: Optional[Callable[[Position], Optional[str]]] = None,
        on_file_dropped: Optional[Callable[[str], object]] = None,
        confirm_delete: Optional[Callable[[Item], bool]] = None,
    ):
        self.workspace = workspace
        self._item_at = item_at
        self._bucket_at = bucket_at
        self._on_file_dropped = on_file_dropped
        self._confirm_delete = confirm_delete
        self._state = GestureState()

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def hovered_item(self) -> Optional[str]:
        return self._state.hovered_item

    @property
    def is_resizing(self) -> bool:
        return self._state.is_resizing

    # Hover focus

    def hover(self, item_id: Optional[str]) -> None:
        """Set the item under the pointer (None when over no item)."""
        self._state.hovered_item = item_id

    def unhover(self, item_id: str) -> None:
        if self._state.hovered_item == item_id:
            self._state.hovered_item = None

    # Drag and drop

    def begin_drag(self, item_id: str) -> None:
        if self._state.is_resizing:
            return
        self._state.dragged_item = item_id

    def drop(self, bucket_id: str) -> bool:
        """
        Drop the dragged item into a bucket.

        Returns:
            True if the item changed bucket
        """
        item_id = self._state.dragged_item
        self._state.dragged_item = None
        if item_id is None or item_id not in self.workspace:
            return False
        return self.workspace.move_item(item_id, bucket_id)

    # Resize

    def begin_resize(self, item_id: str, x: int, y: int) -> None:
        item = self.workspace.get_item(item_id)
        self._state.dragged_item = None
        self._state.is_resizing = True
        self._state.current_resize_item = item_id
        self._state.start_x = x
        self._state.start_y = y
        self._state.start_width = item.size.width
        self._state.start_height = item.size.height

    def pointer_moved(self, x: int, y: int) -> None:
        state = self._state
        if not state.is_resizing or state.current_resize_item is None:
            return

        width = state.start_width + (x - state.start_x)
        height = state.start_height + (y - state.start_y)
        try:
            self.workspace.resize_item(state.current_resize_item, width, height)
        except NotFoundError:
            # Item deleted mid-gesture
            state.end_gesture()

    def pointer_released(self, bucket_id: Optional[str] = None) -> bool:
        """
        Window-level button release: finishes any drag or resize.

        Returns:
            True if a drag ended in a move
        """
        moved = False
        if self._state.dragged_item is not None and bucket_id is not None:
            moved = self.drop(bucket_id)
        self._state.end_gesture()
        return moved

    def pointer_left_window(self) -> None:
        self._state.end_gesture()
        self._state.hovered_item = None

    # Keyboard

    def key_pressed(self, key: int, unicode: str = "") -> bool:
        """
        Apply a key to the hovered item.

        Returns:
            True if the key was handled
        """
        item_id = self._state.hovered_item
        if item_id is None:
            return False
        if item_id not in self.workspace:
            self._state.hovered_item = None
            return False

        if unicode == "+" or key in PLUS_KEYS:
            self.workspace.set_sub_option(item_id, "+")
            return True
        if unicode == "-" or key in MINUS_KEYS:
            self.workspace.set_sub_option(item_id, "-")
            return True
        if key in CLEAR_KEYS:
            self.workspace.set_sub_option(item_id, "")
            return True
        if key in DELETE_KEYS:
            return self._delete_hovered(item_id)
        return False

    def _delete_hovered(self, item_id: str) -> bool:
        item = self.workspace.get_item(item_id)
        if self._confirm_delete and not self._confirm_delete(item):
            return True
        self.workspace.delete_item(item_id)
        self._state.hovered_item = None
        if self._state.current_resize_item == item_id or self._state.dragged_item == item_id:
            self._state.end_gesture()
        return True

    # Pygame events

    def process_event(self, event: pygame.event.Event) -> None:
        """Process a pygame event."""
        if event.type == pygame.MOUSEMOTION:
            if self._item_at and not self._state.is_resizing:
                hit = self._item_at(event.pos)
                self.hover(hit.item_id if hit else None)
            self.pointer_moved(*event.pos)

        elif event.type == pygame.MOUSEBUTTONDOWN:
            if event.button != LEFT_BUTTON or not self._item_at:
                return
            hit = self._item_at(event.pos)
            if hit is None:
                return
            if hit.on_resize_handle:
                self.begin_resize(hit.item_id, *event.pos)
            else:
                self.begin_drag(hit.item_id)

        elif event.type == pygame.MOUSEBUTTONUP:
            if event.button != LEFT_BUTTON:
                return
            bucket_id = self._bucket_at(event.pos) if self._bucket_at else None
            self.pointer_released(bucket_id)

        elif event.type == pygame.KEYDOWN:
            self.key_pressed(event.key, getattr(event, "unicode", ""))

        elif event.type == pygame.WINDOWLEAVE:
            self.pointer_left_window()

        elif event.type == pygame.DROPFILE:
            if self._on_file_dropped:
                self._on_file_dropped(event.file)
            else:
                logger.debug(f"Ignoring dropped file {event.file}")
