"""
Item store - identity and content of tier list items.

Items know nothing about buckets. The workspace owns the tier
fields and keeps them consistent with bucket membership.

Usage:
    store = ItemStore()
    item = store.add("data:image/png;base64,...", "chrono_trigger.png")
    store.get(item.id).size.width  # 80
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Iterator

from tierengine.core.errors import NotFoundError


MIN_SIZE = 40
MAX_SIZE = 150
DEFAULT_SIZE = 80

UNRANKED = "unranked"


def clamp_square(width: int, height: int) -> int:
    """
    Clamp both sides to [MIN_SIZE, MAX_SIZE], then take the smaller one.

    Items are always square: resize(200, 90) -> 90, resize(10, 10) -> 40,
    resize(60, 120) -> 60.
    """
    width = max(MIN_SIZE, min(MAX_SIZE, int(width)))
    height = max(MIN_SIZE, min(MAX_SIZE, int(height)))
    return min(width, height)


@dataclass
class ItemSize:
    """Rendered item size in pixels."""
    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE


class Item:
    """
    A single image in the tier list.

    Attributes:
        id: Opaque identifier, stable across moves
        image_ref: Image content (data URI or URL), immutable
        display_name: File name shown for the image, immutable
        size: Mutable square size
        tier: Id of the bucket holding the item
        sub_option: "" or one of tier, tier+"+", tier+"-"
    """

    def __init__(
        self,
        image_ref: str,
        display_name: str,
        item_id: str | None = None,
        size: ItemSize | None = None,
        tier: str = UNRANKED,
        sub_option: str = "",
    ):
        self._id = item_id or uuid.uuid4().hex
        self._image_ref = image_ref
        self._display_name = display_name
        self.size = size or ItemSize()
        self.tier = tier
        self.sub_option = sub_option

    @property
    def id(self) -> str:
        return self._id

    @property
    def image_ref(self) -> str:
        return self._image_ref

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def is_ranked(self) -> bool:
        return self.tier != UNRANKED

    @property
    def label(self) -> str:
        """Displayed tier label: sub-option if set, else the bare tier."""
        if self.sub_option:
            return self.sub_option
        return self.tier if self.is_ranked else ""

    def __repr__(self) -> str:
        return f"Item({self._display_name!r}, tier={self.tier!r}, label={self.label!r})"


class ItemStore:
    """Owns all items by id. No ordering and no tier knowledge."""

    def __init__(self):
        self._items: dict[str, Item] = {}

    def add(self, image_ref: str, display_name: str, size: ItemSize | None = None) -> Item:
        item = Item(image_ref, display_name, size=size)
        self._items[item.id] = item
        return item

    def get(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(f"Unknown item: {item_id}") from None

    def remove(self, item_id: str) -> Item:
        item = self.get(item_id)
        del self._items[item_id]
        return item

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items.values())
