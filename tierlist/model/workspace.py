"""
Workspace - items plus buckets as one consistent state.

The workspace is the only place that mutates tier membership. Every
mutation goes through a typed method and publishes a WorkspaceEvent,
which is how the change tracker learns that something changed.

Invariants held after every public call:
- every item is in exactly one bucket
- item.tier equals the id of the bucket holding it
- unranked items have an empty sub_option

Usage:
    workspace = Workspace(event_bus=event_bus)
    item = workspace.create_item(data_uri, "ff6.png")
    workspace.move_item(item.id, "GOTY")
    workspace.set_sub_option(item.id, "+")
    workspace.label_of(item.id)  # "GOTY+"
"""

from __future__ import annotations

from typing import Iterator

from tierengine.core.errors import ValidationError
from tierengine.core.events import EventBus, WorkspaceEvent
from tierlist.model.buckets import Bucket, BucketModel, BUCKET_IDS
from tierlist.model.items import (
    Item,
    ItemSize,
    ItemStore,
    UNRANKED,
    clamp_square,
)


SUB_OPTION_SUFFIXES = ("+", "-", "")


def sub_options_for(tier: str) -> tuple[str, ...]:
    """Refinement choices offered for a tier (none while unranked)."""
    if tier == UNRANKED:
        return ()
    return (f"{tier}+", f"{tier}-")


def is_valid_sub_option(tier: str, sub_option: str) -> bool:
    """Check a sub-option against the tier it is attached to."""
    if not sub_option:
        return True
    if tier == UNRANKED:
        return False
    return sub_option == tier or sub_option in sub_options_for(tier)


class Workspace:
    """
    Container for the item store and the bucket model.

    Provides:
    - Item creation, deletion and full clear
    - Moves between buckets (append to the end of the target)
    - Sub-option selection for ranked items
    - Square resize with clamping
    - Event bus notifications for every real change
    """

    def __init__(self, event_bus: EventBus | None = None):
        self.event_bus = event_bus or EventBus()
        self._store = ItemStore()
        self._buckets = BucketModel()

    # Item lifecycle

    def create_item(self, image_ref: str, display_name: str) -> Item:
        """
        Create a new item at the end of the unranked bucket.

        Args:
            image_ref: Image content reference (data URI or URL)
            display_name: File name for the image

        Returns:
            The new item (tier "unranked", default 80x80 size)
        """
        return self.place_item(image_ref, display_name)

    def place_item(
        self,
        image_ref: str,
        display_name: str,
        bucket_id: str = UNRANKED,
        sub_option: str = "",
        size: int | None = None,
    ) -> Item:
        """
        Create an item directly in any bucket.

        Used when rehydrating from a snapshot. The sub-option must belong
        to the target tier; it is always dropped for unranked items.
        """
        if not image_ref:
            raise ValidationError("Item needs an image reference")
        bucket = self._buckets.get(bucket_id)

        if not bucket.is_ranked:
            sub_option = ""
        elif not is_valid_sub_option(bucket_id, sub_option):
            raise ValidationError(
                f"Sub-option {sub_option!r} does not belong to tier {bucket_id!r}"
            )

        item_size = None
        if size is not None:
            side = clamp_square(size, size)
            item_size = ItemSize(side, side)

        item = self._store.add(image_ref, display_name, size=item_size)
        item.tier = bucket.id
        item.sub_option = sub_option
        bucket.append(item.id)

        self._publish(WorkspaceEvent.ITEM_CREATED, item_id=item.id, bucket_id=bucket.id)
        return item

    def delete_item(self, item_id: str) -> Item:
        """Remove an item from its bucket and from the store permanently."""
        item = self._store.get(item_id)
        self._buckets.get(item.tier).remove(item_id)
        self._store.remove(item_id)
        self._publish(WorkspaceEvent.ITEM_DELETED, item_id=item_id)
        return item

    def clear(self) -> None:
        """Empty every bucket and the item store. Irreversible."""
        if not len(self._store):
            return
        self._buckets.clear()
        self._store.clear()
        self._publish(WorkspaceEvent.CLEARED)

    # Tier assignment

    def move_item(self, item_id: str, target_bucket_id: str) -> bool:
        """
        Move an item to the end of another bucket.

        Args:
            item_id: Item to move
            target_bucket_id: "unranked" or one of the ranked tier ids

        Returns:
            True if the item moved, False if it was already there
        """
        target = self._buckets.get(target_bucket_id)
        item = self._store.get(item_id)

        if item.tier == target.id:
            return False

        source = self._buckets.get(item.tier)
        source.remove(item_id)
        target.append(item_id)
        item.tier = target.id

        # A refinement of the old tier never carries over to the new one
        item.sub_option = ""

        self._publish(
            WorkspaceEvent.ITEM_MOVED,
            item_id=item_id,
            source=source.id,
            target=target.id,
        )
        return True

    def set_sub_option(self, item_id: str, suffix: str) -> bool:
        """
        Select "+", "-" or clear ("") the refinement of a ranked item.

        Unranked items are left untouched.

        Returns:
            True if the sub-option changed
        """
        if suffix not in SUB_OPTION_SUFFIXES:
            raise ValidationError(f"Invalid sub-option suffix: {suffix!r}")

        item = self._store.get(item_id)
        if not item.is_ranked:
            return False

        sub_option = f"{item.tier}{suffix}" if suffix else ""
        # "" and the bare tier both display as the bare tier
        if (sub_option or item.tier) == item.label:
            return False

        item.sub_option = sub_option
        self._publish(
            WorkspaceEvent.SUB_OPTION_CHANGED,
            item_id=item_id,
            sub_option=sub_option,
        )
        return True

    def tier_options(self, item_id: str) -> tuple[str, ...]:
        """Refinements offered for an item: (tier+"+", tier+"-") or ()."""
        return sub_options_for(self._store.get(item_id).tier)

    # Size

    def resize_item(self, item_id: str, width: int, height: int) -> ItemSize:
        """
        Resize an item, keeping it square.

        Each side is clamped to [40, 150] first, then both become the
        smaller of the two.
        """
        item = self._store.get(item_id)
        side = clamp_square(width, height)

        if item.size.width != side or item.size.height != side:
            item.size = ItemSize(side, side)
            self._publish(WorkspaceEvent.ITEM_RESIZED, item_id=item_id, size=side)

        return item.size

    # Queries

    def get_item(self, item_id: str) -> Item:
        return self._store.get(item_id)

    def bucket(self, bucket_id: str) -> Bucket:
        return self._buckets.get(bucket_id)

    def bucket_of(self, item_id: str) -> str:
        return self._store.get(item_id).tier

    def items_in(self, bucket_id: str) -> list[Item]:
        """Items of a bucket in display order."""
        return [self._store.get(i) for i in self._buckets.get(bucket_id).items_in_order()]

    def label_of(self, item_id: str) -> str:
        return self._store.get(item_id).label

    @property
    def buckets(self) -> BucketModel:
        return self._buckets

    def check_invariants(self) -> list[str]:
        """
        List every broken membership or label rule.

        An empty list means the workspace is consistent.
        """
        problems: list[str] = []
        seen: dict[str, str] = {}

        for bucket in self._buckets:
            for item_id in bucket:
                if item_id in seen:
                    problems.append(f"{item_id} in both {seen[item_id]} and {bucket.id}")
                seen[item_id] = bucket.id
                if item_id not in self._store:
                    problems.append(f"{item_id} in {bucket.id} but not in the store")

        for item in self._store:
            if item.id not in seen:
                problems.append(f"{item.id} is in no bucket")
            elif item.tier != seen[item.id]:
                problems.append(f"{item.id} has tier {item.tier} but sits in {seen[item.id]}")
            if not is_valid_sub_option(item.tier, item.sub_option):
                problems.append(f"{item.id} has sub-option {item.sub_option!r} in {item.tier}")

        return problems

    def __iter__(self) -> Iterator[Item]:
        """Iterate items bucket by bucket, in display order."""
        for bucket_id in BUCKET_IDS:
            yield from self.items_in(bucket_id)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._store

    def _publish(self, event_type: WorkspaceEvent, **data) -> None:
        self.event_bus.publish(event_type, **data)
