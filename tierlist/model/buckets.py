"""
Bucket model - ordered membership per tier.

A bucket is an ordered set of item ids. Python dicts keep insertion
order, so a dict keyed by item id gives O(1) membership and stable
display order at the same time.
"""

from __future__ import annotations

from typing import Iterator

from tierengine.core.errors import ValidationError
from tierlist.model.items import UNRANKED


RANKED_TIERS: tuple[str, ...] = ("GOTY", "AAA", "AA", "A", "B", "C", "D", "E", "F")
BUCKET_IDS: tuple[str, ...] = (UNRANKED,) + RANKED_TIERS


def is_ranked_tier(bucket_id: str) -> bool:
    """Check if a bucket id names one of the nine ranked tiers."""
    return bucket_id in RANKED_TIERS


class Bucket:
    """Ordered collection of item ids for one tier."""

    def __init__(self, bucket_id: str):
        self._id = bucket_id
        self._members: dict[str, None] = {}

    @property
    def id(self) -> str:
        return self._id

    @property
    def is_ranked(self) -> bool:
        return is_ranked_tier(self._id)

    def append(self, item_id: str) -> None:
        """Add an item id at the end of the bucket."""
        if item_id in self._members:
            raise ValueError(f"Item {item_id} is already in bucket {self._id}")
        self._members[item_id] = None

    def remove(self, item_id: str) -> None:
        """Remove an item id, keeping the order of the rest."""
        del self._members[item_id]

    def items_in_order(self) -> list[str]:
        return list(self._members)

    def clear(self) -> None:
        self._members.clear()

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._members))

    def __repr__(self) -> str:
        return f"Bucket({self._id!r}, {len(self._members)} items)"


class BucketModel:
    """
    The fixed set of buckets: unranked first, then GOTY down to F.

    Buckets are never created or destroyed after construction.
    """

    def __init__(self):
        self._buckets: dict[str, Bucket] = {
            bucket_id: Bucket(bucket_id) for bucket_id in BUCKET_IDS
        }

    def get(self, bucket_id: str) -> Bucket:
        bucket = self._buckets.get(bucket_id)
        if bucket is None:
            raise ValidationError(f"Unknown bucket: {bucket_id!r}")
        return bucket

    def find(self, item_id: str) -> Bucket | None:
        """Return the bucket containing an item, if any."""
        for bucket in self._buckets.values():
            if item_id in bucket:
                return bucket
        return None

    @property
    def unranked(self) -> Bucket:
        return self._buckets[UNRANKED]

    def ranked(self) -> Iterator[Bucket]:
        for tier in RANKED_TIERS:
            yield self._buckets[tier]

    def clear(self) -> None:
        for bucket in self._buckets.values():
            bucket.clear()

    def __iter__(self) -> Iterator[Bucket]:
        return iter(self._buckets.values())

    def __len__(self) -> int:
        return len(self._buckets)
