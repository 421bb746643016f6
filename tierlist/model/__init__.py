"""
Model module - items, buckets and the workspace.
"""

from tierlist.model.items import (
    Item,
    ItemSize,
    ItemStore,
    UNRANKED,
    MIN_SIZE,
    MAX_SIZE,
    DEFAULT_SIZE,
    clamp_square,
)
from tierlist.model.buckets import (
    Bucket,
    BucketModel,
    RANKED_TIERS,
    BUCKET_IDS,
    is_ranked_tier,
)
from tierlist.model.workspace import Workspace, sub_options_for

__all__ = [
    "Item",
    "ItemSize",
    "ItemStore",
    "UNRANKED",
    "MIN_SIZE",
    "MAX_SIZE",
    "DEFAULT_SIZE",
    "clamp_square",
    "Bucket",
    "BucketModel",
    "RANKED_TIERS",
    "BUCKET_IDS",
    "is_ranked_tier",
    "Workspace",
    "sub_options_for",
]
