"""
Snapshot codec - workspace <-> persisted document.

Document layout (stable across versions):

    {
      "unranked": [ItemRecord, ...],
      "tiers": {"GOTY": [...], "AAA": [...], ..., "F": [...]}
    }

    ItemRecord = {"src": str, "fileName": str, "tierSelection": str,
                  "width": "<n>px", "height": "<n>px"}

Raw documents are checked against SNAPSHOT_SCHEMA with jsonschema and
then parsed into pydantic models, so the rest of the engine only sees
typed records. Width and height are optional and default to 80px.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import jsonschema
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from tierengine.core.errors import ValidationError
from tierlist.model.buckets import RANKED_TIERS, is_ranked_tier
from tierlist.model.items import DEFAULT_SIZE, UNRANKED, Item, clamp_square
from tierlist.model.workspace import Workspace, is_valid_sub_option


logger = logging.getLogger(__name__)

_PIXELS_PATTERN = r"^[0-9]+(\.[0-9]+)?px$"

_RECORD_SCHEMA = {
    "type": "object",
    "required": ["src"],
    "properties": {
        "src": {"type": "string", "minLength": 1},
        "fileName": {"type": "string"},
        "tierSelection": {"type": "string"},
        "width": {"type": "string", "pattern": _PIXELS_PATTERN},
        "height": {"type": "string", "pattern": _PIXELS_PATTERN},
    },
}

SNAPSHOT_SCHEMA = {
    "type": "object",
    "required": ["unranked", "tiers"],
    "properties": {
        "unranked": {"type": "array", "items": _RECORD_SCHEMA},
        "tiers": {
            "type": "object",
            "additionalProperties": {"type": "array", "items": _RECORD_SCHEMA},
        },
    },
}


def format_pixels(value: int) -> str:
    """80 -> "80px"."""
    return f"{int(value)}px"


def parse_pixels(value: Optional[str], default: int = DEFAULT_SIZE) -> int:
    """"80px" -> 80; None -> default."""
    if value is None:
        return default
    text = value.strip()
    if not text.endswith("px"):
        raise ValidationError(f"Expected a pixel size like '80px', got {value!r}")
    try:
        return int(round(float(text[:-2])))
    except ValueError:
        raise ValidationError(f"Expected a pixel size like '80px', got {value!r}") from None


class ItemRecord(BaseModel):
    """
    One persisted item.

    Attributes:
        src: Image content reference
        file_name: Display name ("fileName" in documents)
        tier_selection: Label at save time ("tierSelection" in documents)
        width: Optional "<n>px" string, 80px when absent
        height: Optional "<n>px" string, 80px when absent
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    src: str
    file_name: str = Field(default="", alias="fileName")
    tier_selection: str = Field(default="", alias="tierSelection")
    width: Optional[str] = None
    height: Optional[str] = None

    @property
    def pixel_width(self) -> int:
        return parse_pixels(self.width)

    @property
    def pixel_height(self) -> int:
        return parse_pixels(self.height)


def _empty_tiers() -> dict[str, list[ItemRecord]]:
    return {tier: [] for tier in RANKED_TIERS}


class Snapshot(BaseModel):
    """Value copy of a workspace: unranked records plus records per tier."""

    model_config = ConfigDict(extra='ignore')

    unranked: list[ItemRecord] = Field(default_factory=list)
    tiers: dict[str, list[ItemRecord]] = Field(default_factory=_empty_tiers)

    @property
    def item_count(self) -> int:
        return len(self.unranked) + sum(len(records) for records in self.tiers.values())


class SnapshotCodec:
    """
    Converts workspaces to snapshots and back.

    Usage:
        codec = SnapshotCodec()
        snapshot = codec.export(workspace)
        text = codec.dumps(snapshot)

        codec.import_into(other_workspace, codec.loads(text))
    """

    # Export

    def export(self, workspace: Workspace) -> Snapshot:
        """Capture every item in bucket order."""
        snapshot = Snapshot()

        for item in workspace.items_in(UNRANKED):
            snapshot.unranked.append(self._record_for(item, fallback=""))

        for tier in RANKED_TIERS:
            snapshot.tiers[tier] = [
                self._record_for(item, fallback=tier)
                for item in workspace.items_in(tier)
            ]

        return snapshot

    def _record_for(self, item: Item, fallback: str) -> ItemRecord:
        return ItemRecord(
            src=item.image_ref,
            file_name=item.display_name,
            tier_selection=item.sub_option or fallback,
            width=format_pixels(item.size.width),
            height=format_pixels(item.size.height),
        )

    # Import

    def import_into(self, workspace: Workspace, snapshot: Snapshot | dict[str, Any]) -> None:
        """
        Replace the workspace contents with a snapshot.

        Every record is validated before the workspace is touched, so a
        bad snapshot raises ValidationError and leaves it unchanged.
        """
        if not isinstance(snapshot, Snapshot):
            snapshot = self.from_document(snapshot)

        plan = self._plan(snapshot)

        workspace.clear()
        for bucket_id, record, sub_option, side in plan:
            workspace.place_item(
                record.src,
                record.file_name,
                bucket_id=bucket_id,
                sub_option=sub_option,
                size=side,
            )

        logger.debug(f"Imported {len(plan)} items")

    def _plan(self, snapshot: Snapshot) -> list[tuple[str, ItemRecord, str, int]]:
        """Resolve every record to (bucket, record, sub_option, size) or raise."""
        plan = []

        for record in snapshot.unranked:
            if record.tier_selection:
                logger.debug(
                    f"Dropping tier selection {record.tier_selection!r} "
                    f"of unranked item {record.file_name!r}"
                )
            plan.append((UNRANKED, record, "", self._side(record)))

        for tier, records in snapshot.tiers.items():
            if not is_ranked_tier(tier):
                logger.warning(f"Skipping {len(records)} items of unknown tier {tier!r}")
                continue
            for record in records:
                sub_option = record.tier_selection or tier
                if not is_valid_sub_option(tier, sub_option):
                    # Older saves kept the label of the tier an item was moved out of
                    logger.warning(
                        f"Tier selection {record.tier_selection!r} of {record.file_name!r} "
                        f"does not belong to tier {tier!r}, using {tier!r}"
                    )
                    sub_option = tier
                plan.append((tier, record, sub_option, self._side(record)))

        return plan

    def _side(self, record: ItemRecord) -> int:
        if not record.src:
            raise ValidationError(f"Item {record.file_name!r} has no image source")
        return clamp_square(record.pixel_width, record.pixel_height)

    # Documents

    def to_document(self, snapshot: Snapshot) -> dict[str, Any]:
        """Snapshot -> plain JSON-ready dict using the document field names."""
        return snapshot.model_dump(by_alias=True, exclude_none=True)

    def from_document(self, data: Any) -> Snapshot:
        """Validate a raw document and parse it into a Snapshot."""
        try:
            jsonschema.validate(instance=data, schema=SNAPSHOT_SCHEMA)
        except jsonschema.ValidationError as e:
            raise ValidationError(f"Malformed snapshot: {e.message}") from e

        try:
            return Snapshot.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Malformed snapshot: {e}") from e

    def dumps(self, snapshot: Snapshot) -> str:
        return json.dumps(self.to_document(snapshot), ensure_ascii=False)

    def loads(self, text: str) -> Snapshot:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Invalid JSON: {e}") from e
        return self.from_document(data)
