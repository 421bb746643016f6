"""
Test snapshot export/import.
"""

import json

import pytest

from tierengine.core.errors import ValidationError
from tierlist.model.buckets import BUCKET_IDS, RANKED_TIERS
from tierlist.model.items import UNRANKED
from tierlist.model.workspace import Workspace
from tierlist.save.codec import ItemRecord, Snapshot, parse_pixels


def _layout(workspace):
    """Bucket -> [(name, label, width, height)] for comparisons."""
    return {
        bucket_id: [
            (i.display_name, i.label, i.size.width, i.size.height)
            for i in workspace.items_in(bucket_id)
        ]
        for bucket_id in BUCKET_IDS
    }


def test_export_document_shape(populated, codec):
    document = codec.to_document(codec.export(populated))

    assert list(document) == ["unranked", "tiers"]
    assert list(document["tiers"]) == list(RANKED_TIERS)
    assert document["unranked"] == [{
        "src": "data:image/png;base64,CCCC",
        "fileName": "sonic.png",
        "tierSelection": "",
        "width": "80px",
        "height": "80px",
    }]
    assert document["tiers"]["GOTY"][0]["tierSelection"] == "GOTY+"
    assert [r["fileName"] for r in document["tiers"]["B"]] == ["mario.png", "kirby.jpg"]
    assert document["tiers"]["B"][0]["tierSelection"] == "B"
    assert document["tiers"]["B"][1]["tierSelection"] == "B-"
    assert document["tiers"]["B"][1]["width"] == "60px"
    assert document["tiers"]["F"] == []


def test_round_trip(populated, codec):
    snapshot = codec.export(populated)

    restored = Workspace()
    codec.import_into(restored, snapshot)

    assert _layout(restored) == _layout(populated)
    assert codec.to_document(codec.export(restored)) == codec.to_document(snapshot)
    assert restored.check_invariants() == []


def test_round_trip_through_json_text(populated, codec):
    text = codec.dumps(codec.export(populated))

    restored = Workspace()
    codec.import_into(restored, codec.loads(text))

    assert codec.dumps(codec.export(restored)) == text


def test_import_replaces_existing_items(populated, codec):
    target = Workspace()
    target.create_item("old", "old.png")

    codec.import_into(target, codec.export(populated))

    names = [i.display_name for i in target]
    assert "old.png" not in names
    assert len(target) == 4


def test_import_defaults_missing_sizes(codec):
    document = {
        "unranked": [{"src": "a", "fileName": "a.png", "tierSelection": ""}],
        "tiers": {"A": [{"src": "b", "fileName": "b.png", "tierSelection": ""}]},
    }
    workspace = Workspace()

    codec.import_into(workspace, document)

    unranked = workspace.items_in(UNRANKED)[0]
    ranked = workspace.items_in("A")[0]
    assert (unranked.size.width, unranked.size.height) == (80, 80)
    assert (ranked.size.width, ranked.size.height) == (80, 80)
    # empty selection falls back to the bare tier
    assert ranked.sub_option == "A"
    assert ranked.label == "A"


def test_import_normalizes_sizes(codec):
    document = {
        "unranked": [{"src": "a", "fileName": "a.png", "width": "200px", "height": "90px"}],
        "tiers": {},
    }
    workspace = Workspace()
    codec.import_into(workspace, document)

    item = workspace.items_in(UNRANKED)[0]
    assert (item.size.width, item.size.height) == (90, 90)


def test_import_drops_selection_of_unranked_items(codec):
    document = {
        "unranked": [{"src": "a", "fileName": "a.png", "tierSelection": "A+"}],
        "tiers": {},
    }
    workspace = Workspace()
    codec.import_into(workspace, document)

    assert workspace.items_in(UNRANKED)[0].sub_option == ""


def test_import_skips_unknown_tiers(codec):
    document = {
        "unranked": [],
        "tiers": {
            "S": [{"src": "x", "fileName": "x.png", "tierSelection": "S"}],
            "C": [{"src": "y", "fileName": "y.png", "tierSelection": "C+"}],
        },
    }
    workspace = Workspace()
    codec.import_into(workspace, document)

    assert len(workspace) == 1
    assert workspace.items_in("C")[0].label == "C+"


@pytest.mark.parametrize("document", [
    [],
    {"tiers": {}},
    {"unranked": [], "tiers": []},
    {"unranked": [{"fileName": "no-src.png"}], "tiers": {}},
    {"unranked": [{"src": ""}], "tiers": {}},
    {"unranked": [{"src": "a", "width": "wide"}], "tiers": {}},
    {"unranked": [{"src": "a", "width": 80}], "tiers": {}},
])
def test_malformed_import_leaves_workspace_unchanged(populated, codec, document):
    before = _layout(populated)

    with pytest.raises(ValidationError):
        codec.import_into(populated, document)

    assert _layout(populated) == before


def test_loads_invalid_json(codec):
    with pytest.raises(ValidationError):
        codec.loads("{not json")


def test_item_record_aliases():
    record = ItemRecord.model_validate({"src": "s", "fileName": "f.png", "tierSelection": "A-"})
    assert record.file_name == "f.png"
    assert record.tier_selection == "A-"
    assert record.pixel_width == 80

    assert json.loads(record.model_dump_json(by_alias=True, exclude_none=True)) == {
        "src": "s", "fileName": "f.png", "tierSelection": "A-",
    }


def test_empty_snapshot_has_every_tier():
    snapshot = Snapshot()
    assert list(snapshot.tiers) == list(RANKED_TIERS)
    assert snapshot.item_count == 0


def test_parse_pixels():
    assert parse_pixels("80px") == 80
    assert parse_pixels("79.6px") == 80
    assert parse_pixels(None) == 80
    with pytest.raises(ValidationError):
        parse_pixels("80")


def test_import_replaces_stale_tier_selection(codec):
    document = {
        "unranked": [],
        "tiers": {"B": [
            {"src": "a", "fileName": "a.png", "tierSelection": "B+"},
            {"src": "b", "fileName": "b.png", "tierSelection": "A+"},
        ]},
    }
    workspace = Workspace()

    codec.import_into(workspace, document)

    assert [i.label for i in workspace.items_in("B")] == ["B+", "B"]
    assert workspace.check_invariants() == []
