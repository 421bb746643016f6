"""
Test auto-save slot and named saves.
"""

import json

import pytest

from tierengine.core.errors import NotFoundError, StorageError, ValidationError
from tierengine.core.events import PersistenceEvent
from tierlist.model.workspace import Workspace
from tierlist.save.manager import PersistenceService
from tierlist.save.storage import JsonFileStore


def test_auto_save_round_trip(populated, codec, persistence):
    snapshot = codec.export(populated)

    assert persistence.load_auto_save() is None
    assert not persistence.has_auto_save

    persistence.flush_auto_save(snapshot)

    assert persistence.has_auto_save
    assert codec.to_document(persistence.load_auto_save()) == codec.to_document(snapshot)


def test_auto_save_is_overwritten(populated, codec, persistence):
    persistence.flush_auto_save(codec.export(populated))
    first = persistence.read_auto_save().timestamp

    populated.clear()
    persistence.flush_auto_save(codec.export(populated))

    auto_save = persistence.read_auto_save()
    assert auto_save.snapshot.item_count == 0
    assert auto_save.timestamp > first


def test_auto_save_document_layout(populated, codec, persistence, store):
    persistence.flush_auto_save(codec.export(populated))

    with open(store.root / "tierListAutoSave.json", encoding="utf-8") as f:
        document = json.load(f)

    assert set(document) == {"data", "timestamp"}
    assert set(document["data"]) == {"unranked", "tiers"}


def test_clear_auto_save(populated, codec, persistence):
    persistence.flush_auto_save(codec.export(populated))
    persistence.clear_auto_save()

    assert persistence.load_auto_save() is None
    # clearing twice is harmless
    persistence.clear_auto_save()


def test_save_and_load_named(populated, codec, persistence):
    snapshot = codec.export(populated)

    saved = persistence.save_named("  favourites ", snapshot)

    assert saved.name == "favourites"
    assert codec.to_document(persistence.load_named("favourites")) == codec.to_document(snapshot)


def test_save_named_last_write_wins(populated, codec, persistence):
    persistence.save_named("x", codec.export(populated))
    persistence.save_named("y", codec.export(Workspace()))
    first_x = persistence.list_named()["x"]

    populated.clear()
    persistence.save_named("x", codec.export(populated))

    listing = persistence.list_named()
    assert list(listing) == ["x", "y"]
    assert listing["x"] > first_x
    assert persistence.load_named("x").item_count == 0


def test_list_named_in_insertion_order(codec, persistence):
    empty = codec.export(Workspace())
    for name in ["zeta", "alpha", "mid"]:
        persistence.save_named(name, empty)

    assert list(persistence.list_named()) == ["zeta", "alpha", "mid"]
    assert persistence.count_named() == 3


def test_save_named_requires_name(populated, codec, persistence, store):
    persistence.save_named("kept", codec.export(populated))
    before = (store.root / "tierLists.json").read_text(encoding="utf-8")

    with pytest.raises(ValidationError):
        persistence.save_named("", codec.export(populated))
    with pytest.raises(ValidationError):
        persistence.save_named("   ", codec.export(populated))

    assert (store.root / "tierLists.json").read_text(encoding="utf-8") == before


def test_load_missing_named(persistence):
    with pytest.raises(NotFoundError):
        persistence.load_named("missing")


def test_delete_named(codec, persistence):
    persistence.save_named("a", codec.export(Workspace()))
    persistence.save_named("b", codec.export(Workspace()))

    persistence.delete_named("a")

    assert list(persistence.list_named()) == ["b"]
    with pytest.raises(NotFoundError):
        persistence.load_named("a")
    with pytest.raises(NotFoundError):
        persistence.delete_named("a")


def test_load_named_malformed_entry(persistence, store):
    store.write("tierLists", {"broken": {"data": {"unranked": "nope"}, "timestamp": "t"}})

    with pytest.raises(ValidationError):
        persistence.load_named("broken")


def test_corrupted_directory_is_storage_error(persistence, store):
    store.root.mkdir(parents=True, exist_ok=True)
    (store.root / "tierLists.json").write_text("{oops", encoding="utf-8")

    with pytest.raises(StorageError):
        persistence.list_named()


def test_storage_failure_on_named_save(populated, codec, persistence, monkeypatch):
    def fail(key, data):
        raise StorageError("disk full")
    monkeypatch.setattr(persistence.store, "write", fail)

    with pytest.raises(StorageError):
        persistence.save_named("x", codec.export(populated))


def test_events_published(populated, codec, persistence, event_bus):
    received = []
    def handler(event):
        received.append(event.type)
    event_bus.subscribe_all(PersistenceEvent, handler)

    persistence.save_named("x", codec.export(populated))
    persistence.load_named("x")
    persistence.delete_named("x")
    persistence.flush_auto_save(codec.export(populated))

    assert received == [
        PersistenceEvent.SAVE_COMPLETED,
        PersistenceEvent.LOAD_COMPLETED,
        PersistenceEvent.DELETED,
        PersistenceEvent.AUTO_SAVE_COMPLETED,
    ]


def test_survives_new_service_instance(populated, codec, store, clock):
    PersistenceService(store, codec=codec, clock=clock).save_named("x", codec.export(populated))

    reopened = PersistenceService(JsonFileStore(store.root), clock=clock)

    assert list(reopened.list_named()) == ["x"]
    assert codec.to_document(reopened.load_named("x")) == codec.to_document(codec.export(populated))


def test_store_write_is_atomic(store, monkeypatch):
    store.write("doc", {"version": 1})

    def broken_dump(data, f, **kwargs):
        f.write("{partial")
        raise OSError("disk full")
    monkeypatch.setattr("tierlist.save.storage.json.dump", broken_dump)

    with pytest.raises(StorageError):
        store.write("doc", {"version": 2})

    monkeypatch.undo()
    assert store.read("doc") == {"version": 1}
    assert not (store.root / "doc.json.tmp").exists()


def test_store_rejects_bad_keys(store):
    with pytest.raises(ValueError):
        store.write("../escape", {})


def test_named_lookups_ignore_surrounding_whitespace(populated, codec, persistence):
    persistence.save_named(" x ", codec.export(populated))

    assert persistence.load_named(" x ").item_count == 4
    assert persistence.load_named("x").item_count == 4

    persistence.delete_named("  x")
    assert persistence.list_named() == {}
