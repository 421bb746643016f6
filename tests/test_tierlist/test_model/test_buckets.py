import pytest

from tierengine.core.errors import NotFoundError, ValidationError
from tierlist.model.buckets import Bucket, BucketModel, BUCKET_IDS, RANKED_TIERS, is_ranked_tier
from tierlist.model.items import ItemStore, UNRANKED, clamp_square

def test_bucket_order_and_membership():
    bucket = Bucket("A")
    bucket.append("x")
    bucket.append("y")
    bucket.append("z")

    assert bucket.items_in_order() == ["x", "y", "z"]
    assert "y" in bucket
    assert len(bucket) == 3

    bucket.remove("y")
    assert bucket.items_in_order() == ["x", "z"]
    assert "y" not in bucket

    bucket.append("y")
    assert bucket.items_in_order() == ["x", "z", "y"]

def test_bucket_rejects_duplicates():
    bucket = Bucket("B")
    bucket.append("x")
    with pytest.raises(ValueError):
        bucket.append("x")

def test_bucket_model_layout():
    model = BucketModel()

    assert [b.id for b in model] == list(BUCKET_IDS)
    assert BUCKET_IDS[0] == UNRANKED
    assert RANKED_TIERS == ("GOTY", "AAA", "AA", "A", "B", "C", "D", "E", "F")
    assert not model.unranked.is_ranked
    assert all(b.is_ranked for b in model.ranked())

def test_bucket_model_find():
    model = BucketModel()
    model.get("C").append("item-1")

    assert model.find("item-1").id == "C"
    assert model.find("item-2") is None

def test_bucket_model_unknown_id():
    with pytest.raises(ValidationError):
        BucketModel().get("S")

def test_is_ranked_tier():
    assert is_ranked_tier("GOTY")
    assert not is_ranked_tier(UNRANKED)
    assert not is_ranked_tier("S")

def test_item_store():
    store = ItemStore()
    item = store.add("src", "name.png")

    assert store.get(item.id) is item
    assert len(store) == 1

    store.remove(item.id)
    assert item.id not in store
    with pytest.raises(NotFoundError):
        store.get(item.id)

def test_item_content_is_read_only():
    item = ItemStore().add("src", "name.png")
    with pytest.raises(AttributeError):
        item.image_ref = "other"
    with pytest.raises(AttributeError):
        item.display_name = "other.png"

def test_clamp_square():
    assert clamp_square(200, 90) == 90
    assert clamp_square(10, 10) == 40
    assert clamp_square(60, 120) == 60
