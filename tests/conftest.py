import os
import sys
from datetime import datetime, timedelta, timezone

import pytest

# Ensure engine modules can be imported
sys.path.append(os.getcwd())


class FakeClock:
    """Deterministic clock: each call is one second after the previous."""

    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from tierengine.core.events import EventBus
    return EventBus()


@pytest.fixture
def workspace(event_bus):
    """Empty Workspace on the test bus."""
    from tierlist.model.workspace import Workspace
    return Workspace(event_bus)


@pytest.fixture
def codec():
    from tierlist.save.codec import SnapshotCodec
    return SnapshotCodec()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    """JSON file store in a temporary directory."""
    from tierlist.save.storage import JsonFileStore
    return JsonFileStore(tmp_path / "storage")


@pytest.fixture
def persistence(store, codec, event_bus, clock):
    from tierlist.save.manager import PersistenceService
    return PersistenceService(store, codec=codec, event_bus=event_bus, clock=clock)


@pytest.fixture
def populated(workspace):
    """
    Workspace with four items:
    zelda in GOTY (GOTY+), mario in B, sonic unranked, kirby in B (B-) at 60px.
    """
    zelda = workspace.create_item("data:image/png;base64,AAAA", "zelda.png")
    mario = workspace.create_item("data:image/png;base64,BBBB", "mario.png")
    workspace.create_item("data:image/png;base64,CCCC", "sonic.png")
    kirby = workspace.create_item("https://example.com/kirby.jpg", "kirby.jpg")

    workspace.move_item(zelda.id, "GOTY")
    workspace.set_sub_option(zelda.id, "+")
    workspace.move_item(mario.id, "B")
    workspace.move_item(kirby.id, "B")
    workspace.set_sub_option(kirby.id, "-")
    workspace.resize_item(kirby.id, 60, 120)
    return workspace
