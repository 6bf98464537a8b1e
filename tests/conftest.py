import pytest
from fastapi.testclient import TestClient

from linkgraph.api import create_app
from linkgraph.domain.timeline import Feature, TimelineItem
from linkgraph.links.manager import LinkGraphManager
from tests.fakes import FakeItemStore


@pytest.fixture
def timeline_items() -> list[TimelineItem]:
    return [
        TimelineItem(id="I1", name="Design"),
        TimelineItem(id="I2", name="Build"),
        TimelineItem(id="I3", name="Test"),
        TimelineItem(id="I4", name="Deploy"),
    ]


@pytest.fixture
def feature(timeline_items: list[TimelineItem]) -> Feature:
    return Feature(id="F", name="Checkout", timeline_items=timeline_items)


@pytest.fixture
def fake_item_store(feature: Feature) -> FakeItemStore:
    return FakeItemStore(
        {
            "F": feature,
            "NO_ITEMS": Feature(id="NO_ITEMS", name="Unplanned"),
        }
    )


@pytest.fixture
def manager(fake_item_store: FakeItemStore) -> LinkGraphManager:
    """Manager that validates input and refuses circular dependencies."""
    return LinkGraphManager(fake_item_store)


@pytest.fixture
def permissive_manager(fake_item_store: FakeItemStore) -> LinkGraphManager:
    """Manager that leaves validation and cycle checks to the caller."""
    return LinkGraphManager(fake_item_store, enforce_acyclic=False)


@pytest.fixture
def test_client(fake_item_store: FakeItemStore, manager: LinkGraphManager) -> TestClient:
    """Create test client with the fake item store."""
    app = create_app(item_store=fake_item_store, manager=manager)
    return TestClient(app)
