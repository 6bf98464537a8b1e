from tests.fakes.fake_item_store import FakeItemStore

__all__ = ["FakeItemStore"]
