from linkgraph.item_store.base import ItemStore
from linkgraph.item_store.local import LocalItemStore

__all__ = ["ItemStore", "LocalItemStore"]
