import sys

from loguru import logger

from linkgraph.api import create_app
from linkgraph.config import settings
from linkgraph.item_store.local import LocalItemStore
from linkgraph.links.manager import LinkGraphManager

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info(f"Loading features from {settings.item_store_path}")
item_store = LocalItemStore(filepath=settings.item_store_path)
manager = LinkGraphManager(item_store, enforce_acyclic=settings.enforce_acyclic)
app = create_app(item_store=item_store, manager=manager)
