from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkgraph.api.endpoints import get_endpoints_router
from linkgraph.item_store.base import ItemStore
from linkgraph.links.manager import LinkGraphManager


def create_app(
    *,
    item_store: ItemStore,
    manager: LinkGraphManager,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(manager=manager, item_store=item_store))

    return app
