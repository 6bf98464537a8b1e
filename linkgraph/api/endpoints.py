from threading import Lock

from fastapi import APIRouter, HTTPException, Response, status
from loguru import logger

from linkgraph.api.schemas import LinkCheck, LinkRequest
from linkgraph.domain.links import (
    CycleReport,
    ItemLinks,
    LinkInconsistency,
    LinkStats,
    ValidationResult,
)
from linkgraph.domain.timeline import Feature, TimelineItem
from linkgraph.item_store.base import ItemStore
from linkgraph.links.errors import CyclicDependencyError
from linkgraph.links.manager import LinkGraphManager


def _require_feature(item_store: ItemStore, feature_id: str) -> Feature:
    feature = item_store.get_feature(feature_id)
    if feature is None or feature.timeline_items is None:
        raise HTTPException(status_code=404, detail="Feature not found")
    return feature


def _require_item(feature: Feature, item_id: str) -> TimelineItem:
    item = feature.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Timeline item not found")
    return item


def _save(item_store: ItemStore) -> None:
    try:
        item_store.save()
    except Exception as e:
        logger.error(f"Error saving item store: {e}")
        raise HTTPException(status_code=500, detail="Internal server error") from e


def _create_link_endpoint(manager: LinkGraphManager, item_store: ItemStore, lock: Lock):
    """Create the link creation endpoint handler."""

    def create_link(feature_id: str, body: LinkRequest, response: Response):
        feature = _require_feature(item_store, feature_id)

        validation = manager.validate(body.source_id, body.target_id, body.relationship_type)
        if not validation.valid:
            raise HTTPException(status_code=422, detail=validation.errors)

        _require_item(feature, body.source_id)
        _require_item(feature, body.target_id)

        with lock:
            try:
                created = manager.create_link(
                    feature_id,
                    body.source_id,
                    body.target_id,
                    body.relationship_type,  # type: ignore[arg-type]
                )
            except CyclicDependencyError as e:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail={"message": str(e), "path": e.path},
                ) from e

            if not created:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT, detail="Link already exists"
                )
            _save(item_store)

        response.status_code = status.HTTP_201_CREATED
        return manager.get_all_links(feature_id, body.source_id)

    return create_link


def _delete_link_endpoint(manager: LinkGraphManager, item_store: ItemStore, lock: Lock):
    """Create the link deletion endpoint handler."""

    def delete_link(feature_id: str, source_id: str, target_id: str):
        feature = _require_feature(item_store, feature_id)
        _require_item(feature, source_id)
        _require_item(feature, target_id)

        with lock:
            manager.delete_link(feature_id, source_id, target_id)
            _save(item_store)

        return {"deleted": True}

    return delete_link


def _remove_item_links_endpoint(manager: LinkGraphManager, item_store: ItemStore, lock: Lock):
    """Create the endpoint handler that unlinks an item from everything."""

    def remove_item_links(feature_id: str, item_id: str):
        feature = _require_feature(item_store, feature_id)
        _require_item(feature, item_id)

        with lock:
            removed = manager.remove_item_links(feature_id, item_id)
            if removed:
                _save(item_store)

        return {"removed": removed}

    return remove_item_links


def get_endpoints_router(*, manager: LinkGraphManager, item_store: ItemStore) -> APIRouter:
    router = APIRouter()
    lock = Lock()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.post("/api/links/validate")
    async def validate_link(body: LinkRequest) -> ValidationResult:
        return manager.validate(body.source_id, body.target_id, body.relationship_type)

    @router.get("/api/features/{feature_id}/links/stats")
    async def link_stats(feature_id: str) -> LinkStats:
        _require_feature(item_store, feature_id)
        return manager.get_stats(feature_id)

    @router.get("/api/features/{feature_id}/links/check")
    async def check_link(feature_id: str, source_id: str, target_id: str) -> LinkCheck:
        _require_feature(item_store, feature_id)
        circular = manager.would_create_circular(feature_id, source_id, target_id)
        return LinkCheck(
            exists=manager.link_exists(feature_id, source_id, target_id),
            would_create_circular=circular,
            path=manager.find_dependency_path(feature_id, target_id, source_id)
            if circular
            else [],
        )

    @router.get("/api/features/{feature_id}/links/audit")
    async def audit_links(feature_id: str) -> list[LinkInconsistency]:
        _require_feature(item_store, feature_id)
        return manager.find_inconsistencies(feature_id)

    @router.get("/api/features/{feature_id}/links/cycles")
    async def link_cycles(feature_id: str) -> CycleReport:
        feature = _require_feature(item_store, feature_id)
        cycles = manager.find_cycles(feature_id)
        on_cycle = {item_id for cycle in cycles for item_id in cycle}
        return CycleReport(
            has_cycles=bool(cycles),
            cycles=cycles,
            affected_items=[
                item.id for item in feature.timeline_items or [] if item.id in on_cycle
            ],
        )

    @router.get("/api/features/{feature_id}/items/{item_id}/links")
    async def item_links(feature_id: str, item_id: str) -> ItemLinks:
        _require_item(_require_feature(item_store, feature_id), item_id)
        return manager.get_all_links(feature_id, item_id)

    @router.get("/api/features/{feature_id}/items/{item_id}/dependencies")
    async def item_dependencies(feature_id: str, item_id: str) -> list[TimelineItem]:
        _require_item(_require_feature(item_store, feature_id), item_id)
        return manager.get_dependencies(feature_id, item_id)

    @router.get("/api/features/{feature_id}/items/{item_id}/dependents")
    async def item_dependents(feature_id: str, item_id: str) -> list[TimelineItem]:
        _require_item(_require_feature(item_store, feature_id), item_id)
        return manager.get_dependents(feature_id, item_id)

    router.post("/api/features/{feature_id}/links")(
        _create_link_endpoint(manager, item_store, lock)
    )
    router.delete("/api/features/{feature_id}/links/{source_id}/{target_id}")(
        _delete_link_endpoint(manager, item_store, lock)
    )
    router.delete("/api/features/{feature_id}/items/{item_id}/links")(
        _remove_item_links_endpoint(manager, item_store, lock)
    )

    return router
