"""Timeline domain models."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

RelationshipType = Literal["dependency", "complements"]
LinkDirection = Literal["outgoing", "incoming"]

RELATIONSHIP_TYPES: tuple[str, ...] = ("dependency", "complements")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LinkRecord(BaseModel):
    """One endpoint of a directed link, stored on the item it belongs to.

    Attributes:
        direction: "outgoing" when stored on the source item, "incoming" on the target
        relationship_type: Either "dependency" or "complements"
        target_id: The other item of an outgoing record
        source_id: The other item of an incoming record
        created_at: When the link was created (UTC)
    """

    direction: LinkDirection
    relationship_type: RelationshipType
    target_id: str | None = None
    source_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def _check_endpoint(self) -> "LinkRecord":
        if self.direction == "outgoing" and not self.target_id:
            raise ValueError("outgoing link record requires target_id")
        if self.direction == "incoming" and not self.source_id:
            raise ValueError("incoming link record requires source_id")
        return self

    @property
    def other_id(self) -> str:
        """ID of the item on the other end of the link."""
        if self.direction == "outgoing":
            return self.target_id  # type: ignore
        return self.source_id  # type: ignore


class TimelineItem(BaseModel):
    """A schedulable sub-unit of a feature and a node of the link graph.

    Fields other than the ones below belong to the item store and are kept as-is.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    linked_items: list[LinkRecord] = []


class Feature(BaseModel):
    """Top-level work item owning a collection of timeline items.

    A feature whose ``timeline_items`` is None has no items collection at all,
    which the link manager treats the same as a missing feature.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    timeline_items: list[TimelineItem] | None = None
    updated_at: datetime | None = None

    def get_item(self, item_id: str) -> TimelineItem | None:
        for item in self.timeline_items or []:
            if item.id == item_id:
                return item
        return None

    def touch(self) -> None:
        self.updated_at = utc_now()
