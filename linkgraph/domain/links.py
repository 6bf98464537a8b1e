"""Result models returned by link graph operations."""

from typing import Literal

from pydantic import BaseModel

from linkgraph.domain.timeline import LinkRecord


class ValidationResult(BaseModel):
    """Outcome of validating link input. Errors are human-readable messages."""

    valid: bool
    errors: list[str] = []


class ItemLinks(BaseModel):
    incoming: list[LinkRecord] = []
    outgoing: list[LinkRecord] = []


class LinkStats(BaseModel):
    """Link counts for a feature, one per edge (outgoing records only)."""

    total: int = 0
    by_type: dict[str, int] = {"dependency": 0, "complements": 0}


class LinkInconsistency(BaseModel):
    """A stored link record that breaks the pairing or self-link rules.

    Attributes:
        kind: What is wrong with the record
        item_id: Item holding the offending record
        source_id: Source of the edge the record describes
        target_id: Target of the edge the record describes
        detail: Human-readable description
    """

    kind: Literal["missing_incoming", "missing_outgoing", "type_mismatch", "duplicate", "self_link"]
    item_id: str
    source_id: str
    target_id: str
    detail: str = ""


class CycleReport(BaseModel):
    """Circular dependency chains found in a feature and the items on them."""

    has_cycles: bool = False
    cycles: list[list[str]] = []
    affected_items: list[str] = []
