"""Creation, deletion and querying of links between timeline items."""

from collections import Counter

from loguru import logger

from linkgraph.domain.links import ItemLinks, LinkInconsistency, LinkStats, ValidationResult
from linkgraph.domain.timeline import (
    RELATIONSHIP_TYPES,
    Feature,
    LinkRecord,
    RelationshipType,
    TimelineItem,
    utc_now,
)
from linkgraph.item_store.base import ItemStore
from linkgraph.links.errors import CyclicDependencyError
from linkgraph.links.index import LinkIndex


class LinkGraphManager:
    """Manages directed, typed links between the timeline items of a feature.

    Every link is stored twice: an outgoing record on the source item and an
    incoming record on the target item. The two are always written and removed
    together. Missing features or items never raise; queries return empty
    results and mutations return False.
    """

    def __init__(self, item_store: ItemStore, *, enforce_acyclic: bool = True) -> None:
        """Initialize the manager.

        Args:
            item_store: Store that owns the features and their timeline items
            enforce_acyclic: If True, create_link validates its input and refuses
                dependency links that would close a cycle. If False, both checks
                are left to the caller (validate and would_create_circular).
        """
        self.item_store = item_store
        self.enforce_acyclic = enforce_acyclic

    def validate(
        self, source_id: str | None, target_id: str | None, relationship_type: str | None
    ) -> ValidationResult:
        """Validate link input, collecting every problem rather than stopping at the first."""
        errors = []

        if not source_id:
            errors.append("Source item ID is required")

        if not target_id:
            errors.append("Target item ID is required")

        if source_id == target_id:
            errors.append("Cannot link item to itself")

        if not relationship_type or relationship_type not in RELATIONSHIP_TYPES:
            errors.append("Valid relationship type is required (dependency or complements)")

        return ValidationResult(valid=not errors, errors=errors)

    def create_link(
        self,
        feature_id: str,
        source_id: str,
        target_id: str,
        relationship_type: RelationshipType,
    ) -> bool:
        """Create a link from source to target.

        Args:
            feature_id: Feature owning both items
            source_id: Item the link starts from (for dependencies, the dependent item)
            target_id: Item the link points to
            relationship_type: "dependency" or "complements"

        Returns:
            True if the link was created, False if the input was rejected, the
            feature or items were not found, or the link already exists.

        Raises:
            CyclicDependencyError: If acyclicity is enforced and a dependency
                link would close a cycle.
        """
        if self.enforce_acyclic:
            validation = self.validate(source_id, target_id, relationship_type)
            if not validation.valid:
                logger.warning(
                    f"Rejected link {source_id} -> {target_id}: {'; '.join(validation.errors)}"
                )
                return False
        elif relationship_type not in RELATIONSHIP_TYPES:
            logger.error(f"Unknown relationship type: {relationship_type}")
            return False

        feature = self._get_feature(feature_id)
        if feature is None:
            logger.error(f"Feature not found: {feature_id}")
            return False

        source_item = feature.get_item(source_id)
        target_item = feature.get_item(target_id)
        if source_item is None or target_item is None:
            logger.error(f"Timeline item(s) not found in feature {feature_id}")
            return False

        existing_outgoing = any(
            record.direction == "outgoing" and record.target_id == target_id
            for record in source_item.linked_items
        )
        existing_incoming = any(
            record.direction == "incoming" and record.source_id == source_id
            for record in target_item.linked_items
        )
        if existing_outgoing and existing_incoming:
            logger.info(f"Link already exists: {source_item.name} -> {target_item.name}")
            return False

        if self.enforce_acyclic and relationship_type == "dependency":
            index = LinkIndex.from_items(feature.timeline_items or [])
            if index.reaches(target_id, source_id):
                path = index.path(target_id, source_id)
                logger.warning(
                    f"Refused circular dependency: {source_item.name} -> {target_item.name}"
                )
                raise CyclicDependencyError(source_id, target_id, path)

        created_at = utc_now()
        source_item.linked_items.append(
            LinkRecord(
                direction="outgoing",
                target_id=target_id,
                relationship_type=relationship_type,
                created_at=created_at,
            )
        )
        target_item.linked_items.append(
            LinkRecord(
                direction="incoming",
                source_id=source_id,
                relationship_type=relationship_type,
                created_at=created_at,
            )
        )
        self._commit(feature)

        logger.info(f"Created link: {source_item.name} -> {target_item.name}")
        return True

    def delete_link(self, feature_id: str, source_id: str, target_id: str) -> bool:
        """Delete the link from source to target, removing both of its records.

        Returns True whenever the feature and both items exist, whether or not
        there was anything to remove.
        """
        feature = self._get_feature(feature_id)
        if feature is None:
            logger.error(f"Feature not found: {feature_id}")
            return False

        source_item = feature.get_item(source_id)
        target_item = feature.get_item(target_id)
        if source_item is None or target_item is None:
            logger.error(f"Timeline item(s) not found in feature {feature_id}")
            return False

        source_item.linked_items = [
            record
            for record in source_item.linked_items
            if not (record.direction == "outgoing" and record.target_id == target_id)
        ]
        target_item.linked_items = [
            record
            for record in target_item.linked_items
            if not (record.direction == "incoming" and record.source_id == source_id)
        ]
        self._commit(feature)

        logger.info(f"Deleted link: {source_item.name} -> {target_item.name}")
        return True

    def get_outgoing_links(self, feature_id: str, item_id: str) -> list[LinkRecord]:
        item = self._get_item(feature_id, item_id)
        if item is None:
            return []
        return [record for record in item.linked_items if record.direction == "outgoing"]

    def get_incoming_links(self, feature_id: str, item_id: str) -> list[LinkRecord]:
        item = self._get_item(feature_id, item_id)
        if item is None:
            return []
        return [record for record in item.linked_items if record.direction == "incoming"]

    def get_all_links(self, feature_id: str, item_id: str) -> ItemLinks:
        return ItemLinks(
            incoming=self.get_incoming_links(feature_id, item_id),
            outgoing=self.get_outgoing_links(feature_id, item_id),
        )

    def link_exists(self, feature_id: str, source_id: str, target_id: str) -> bool:
        """Check for a link by looking at the source item's outgoing records only."""
        return any(
            record.target_id == target_id
            for record in self.get_outgoing_links(feature_id, source_id)
        )

    def get_stats(self, feature_id: str) -> LinkStats:
        """Count the links of a feature, overall and per relationship type."""
        stats = LinkStats()
        feature = self._get_feature(feature_id)
        if feature is None:
            return stats

        for item in feature.timeline_items or []:
            # Count only outgoing to avoid double-counting
            outgoing = [record for record in item.linked_items if record.direction == "outgoing"]
            stats.total += len(outgoing)
            for record in outgoing:
                if record.relationship_type in stats.by_type:
                    stats.by_type[record.relationship_type] += 1

        return stats

    def get_dependencies(self, feature_id: str, item_id: str) -> list[TimelineItem]:
        """Get the items this item depends on, in feature order."""
        feature = self._get_feature(feature_id)
        if feature is None:
            return []

        dependency_ids = {
            record.target_id
            for record in self.get_outgoing_links(feature_id, item_id)
            if record.relationship_type == "dependency"
        }
        return [item for item in feature.timeline_items or [] if item.id in dependency_ids]

    def get_dependents(self, feature_id: str, item_id: str) -> list[TimelineItem]:
        """Get the items that depend on this item, in feature order."""
        feature = self._get_feature(feature_id)
        if feature is None:
            return []

        dependent_ids = {
            record.source_id
            for record in self.get_incoming_links(feature_id, item_id)
            if record.relationship_type == "dependency"
        }
        return [item for item in feature.timeline_items or [] if item.id in dependent_ids]

    def would_create_circular(self, feature_id: str, source_id: str, target_id: str) -> bool:
        """Check whether a dependency link from source to target would close a cycle.

        That is the case exactly when source is already reachable from target
        through existing dependency links. Linking an item to itself always counts.
        """
        return self._build_index(feature_id).reaches(target_id, source_id)

    def find_dependency_path(self, feature_id: str, start_id: str, goal_id: str) -> list[str]:
        """Find the shortest chain of dependency links from start to goal.

        Returns:
            Item IDs from start to goal inclusive, or an empty list if goal is not reachable
        """
        return self._build_index(feature_id).path(start_id, goal_id)

    def find_cycles(self, feature_id: str) -> list[list[str]]:
        """Find circular dependency chains already stored in a feature.

        Such chains can only come from permissive linking or from data written
        outside the manager.

        Returns:
            One list of item IDs per cycle, in link order; empty if the feature is acyclic
        """
        return self._build_index(feature_id).cycles("dependency")

    def remove_item_links(self, feature_id: str, item_id: str) -> int:
        """Remove every link touching an item, ahead of the item being deleted.

        Returns:
            Number of link records removed across the feature
        """
        feature = self._get_feature(feature_id)
        if feature is None:
            logger.error(f"Feature not found: {feature_id}")
            return 0

        removed = 0
        for item in feature.timeline_items or []:
            if item.id == item_id:
                kept = []
            else:
                kept = [record for record in item.linked_items if record.other_id != item_id]
            removed += len(item.linked_items) - len(kept)
            item.linked_items = kept

        if removed:
            self._commit(feature)
            logger.info(f"Removed {removed} link records for item {item_id}")
        return removed

    def find_inconsistencies(self, feature_id: str) -> list[LinkInconsistency]:
        """Audit stored records for unpaired halves, type mismatches, duplicates and self-links."""
        feature = self._get_feature(feature_id)
        if feature is None:
            return []

        items = {item.id: item for item in feature.timeline_items or []}
        problems = []

        for item in items.values():
            counts = Counter((record.direction, record.other_id) for record in item.linked_items)
            reported: set[tuple[str, str]] = set()

            for record in item.linked_items:
                other = items.get(record.other_id)
                if record.direction == "outgoing":
                    source_id, target_id = item.id, record.other_id
                    expected, missing_kind = "incoming", "missing_incoming"
                else:
                    source_id, target_id = record.other_id, item.id
                    expected, missing_kind = "outgoing", "missing_outgoing"

                if source_id == target_id:
                    problems.append(
                        LinkInconsistency(
                            kind="self_link",
                            item_id=item.id,
                            source_id=source_id,
                            target_id=target_id,
                            detail=f"{item.name or item.id} is linked to itself",
                        )
                    )
                    continue

                key = (record.direction, record.other_id)
                if counts[key] > 1 and key not in reported:
                    reported.add(key)
                    problems.append(
                        LinkInconsistency(
                            kind="duplicate",
                            item_id=item.id,
                            source_id=source_id,
                            target_id=target_id,
                            detail=f"{counts[key]} {record.direction} records for the same link",
                        )
                    )

                counterparts = [
                    candidate
                    for candidate in (other.linked_items if other else [])
                    if candidate.direction == expected and candidate.other_id == item.id
                ]
                if not counterparts:
                    problems.append(
                        LinkInconsistency(
                            kind=missing_kind,
                            item_id=item.id,
                            source_id=source_id,
                            target_id=target_id,
                            detail=f"No {expected} record on {record.other_id}",
                        )
                    )
                elif record.direction == "outgoing" and all(
                    candidate.relationship_type != record.relationship_type
                    for candidate in counterparts
                ):
                    problems.append(
                        LinkInconsistency(
                            kind="type_mismatch",
                            item_id=item.id,
                            source_id=source_id,
                            target_id=target_id,
                            detail=(
                                f"{record.relationship_type} on {source_id}, "
                                f"{counterparts[0].relationship_type} on {target_id}"
                            ),
                        )
                    )

        return problems

    def _get_feature(self, feature_id: str) -> Feature | None:
        feature = self.item_store.get_feature(feature_id)
        if feature is None or feature.timeline_items is None:
            return None
        return feature

    def _get_item(self, feature_id: str, item_id: str) -> TimelineItem | None:
        feature = self._get_feature(feature_id)
        if feature is None:
            return None
        return feature.get_item(item_id)

    def _build_index(self, feature_id: str) -> LinkIndex:
        feature = self._get_feature(feature_id)
        if feature is None:
            return LinkIndex()
        return LinkIndex.from_items(feature.timeline_items or [])

    def _commit(self, feature: Feature) -> None:
        feature.touch()
        self.item_store.update_feature(feature)
