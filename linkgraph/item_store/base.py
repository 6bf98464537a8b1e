from typing import List, Protocol

from linkgraph.domain.timeline import Feature


class ItemStore(Protocol):
    """Protocol for stores that own features and their timeline items."""

    def get_feature(self, feature_id: str) -> Feature | None:
        """Get a feature by its ID."""
        ...

    def get_feature_ids(self) -> List[str]:
        """Get all feature IDs held by the store."""
        ...

    def add_feature(self, feature: Feature) -> None:
        """Add a feature to the store."""
        ...

    def update_feature(self, feature: Feature) -> None:
        """Record changes made to a feature's items or links."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the store to disk."""
        ...
