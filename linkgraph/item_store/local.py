import json
from pathlib import Path
from typing import List

from loguru import logger

from linkgraph.domain.timeline import Feature
from linkgraph.item_store.base import ItemStore


class LocalItemStore(ItemStore):
    """Local item store that keeps features in a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalItemStore.

        Args:
            filepath: Path to the store file. If provided and exists, will auto-load.
                     If provided and doesn't exist, will save to this path when save() is called.
                     If not provided, creates empty store in memory only.
        """
        self._filepath = str(filepath) if filepath else None

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            self._features = {
                feature_id: Feature.model_validate(feature_data)
                for feature_id, feature_data in data["features"].items()
            }
            logger.debug(f"Loaded {len(self._features)} features from {self._filepath}")
        else:
            self._features = {}

    @classmethod
    def from_features(cls, features: List[Feature]) -> "LocalItemStore":
        """Create an in-memory store holding the given features."""
        instance = cls(filepath=None)
        for feature in features:
            instance.add_feature(feature)
        return instance

    def get_feature(self, feature_id: str) -> Feature | None:
        """Get a feature by its ID."""
        return self._features.get(feature_id)

    def get_feature_ids(self) -> List[str]:
        """Get all feature IDs held by the store."""
        return list(self._features.keys())

    def add_feature(self, feature: Feature) -> None:
        """Add a feature to the store, replacing any feature with the same ID."""
        self._features[feature.id] = feature

    def update_feature(self, feature: Feature) -> None:
        """Record changes made to a feature's items or links."""
        self._features[feature.id] = feature

    def save(self, filepath: str | None = None) -> None:
        """Save the store to a JSON file.

        The file is written next to its destination first and then moved into place.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )

        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "features": {
                feature_id: feature.model_dump(mode="json")
                for feature_id, feature in self._features.items()
            }
        }
        tmp_path = save_path.with_suffix(save_path.suffix + ".tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f)
        except Exception:
            tmp_path.unlink(missing_ok=True)
            raise
        tmp_path.replace(save_path)
