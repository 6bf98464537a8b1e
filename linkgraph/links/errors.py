class LinkGraphError(Exception):
    """Base class for link graph errors."""


class CyclicDependencyError(LinkGraphError):
    """Raised when a dependency link would close a cycle.

    Attributes:
        source_id: Source of the rejected link
        target_id: Target of the rejected link
        path: Existing dependency path from target back to source
    """

    def __init__(self, source_id: str, target_id: str, path: list[str]) -> None:
        self.source_id = source_id
        self.target_id = target_id
        self.path = path
        chain = " -> ".join(path) if path else target_id
        super().__init__(
            f"Linking {source_id} -> {target_id} would create a circular dependency "
            f"(existing path: {chain})"
        )
