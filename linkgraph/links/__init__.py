"""Link graph management for timeline items: linking, queries and cycle detection."""

from linkgraph.links.errors import CyclicDependencyError, LinkGraphError
from linkgraph.links.index import LinkIndex
from linkgraph.links.manager import LinkGraphManager

__all__ = [
    "CyclicDependencyError",
    "LinkGraphError",
    "LinkGraphManager",
    "LinkIndex",
]
