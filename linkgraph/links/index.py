"""Edge index over the link records of a feature's timeline items."""

from collections import deque
from typing import Iterable

from linkgraph.domain.timeline import RelationshipType, TimelineItem


class LinkIndex:
    """Edges of a feature keyed by (source_id, target_id), with adjacency maps.

    Only outgoing records are read: each edge is held once, on its source item,
    and the predecessor map is derived from the same edge map so the two
    directions cannot disagree. A pair stored with more than one relationship
    type keeps all of them, and a typed traversal follows the pair if any of
    its types match.
    """

    def __init__(self) -> None:
        self._edges: dict[tuple[str, str], list[RelationshipType]] = {}
        self._successors: dict[str, list[str]] = {}
        self._predecessors: dict[str, list[str]] = {}

    @classmethod
    def from_items(cls, items: Iterable[TimelineItem]) -> "LinkIndex":
        """Build an index from the outgoing link records of the given items."""
        index = cls()
        for item in items:
            for record in item.linked_items:
                if record.direction == "outgoing" and record.target_id:
                    index.add_edge(item.id, record.target_id, record.relationship_type)
        return index

    def add_edge(
        self, source_id: str, target_id: str, relationship_type: RelationshipType
    ) -> None:
        key = (source_id, target_id)
        if key not in self._edges:
            self._edges[key] = []
            self._successors.setdefault(source_id, []).append(target_id)
            self._predecessors.setdefault(target_id, []).append(source_id)
        if relationship_type not in self._edges[key]:
            self._edges[key].append(relationship_type)

    def edges(self) -> list[tuple[str, str, RelationshipType]]:
        """One (source, target, type) entry per relationship type of each pair."""
        return [
            (source, target, rel)
            for (source, target), rels in self._edges.items()
            for rel in rels
        ]

    def relationships(self, source_id: str, target_id: str) -> list[RelationshipType]:
        return list(self._edges.get((source_id, target_id), []))

    def successors(
        self, item_id: str, relationship_type: RelationshipType | None = None
    ) -> list[str]:
        """IDs this item links to, optionally restricted to one relationship type."""
        return [
            target_id
            for target_id in self._successors.get(item_id, [])
            if relationship_type is None or relationship_type in self._edges[(item_id, target_id)]
        ]

    def predecessors(
        self, item_id: str, relationship_type: RelationshipType | None = None
    ) -> list[str]:
        """IDs linking to this item, optionally restricted to one relationship type."""
        return [
            source_id
            for source_id in self._predecessors.get(item_id, [])
            if relationship_type is None or relationship_type in self._edges[(source_id, item_id)]
        ]

    def reaches(
        self, start_id: str, goal_id: str, relationship_type: RelationshipType = "dependency"
    ) -> bool:
        """Check whether goal is reachable from start by following edges forward.

        Breadth-first; each item is expanded at most once, so this terminates
        even when the stored graph already holds a cycle. An item always
        reaches itself.
        """
        visited: set[str] = set()
        queue = deque([start_id])

        while queue:
            current_id = queue.popleft()
            if current_id == goal_id:
                return True

            if current_id in visited:
                continue
            visited.add(current_id)

            queue.extend(self.successors(current_id, relationship_type))

        return False

    def path(
        self, start_id: str, goal_id: str, relationship_type: RelationshipType = "dependency"
    ) -> list[str]:
        """Find the shortest path of item IDs from start to goal, or [] if none."""
        if start_id == goal_id:
            return [start_id]

        visited = {start_id}
        queue = deque([(start_id, [start_id])])  # (item_id, path)

        while queue:
            current_id, path = queue.popleft()
            for next_id in self.successors(current_id, relationship_type):
                if next_id == goal_id:
                    return path + [next_id]

                if next_id not in visited:
                    visited.add(next_id)
                    queue.append((next_id, path + [next_id]))

        return []

    def cycles(self, relationship_type: RelationshipType = "dependency") -> list[list[str]]:
        """Find cycles among edges of one relationship type.

        Depth-first; every edge that leads back to an item still on the current
        path yields one cycle, listed from that item onwards. A self link is a
        cycle of one item.
        """
        on_path, done = set(), set()
        found = []

        for start_id in list(self._successors):
            if start_id in done:
                continue

            path = [start_id]
            on_path.add(start_id)
            stack = [iter(self.successors(start_id, relationship_type))]

            while stack:
                next_id = next(stack[-1], None)
                if next_id is None:
                    stack.pop()
                    finished = path.pop()
                    on_path.discard(finished)
                    done.add(finished)
                elif next_id in on_path:
                    found.append(path[path.index(next_id):])
                elif next_id not in done:
                    path.append(next_id)
                    on_path.add(next_id)
                    stack.append(iter(self.successors(next_id, relationship_type)))

        return found
