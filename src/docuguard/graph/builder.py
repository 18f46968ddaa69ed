"""Relationship graph construction.

This module derives the document relationship graph from the store state:
one node per document on a fixed circle, one edge per unordered document
pair that has at least one conflict. The build is a pure function;
``GraphProjection`` memoizes it against the store's version counter.
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Sequence

from docuguard.core.config import GraphConfig
from docuguard.models.conflict import Conflict, ConflictStatus, pair_key
from docuguard.models.document import Document

if TYPE_CHECKING:
    from docuguard.conflicts.store import ConflictRecordStore


@dataclass(frozen=True)
class GraphNode:
    """A document placed in graph space."""

    id: str
    label: str
    x: float
    y: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "label": self.label, "x": self.x, "y": self.y}


@dataclass
class GraphEdge:
    """Aggregate of all conflicts between two documents.

    ``source``/``target`` keep the order of the first conflict seen for the
    pair; lookups are order-insensitive via ``key``.
    """

    source: str
    target: str
    unresolved_conflict_count: int = 0

    @property
    def key(self) -> tuple[str, str]:
        """Get the canonical unordered pair key."""
        return pair_key(self.source, self.target)

    @property
    def has_unresolved(self) -> bool:
        """Check whether any conflict of the pair is still unresolved."""
        return self.unresolved_conflict_count > 0

    def connects(self, node_id: str) -> bool:
        """Check whether the edge touches a node."""
        return node_id in (self.source, self.target)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "target": self.target,
            "unresolved_conflict_count": self.unresolved_conflict_count,
        }


@dataclass
class RelationshipGraph:
    """Nodes, aggregated edges and per-document conflict totals."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)
    node_conflict_counts: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """Check whether the graph has no nodes."""
        return not self.nodes

    def get_node(self, node_id: str) -> GraphNode | None:
        """Get a node by ID, or None if not found."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edge_between(self, first_id: str, second_id: str) -> GraphEdge | None:
        """Get the edge of an unordered pair, or None."""
        key = pair_key(first_id, second_id)
        for edge in self.edges:
            if edge.key == key:
                return edge
        return None

    def neighbors(self, node_id: str) -> set[str]:
        """Get the ids of nodes one edge away from a node."""
        result = set()
        for edge in self.edges:
            if edge.source == node_id:
                result.add(edge.target)
            elif edge.target == node_id:
                result.add(edge.source)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "node_conflict_counts": dict(self.node_conflict_counts),
        }


def layout_circle(count: int, config: GraphConfig) -> list[tuple[float, float]]:
    """Get positions of ``count`` nodes on the layout circle.

    The first node sits at the top; the rest follow clockwise (screen y grows
    downward).
    """
    if count == 0:
        return []
    center_x, center_y = config.center
    step = 2 * math.pi / count
    return [
        (
            center_x + config.radius * math.cos(i * step - math.pi / 2),
            center_y + config.radius * math.sin(i * step - math.pi / 2),
        )
        for i in range(count)
    ]


def build_graph(
    documents: Sequence[Document],
    conflicts: Iterable[Conflict],
    config: GraphConfig | None = None,
) -> RelationshipGraph:
    """Build the relationship graph.

    Args:
        documents: Documents in store order (determines layout order).
        conflicts: All conflicts regardless of status.
        config: Layout configuration.

    Returns:
        The derived graph. No documents yields an empty graph.
    """
    if not documents:
        return RelationshipGraph()

    config = config or GraphConfig()
    conflict_list = list(conflicts)

    nodes = [
        GraphNode(id=doc.id, label=doc.title, x=x, y=y)
        for doc, (x, y) in zip(documents, layout_circle(len(documents), config))
    ]

    edge_map: dict[tuple[str, str], GraphEdge] = {}
    for conflict in conflict_list:
        key = conflict.pair_key
        if key not in edge_map:
            source, target = conflict.document_ids
            edge_map[key] = GraphEdge(source=source, target=target)
        if conflict.status is ConflictStatus.UNRESOLVED:
            edge_map[key].unresolved_conflict_count += 1

    node_conflict_counts = {
        doc.id: sum(1 for c in conflict_list if c.involves(doc.id))
        for doc in documents
    }

    return RelationshipGraph(
        nodes=nodes,
        edges=list(edge_map.values()),
        node_conflict_counts=node_conflict_counts,
    )


class GraphProjection:
    """Memoized ``build_graph`` over a store, keyed by its version counter."""

    def __init__(self, store: "ConflictRecordStore", config: GraphConfig | None = None) -> None:
        self._store = store
        self._config = config or GraphConfig()
        self._cached: RelationshipGraph | None = None
        self._cached_version: int | None = None

    def get(self) -> RelationshipGraph:
        """Get the graph for the store's current state."""
        version = self._store.version
        if self._cached is None or self._cached_version != version:
            documents, conflicts, _ = self._store.dump()
            self._cached = build_graph(documents, conflicts, self._config)
            self._cached_version = version
        return self._cached
