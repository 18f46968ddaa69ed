"""Document relationship graph: layout, viewport and rendering."""

from docuguard.graph.builder import (
    GraphEdge,
    GraphNode,
    GraphProjection,
    RelationshipGraph,
    build_graph,
    layout_circle,
)
from docuguard.graph.viewport import Point, Tooltip, Transform, ViewportController

__all__ = [
    "GraphEdge",
    "GraphNode",
    "GraphProjection",
    "Point",
    "RelationshipGraph",
    "Tooltip",
    "Transform",
    "ViewportController",
    "build_graph",
    "layout_circle",
]
