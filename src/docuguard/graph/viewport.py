"""Interactive viewport over the relationship graph.

The viewport is an affine map from graph space to screen space,
``screen = graph * k + (x, y)``. Panning changes only the translation;
zooming rescales around the pointer so the graph point under it stays put.
"""

from dataclasses import dataclass
from typing import Any

from docuguard.core.config import GraphConfig
from docuguard.core.exceptions import NotFoundError
from docuguard.graph.builder import GraphEdge, RelationshipGraph


@dataclass(frozen=True)
class Point:
    """A 2D point (screen or graph space)."""

    x: float
    y: float


@dataclass(frozen=True)
class Transform:
    """Translation plus uniform scale."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, point: Point) -> Point:
        """Map a graph point to screen space."""
        return Point(point.x * self.k + self.x, point.y * self.k + self.y)

    def invert(self, point: Point) -> Point:
        """Map a screen point to graph space."""
        return Point((point.x - self.x) / self.k, (point.y - self.y) / self.k)

    def to_svg(self) -> str:
        """Render as an SVG transform attribute value."""
        return f"translate({self.x}, {self.y}) scale({self.k})"

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "k": self.k}


IDENTITY = Transform()


@dataclass(frozen=True)
class Tooltip:
    """Hover tooltip anchored at a node, in graph space."""

    lines: tuple[str, ...]
    x: float
    y: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"lines": list(self.lines), "x": self.x, "y": self.y}


class ViewportController:
    """Pan, zoom and hover state for one rendered graph."""

    def __init__(
        self,
        graph: RelationshipGraph | None = None,
        config: GraphConfig | None = None,
    ) -> None:
        self._graph = graph or RelationshipGraph()
        self._config = config or GraphConfig()
        self.transform = IDENTITY
        self.hovered_node_id: str | None = None
        self.is_panning = False
        self.pan_anchor = Point(0.0, 0.0)

    @property
    def graph(self) -> RelationshipGraph:
        """Get the graph being viewed."""
        return self._graph

    @property
    def config(self) -> GraphConfig:
        """Get the zoom and layout configuration."""
        return self._config

    def set_graph(self, graph: RelationshipGraph) -> None:
        """Swap in a rebuilt graph, dropping a hover on a vanished node."""
        self._graph = graph
        if self.hovered_node_id is not None and graph.get_node(self.hovered_node_id) is None:
            self.hovered_node_id = None

    def reset(self) -> None:
        """Restore the identity transform and clear interaction state."""
        self.transform = IDENTITY
        self.is_panning = False
        self.hovered_node_id = None

    # Pan

    def begin_pan(self, pointer: Point) -> None:
        """Start a drag at the pointer position."""
        self.pan_anchor = pointer
        self.is_panning = True

    def continue_pan(self, pointer: Point) -> None:
        """Translate by the pointer movement since the last pan event."""
        if not self.is_panning:
            return
        dx = pointer.x - self.pan_anchor.x
        dy = pointer.y - self.pan_anchor.y
        t = self.transform
        self.transform = Transform(t.x + dx, t.y + dy, t.k)
        self.pan_anchor = pointer

    def end_pan(self) -> None:
        """Stop dragging."""
        self.is_panning = False

    # Zoom

    def zoom_at(self, pointer: Point, wheel_delta: float) -> Transform:
        """Zoom toward the pointer.

        A positive wheel delta zooms out, anything else zooms in. The scale
        is clamped to the configured bounds.
        """
        t = self.transform
        step = self._config.zoom_step
        new_k = t.k / step if wheel_delta > 0 else t.k * step
        new_k = min(max(self._config.min_zoom, new_k), self._config.max_zoom)

        ratio = new_k / t.k
        self.transform = Transform(
            x=pointer.x - (pointer.x - t.x) * ratio,
            y=pointer.y - (pointer.y - t.y) * ratio,
            k=new_k,
        )
        return self.transform

    # Coordinates

    def screen_to_graph(self, point: Point) -> Point:
        """Map a screen position into graph coordinates."""
        return self.transform.invert(point)

    def graph_to_screen(self, point: Point) -> Point:
        """Map a graph position onto the screen."""
        return self.transform.apply(point)

    # Hover

    def hover(self, node_id: str | None) -> None:
        """Set or clear the hovered node.

        Raises:
            NotFoundError: If the node is not in the graph.
        """
        if node_id is not None and self._graph.get_node(node_id) is None:
            raise NotFoundError(
                f"Node not found: {node_id}",
                entity="node",
                entity_id=node_id,
            )
        self.hovered_node_id = node_id

    @property
    def active_node_ids(self) -> set[str] | None:
        """Get the hovered node and its direct neighbours, or None."""
        if self.hovered_node_id is None:
            return None
        return {self.hovered_node_id} | self._graph.neighbors(self.hovered_node_id)

    def is_node_active(self, node_id: str) -> bool:
        """Check if a node is drawn at full opacity."""
        active = self.active_node_ids
        return active is None or node_id in active

    def is_edge_active(self, edge: GraphEdge) -> bool:
        """Check if an edge joins two active nodes."""
        active = self.active_node_ids
        return active is None or (edge.source in active and edge.target in active)

    @property
    def tooltip(self) -> Tooltip | None:
        """Get the tooltip for the hovered node, or None."""
        if self.hovered_node_id is None:
            return None
        node = self._graph.get_node(self.hovered_node_id)
        if node is None:
            return None
        count = self._graph.node_conflict_counts.get(node.id, 0)
        return Tooltip(
            lines=(node.label, f"Total Conflicts: {count}"),
            x=node.x,
            y=node.y,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert the interaction state to a dictionary."""
        active = self.active_node_ids
        tooltip = self.tooltip
        return {
            "transform": self.transform.to_dict(),
            "hovered_node_id": self.hovered_node_id,
            "is_panning": self.is_panning,
            "active_node_ids": sorted(active) if active is not None else None,
            "tooltip": tooltip.to_dict() if tooltip else None,
        }
