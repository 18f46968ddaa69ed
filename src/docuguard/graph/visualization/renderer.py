"""
Relationship graph renderer.

Renders the document relationship graph in multiple output formats.

Output Formats:
- SVG: Static drawing of the current viewport (transform, hover dimming, tooltip)
- HTML: The SVG wrapped in a page with pan/zoom/hover wiring
- JSON: Raw graph data for custom visualization
- DOT: Graphviz format for static diagrams
- Mermaid: Mermaid syntax for markdown documentation
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from html import escape

from docuguard.core.constants import (
    DIMMED_OPACITY,
    MAX_EDGE_STROKE,
    NODE_LABEL_MAX_LENGTH,
    NODE_RADIUS,
)
from docuguard.core.exceptions import ValidationError
from docuguard.graph.builder import GraphEdge, GraphNode, RelationshipGraph
from docuguard.graph.viewport import Tooltip, ViewportController


logger = logging.getLogger(__name__)


OUTPUT_FORMATS = ("svg", "html", "json", "dot", "mermaid")

UNRESOLVED_COLOR = "#e53e3e"
RESOLVED_COLOR = "#38a169"
NODE_COLOR = "#4299e1"
NODE_STROKE = "#fff"
TOOLTIP_FILL = "rgba(26, 32, 44, 0.9)"


@dataclass(frozen=True)
class RenderConfig:
    """
    Configuration for graph rendering.

    Attributes:
        output_format: Output format (svg, html, json, dot, mermaid)
        width: Canvas width in graph units
        height: Canvas height in graph units
        include_edge_counts: Label edges with their unresolved count
        max_label_length: Labels longer than this are shortened
        layout_direction: Direction for DOT (TB, LR, BT, RL)
    """

    output_format: str = "svg"
    width: float = 800.0
    height: float = 600.0
    include_edge_counts: bool = True
    max_label_length: int = NODE_LABEL_MAX_LENGTH
    layout_direction: str = "LR"


@dataclass
class RenderResult:
    """
    Result of graph rendering.

    Attributes:
        content: Rendered output string
        format: Output format used
        node_count: Number of nodes rendered
        edge_count: Number of edges rendered
        warnings: Any warnings during rendering
    """

    content: str = ""
    format: str = "svg"
    node_count: int = 0
    edge_count: int = 0
    warnings: list[str] = field(default_factory=list)

    def save(self, path: str) -> None:
        """Save rendered content to file."""
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.content)


def shorten_label(label: str, max_length: int = NODE_LABEL_MAX_LENGTH) -> str:
    """Cut labels longer than ``max_length`` to ``max_length - 2`` chars plus '...'."""
    if len(label) > max_length:
        return label[:max_length - 2] + "..."
    return label


def edge_stroke_width(edge: GraphEdge, scale: float) -> float:
    """Get the on-screen stroke width, constant under zoom."""
    return min(1 + edge.unresolved_conflict_count, MAX_EDGE_STROKE) / scale


def edge_color(edge: GraphEdge) -> str:
    return UNRESOLVED_COLOR if edge.has_unresolved else RESOLVED_COLOR


def script_json(data: object) -> str:
    """Serialize data for embedding inside an HTML <script> element."""
    return (
        json.dumps(data)
        .replace("&", "\\u0026")
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
    )

class GraphRenderer:
    """
    Renders relationship graph visualizations.

    Example:
        renderer = GraphRenderer(viewport)
        result = renderer.render(RenderConfig(output_format="html"))
        result.save("graph.html")
    """

    def __init__(
        self,
        viewport: ViewportController,
        config: RenderConfig | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            viewport: Viewport holding the graph and interaction state
            config: Render configuration
        """
        self._viewport = viewport
        self._config = config or RenderConfig()

    @property
    def config(self) -> RenderConfig:
        """Return current configuration."""
        return self._config

    def render(self, config: RenderConfig | None = None) -> RenderResult:
        """
        Render the graph in the configured format.

        Args:
            config: Optional override configuration

        Returns:
            RenderResult with formatted output

        Raises:
            ValidationError: If the output format is unknown
        """
        cfg = config or self._config
        graph = self._viewport.graph

        if cfg.output_format == "json":
            return self._render_json(graph, cfg)
        elif cfg.output_format == "dot":
            return self._render_dot(graph, cfg)
        elif cfg.output_format == "mermaid":
            return self._render_mermaid(graph, cfg)
        elif cfg.output_format == "svg":
            return self._render_svg(graph, cfg)
        elif cfg.output_format == "html":
            return self._render_html(graph, cfg)
        raise ValidationError(
            f"Unknown output format: {cfg.output_format}",
            field="output_format",
            details={"supported": ", ".join(OUTPUT_FORMATS)},
        )

    def _render_svg(self, graph: RelationshipGraph, config: RenderConfig) -> RenderResult:
        """Render the current viewport as an SVG document."""
        viewport = self._viewport
        k = viewport.transform.k
        node_map = {n.id: n for n in graph.nodes}
        warnings: list[str] = []

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="100%" height="{config.height:g}" '
            f'viewBox="0 0 {config.width:g} {config.height:g}">',
            f'<g id="viewport" transform="{viewport.transform.to_svg()}">',
        ]

        for edge in graph.edges:
            source = node_map.get(edge.source)
            target = node_map.get(edge.target)
            if source is None or target is None:
                warnings.append(f"Edge {edge.source}-{edge.target} references a missing node")
                continue
            parts.append(self._svg_edge(edge, source, target, k, config))

        for node in graph.nodes:
            parts.append(self._svg_node(node, k, config))

        tooltip = viewport.tooltip
        if tooltip is not None:
            parts.append(self._svg_tooltip(tooltip, k))

        parts.append("</g>")
        parts.append("</svg>")

        for warning in warnings:
            logger.warning(warning)

        return RenderResult(
            content="\n".join(parts),
            format="svg",
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
            warnings=warnings,
        )

    def _opacity(self, active: bool) -> float:
        if self._viewport.hovered_node_id is not None and not active:
            return DIMMED_OPACITY
        return 1.0

    def _svg_edge(
        self,
        edge: GraphEdge,
        source: GraphNode,
        target: GraphNode,
        k: float,
        config: RenderConfig,
    ) -> str:
        opacity = self._opacity(self._viewport.is_edge_active(edge))
        lines = [
            f'<g class="edge" data-source="{escape(edge.source)}" '
            f'data-target="{escape(edge.target)}" opacity="{opacity:g}">',
            f'<line x1="{source.x:.2f}" y1="{source.y:.2f}" '
            f'x2="{target.x:.2f}" y2="{target.y:.2f}" '
            f'stroke="{edge_color(edge)}" stroke-width="{edge_stroke_width(edge, k):.4g}"/>',
        ]
        if config.include_edge_counts and edge.has_unresolved:
            mid_x = (source.x + target.x) / 2
            mid_y = (source.y + target.y) / 2
            lines.append(
                f'<text x="{mid_x:.2f}" y="{mid_y:.2f}" dy="{-8 / k:.4g}" fill="#fff" '
                f'font-size="{12 / k:.4g}" font-weight="bold" text-anchor="middle">'
                f"{edge.unresolved_conflict_count}</text>"
            )
        lines.append("</g>")
        return "\n".join(lines)

    def _svg_node(self, node: GraphNode, k: float, config: RenderConfig) -> str:
        opacity = self._opacity(self._viewport.is_node_active(node.id))
        label = escape(shorten_label(node.label, config.max_label_length))
        return "\n".join([
            f'<g class="node" data-id="{escape(node.id)}" '
            f'transform="translate({node.x:.2f},{node.y:.2f})" opacity="{opacity:g}">',
            f'<circle r="{NODE_RADIUS:g}" fill="{NODE_COLOR}" stroke="{NODE_STROKE}" '
            f'stroke-width="{3 / k:.4g}"/>',
            f'<text y="4" fill="white" font-size="10" text-anchor="middle">{label}</text>',
            "</g>",
        ])

    def _svg_tooltip(self, tooltip: Tooltip, k: float) -> str:
        padding = 8 / k
        char_width = 7 / k
        line_height = 16 / k
        box_width = max(len(line) for line in tooltip.lines) * char_width + 2 * padding
        box_height = len(tooltip.lines) * line_height + padding * 1.5
        offset_x = 45 / k

        parts = [
            f'<g class="tooltip" transform="translate({tooltip.x + offset_x:.2f}, {tooltip.y:.2f})">',
            f'<rect x="0" y="{-box_height / 2:.4g}" width="{box_width:.4g}" '
            f'height="{box_height:.4g}" rx="{5 / k:.4g}" ry="{5 / k:.4g}" '
            f'fill="{TOOLTIP_FILL}" stroke="{NODE_COLOR}" stroke-width="{1.5 / k:.4g}"/>',
        ]
        for i, line in enumerate(tooltip.lines):
            y = -box_height / 2 + padding / 2 + i * line_height + line_height / 2
            parts.append(
                f'<text x="{padding:.4g}" y="{y:.4g}" fill="white" font-size="{12 / k:.4g}" '
                f'dominant-baseline="middle">{escape(line)}</text>'
            )
        parts.append("</g>")
        return "\n".join(parts)

    def _render_html(self, graph: RelationshipGraph, config: RenderConfig) -> RenderResult:
        """Render as an HTML page with pan, zoom and hover."""
        svg = self._render_svg(graph, config)
        graph_json = script_json(graph.to_dict())
        transform_json = script_json(self._viewport.transform.to_dict())

        html = f'''<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>DocuGuard Conflict Graph</title>
    <style>
        body {{ margin: 0; font-family: sans-serif; background: #1a202c; color: #cbd5e0; }}
        #info {{ padding: 10px; }}
        #canvas {{ cursor: grab; }}
        #canvas.panning {{ cursor: grabbing; }}
        .node {{ cursor: pointer; transition: opacity 0.3s; }}
        .edge {{ transition: opacity 0.3s; }}
        #legend {{ padding: 10px; display: flex; gap: 20px; }}
        .legend-item {{ display: flex; align-items: center; gap: 5px; }}
        .legend-color {{ width: 16px; height: 4px; border-radius: 2px; }}
    </style>
</head>
<body>
    <div id="info">
        <strong>Document Conflict Graph</strong> |
        Documents: {len(graph.nodes)} | Edges: {len(graph.edges)} |
        Generated: {datetime.now(timezone.utc).isoformat()}
    </div>
    <div id="canvas">
{svg.content}
    </div>
    <div id="legend">
        <span class="legend-item"><span class="legend-color" style="background:{RESOLVED_COLOR}"></span>No Unresolved Conflicts</span>
        <span class="legend-item"><span class="legend-color" style="background:{UNRESOLVED_COLOR}"></span>Has Unresolved Conflicts</span>
    </div>
    <script>
        const graph = {graph_json};
        const t = {transform_json};
        const svg = document.querySelector("#canvas svg");
        const root = document.getElementById("viewport");
        let panning = false, anchor = null;

        function apply() {{
            root.setAttribute("transform", `translate(${{t.x}}, ${{t.y}}) scale(${{t.k}})`);
        }}
        function toSvg(e) {{
            const p = svg.createSVGPoint();
            p.x = e.clientX; p.y = e.clientY;
            const ctm = svg.getScreenCTM();
            return ctm ? p.matrixTransform(ctm.inverse()) : null;
        }}
        svg.addEventListener("mousedown", e => {{
            e.preventDefault(); panning = true; anchor = {{x: e.clientX, y: e.clientY}};
            svg.parentNode.classList.add("panning");
        }});
        svg.addEventListener("mousemove", e => {{
            if (!panning) return;
            t.x += e.clientX - anchor.x; t.y += e.clientY - anchor.y;
            anchor = {{x: e.clientX, y: e.clientY}}; apply();
        }});
        const stop = () => {{ panning = false; svg.parentNode.classList.remove("panning"); }};
        svg.addEventListener("mouseup", stop);
        svg.addEventListener("mouseleave", stop);
        svg.addEventListener("wheel", e => {{
            e.preventDefault();
            const p = toSvg(e);
            if (!p) return;
            const k = Math.min(Math.max({self._viewport_min_zoom}, e.deltaY > 0 ? t.k / {self._viewport_zoom_step} : t.k * {self._viewport_zoom_step}), {self._viewport_max_zoom});
            t.x = p.x - (p.x - t.x) * (k / t.k);
            t.y = p.y - (p.y - t.y) * (k / t.k);
            t.k = k; apply();
        }});
        document.querySelectorAll(".node").forEach(el => {{
            const id = el.dataset.id;
            el.addEventListener("mouseenter", () => {{
                const active = new Set([id]);
                graph.edges.forEach(edge => {{
                    if (edge.source === id) active.add(edge.target);
                    if (edge.target === id) active.add(edge.source);
                }});
                document.querySelectorAll(".node").forEach(n =>
                    n.setAttribute("opacity", active.has(n.dataset.id) ? 1 : {DIMMED_OPACITY}));
                document.querySelectorAll(".edge").forEach(g =>
                    g.setAttribute("opacity", active.has(g.dataset.source) && active.has(g.dataset.target) ? 1 : {DIMMED_OPACITY}));
            }});
            el.addEventListener("mouseleave", () => {{
                document.querySelectorAll(".node, .edge").forEach(n => n.setAttribute("opacity", 1));
            }});
        }});
    </script>
</body>
</html>'''

        return RenderResult(
            content=html,
            format="html",
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
            warnings=svg.warnings,
        )

    @property
    def _viewport_zoom_step(self) -> float:
        return self._viewport.config.zoom_step

    @property
    def _viewport_min_zoom(self) -> float:
        return self._viewport.config.min_zoom

    @property
    def _viewport_max_zoom(self) -> float:
        return self._viewport.config.max_zoom

    def _render_json(self, graph: RelationshipGraph, config: RenderConfig) -> RenderResult:
        """Render as JSON data."""
        data = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "node_count": len(graph.nodes),
            "edge_count": len(graph.edges),
            **graph.to_dict(),
            "viewport": self._viewport.to_dict(),
        }

        return RenderResult(
            content=json.dumps(data, indent=2),
            format="json",
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
        )

    def _render_dot(self, graph: RelationshipGraph, config: RenderConfig) -> RenderResult:
        """Render as Graphviz DOT format (undirected)."""
        lines = [
            "graph ConflictGraph {",
            f"    rankdir={config.layout_direction};",
            f'    node [shape=circle, style=filled, fillcolor="{NODE_COLOR}", fontcolor=white];',
            "",
        ]

        for node in graph.nodes:
            label = shorten_label(node.label, config.max_label_length).replace('"', '\\"')
            count = graph.node_conflict_counts.get(node.id, 0)
            lines.append(
                f'    "{node.id}" [label="{label}", tooltip="Total Conflicts: {count}"];'
            )

        lines.append("")

        for edge in graph.edges:
            label_attr = (
                f', label="{edge.unresolved_conflict_count}"'
                if config.include_edge_counts and edge.has_unresolved
                else ""
            )
            width = min(1 + edge.unresolved_conflict_count, MAX_EDGE_STROKE)
            lines.append(
                f'    "{edge.source}" -- "{edge.target}" '
                f'[color="{edge_color(edge)}", penwidth={width:g}{label_attr}];'
            )

        lines.append("}")

        return RenderResult(
            content="\n".join(lines),
            format="dot",
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
        )

    def _render_mermaid(self, graph: RelationshipGraph, config: RenderConfig) -> RenderResult:
        """Render as Mermaid diagram syntax."""
        direction = {"TB": "TD", "LR": "LR", "BT": "BT", "RL": "RL"}.get(
            config.layout_direction, "LR"
        )

        lines = [f"graph {direction}"]
        ids = {node.id: _mermaid_id(node.id) for node in graph.nodes}

        for node in graph.nodes:
            label = shorten_label(node.label, config.max_label_length).replace('"', "'")
            lines.append(f'    {ids[node.id]}(("{label}"))')

        styles = []
        for index, edge in enumerate(graph.edges):
            source = ids.get(edge.source, _mermaid_id(edge.source))
            target = ids.get(edge.target, _mermaid_id(edge.target))
            if config.include_edge_counts and edge.has_unresolved:
                lines.append(f"    {source} ---|{edge.unresolved_conflict_count}| {target}")
            else:
                lines.append(f"    {source} --- {target}")
            styles.append(f"    linkStyle {index} stroke:{edge_color(edge)}")

        lines.extend(styles)

        return RenderResult(
            content="\n".join(lines),
            format="mermaid",
            node_count=len(graph.nodes),
            edge_count=len(graph.edges),
        )


def _mermaid_id(node_id: str) -> str:
    return "n_" + "".join(ch if ch.isalnum() else "_" for ch in node_id)
