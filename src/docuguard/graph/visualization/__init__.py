"""Graph visualization output formats."""

from docuguard.graph.visualization.renderer import (
    OUTPUT_FORMATS,
    GraphRenderer,
    RenderConfig,
    RenderResult,
)

__all__ = ["OUTPUT_FORMATS", "GraphRenderer", "RenderConfig", "RenderResult"]
