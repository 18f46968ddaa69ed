"""CLI commands for the document relationship graph.

This module provides the `docuguard graph` command group with subcommands for:
- show: List nodes and edges with their unresolved conflict counts
- render: Render the graph as SVG, HTML, JSON, DOT or Mermaid
"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from docuguard.cli.utils import BasePathOption, JsonOption, fail, workspace_session
from docuguard.cli.utils.session import console
from docuguard.graph.viewport import Point, ViewportController
from docuguard.graph.visualization.renderer import OUTPUT_FORMATS, GraphRenderer, RenderConfig


app = typer.Typer(
    name="graph",
    help="Document relationship graph.",
    no_args_is_help=True,
)


@app.command("show")
def show_graph(
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """List graph nodes and edges."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        graph = workspace.graph()

        if json_output:
            typer.echo(json.dumps(graph.to_dict(), indent=2))
            return

        if graph.is_empty:
            console.print("[dim]Graph is empty. Analyze some documents first.[/dim]")
            return

        node_table = Table(title=f"Documents ({len(graph.nodes)})")
        node_table.add_column("ID", style="cyan")
        node_table.add_column("Title")
        node_table.add_column("Unresolved", justify="right")
        for node in graph.nodes:
            node_table.add_row(node.id, node.label, str(graph.node_conflict_counts.get(node.id, 0)))
        console.print(node_table)

        if not graph.edges:
            console.print("[dim]No conflicts between documents.[/dim]")
            return

        titles = {node.id: node.label for node in graph.nodes}
        edge_table = Table(title=f"Relationships ({len(graph.edges)})")
        edge_table.add_column("Source")
        edge_table.add_column("Target")
        edge_table.add_column("Unresolved", justify="right")
        for edge in graph.edges:
            count = edge.unresolved_conflict_count
            edge_table.add_row(
                titles[edge.source],
                titles[edge.target],
                f"[red]{count}[/red]" if count else "[green]0[/green]",
            )
        console.print(edge_table)


@app.command("render")
def render_graph(
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help=f"Output format: {', '.join(OUTPUT_FORMATS)}"),
    ] = "svg",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file (stdout when omitted)"),
    ] = None,
    hover: Annotated[
        Optional[str],
        typer.Option("--hover", help="Document ID to highlight with its neighbours"),
    ] = None,
    zoom: Annotated[
        int,
        typer.Option("--zoom", help="Zoom steps at the canvas centre (negative zooms out)"),
    ] = 0,
    base_path: BasePathOption = None,
) -> None:
    """Render the relationship graph."""
    if output_format not in OUTPUT_FORMATS:
        fail(f"Invalid format '{output_format}'. Valid formats: {', '.join(OUTPUT_FORMATS)}")

    with workspace_session(base_path, quiet=output is None) as workspace:
        graph_config = workspace.config.graph
        viewport = ViewportController(workspace.graph(), graph_config)
        viewport.hover(hover)

        center = Point(*graph_config.center)
        for _ in range(abs(zoom)):
            viewport.zoom_at(center, -1 if zoom > 0 else 1)

        result = GraphRenderer(
            viewport,
            RenderConfig(
                output_format=output_format,
                width=graph_config.width,
                height=graph_config.height,
            ),
        ).render()

        if output is None:
            typer.echo(result.content)
            return

        result.save(str(output))
        console.print(
            f"[green]Rendered {result.node_count} nodes, {result.edge_count} edges "
            f"to {output}[/green]"
        )
        for warning in result.warnings:
            console.print(f"[yellow]{warning}[/yellow]")
