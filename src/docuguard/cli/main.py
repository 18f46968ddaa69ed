"""Main CLI entrypoint for DocuGuard."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from docuguard.cli.conflicts import app as conflicts_app
from docuguard.cli.documents import app as documents_app
from docuguard.cli.graph import app as graph_app
from docuguard.cli.profile import app as profile_app
from docuguard.cli.utils import BasePathOption, JsonOption, fail, workspace_session
from docuguard.cli.utils.session import console
from docuguard.conflicts.orchestrator import AnalysisRun
from docuguard.core.constants import DEFAULT_HOST, DEFAULT_PORT, get_docuguard_root

# Create main app
app = typer.Typer(
    name="docuguard",
    help="DocuGuard - find and track contradictions between documents",
    no_args_is_help=True,
)

app.add_typer(conflicts_app, name="conflicts")
app.add_typer(documents_app, name="documents")
app.add_typer(graph_app, name="graph")
app.add_typer(profile_app, name="profile")

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@app.callback()
def main(
    log_level: Annotated[
        str, typer.Option("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    ] = "WARNING",
) -> None:
    """DocuGuard - find and track contradictions between documents."""
    log_level_upper = log_level.upper()
    if log_level_upper not in VALID_LOG_LEVELS:
        fail(f"Invalid log level '{log_level}'. Valid levels: {', '.join(VALID_LOG_LEVELS)}")

    logging.basicConfig(
        level=getattr(logging, log_level_upper),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _print_run(run: AnalysisRun) -> None:
    console.print(f"[bold]Analysis {run.mode}[/bold] ({run.duration_ms:.1f}ms)")
    console.print(f"Documents ingested: {run.documents_ingested}")
    console.print(f"Pairs analyzed:     {run.pairs_analyzed}")
    console.print(f"Conflicts found:    {run.conflicts_created}")
    if run.conflicts_replaced:
        console.print(f"Stale replaced:     {run.conflicts_replaced}")


@app.command("status")
def status_command(
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show dashboard numbers and conflict statistics."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        dashboard = workspace.dashboard()
        stats = workspace.store.get_stats()

        if json_output:
            typer.echo(json.dumps({
                "dashboard": dashboard.to_dict(),
                "stats": stats.to_dict(),
            }, indent=2))
            return

        console.print("[bold]DocuGuard Status[/bold]")
        console.print("-" * 30)
        console.print(f"Workspace:            {get_docuguard_root(base_path)}")
        console.print(f"Documents processed:  {dashboard.documents_processed}")
        console.print(f"Reports generated:    {dashboard.reports_generated}")
        console.print(f"Unresolved conflicts: [red]{dashboard.unresolved_conflicts}[/red]")
        console.print(
            f"Conflicts:            {stats.total} total, "
            f"{stats.resolved} resolved, {stats.ignored} ignored"
        )
        for severity, count in stats.by_severity.items():
            console.print(f"  {severity}: {count}")


@app.command("history")
def history_command(
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum events to show")] = 20,
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the activity log, newest first."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        events = workspace.store.history[:limit]

        if json_output:
            typer.echo(json.dumps([e.to_dict() for e in events], indent=2))
            return

        if not events:
            console.print("[dim]No recent activity.[/dim]")
            return

        table = Table(title="Recent Activity")
        table.add_column("Time", style="dim")
        table.add_column("Event")
        table.add_column("Details")
        for event in events:
            table.add_row(
                event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                event.type.value,
                event.details,
            )
        console.print(table)


@app.command("analyze")
def analyze_command(
    files: Annotated[list[Path], typer.Argument(help="Plain-text files to analyze")],
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Ingest text files and analyze them against each other and the workspace."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        run = asyncio.run(workspace.analyze_files(files))

        if json_output:
            typer.echo(json.dumps(run.to_dict(), indent=2))
            return
        _print_run(run)


@app.command("analyze-pair")
def analyze_pair_command(
    first_id: Annotated[str, typer.Argument(help="First document ID")],
    second_id: Annotated[str, typer.Argument(help="Second document ID")],
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Re-analyze one pair of stored documents."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        run = asyncio.run(workspace.analyze_pair(first_id, second_id))

        if json_output:
            typer.echo(json.dumps(run.to_dict(), indent=2))
            return
        _print_run(run)


@app.command("serve")
def serve_command(
    host: Annotated[str, typer.Option("--host", help="Host to bind to")] = DEFAULT_HOST,
    port: Annotated[int, typer.Option("--port", help="Port to listen on")] = DEFAULT_PORT,
    base_path: BasePathOption = None,
    log_level: Annotated[str, typer.Option("--server-log-level", help="Uvicorn log level")] = "info",
) -> None:
    """Run the HTTP API server in the foreground."""
    from docuguard.daemon.server import run_server

    console.print(f"[green]Serving DocuGuard on http://{host}:{port}[/green]")
    try:
        run_server(host=host, port=port, base_path=base_path, log_level=log_level)
    except KeyboardInterrupt:
        console.print("Server stopped")


if __name__ == "__main__":
    app()
