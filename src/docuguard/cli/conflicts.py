"""CLI commands for the conflict inbox, resolution and reports."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.panel import Panel
from rich.table import Table

from docuguard.cli.utils import BasePathOption, JsonOption, fail, workspace_session
from docuguard.cli.utils.session import console
from docuguard.conflicts.inbox import ConflictFilter
from docuguard.models.conflict import Conflict, ConflictStatus, Severity


app = typer.Typer(
    name="conflicts",
    help="Conflict inbox, resolution and report commands.",
    no_args_is_help=True,
)

StatusOption = Annotated[
    str,
    typer.Option("--status", help="Status filter: unresolved, resolved, ignored or All"),
]
SeverityOption = Annotated[
    str,
    typer.Option("--severity", help="Severity filter: High, Medium, Low or All"),
]
SortOption = Annotated[
    str,
    typer.Option("--sort", help="Sort order: severity-desc or severity-asc"),
]

SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}

STATUS_COLORS = {
    ConflictStatus.UNRESOLVED: "red",
    ConflictStatus.RESOLVED: "green",
    ConflictStatus.IGNORED: "dim",
}


def _build_filter(status: str, severity: str, sort: str) -> ConflictFilter:
    try:
        return ConflictFilter.parse(status=status, severity=severity, sort=sort)
    except ValueError as e:
        fail(f"Invalid filter: {e}")


def _severity_text(severity: Severity) -> str:
    color = SEVERITY_COLORS[severity]
    return f"[{color}]{severity.value}[/{color}]"


def _status_text(status: ConflictStatus) -> str:
    color = STATUS_COLORS[status]
    return f"[{color}]{status.value}[/{color}]"


@app.command("list")
def list_conflicts(
    status: StatusOption = ConflictStatus.UNRESOLVED.value,
    severity: SeverityOption = "All",
    sort: SortOption = "severity-desc",
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """List conflicts in the inbox."""
    conflict_filter = _build_filter(status, severity, sort)

    with workspace_session(base_path, quiet=json_output) as workspace:
        conflicts = workspace.list_conflicts(conflict_filter)

        if json_output:
            typer.echo(json.dumps([c.to_dict() for c in conflicts], indent=2))
            return

        if not conflicts:
            console.print("[green]No conflicts found.[/green]")
            return

        status_label, severity_label = conflict_filter.describe()
        table = Table(title=f"Conflicts (Status: {status_label}, Severity: {severity_label})")
        table.add_column("ID", style="cyan")
        table.add_column("Documents")
        table.add_column("Severity")
        table.add_column("Status")
        table.add_column("Explanation")

        for conflict in conflicts:
            table.add_row(
                conflict.id,
                f"{conflict.document_titles[0]} vs {conflict.document_titles[1]}",
                _severity_text(conflict.severity),
                _status_text(conflict.status),
                conflict.explanation,
            )
        console.print(table)
        console.print(f"\n{len(conflicts)} conflict(s)")


def _print_conflict(conflict: Conflict) -> None:
    console.print(Panel(
        conflict.explanation,
        title=f"Conflict {conflict.id}",
        subtitle=f"{conflict.severity.value} / {conflict.status.value}",
    ))
    for index in (0, 1):
        console.print(f"[bold]{conflict.document_titles[index]}[/bold] ({conflict.document_ids[index]})")
        console.print(f"  \"{conflict.excerpts[index]}\"")
    if conflict.resolution is not None:
        console.print(f"Resolution: {conflict.resolution.value}")


@app.command("show")
def show_conflict(
    conflict_id: Annotated[str, typer.Argument(help="Conflict ID")],
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show a conflict with both excerpts."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        conflict = workspace.store.get(conflict_id)
        if conflict is None:
            fail(f"Conflict not found: {conflict_id}")

        if json_output:
            typer.echo(json.dumps(conflict.to_dict(), indent=2))
            return
        _print_conflict(conflict)


@app.command("resolve")
def resolve_conflict(
    conflict_id: Annotated[str, typer.Argument(help="Conflict ID")],
    resolution: Annotated[
        str, typer.Argument(help="Resolution: accept_doc1, accept_doc2 or ignore")
    ],
    base_path: BasePathOption = None,
) -> None:
    """Resolve a conflict."""
    with workspace_session(base_path) as workspace:
        conflict = workspace.resolve_conflict(conflict_id, resolution)
        console.print(
            f"Conflict {conflict.id}: {_status_text(conflict.status)} "
            f"({conflict.resolution.value})"
        )


@app.command("report")
def export_report(
    status: StatusOption = ConflictStatus.UNRESOLVED.value,
    severity: SeverityOption = "All",
    sort: SortOption = "severity-desc",
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Directory to write the report to"),
    ] = None,
    base_path: BasePathOption = None,
) -> None:
    """Export the filtered conflicts as a text report."""
    conflict_filter = _build_filter(status, severity, sort)

    with workspace_session(base_path) as workspace:
        report, path = workspace.generate_report(conflict_filter, output_dir)
        console.print(f"[green]Wrote {report.conflict_count} conflict(s) to {path}[/green]")
