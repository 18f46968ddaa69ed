"""CLI commands for stored documents."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.table import Table

from docuguard.cli.utils import BasePathOption, JsonOption, fail, workspace_session
from docuguard.cli.utils.session import console


app = typer.Typer(
    name="documents",
    help="Inspect and edit ingested documents.",
    no_args_is_help=True,
)


@app.command("list")
def list_documents(
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """List ingested documents with their unresolved conflict counts."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        documents = workspace.store.documents
        counts = workspace.graph().node_conflict_counts

        if json_output:
            typer.echo(json.dumps([
                {"id": d.id, "title": d.title, "length": len(d.content), "conflicts": counts.get(d.id, 0)}
                for d in documents
            ], indent=2))
            return

        if not documents:
            console.print("[dim]No documents yet. Run 'docuguard analyze' first.[/dim]")
            return

        table = Table(title="Documents")
        table.add_column("ID", style="cyan")
        table.add_column("Title")
        table.add_column("Chars", justify="right")
        table.add_column("Unresolved", justify="right")
        for document in documents:
            unresolved = counts.get(document.id, 0)
            table.add_row(
                document.id,
                document.title,
                str(len(document.content)),
                f"[red]{unresolved}[/red]" if unresolved else "0",
            )
        console.print(table)


@app.command("show")
def show_document(
    document_id: Annotated[str, typer.Argument(help="Document ID")],
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Print a document's content."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        document = workspace.store.require_document(document_id)

        if json_output:
            typer.echo(json.dumps(document.to_dict(), indent=2))
            return

        console.print(f"[bold]{document.title}[/bold] ({document.id})")
        console.print("-" * 30)
        typer.echo(document.content)


@app.command("save")
def save_document(
    document_id: Annotated[str, typer.Argument(help="Document ID")],
    file: Annotated[
        Optional[Path],
        typer.Option("--file", "-f", help="Read the new content from a file"),
    ] = None,
    content: Annotated[
        Optional[str],
        typer.Option("--content", "-c", help="New content"),
    ] = None,
    base_path: BasePathOption = None,
) -> None:
    """Replace a document's content.

    Existing conflicts are kept; run 'docuguard analyze-pair' to re-check.
    """
    if (file is None) == (content is None):
        fail("Provide exactly one of --file or --content")

    if file is not None:
        try:
            content = file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            fail(f"Cannot read {file}: {e}")

    with workspace_session(base_path) as workspace:
        document = workspace.save_document(document_id, content)
        console.print(f"{document.title}: {len(document.content)} chars")
