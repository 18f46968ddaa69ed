"""
Workspace session handling for CLI commands.

Every command opens the workspace persisted under the project base path,
runs against it and flushes pending state before the process exits.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, NoReturn, Optional

import typer
from rich.console import Console

from docuguard.core.exceptions import DocuGuardError
from docuguard.workspace import NotificationLevel, Workspace

console = Console()
err_console = Console(stderr=True)

BasePathOption = Annotated[
    Optional[Path],
    typer.Option("--path", "-p", help="Project base path"),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def fail(error: Exception | str) -> NoReturn:
    """Print an error and exit with status 1."""
    err_console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


def print_notifications(workspace: Workspace) -> None:
    """Print and clear the workspace's pending notifications."""
    for notification in workspace.drain_notifications():
        color = "green" if notification.level == NotificationLevel.SUCCESS else "yellow"
        console.print(f"[{color}]{notification.message}[/{color}]")


@contextmanager
def workspace_session(
    base_path: Optional[Path] = None,
    quiet: bool = False,
) -> Iterator[Workspace]:
    """Open a workspace for the duration of a command.

    Domain errors raised inside the block are reported and turned into
    exit status 1. Notifications are printed unless ``quiet`` is set.
    """
    try:
        workspace = Workspace.open(base_path)
    except DocuGuardError as e:
        fail(e)

    try:
        yield workspace
    except DocuGuardError as e:
        if not quiet:
            print_notifications(workspace)
        fail(e)
    else:
        if not quiet:
            print_notifications(workspace)
    finally:
        workspace.close()
