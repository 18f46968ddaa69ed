"""CLI commands for the user profile."""

import json
from typing import Annotated, Any, Optional

import typer

from docuguard.cli.utils import BasePathOption, JsonOption, fail, workspace_session
from docuguard.cli.utils.session import console


app = typer.Typer(
    name="profile",
    help="View and update the user profile.",
    no_args_is_help=True,
)


@app.command("show")
def show_profile(
    base_path: BasePathOption = None,
    json_output: JsonOption = False,
) -> None:
    """Show the user profile."""
    with workspace_session(base_path, quiet=json_output) as workspace:
        profile = workspace.profile

        if json_output:
            typer.echo(json.dumps(profile.to_dict(), indent=2))
            return

        notifications = "on" if profile.notifications_enabled else "off"
        console.print(f"Name:          {profile.name}")
        console.print(f"Email:         {profile.email or '-'}")
        console.print(f"Phone:         {profile.phone or '-'}")
        console.print(f"Notifications: {notifications}")
        console.print(f"Theme:         {profile.theme.value}")


@app.command("set")
def set_profile(
    name: Annotated[Optional[str], typer.Option("--name", help="Display name")] = None,
    email: Annotated[Optional[str], typer.Option("--email", help="Email address")] = None,
    phone: Annotated[Optional[str], typer.Option("--phone", help="Phone number")] = None,
    notifications: Annotated[
        Optional[bool],
        typer.Option("--notifications/--no-notifications", help="Toggle notifications"),
    ] = None,
    theme: Annotated[Optional[str], typer.Option("--theme", help="light or dark")] = None,
    base_path: BasePathOption = None,
) -> None:
    """Update profile fields."""
    changes: dict[str, Any] = {
        "name": name,
        "email": email,
        "phone": phone,
        "notifications_enabled": notifications,
        "theme": theme,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        fail("Nothing to update")

    with workspace_session(base_path) as workspace:
        workspace.update_profile(**changes)


@app.command("theme")
def toggle_theme(base_path: BasePathOption = None) -> None:
    """Switch between the light and dark theme."""
    with workspace_session(base_path) as workspace:
        theme = workspace.toggle_theme()
        console.print(f"Theme: {theme.value}")
