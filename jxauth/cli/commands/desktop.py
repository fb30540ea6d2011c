"""Desktop integration command."""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from jxauth.cli.common import CliState, reported_errors
from jxauth.core.oauth import StorageError, StorageErrorKind
from jxauth.desktop import create_entry


def create_desktop_entry(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Name shown in the application menu"),
    character_id: str = typer.Option(..., "--character-id", help="Account ID of the character to play"),
    program: str = typer.Argument(..., help="Game client to run"),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments passed to the program"),
) -> None:
    """Create an application menu entry that launches a character.

    Example:
        jxauth create-desktop-entry --name "RuneLite (main)" --character-id 123456 runelite
    """
    state: CliState = ctx.obj
    console = Console()

    with reported_errors():
        try:
            path = create_entry(
                state.session_name if state.session_name_given else None,
                name,
                character_id,
                program,
                args or [],
            )
        except OSError as e:
            raise StorageError(StorageErrorKind.WRITE, f"Cannot write desktop entry: {e}") from e

    console.print(f"Desktop entry created: [bold green]{escape(str(path))}[/bold green]")
