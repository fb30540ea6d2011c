"""Character commands: list the account's characters and launch one."""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from jxauth.cli.common import CliState, reported_errors, stdin_is_interactive
from jxauth.cli.services import build_services
from jxauth.core.game import CharacterRecord
from jxauth.launch import LaunchContext, find_character, launch


def _print_characters(console: Console, characters: list[CharacterRecord]) -> None:
    if not characters:
        console.print("[yellow]No characters found for this account[/yellow]")
        return
    for character in characters:
        console.print(
            f"  [cyan]•[/cyan] [bold green]{escape(character.display_name)}[/bold green] "
            f"(ID: [bold]{escape(character.id)}[/bold])"
        )


def list_characters(
    ctx: typer.Context,
    offline: bool = typer.Option(False, "--offline", help="Use the offline cache instead of the game API"),
    write_cache: bool = typer.Option(False, "--write-cache", help="Store the list for offline use"),
) -> None:
    """List the characters tied to your account.

    Example:
        jxauth ls --write-cache
    """
    state: CliState = ctx.obj
    console = Console()

    with reported_errors(), build_services(
        state.config, state.session_name, interactive=stdin_is_interactive()
    ) as services:
        if offline:
            characters = services.cache.require()
        else:
            session_id = services.manager.ensure_valid_session()
            characters = services.game.list_characters(session_id)
            if write_cache:
                services.cache.save(characters)

    _print_characters(console, characters)


def exec_program(
    ctx: typer.Context,
    character_id: str = typer.Option(..., "--character-id", help="Account ID of the character to play"),
    offline: bool = typer.Option(False, "--offline", help="Look the character up in the offline cache"),
    program: str = typer.Argument(..., help="Game client to run"),
    args: Optional[list[str]] = typer.Argument(None, help="Arguments passed to the program"),
) -> None:
    """Run a game client with the session in its environment.

    The program receives JX_SESSION_ID, JX_CHARACTER_ID and JX_DISPLAY_NAME
    and replaces this process.

    Example:
        jxauth exec --character-id 123456 runelite -- --debug
    """
    state: CliState = ctx.obj

    with reported_errors():
        with build_services(
            state.config, state.session_name, interactive=stdin_is_interactive()
        ) as services:
            session_id = services.manager.ensure_valid_session()
            if offline:
                characters = services.cache.require()
            else:
                characters = services.game.list_characters(session_id)

        character = find_character(characters, character_id)
        launch(
            LaunchContext(
                session_id=session_id,
                character_id=character.id,
                display_name=character.display_name,
            ),
            program,
            args or [],
        )
