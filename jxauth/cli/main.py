"""Main CLI entry point for jxauth."""

from typing import Optional

import typer
from rich.console import Console

# Import command modules
from jxauth.cli.commands import characters, desktop, session
from jxauth.cli.common import PASSTHROUGH, CliState, print_error, reported_errors
from jxauth.core.config import Config, validate_all, validate_session_name
from jxauth.core.logging import configure_logging
from jxauth.core.oauth.constants import SessionDefaults

app = typer.Typer(
    name="jxauth",
    help="Log in with a Jagex account and launch game clients with a valid session",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Add commands
app.command()(session.authorize)
app.command("ls")(characters.list_characters)
app.command("exec", context_settings=PASSTHROUGH)(characters.exec_program)
app.command()(session.status)
app.command()(session.logout)
app.command("create-desktop-entry", context_settings=PASSTHROUGH)(desktop.create_desktop_entry)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    session_name: Optional[str] = typer.Option(
        None,
        "--session-name",
        "-s",
        help=f"Named session to use (default: {SessionDefaults.SESSION_NAME})",
    ),
) -> None:
    """jxauth: Jagex account authentication."""
    config_errors = validate_all()
    if config_errors:
        for error in config_errors:
            print_error(error)
        raise typer.Exit(1)

    with reported_errors():
        config = Config()
        if session_name is not None:
            validate_session_name(session_name)

    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = CliState(
        config=config,
        session_name=session_name or SessionDefaults.SESSION_NAME,
        session_name_given=session_name is not None,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from jxauth import __version__

    console = Console()
    console.print(f"[bold cyan]jxauth[/bold cyan] version [green]{__version__}[/green]")


if __name__ == "__main__":
    app()
