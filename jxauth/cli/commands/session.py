"""Session commands: log in, inspect and log out."""

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from jxauth.cli.common import CliState, reported_errors
from jxauth.cli.services import build_services
from jxauth.core.oauth import SessionState


def authorize(ctx: typer.Context) -> None:
    """Log in with your Jagex account.

    Opens the login page in your browser. The session is stored and
    renewed automatically until you log out.

    Example:
        jxauth authorize
    """
    state: CliState = ctx.obj
    console = Console()

    with reported_errors(), build_services(state.config, state.session_name, interactive=True) as services:
        session = services.manager.authorize()

    console.print(
        Panel(
            f"[green]✅ Successfully authenticated![/green]\n\n"
            f"Session: {escape(state.session_name)}\n"
            f"Valid until: {session.expires_at.isoformat()}",
            title="Login Success",
            border_style="green",
        )
    )


def status(ctx: typer.Context) -> None:
    """Show the stored session without contacting any server.

    Example:
        jxauth status
    """
    state: CliState = ctx.obj
    console = Console()

    with reported_errors(), build_services(state.config, state.session_name, interactive=False) as services:
        snapshot = services.manager.describe()
        session_dir = state.config.session_dir(state.session_name)

    if snapshot.state is SessionState.UNAUTHENTICATED:
        console.print(
            Panel(
                f"[yellow]No session stored for: {escape(state.session_name)}[/yellow]\n\n"
                "Run 'jxauth authorize' to log in.",
                title="Not Authenticated",
                border_style="yellow",
            )
        )
        raise typer.Exit(1)

    table = Table(title=f"Session: {state.session_name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    if snapshot.state is SessionState.VALID:
        table.add_row("Status", "[green]✅ Valid[/green]")
    else:
        table.add_row("Status", "[yellow]Expired (renewed on next use)[/yellow]")
    table.add_row("Expires At", snapshot.expires_at.isoformat() if snapshot.expires_at else "Unknown")
    table.add_row("Issued At", snapshot.issued_at.isoformat() if snapshot.issued_at else "Unknown")
    table.add_row("Storage Path", str(session_dir))

    console.print(table)


def logout(ctx: typer.Context) -> None:
    """Forget the stored session and character cache.

    Example:
        jxauth logout
    """
    state: CliState = ctx.obj
    console = Console()

    with reported_errors(), build_services(state.config, state.session_name, interactive=False) as services:
        services.manager.logout()
        services.cache.clear()

    console.print(f"[green]✅ Logged out of session '{escape(state.session_name)}'[/green]")
