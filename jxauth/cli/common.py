"""Helpers shared by the jxauth commands."""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from jxauth.core.config import Config
from jxauth.core.oauth import JxAuthError

_logger = logging.getLogger(__name__)

# Unknown options after PROGRAM belong to the program
PASSTHROUGH = {"ignore_unknown_options": True}


@dataclass
class CliState:
    config: Config
    session_name: str
    # Only an explicitly chosen session is written into desktop entries
    session_name_given: bool


def stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def print_error(error: JxAuthError) -> None:
    body = f"[red]{escape(str(error))}[/red]"
    if error.hint:
        body += f"\n\n{escape(error.hint)}"
    Console(stderr=True).print(Panel(body, title="Error", border_style="red"))


@contextmanager
def reported_errors() -> Iterator[None]:
    """Render library errors as a panel and exit 1."""
    try:
        yield
    except typer.Exit:
        raise
    except JxAuthError as e:
        _logger.debug("Command failed", exc_info=True)
        print_error(e)
        raise typer.Exit(1) from None
    except Exception as e:
        _logger.debug("Unexpected error", exc_info=True)
        Console(stderr=True).print(
            Panel(
                f"[red]An unexpected error occurred.[/red]\n\nError: {escape(str(e))}\n\n"
                "Run again with --verbose for details",
                title="Error",
                border_style="red",
            )
        )
        raise typer.Exit(1) from None
