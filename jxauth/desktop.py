"""Desktop entry generation.

Writes a freedesktop ``.desktop`` file whose Exec line re-invokes
``jxauth exec`` for one character, so the game can be started from the
application menu without a terminal.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path

from .core.oauth.exceptions import ValidationError

_logger = logging.getLogger(__name__)

PROGRAM_NAME = "jxauth"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w-]")
_EXEC_RESERVED = set(' \t\n"\'\\><~|&;$*?#()`')


def applications_dir(environ: Mapping[str, str] | None = None) -> Path:
    """``$XDG_DATA_HOME/applications``, falling back to ``~/.local/share/applications``."""
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "applications"


def entry_filename(name: str) -> str:
    # \w is Unicode-aware, matching "alphanumeric or underscore"
    return f"{_UNSAFE_FILENAME_CHARS.sub('_', name).lower()}.desktop"


def _quote_exec_arg(arg: str) -> str:
    # Bare % starts a field code, quoted or not
    arg = arg.replace("%", "%%")
    if arg and not any(c in _EXEC_RESERVED for c in arg):
        return arg
    escaped = "".join(f"\\{c}" if c in '"`$\\' else c for c in arg)
    return f'"{escaped}"'


def build_exec_command(
    session_name: str | None,
    character_id: str,
    program: str,
    args: Sequence[str] = (),
) -> str:
    """Build the Exec line value.

    Example:
        >>> build_exec_command("alt", "123", "runelite", ["--debug"])
        'jxauth --session-name alt exec --character-id 123 runelite -- --debug'
    """
    parts = [PROGRAM_NAME]
    if session_name:
        parts += ["--session-name", session_name]
    parts += ["exec", "--character-id", character_id, program]
    if args:
        parts.append("--")
        parts.extend(args)
    return " ".join(_quote_exec_arg(p) for p in parts)


def render_entry(name: str, exec_command: str) -> str:
    return (
        "[Desktop Entry]\n"
        f"Name={name}\n"
        f"Comment=Launch {name}\n"
        f"Exec={exec_command}\n"
        "Icon=runelite\n"
        "Terminal=false\n"
        "Type=Application\n"
        "Categories=Game;\n"
    )


def create_entry(
    session_name: str | None,
    name: str,
    character_id: str,
    program: str,
    args: Sequence[str] = (),
    *,
    target_dir: Path | None = None,
) -> Path:
    """Write the desktop entry and return its path.

    Raises:
        ValidationError: If ``name`` is empty or spans several lines
        OSError: If the file cannot be written
    """
    if not name.strip() or "\n" in name or "\r" in name:
        raise ValidationError("name", name, "must be a single non-empty line")

    directory = target_dir if target_dir is not None else applications_dir()
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / entry_filename(name)
    path.write_text(
        render_entry(name, build_exec_command(session_name, character_id, program, args)),
        encoding="utf-8",
    )
    _logger.info("Wrote desktop entry %s", path)
    return path
