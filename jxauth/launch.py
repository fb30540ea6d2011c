"""Launching a game client with the session bound into its environment."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from .core.game import CharacterRecord
from .core.oauth.constants import LaunchEnv
from .core.oauth.exceptions import CharacterNotFoundError, LaunchError

_logger = logging.getLogger(__name__)

ExecFn = Callable[[str, list[str], dict[str, str]], None]


@dataclass(frozen=True)
class LaunchContext:
    """Everything the child process learns about the session. Never persisted."""

    session_id: str
    character_id: str
    display_name: str

    def __repr__(self) -> str:
        return f"LaunchContext(character_id={self.character_id!r}, display_name={self.display_name!r})"


def find_character(characters: Sequence[CharacterRecord], character_id: str) -> CharacterRecord:
    """Pick the character with ``character_id``.

    Raises:
        CharacterNotFoundError: Listing the characters that do exist
    """
    for character in characters:
        if character.id == character_id:
            return character
    raise CharacterNotFoundError(character_id, [(c.id, c.display_name) for c in characters])


def build_environment(ctx: LaunchContext, base_env: Mapping[str, str] | None = None) -> dict[str, str]:
    env = dict(os.environ if base_env is None else base_env)
    env[LaunchEnv.SESSION_ID] = ctx.session_id
    env[LaunchEnv.CHARACTER_ID] = ctx.character_id
    env[LaunchEnv.DISPLAY_NAME] = ctx.display_name
    return env


def launch(
    ctx: LaunchContext,
    program: str,
    args: Sequence[str] = (),
    *,
    base_env: Mapping[str, str] | None = None,
    exec_fn: ExecFn = os.execvpe,
) -> None:
    """Replace the current process with ``program``.

    The child inherits our environment plus the three session variables,
    and its exit status becomes ours. Returns only when ``exec_fn`` does
    (tests).

    Raises:
        LaunchError: If the program cannot be executed
    """
    env = build_environment(ctx, base_env)
    argv = [program, *args]
    _logger.info("Launching %s as %s", program, ctx.display_name)
    try:
        exec_fn(program, argv, env)
    except OSError as e:
        raise LaunchError(program, e.strerror or str(e)) from e
