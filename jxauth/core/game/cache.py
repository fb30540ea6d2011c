"""Offline character cache.

``jxauth ls --write-cache`` stores the character list next to the session
so ``ls --offline`` and ``exec --offline`` work without calling the game
API.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..oauth.constants import StorageDefaults
from ..oauth.exceptions import JxAuthError, StorageError, StorageErrorKind
from ..oauth.storage.file_storage import write_private_json
from .client import CharacterRecord

_logger = logging.getLogger(__name__)


class CacheMissError(JxAuthError):
    """Offline mode was requested but no usable character cache exists."""

    hint = "Run 'jxauth ls --write-cache' while online to create the cache"


class CharacterCache:
    def __init__(self, base_path: Path) -> None:
        self.cache_file = Path(base_path).expanduser() / StorageDefaults.CHARACTERS_FILE

    def load(self) -> list[CharacterRecord] | None:
        """Return the cached characters, or None if nothing usable is cached."""
        try:
            raw = self.cache_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(StorageErrorKind.READ, f"Cannot read character cache: {e}") from e

        try:
            return [CharacterRecord.from_dict(item) for item in json.loads(raw)]
        except (ValueError, KeyError, TypeError) as e:
            _logger.warning("Ignoring corrupt character cache %s: %s", self.cache_file, e)
            return None

    def require(self) -> list[CharacterRecord]:
        """Like load(), but a missing cache is an error.

        Raises:
            CacheMissError: If nothing usable is cached
        """
        characters = self.load()
        if characters is None:
            raise CacheMissError(f"No cached characters found at {self.cache_file}")
        return characters

    def save(self, characters: list[CharacterRecord]) -> None:
        try:
            write_private_json(self.cache_file, [c.to_dict() for c in characters])
        except OSError as e:
            raise StorageError(StorageErrorKind.WRITE, f"Cannot write character cache: {e}") from e

    def clear(self) -> None:
        try:
            self.cache_file.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(StorageErrorKind.WRITE, f"Cannot remove character cache: {e}") from e


__all__ = ["CacheMissError", "CharacterCache"]
