"""
Filesystem-based session storage.

Stores the session in <data_home>/<session_name>/session.json with
owner-only permissions. Writes go to a temporary file in the same
directory which is then renamed over the target, so a crash mid-write
leaves either the old file or the new one, never a truncated mix.
"""

from __future__ import annotations

import contextlib
import fcntl
import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from ..constants import StorageDefaults
from ..exceptions import StorageError, StorageErrorKind, ValidationError
from . import SessionStore, StoredSession

_logger = logging.getLogger(__name__)


def write_private_json(path: Path, data: Any) -> None:
    """Atomically replace ``path`` with ``data`` serialized as JSON, mode 0600.

    Raises:
        OSError: If the directory, temp file or rename fails
    """
    path.parent.mkdir(mode=StorageDefaults.DIR_PERMISSIONS, parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.fchmod(f.fileno(), StorageDefaults.FILE_PERMISSIONS)
            json.dump(data, f, indent=2)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class FileSystemSessionStore(SessionStore):
    """File-based session storage.

    The session file is created with mode 0600 and its directory with
    mode 0700 since the refresh token grants durable account access.
    """

    def __init__(self, base_path: Path) -> None:
        """Initialize file-based storage.

        Args:
            base_path: Directory holding session.json (one per session name)
        """
        self.base_path = Path(base_path).expanduser()
        self.session_file = self.base_path / StorageDefaults.SESSION_FILE
        self.lock_file = self.base_path / (StorageDefaults.SESSION_FILE + StorageDefaults.LOCK_SUFFIX)

    def load(self) -> StoredSession | None:
        """Read the session from disk.

        Returns:
            StoredSession if the file exists and is valid, None if it is
            missing or its contents are corrupt

        Raises:
            StorageError: If the file exists but cannot be read
        """
        try:
            with open(self.session_file, encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            _logger.error("Failed to read session file %s: %s", self.session_file, e)
            raise StorageError(StorageErrorKind.READ, f"Cannot read session file: {e}") from e

        try:
            return StoredSession.from_dict(json.loads(raw))
        except (ValueError, TypeError, OverflowError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            _logger.warning(
                "Ignoring corrupt session file %s (%s); a new login will be required",
                self.session_file,
                e,
            )
            return None

    def save(self, session: StoredSession) -> None:
        """Write the session to disk atomically.

        Raises:
            StorageError: If write fails due to I/O errors
        """
        try:
            write_private_json(self.session_file, session.to_dict())
        except OSError as e:
            _logger.error("Failed to write session file %s: %s", self.session_file, e)
            raise StorageError(StorageErrorKind.WRITE, f"Cannot write session file: {e}") from e
        _logger.debug("Saved session to %s", self.session_file)

    def clear(self) -> None:
        """Remove the session file.

        Raises:
            StorageError: If file removal fails due to I/O errors
        """
        try:
            self.session_file.unlink(missing_ok=True)
        except OSError as e:
            _logger.error("Failed to remove session file %s: %s", self.session_file, e)
            raise StorageError(StorageErrorKind.WRITE, f"Cannot remove session file: {e}") from e

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        """Advisory cross-process lock on a sidecar file.

        Blocks until any other jxauth process refreshing the same session
        has finished.

        Raises:
            StorageError: If the lock file cannot be opened
        """
        try:
            self.base_path.mkdir(mode=StorageDefaults.DIR_PERMISSIONS, parents=True, exist_ok=True)
            fd = os.open(self.lock_file, os.O_RDWR | os.O_CREAT, StorageDefaults.FILE_PERMISSIONS)
        except OSError as e:
            raise StorageError(StorageErrorKind.WRITE, f"Cannot open lock file: {e}") from e

        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            os.close(fd)

    @property
    def path(self) -> str:
        """Absolute path to session.json as string."""
        return str(self.session_file)
