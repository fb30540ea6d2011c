"""
In-memory session storage for testing and ephemeral use.

Data is lost when the process exits.
"""

from __future__ import annotations

import contextlib
import threading
from collections.abc import Iterator

from . import SessionStore, StoredSession


class InMemorySessionStore(SessionStore):
    """In-memory session storage.

    Counts saves and clears so tests can assert on persistence side effects.
    """

    def __init__(self, session: StoredSession | None = None) -> None:
        self._session = session
        self._lock = threading.Lock()
        self.save_count = 0
        self.clear_count = 0

    def load(self) -> StoredSession | None:
        return self._session

    def save(self, session: StoredSession) -> None:
        self._session = session
        self.save_count += 1

    def clear(self) -> None:
        self._session = None
        self.clear_count += 1

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        with self._lock:
            yield

    def __repr__(self) -> str:
        if self._session:
            return f"InMemorySessionStore(authenticated=True, expires_at={self._session.expires_at.isoformat()})"
        return "InMemorySessionStore(authenticated=False)"
