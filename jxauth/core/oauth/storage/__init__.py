"""
Storage abstraction for session data.

This module provides an abstract interface for persisting the current
token pair and game session id, allowing different backends (filesystem,
memory, custom) to be used.
"""

from __future__ import annotations

import contextlib
import datetime
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from ..validation import (
    ValidationError,
    validate_dict_keys,
    validate_type,
    validate_iso_timestamp,
    validate_string,
    validate_token,
)

# Allowed fields for StoredSession dictionaries (anything else is corruption)
_SESSION_ALLOWED_FIELDS = {
    "session_id",
    "access_token",
    "refresh_token",
    "id_token",
    "expires_at",
    "issued_at",
    "session_pending",
}
_SESSION_REQUIRED_FIELDS = ("session_id", "access_token", "refresh_token", "expires_at", "issued_at")


@dataclass(frozen=True)
class TokenPair:
    """Tokens returned by one successful exchange or refresh.

    Attributes:
        access_token: Short-lived credential for provider APIs
        refresh_token: Long-lived credential used to mint new access tokens
        expires_at: Aware UTC datetime, issuance time plus declared lifetime
        issued_at: When the token request was sent (aware UTC)
        id_token: OpenID Connect ID token used to create game sessions

    Raises:
        ValidationError: If created with invalid data
    """

    access_token: str
    refresh_token: str
    expires_at: datetime.datetime
    issued_at: datetime.datetime
    id_token: str | None = None

    def __post_init__(self) -> None:
        validate_token(self.access_token, "access_token")
        validate_token(self.refresh_token, "refresh_token")
        if self.id_token is not None:
            validate_token(self.id_token, "id_token")
        for name in ("expires_at", "issued_at"):
            if getattr(self, name).tzinfo is None:
                raise ValidationError(name, getattr(self, name), "must be timezone-aware")

    def __repr__(self) -> str:
        return f"TokenPair(expires_at={self.expires_at.isoformat()!r})"


@dataclass(frozen=True)
class StoredSession:
    """The persisted authentication state for one named session.

    Attributes:
        tokens: The most recent token pair
        session_id: Game session id handed to launched clients
        session_pending: The tokens were renewed but ``session_id`` still
            belongs to the previous pair; a new game session must be
            created before it is handed out
    """

    tokens: TokenPair
    session_id: str
    session_pending: bool = False

    def __post_init__(self) -> None:
        validate_string(self.session_id, "session_id", allow_empty=False)

    @property
    def expires_at(self) -> datetime.datetime:
        return self.tokens.expires_at

    def is_usable(self, now: datetime.datetime, margin_seconds: float) -> bool:
        """True if ``session_id`` can be handed out as is."""
        return not self.session_pending and self.is_valid(now, margin_seconds)

    def is_valid(self, now: datetime.datetime, margin_seconds: float) -> bool:
        """True if the access token outlives ``now`` by more than the margin."""
        return (self.expires_at - now).total_seconds() > margin_seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "session_id": self.session_id,
            "access_token": self.tokens.access_token,
            "refresh_token": self.tokens.refresh_token,
            "id_token": self.tokens.id_token,
            "expires_at": self.tokens.expires_at.isoformat(),
            "issued_at": self.tokens.issued_at.isoformat(),
        }
        if self.session_pending:
            data["session_pending"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StoredSession:
        """Create from dictionary with validation.

        Raises:
            ValidationError: If data is invalid, incomplete or contains unknown fields
        """
        if not isinstance(data, dict):
            raise ValidationError("StoredSession", data, "must be a JSON object")

        validate_dict_keys(data, _SESSION_ALLOWED_FIELDS, "StoredSession")

        for name in _SESSION_REQUIRED_FIELDS:
            if not data.get(name):
                raise ValidationError(name, data.get(name), "required field is missing or empty")

        tokens = TokenPair(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            id_token=data.get("id_token"),
            expires_at=validate_iso_timestamp(data["expires_at"], "expires_at"),
            issued_at=validate_iso_timestamp(data["issued_at"], "issued_at"),
        )
        session_pending = data.get("session_pending", False)
        validate_type(session_pending, bool, "session_pending")
        return cls(tokens=tokens, session_id=data["session_id"], session_pending=session_pending)


class SessionStore(ABC):
    """Abstract storage backend for session data.

    Implementations:
    - FileSystemSessionStore: Uses <data_home>/<session_name>/session.json
    - InMemorySessionStore: For testing and ephemeral use
    """

    @abstractmethod
    def load(self) -> StoredSession | None:
        """Read the stored session.

        Returns:
            StoredSession if one exists and is well-formed, None otherwise

        Raises:
            StorageError: If stored data exists but cannot be read
        """

    @abstractmethod
    def save(self, session: StoredSession) -> None:
        """Persist a session, replacing any previous one.

        Raises:
            StorageError: If write fails
        """

    @abstractmethod
    def clear(self) -> None:
        """Remove the stored session. Missing data is not an error.

        Raises:
            StorageError: If removal fails
        """

    @contextlib.contextmanager
    def lock(self) -> Iterator[None]:
        """Hold exclusive access to the store for a read-modify-write."""
        yield


# Import implementations (E402 exemption: implementations import the base classes above)
from .file_storage import FileSystemSessionStore  # noqa: E402
from .memory_storage import InMemorySessionStore  # noqa: E402

__all__ = [
    "TokenPair",
    "StoredSession",
    "SessionStore",
    "FileSystemSessionStore",
    "InMemorySessionStore",
]
