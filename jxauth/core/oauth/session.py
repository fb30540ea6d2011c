"""Session lifecycle management.

SessionManager is the only thing the rest of the program asks for a
credential. It decides whether the stored session is usable, refreshes
it when it has expired, and falls back to an interactive login when the
refresh token is dead or nothing is stored.

States::

    UNAUTHENTICATED --login--> VALID
    VALID --expires--> EXPIRED --> REFRESHING --ok--> VALID
                                       |--transient--> EXPIRED (error raised, store untouched)
                                       |--game session fails--> EXPIRED (new tokens kept, session pending)
                                       `--rejected--> REAUTH_REQUIRED --clear--> UNAUTHENTICATED
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .constants import SessionDefaults, ValidationLimits
from .exceptions import (
    AuthFlowError,
    AuthFlowErrorKind,
    JxAuthError,
    ReauthRequiredError,
    SessionError,
    StorageError,
    TokenRejectedError,
    TransientTokenError,
)
from .http_client import HttpError
from .oauth import AuthorizationFlow
from .storage import SessionStore, StoredSession, TokenPair
from .token_exchanger import Clock, TokenExchanger, utcnow
from .validation import validate_range, validate_store_instance

_logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VALID = "valid"
    EXPIRED = "expired"
    REFRESHING = "refreshing"
    REAUTH_REQUIRED = "reauth_required"


class SessionIssuer(Protocol):
    """Turns an ID token into the session id handed to game clients."""

    def create_session(self, id_token: str) -> str: ...


@dataclass(frozen=True)
class SessionStatus:
    """Read-only snapshot for display; computed without any network call."""

    state: SessionState
    expires_at: datetime.datetime | None = None
    issued_at: datetime.datetime | None = None


class SessionManager:
    """Produces a guaranteed-valid session id.

    Example:
        >>> manager = SessionManager(store, exchanger, game_client, flow)
        >>> session_id = manager.ensure_valid_session()

    Without a ``flow`` the manager is non-interactive: whenever a login
    would be needed it raises ReauthRequiredError instead.
    """

    def __init__(
        self,
        store: SessionStore,
        exchanger: TokenExchanger,
        issuer: SessionIssuer,
        flow: AuthorizationFlow | None = None,
        *,
        expiry_margin: int = SessionDefaults.EXPIRY_MARGIN_SECONDS,
        clock: Clock = utcnow,
    ) -> None:
        validate_store_instance(store, "store")
        validate_range(
            expiry_margin,
            "expiry_margin",
            min_value=ValidationLimits.MIN_EXPIRY_MARGIN_SECONDS,
            max_value=ValidationLimits.MAX_EXPIRY_MARGIN_SECONDS,
        )
        self.store = store
        self.exchanger = exchanger
        self.issuer = issuer
        self.flow = flow
        self.expiry_margin = expiry_margin
        self._clock = clock
        self._state = SessionState.UNAUTHENTICATED

    @property
    def state(self) -> SessionState:
        """The state the last operation ended in."""
        return self._state

    def ensure_valid_session(self) -> str:
        """Return a session id that is valid beyond the safety margin.

        Refreshes or logs in as needed. Never returns an expired session.

        Raises:
            SessionError: If no valid session could be produced; ``retriable``
                is set when simply calling again may succeed
            ReauthRequiredError: If a login is needed and the manager is
                non-interactive
        """
        session = self.store.load()

        if session is None:
            self._state = SessionState.UNAUTHENTICATED
            return self._login().session_id

        if self._is_usable(session):
            self._state = SessionState.VALID
            return session.session_id

        self._state = SessionState.EXPIRED
        refreshed = self._refresh()
        if refreshed is not None:
            return refreshed.session_id

        # REAUTH_REQUIRED: the store has been cleared, behave as a first run
        return self._login().session_id

    def authorize(self) -> StoredSession:
        """Run a fresh interactive login regardless of the current state.

        Raises:
            SessionError: If the login, token exchange or save fails
        """
        return self._login()

    def logout(self) -> None:
        self.store.clear()
        self._state = SessionState.UNAUTHENTICATED

    def describe(self) -> SessionStatus:
        session = self.store.load()
        if session is None:
            return SessionStatus(SessionState.UNAUTHENTICATED)
        state = SessionState.VALID if self._is_usable(session) else SessionState.EXPIRED
        return SessionStatus(state, expires_at=session.expires_at, issued_at=session.tokens.issued_at)

    def _is_valid(self, session: StoredSession) -> bool:
        return session.is_valid(self._clock(), self.expiry_margin)

    def _is_usable(self, session: StoredSession) -> bool:
        return session.is_usable(self._clock(), self.expiry_margin)

    def _refresh(self) -> StoredSession | None:
        """Refresh under the store lock.

        Returns:
            The refreshed (or concurrently refreshed) session, or None when
            the refresh token was rejected and the store has been cleared

        Raises:
            SessionError: retriable, on transient failures
        """
        with self.store.lock():
            # Another process may have refreshed or logged out while we waited
            current = self.store.load()
            if current is None:
                self._state = SessionState.UNAUTHENTICATED
                return None
            if self._is_usable(current):
                _logger.debug("Session was refreshed by another process")
                self._state = SessionState.VALID
                return current

            if self._is_valid(current):
                _logger.info("Tokens were renewed earlier, creating the pending game session")
                tokens = current.tokens
            else:
                tokens = self._refresh_tokens(current)
                if tokens is None:
                    return None

            return self._open_game_session(tokens)

    def _refresh_tokens(self, current: StoredSession) -> TokenPair | None:
        self._state = SessionState.REFRESHING
        _logger.info("Access token expired at %s, refreshing", current.expires_at.isoformat())

        try:
            tokens = self.exchanger.refresh(current.tokens.refresh_token, previous=current.tokens)
        except TokenRejectedError as e:
            self._discard(f"Refresh token was rejected: {e}")
            return None
        except JxAuthError as e:
            self._state = SessionState.EXPIRED
            raise SessionError(f"Could not renew the session: {e}", retriable=True) from e

        # The provider may have rotated the refresh token; it must survive a game API failure
        self._save(StoredSession(tokens=tokens, session_id=current.session_id, session_pending=True))
        return tokens

    def _open_game_session(self, tokens: TokenPair) -> StoredSession | None:
        try:
            session = StoredSession(tokens=tokens, session_id=self._issue(tokens))
        except HttpError as e:
            if not e.is_transient:
                self._discard(f"Game session could not be created: {e.reason}")
                return None
            self._state = SessionState.EXPIRED
            raise SessionError(
                "Could not renew the session: game session server unavailable", retriable=True
            ) from e
        except JxAuthError as e:
            self._state = SessionState.EXPIRED
            raise SessionError(f"Could not renew the session: {e}", retriable=True) from e

        self._save(session)
        self._state = SessionState.VALID
        _logger.info("Session refreshed, valid until %s", session.expires_at.isoformat())
        return session

    def _save(self, session: StoredSession) -> None:
        try:
            self.store.save(session)
        except StorageError as e:
            self._state = SessionState.EXPIRED
            raise SessionError(f"Could not save the renewed session: {e}", hint=e.hint) from e

    def _discard(self, reason: str) -> None:
        _logger.warning("%s; clearing stored session", reason)
        self._state = SessionState.REAUTH_REQUIRED
        self.store.clear()

    def _login(self) -> StoredSession:
        if self.flow is None:
            raise ReauthRequiredError(
                "Session expired and could not be renewed"
                if self._state is SessionState.REAUTH_REQUIRED
                else "Not authenticated"
            )

        try:
            auth_code = self.flow.obtain_authorization_code()
            tokens = self.exchanger.exchange_code(auth_code)
            session = StoredSession(tokens=tokens, session_id=self._issue(tokens))
            self.store.save(session)
        except AuthFlowError as e:
            if e.kind is AuthFlowErrorKind.STATE_MISMATCH:
                self.store.clear()
            self._state = SessionState.UNAUTHENTICATED
            raise SessionError(f"Login failed: {e}", hint=e.hint) from e
        except JxAuthError as e:
            self._state = SessionState.UNAUTHENTICATED
            retriable = isinstance(e, TransientTokenError) or (
                isinstance(e, HttpError) and e.is_transient
            )
            raise SessionError(f"Login failed: {e}", retriable=retriable, hint=e.hint) from e

        self._state = SessionState.VALID
        _logger.info("Logged in, session valid until %s", session.expires_at.isoformat())
        return session

    def _issue(self, tokens: TokenPair) -> str:
        if not tokens.id_token:
            raise SessionError("Identity provider did not return an ID token")
        return self.issuer.create_session(tokens.id_token)


__all__ = [
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "SessionIssuer",
]
