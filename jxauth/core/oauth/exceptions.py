"""
Custom exception hierarchy for jxauth.

Provides specific, actionable error messages for authentication, token,
storage and launch failures.

All exceptions inherit from JxAuthError, allowing callers to catch all
library-specific errors with a single except clause. Every exception
carries a ``hint`` telling the user what to do next; the CLI prints it
below the error message.

Example:
    >>> try:
    ...     manager.ensure_valid_session()
    ... except JxAuthError as e:
    ...     print(f"{e}\\n{e.hint}")
"""

from __future__ import annotations

from enum import Enum

_AUTHORIZE_HINT = "Run 'jxauth authorize' to log in with your Jagex account"
_RETRY_HINT = "Check your internet connection and try again in a few moments"


class JxAuthError(Exception):
    """Base exception for all jxauth errors."""

    hint: str = "Please try again or report this bug if it persists"

    def __init__(self, message: str = "", *, hint: str | None = None) -> None:
        super().__init__(message)
        if hint is not None:
            self.hint = hint


class ValidationError(JxAuthError):
    """Raised when input validation fails.

    Attributes:
        field: Name of the field that failed validation
        value: The invalid value that was provided
        message: Human-readable explanation of the validation error

    Example:
        >>> OAuthSettings(origin="http://account.jagex.com")
        ValidationError: Invalid 'origin': URL must use HTTPS scheme (got 'http://...')
    """

    def __init__(self, field: str, value: object, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Invalid {field!r}: {message} (got {value!r})")

    def __repr__(self) -> str:
        return (
            f"ValidationError(field={self.field!r}, value={self.value!r}, message={self.message!r})"
        )


class ConfigurationError(JxAuthError):
    """Raised when configuration is invalid or incomplete."""

    hint = "Check the JXAUTH_* environment variables and your .env file"


# =============================================================================
# Authorization flow
# =============================================================================


class AuthFlowErrorKind(str, Enum):
    """Why an interactive login did not produce an authorization code."""

    CANCELLED = "cancelled"  # Login surface closed, or the user declined consent
    STATE_MISMATCH = "state_mismatch"  # Redirect state differs from this attempt's
    MALFORMED_REDIRECT = "malformed_redirect"  # Redirect missing code/state or wrong target


class AuthFlowError(JxAuthError):
    """Raised when the interactive login fails.

    None of these failures are retried automatically.

    Example:
        >>> flow.obtain_authorization_code()
        AuthFlowError: Login state parameter mismatch - possible CSRF attack
    """

    hint = "Run 'jxauth authorize' again to retry the login"

    def __init__(self, kind: AuthFlowErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


# =============================================================================
# Token endpoint
# =============================================================================


class TokenError(JxAuthError):
    """Raised when a token endpoint operation fails.

    ``terminal`` tells the session manager whether the credential that was
    sent must be discarded (True) or may be used again on a later attempt.
    """

    terminal = False


class TransientTokenError(TokenError):
    """Network, server-side or protocol failure; the same token may be retried."""

    hint = _RETRY_HINT


class TokenRejectedError(TokenError):
    """The provider refused the grant (revoked/expired refresh token, bad code)."""

    terminal = True
    hint = _AUTHORIZE_HINT


# =============================================================================
# Storage
# =============================================================================


class StorageErrorKind(str, Enum):
    READ = "read"
    WRITE = "write"


class StorageError(JxAuthError):
    """Raised when session storage operations fail.

    Example:
        >>> store.save(session)
        StorageError: Cannot write session file: Permission denied
    """

    hint = "Check file permissions and available disk space"

    def __init__(self, kind: StorageErrorKind, message: str) -> None:
        self.kind = kind
        super().__init__(message)


# =============================================================================
# Session manager
# =============================================================================


class SessionError(JxAuthError):
    """Raised when no valid session could be produced.

    The underlying TokenError, AuthFlowError or StorageError is chained as
    ``__cause__``. ``retriable`` is True when simply re-running the command
    may succeed (the stored session was left intact).
    """

    hint = _AUTHORIZE_HINT

    def __init__(self, message: str, *, retriable: bool = False, hint: str | None = None) -> None:
        self.retriable = retriable
        if hint is None and retriable:
            hint = _RETRY_HINT
        super().__init__(message, hint=hint)


class ReauthRequiredError(SessionError):
    """The stored session is unusable and a new interactive login is needed."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message, retriable=False)


# =============================================================================
# Game client launch
# =============================================================================


class CharacterNotFoundError(JxAuthError):
    """Raised when the requested character is not tied to the account."""

    def __init__(self, character_id: str, available: list[tuple[str, str]]) -> None:
        self.character_id = character_id
        self.available = available
        listing = "\n".join(f"  • {name} (ID: {cid})" for cid, name in available) or "  (none)"
        super().__init__(
            f"Character '{character_id}' not found",
            hint=(
                f"Available characters:\n{listing}\n\n"
                "Use one of the account IDs listed above with the --character-id option"
            ),
        )


class LaunchError(JxAuthError):
    """Raised when the game client program cannot be executed."""

    def __init__(self, program: str, details: str) -> None:
        self.program = program
        self.details = details
        super().__init__(
            f"Failed to launch program '{program}': {details}",
            hint=(
                f"• Make sure '{program}' is installed and in your $PATH\n"
                "• Check the program name is spelled correctly\n"
                "• Try using the full path to the executable"
            ),
        )


__all__ = [
    "JxAuthError",
    "ValidationError",
    "ConfigurationError",
    "AuthFlowErrorKind",
    "AuthFlowError",
    "TokenError",
    "TransientTokenError",
    "TokenRejectedError",
    "StorageErrorKind",
    "StorageError",
    "SessionError",
    "ReauthRequiredError",
    "CharacterNotFoundError",
    "LaunchError",
]
