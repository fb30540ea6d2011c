"""
Centralized constants for the jxauth oauth package.

Constants are grouped by:
- Client identity: Values identifying the launcher to the Jagex servers
- Configurable defaults: Values users may want to override
- Protocol constants: Fixed by OAuth/PKCE specifications
- Internal constants: Implementation details
- Validation limits: Valid ranges for parameters
"""

from __future__ import annotations

# =============================================================================
# CLIENT IDENTITY
# =============================================================================


class JagexClient:
    """OAuth client registration used by the official launcher.

    The redirect URI is a page on the provider's own domain, so it cannot be
    captured by a local listener; see PasteRedirectSurface.
    """

    CLIENT_ID = "com_jagex_auth_desktop_launcher"
    ORIGIN = "https://account.jagex.com"
    REDIRECT_URI = "https://secure.runescape.com/m=weblogin/launcher-redirect"
    SCOPE = "openid offline gamesso.token.create user.profile.read"
    GAME_API = "https://auth.jagex.com/game-session/v1"


# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================


class OAuthDefaults:
    """Default values for the login flow and HTTP calls.

    - 300s callback timeout: 5 minutes is reasonable for user interaction
    - 30s HTTP timeout: Balance between responsiveness and slow networks
    """

    CALLBACK_TIMEOUT = 300  # seconds

    HTTP_REQUEST_TIMEOUT = 30  # seconds

    # Retries apply to idempotent game API reads only, never to the token endpoint
    GAME_API_MAX_RETRIES = 3

    # Seconds the listener stays up so the confirmation page is delivered
    SUCCESS_PAGE_SHUTDOWN_DELAY = 1.0


class SessionDefaults:
    """Default values for session validity checks.

    Tokens expiring within the margin are treated as already expired so a
    launched client never starts with a session the provider is about to
    reject.
    """

    EXPIRY_MARGIN_SECONDS = 300
    SESSION_NAME = "default"


# =============================================================================
# PROTOCOL CONSTANTS (Fixed by Standards)
# =============================================================================


class OAuthProtocol:
    """Constants defined by OAuth 2.0 and related RFCs."""

    HTTP_OK = 200
    HTTP_NOT_FOUND = 404
    HTTP_TOO_MANY_REQUESTS = 429
    HTTP_SERVER_ERROR = 500

    GRANT_TYPE_AUTH_CODE = "authorization_code"
    GRANT_TYPE_REFRESH_TOKEN = "refresh_token"

    RESPONSE_TYPE_CODE = "code"


class PkceProtocol:
    """Constants defined by PKCE (RFC 7636).

    Code verifier requirements (RFC 7636 Section 4.1):
    - Must be 43-128 characters
    - Using URL-safe characters (A-Z, a-z, 0-9, -, ., _, ~)
    """

    # 32 random bytes base64url-encoded = 43 chars, the RFC minimum
    CODE_VERIFIER_BYTES = 32

    CODE_CHALLENGE_METHOD = "S256"


# =============================================================================
# INTERNAL CONSTANTS
# =============================================================================


class StorageDefaults:
    """Filesystem storage defaults."""

    # octal 0600 = rw------- (user: rw, group: -, other: -)
    FILE_PERMISSIONS = 0o600
    DIR_PERMISSIONS = 0o700

    SESSION_FILE = "session.json"
    CHARACTERS_FILE = "characters.json"
    LOCK_SUFFIX = ".lock"


class LaunchEnv:
    """Environment variables the game client reads its session from."""

    SESSION_ID = "JX_SESSION_ID"
    CHARACTER_ID = "JX_CHARACTER_ID"
    DISPLAY_NAME = "JX_DISPLAY_NAME"


# =============================================================================
# VALIDATION RANGES
# =============================================================================


class ValidationLimits:
    """Valid ranges for user-configurable parameters."""

    MIN_TIMEOUT_SECONDS = 1
    MAX_TIMEOUT_SECONDS = 3600  # 1 hour

    MIN_EXPIRY_MARGIN_SECONDS = 0
    MAX_EXPIRY_MARGIN_SECONDS = 1800


__all__ = [
    "JagexClient",
    "OAuthDefaults",
    "SessionDefaults",
    "OAuthProtocol",
    "PkceProtocol",
    "StorageDefaults",
    "LaunchEnv",
    "ValidationLimits",
]
