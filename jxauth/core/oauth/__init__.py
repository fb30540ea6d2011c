"""
Jagex account authentication.

This package provides:
- OAuth 2.0 + PKCE authorization flow with pluggable login surfaces
- Token exchange and refresh against the account.jagex.com token endpoint
- Session persistence (filesystem, memory) with atomic, owner-only writes
- A session manager that always hands out a valid game session id

Basic Usage:
    >>> from jxauth.core.oauth import (
    ...     AuthorizationFlow, FileSystemSessionStore, HttpxHttpClient,
    ...     OAuthConfig, PasteRedirectSurface, SessionManager, TokenExchanger,
    ... )
    >>> from jxauth.core.game import GameSessionClient
    >>>
    >>> config = OAuthConfig()
    >>> http = HttpxHttpClient()
    >>> manager = SessionManager(
    ...     FileSystemSessionStore(base_path=data_dir / "default"),
    ...     TokenExchanger(http, config),
    ...     GameSessionClient(http),
    ...     AuthorizationFlow(config, PasteRedirectSurface()),
    ... )
    >>> session_id = manager.ensure_valid_session()

For Testing:
    >>> from jxauth.core.oauth import InMemorySessionStore, MockHttpClient
"""

from .callback_server import OAuthCallbackHandler, OAuthCallbackServer
from .exceptions import (
    AuthFlowError,
    AuthFlowErrorKind,
    CharacterNotFoundError,
    ConfigurationError,
    JxAuthError,
    LaunchError,
    ReauthRequiredError,
    SessionError,
    StorageError,
    StorageErrorKind,
    TokenError,
    TokenRejectedError,
    TransientTokenError,
    ValidationError,
)
from .http_client import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    HttpResponse,
    HttpxHttpClient,
    MockHttpClient,
)
from .login_surface import CallbackServerSurface, LoginSurface, PasteRedirectSurface
from .oauth import AuthCode, AuthorizationFlow, OAuthConfig, build_authorization_url, parse_redirect
from .pkce import PkceCodes, generate_pkce
from .session import SessionIssuer, SessionManager, SessionState, SessionStatus
from .storage import (
    FileSystemSessionStore,
    InMemorySessionStore,
    SessionStore,
    StoredSession,
    TokenPair,
)
from .token_exchanger import TokenExchanger

__all__ = [
    # Storage
    "SessionStore",
    "StoredSession",
    "TokenPair",
    "FileSystemSessionStore",
    "InMemorySessionStore",
    # Authorization flow
    "OAuthConfig",
    "AuthCode",
    "AuthorizationFlow",
    "build_authorization_url",
    "parse_redirect",
    "LoginSurface",
    "PasteRedirectSurface",
    "CallbackServerSurface",
    "OAuthCallbackServer",
    "OAuthCallbackHandler",
    "generate_pkce",
    "PkceCodes",
    # Tokens and sessions
    "TokenExchanger",
    "SessionManager",
    "SessionState",
    "SessionStatus",
    "SessionIssuer",
    # HTTP client
    "HttpClient",
    "HttpClientConfig",
    "HttpResponse",
    "HttpError",
    "HttpxHttpClient",
    "MockHttpClient",
    # Exceptions
    "JxAuthError",
    "ValidationError",
    "ConfigurationError",
    "AuthFlowError",
    "AuthFlowErrorKind",
    "TokenError",
    "TransientTokenError",
    "TokenRejectedError",
    "StorageError",
    "StorageErrorKind",
    "SessionError",
    "ReauthRequiredError",
    "CharacterNotFoundError",
    "LaunchError",
]
