"""OAuth 2.0 + PKCE authorization flow for Jagex accounts.

This module builds the authorization request, hands it to a login
surface and turns the captured redirect into an authorization code.
Rendering the login page is the surface's job (login_surface.py).
"""

from __future__ import annotations

import logging
import secrets
import urllib.parse
from dataclasses import dataclass

from .constants import JagexClient, OAuthDefaults, OAuthProtocol, PkceProtocol, ValidationLimits
from .exceptions import AuthFlowError, AuthFlowErrorKind
from .login_surface import LoginSurface
from .pkce import generate_pkce
from .validation import validate_range, validate_string, validate_url

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthConfig:
    """Configuration for the identity provider.

    Attributes:
        client_id: OAuth client ID (defaults to the official launcher's)
        origin: Identity provider origin (must be HTTPS)
        redirect_uri: Registered redirect URI the provider sends the code to
        scope: Space-separated scopes to request
        callback_timeout: Seconds a local callback listener waits (1-3600)

    Raises:
        ValidationError: If any parameter fails validation
    """

    client_id: str = JagexClient.CLIENT_ID
    origin: str = JagexClient.ORIGIN
    redirect_uri: str = JagexClient.REDIRECT_URI
    scope: str = JagexClient.SCOPE
    callback_timeout: int = OAuthDefaults.CALLBACK_TIMEOUT

    def __post_init__(self) -> None:
        validate_string(self.client_id, "client_id", allow_empty=False)
        validate_url(self.origin, "origin", require_https=True)
        validate_url(self.redirect_uri, "redirect_uri")
        validate_string(self.scope, "scope", allow_empty=False)
        validate_range(
            self.callback_timeout,
            "callback_timeout",
            min_value=ValidationLimits.MIN_TIMEOUT_SECONDS,
            max_value=ValidationLimits.MAX_TIMEOUT_SECONDS,
        )

    @property
    def authorize_url(self) -> str:
        return f"{self.origin.rstrip('/')}/oauth2/auth"

    @property
    def token_url(self) -> str:
        return f"{self.origin.rstrip('/')}/oauth2/token"

    @property
    def uses_local_callback(self) -> bool:
        """True when the redirect lands on this machine and can be captured."""
        host = urllib.parse.urlparse(self.redirect_uri).hostname
        return host in ("localhost", "127.0.0.1")


@dataclass(frozen=True)
class AuthCode:
    """A one-time authorization code plus what is needed to redeem it."""

    code: str
    code_verifier: str
    redirect_uri: str

    def __repr__(self) -> str:
        return f"AuthCode(redirect_uri={self.redirect_uri!r})"


def build_authorization_url(config: OAuthConfig, state: str, code_challenge: str) -> str:
    """Build the provider's authorization URL for one login attempt."""
    params = {
        "flow": "launcher",
        "response_type": OAuthProtocol.RESPONSE_TYPE_CODE,
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "code_challenge": code_challenge,
        "code_challenge_method": PkceProtocol.CODE_CHALLENGE_METHOD,
        "prompt": "login",
        "scope": config.scope,
        "state": state,
    }
    return f"{config.authorize_url}?" + urllib.parse.urlencode(params)


def parse_redirect(redirect_url: str, expected_redirect_uri: str) -> tuple[str, str]:
    """Extract ``(code, state)`` from a captured redirect.

    Raises:
        AuthFlowError: CANCELLED if the provider reported an error such as
            ``access_denied``; MALFORMED_REDIRECT if the URL is not the
            registered redirect or lacks ``code``/``state``
    """
    parsed = urllib.parse.urlparse(redirect_url.strip())
    expected = urllib.parse.urlparse(expected_redirect_uri)

    if (parsed.scheme, parsed.hostname, parsed.path.rstrip("/")) != (
        expected.scheme,
        expected.hostname,
        expected.path.rstrip("/"),
    ):
        raise AuthFlowError(
            AuthFlowErrorKind.MALFORMED_REDIRECT,
            f"Redirect does not target {expected_redirect_uri}",
        )

    params = urllib.parse.parse_qs(parsed.query)
    error = params.get("error", [None])[0]
    if error:
        description = params.get("error_description", [error])[0]
        raise AuthFlowError(AuthFlowErrorKind.CANCELLED, f"Login was not completed: {description}")

    code = params.get("code", [None])[0]
    state = params.get("state", [None])[0]
    if not code or not state:
        raise AuthFlowError(
            AuthFlowErrorKind.MALFORMED_REDIRECT,
            "Redirect is missing the authorization code or state parameter",
        )
    return code, state


class AuthorizationFlow:
    """Drives one interactive login per call.

    Each attempt generates a fresh state and PKCE pair, hands the
    authorization URL to the login surface, and checks the redirect's
    state before the code is released to anyone.

    Example:
        >>> flow = AuthorizationFlow(OAuthConfig(), PasteRedirectSurface())
        >>> auth_code = flow.obtain_authorization_code()
    """

    def __init__(self, config: OAuthConfig, surface: LoginSurface) -> None:
        self.config = config
        self.surface = surface

    def obtain_authorization_code(self) -> AuthCode:
        """Run the login and return the authorization code.

        Blocks until the surface yields a redirect or is cancelled.

        Raises:
            AuthFlowError: On cancellation, state mismatch or malformed redirect
        """
        state = secrets.token_urlsafe(32)
        pkce = generate_pkce()
        auth_url = build_authorization_url(self.config, state, pkce.code_challenge)

        _logger.debug("Starting login via %s", type(self.surface).__name__)
        redirect_url = self.surface.open(auth_url)
        if redirect_url is None:
            raise AuthFlowError(AuthFlowErrorKind.CANCELLED, "Login was cancelled")

        code, returned_state = parse_redirect(redirect_url, self.config.redirect_uri)

        if not secrets.compare_digest(returned_state.encode(), state.encode()):
            _logger.warning("Login redirect carried an unexpected state parameter")
            raise AuthFlowError(
                AuthFlowErrorKind.STATE_MISMATCH,
                "Login state parameter mismatch - possible CSRF attack",
            )

        return AuthCode(
            code=code,
            code_verifier=pkce.code_verifier,
            redirect_uri=self.config.redirect_uri,
        )


__all__ = [
    "OAuthConfig",
    "AuthCode",
    "AuthorizationFlow",
    "build_authorization_url",
    "parse_redirect",
]
