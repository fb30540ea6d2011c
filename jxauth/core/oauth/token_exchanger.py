"""Token endpoint client.

Exchanges authorization codes and refresh tokens for token pairs. Each
call is a single round-trip: retry policy belongs to the session manager,
and a refresh token must never be replayed after the provider may have
rotated it.
"""

from __future__ import annotations

import datetime
import logging
import urllib.parse
from collections.abc import Callable
from typing import Any

from .constants import OAuthProtocol
from .exceptions import TokenRejectedError, TransientTokenError, ValidationError
from .http_client import HttpClient, HttpError
from .oauth import AuthCode, OAuthConfig
from .storage import TokenPair

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class TokenExchanger:
    """Handle OAuth token exchange and refresh.

    Error classification:
    - TransientTokenError: network failure, 429, 5xx or an unusable
      response body; the same credential may be used again later
    - TokenRejectedError: any other 4xx (``invalid_grant`` etc.); the
      credential is dead
    """

    def __init__(
        self,
        http_client: HttpClient,
        config: OAuthConfig | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self.http_client = http_client
        self.config = config or OAuthConfig()
        self._clock = clock

    def exchange_code(self, auth_code: AuthCode) -> TokenPair:
        """Exchange an authorization code for a token pair.

        Raises:
            TransientTokenError: If the request may succeed when retried
            TokenRejectedError: If the provider refused the code
        """
        form = {
            "grant_type": OAuthProtocol.GRANT_TYPE_AUTH_CODE,
            "client_id": self.config.client_id,
            "code": auth_code.code,
            "code_verifier": auth_code.code_verifier,
            "redirect_uri": auth_code.redirect_uri,
        }
        return self._request(form, previous=None)

    def refresh(self, refresh_token: str, previous: TokenPair | None = None) -> TokenPair:
        """Exchange a refresh token for a new token pair.

        Args:
            refresh_token: The refresh token to redeem
            previous: The pair being replaced; its refresh/id tokens are
                carried over when the provider does not send new ones

        Raises:
            TransientTokenError: If the request may succeed when retried
            TokenRejectedError: If the refresh token is revoked or expired
        """
        form = {
            "grant_type": OAuthProtocol.GRANT_TYPE_REFRESH_TOKEN,
            "client_id": self.config.client_id,
            "refresh_token": refresh_token,
        }
        return self._request(form, previous=previous)

    def _request(self, form: dict[str, str], previous: TokenPair | None) -> TokenPair:
        grant_type = form["grant_type"]
        data = urllib.parse.urlencode(form).encode()
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        # Read the clock before sending so network latency shortens, never extends, the lifetime
        issued_at = self._clock()

        try:
            response = self.http_client.post(self.config.token_url, data=data, headers=headers)
        except HttpError as e:
            raise self._classify(grant_type, e) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise TransientTokenError(f"Token {grant_type} failed: response is not JSON") from e

        try:
            return self._token_pair(payload, issued_at, previous)
        except (AttributeError, KeyError, OverflowError, TypeError, ValueError, ValidationError) as e:
            _logger.error("Token %s returned an unusable response: %s", grant_type, e)
            raise TransientTokenError(f"Token {grant_type} failed: invalid response - {e}") from e

    @staticmethod
    def _token_pair(
        payload: dict[str, Any], issued_at: datetime.datetime, previous: TokenPair | None
    ) -> TokenPair:
        expires_in = int(payload["expires_in"])
        if expires_in <= 0:
            raise ValueError(f"expires_in must be positive, got {expires_in}")

        refresh_token = payload.get("refresh_token") or (previous.refresh_token if previous else None)
        if not refresh_token:
            raise KeyError("refresh_token")

        id_token = payload.get("id_token") or (previous.id_token if previous else None)

        return TokenPair(
            access_token=payload["access_token"],
            refresh_token=refresh_token,
            id_token=id_token,
            issued_at=issued_at,
            expires_at=issued_at + datetime.timedelta(seconds=expires_in),
        )

    @staticmethod
    def _classify(grant_type: str, error: HttpError) -> TransientTokenError | TokenRejectedError:
        if error.is_transient:
            if error.status_code == 0:
                _logger.warning("Token %s failed: network error - %s", grant_type, error.reason)
            else:
                _logger.error("Token %s failed: HTTP %s - %s", grant_type, error.status_code, error.reason)
            return TransientTokenError(
                f"Token {grant_type} failed: "
                + ("network error" if error.status_code == 0 else f"HTTP {error.status_code}")
            )

        payload = error.error_payload()
        detail = payload.get("error_description") or payload.get("error") or error.reason
        _logger.error("Token %s rejected: HTTP %s - %s", grant_type, error.status_code, detail)
        return TokenRejectedError(f"Token {grant_type} rejected by provider: {detail}")


__all__ = ["TokenExchanger", "utcnow"]
