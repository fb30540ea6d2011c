"""
PKCE (Proof Key for Code Exchange) utilities.

PKCE prevents an intercepted authorization code from being redeemed by
anyone but the process that started the login. It is used by public
clients, like this launcher, that cannot keep a client secret.
"""

import base64
import hashlib
import secrets
from dataclasses import dataclass

from .constants import PkceProtocol


@dataclass(frozen=True)
class PkceCodes:
    """PKCE code verifier and challenge pair.

    Attributes:
        code_verifier: Cryptographically random string (43-128 chars)
        code_challenge: Base64url-encoded SHA256 hash of verifier
    """

    code_verifier: str
    code_challenge: str


def code_challenge_for(code_verifier: str) -> str:
    """Return the S256 challenge for a verifier (base64url, no padding)."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce() -> PkceCodes:
    """Generate PKCE code verifier and challenge.

    The verifier comes from ``secrets.token_urlsafe`` so it only contains
    unreserved characters and is exactly 43 characters long.

    Example:
        >>> pkce = generate_pkce()
        >>> len(pkce.code_verifier)
        43
    """
    code_verifier = secrets.token_urlsafe(PkceProtocol.CODE_VERIFIER_BYTES)

    return PkceCodes(
        code_verifier=code_verifier,
        code_challenge=code_challenge_for(code_verifier),
    )


__all__ = ["PkceCodes", "generate_pkce", "code_challenge_for"]
