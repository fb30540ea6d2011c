"""Builders for sessions, token responses and a controllable clock."""

import datetime
import urllib.parse
from collections.abc import Callable

from jxauth.core.oauth import LoginSurface, StoredSession, TokenPair

T0 = datetime.datetime(2024, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


class FakeClock:
    """Deterministic clock; call it to read, advance() to move time forward."""

    def __init__(self, now: datetime.datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += datetime.timedelta(seconds=seconds)


def make_session(
    issued_at: datetime.datetime = T0,
    ttl: int = 3600,
    access_token: str = "AT1",
    refresh_token: str = "RT1",
    id_token: str = "ID1",
    session_id: str = "S1",
) -> StoredSession:
    tokens = TokenPair(
        access_token=access_token,
        refresh_token=refresh_token,
        id_token=id_token,
        issued_at=issued_at,
        expires_at=issued_at + datetime.timedelta(seconds=ttl),
    )
    return StoredSession(tokens=tokens, session_id=session_id)


def token_response(access_token: str, refresh_token: str, expires_in: int = 3600, id_token: str = "ID1"):
    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "id_token": id_token,
        "expires_in": expires_in,
        "token_type": "Bearer",
    }


REDIRECT_URI = "https://secure.runescape.com/m=weblogin/launcher-redirect"


def redirect_to(redirect_uri: str = REDIRECT_URI, **params: str) -> str:
    return f"{redirect_uri}?{urllib.parse.urlencode(params)}"


class ScriptedSurface(LoginSurface):
    """Login surface that answers from a callback given the authorization parameters."""

    def __init__(self, respond: Callable[[dict[str, str]], str | None]) -> None:
        self.respond = respond
        self.auth_urls: list[str] = []

    def open(self, auth_url: str) -> str | None:
        self.auth_urls.append(auth_url)
        query = urllib.parse.urlparse(auth_url).query
        return self.respond(dict(urllib.parse.parse_qsl(query)))

    @classmethod
    def approving(cls, code: str = "abc123") -> "ScriptedSurface":
        """A user who logs in successfully; the redirect echoes the request's state."""
        return cls(lambda params: redirect_to(params["redirect_uri"], code=code, state=params["state"]))
