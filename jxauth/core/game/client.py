"""Jagex game-session API client.

Creates game sessions from an OpenID ID token and lists the characters
(game accounts) tied to a session.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from ..oauth.constants import JagexClient
from ..oauth.exceptions import JxAuthError
from ..oauth.http_client import HttpClient

_logger = logging.getLogger(__name__)

_JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class GameApiError(JxAuthError):
    """The game-session API answered with something we cannot use."""

    hint = "This appears to be a server-side issue, please try again or report this bug if it persists"


@dataclass(frozen=True)
class CharacterRecord:
    """A character (game account) tied to the authenticated identity.

    Attributes:
        id: Numeric account id, kept as the server sent it
        display_name: In-game display name
    """

    id: str
    display_name: str

    def to_dict(self) -> dict[str, str]:
        return {"accountId": self.id, "displayName": self.display_name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CharacterRecord:
        """Parse one ``{accountId, displayName, ...}`` item.

        Raises:
            KeyError: If a required field is missing
        """
        return cls(id=str(data["accountId"]), display_name=str(data["displayName"]))


class GameSessionClient:
    """Client for ``/game-session/v1``.

    Example:
        >>> client = GameSessionClient(HttpxHttpClient())
        >>> session_id = client.create_session(tokens.id_token)
        >>> client.list_characters(session_id)
        [CharacterRecord(id='123', display_name='Zezima')]
    """

    def __init__(self, http_client: HttpClient, base_url: str = JagexClient.GAME_API) -> None:
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    def create_session(self, id_token: str) -> str:
        """Create a game session.

        Returns:
            The session id

        Raises:
            HttpError: If the request fails
            GameApiError: If the response has no session id
        """
        body = json.dumps({"idToken": id_token}).encode()
        response = self.http_client.post(f"{self.base_url}/sessions", data=body, headers=_JSON_HEADERS)

        try:
            session_id = response.json()["sessionId"]
        except (ValueError, KeyError, TypeError) as e:
            raise GameApiError("Invalid response from game session server") from e

        if not isinstance(session_id, str) or not session_id:
            raise GameApiError("Game session server returned an empty session id")
        return session_id

    def list_characters(self, session_id: str) -> list[CharacterRecord]:
        """List the characters available to a session, in server order.

        Raises:
            HttpError: If the request fails
            GameApiError: If the response cannot be parsed
        """
        headers = dict(_JSON_HEADERS)
        headers["Authorization"] = f"Bearer {session_id}"
        response = self.http_client.get(f"{self.base_url}/accounts", headers=headers)

        try:
            characters = [CharacterRecord.from_dict(item) for item in response.json()]
        except (ValueError, KeyError, TypeError) as e:
            raise GameApiError("Invalid character list from game session server") from e

        _logger.debug("Fetched %d characters", len(characters))
        return characters


__all__ = ["CharacterRecord", "GameApiError", "GameSessionClient"]
