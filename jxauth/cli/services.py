"""Wiring of the session manager and its collaborators for one CLI run."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType

from jxauth.core.config import Config
from jxauth.core.game import CharacterCache, GameSessionClient
from jxauth.core.oauth import (
    AuthorizationFlow,
    CallbackServerSurface,
    FileSystemSessionStore,
    HttpClient,
    HttpClientConfig,
    HttpxHttpClient,
    LoginSurface,
    OAuthConfig,
    PasteRedirectSurface,
    SessionManager,
    SessionStore,
    TokenExchanger,
)


@dataclass
class Services:
    store: SessionStore
    manager: SessionManager
    game: GameSessionClient
    cache: CharacterCache
    http_clients: list[HttpClient] = field(default_factory=list)

    def close(self) -> None:
        for client in self.http_clients:
            if isinstance(client, HttpxHttpClient):
                client.close()

    def __enter__(self) -> Services:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def login_surface(config: Config, oauth_config: OAuthConfig) -> LoginSurface:
    """Local listener when the redirect comes back to this machine, paste otherwise."""
    if oauth_config.uses_local_callback:
        return CallbackServerSurface(
            oauth_config.redirect_uri,
            timeout=config.callback_timeout,
            open_browser=config.open_browser,
        )
    return PasteRedirectSurface(open_browser=config.open_browser)


def build_services(config: Config, session_name: str, *, interactive: bool) -> Services:
    """Build everything a command needs; no network traffic happens here.

    Args:
        config: Loaded configuration
        session_name: Named session (a directory under the data home)
        interactive: Give the manager a login flow; without one it raises
            ReauthRequiredError instead of prompting

    Raises:
        ConfigError: If the identity provider settings are invalid
        ValidationError: If the session name is unusable
    """
    session_dir = config.session_dir(session_name)
    oauth_config = config.oauth_config()

    # Token requests are single-shot; a rotated refresh token must not be replayed
    token_http = HttpxHttpClient(HttpClientConfig(timeout=config.http_timeout, max_retries=0))
    game_http = HttpxHttpClient(config.http_client_config)

    store = FileSystemSessionStore(base_path=session_dir)
    game = GameSessionClient(game_http, base_url=config.game_api)
    flow = AuthorizationFlow(oauth_config, login_surface(config, oauth_config)) if interactive else None

    manager = SessionManager(
        store,
        TokenExchanger(token_http, oauth_config),
        game,
        flow,
        expiry_margin=config.expiry_margin,
    )
    return Services(
        store=store,
        manager=manager,
        game=game,
        cache=CharacterCache(session_dir),
        http_clients=[token_http, game_http],
    )
