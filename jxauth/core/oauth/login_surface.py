"""Login surfaces: where the user actually signs in.

A surface takes the authorization URL, lets the user complete the
provider's login page, and reports the final redirect URL back, or None
when the user gives up. The flow driver does not care how the page is
rendered.
"""

from __future__ import annotations

import abc
import logging
import threading
import urllib.parse
import webbrowser
from collections.abc import Callable

from rich.console import Console
from rich.prompt import Prompt

from .callback_server import OAuthCallbackServer, shutdown_after_delay
from .constants import OAuthDefaults

_logger = logging.getLogger(__name__)


class LoginSurface(abc.ABC):
    """Capability that renders a login page and returns the redirect."""

    @abc.abstractmethod
    def open(self, auth_url: str) -> str | None:
        """Show ``auth_url`` and block until the login finishes.

        Returns:
            The redirect URL the provider navigated to, or None if cancelled
        """


def _open_browser(auth_url: str, console: Console) -> None:
    if not webbrowser.open(auth_url):
        _logger.debug("No browser could be launched")
    console.print(f"If no browser window opened, visit this URL to log in:\n{auth_url}\n")


class PasteRedirectSurface(LoginSurface):
    """System browser plus a pasted redirect URL.

    The launcher's redirect URI lives on the provider's domain, so a local
    listener never sees it. After logging in, the browser lands on that
    page and the user copies the address bar into the terminal.
    """

    def __init__(
        self,
        open_browser: bool = True,
        console: Console | None = None,
        ask: Callable[[str], str] | None = None,
    ) -> None:
        self.open_browser = open_browser
        self.console = console or Console(stderr=True)
        self._ask = ask or (lambda prompt: Prompt.ask(prompt, console=self.console, default=""))

    def open(self, auth_url: str) -> str | None:
        if self.open_browser:
            _open_browser(auth_url, self.console)
        else:
            self.console.print(f"Visit this URL to log in:\n{auth_url}\n")

        self.console.print(
            "After logging in your browser is sent to a page on secure.runescape.com.\n"
            "Copy the full address from the address bar and paste it below "
            "(leave empty to cancel)."
        )
        try:
            answer = self._ask("Redirect URL")
        except (EOFError, KeyboardInterrupt):
            return None

        answer = answer.strip()
        return answer or None


class CallbackServerSurface(LoginSurface):
    """System browser plus a local HTTP listener on the redirect URI.

    Only usable when the redirect URI is ``http://localhost:<port>/...``.
    A timeout is reported as a cancellation.
    """

    def __init__(
        self,
        redirect_uri: str,
        timeout: float = OAuthDefaults.CALLBACK_TIMEOUT,
        open_browser: bool = True,
        console: Console | None = None,
    ) -> None:
        parsed = urllib.parse.urlparse(redirect_uri)
        self.host = parsed.hostname or "localhost"
        self.port = parsed.port or 80
        self.callback_path = parsed.path or "/"
        self.timeout = timeout
        self.open_browser = open_browser
        self.console = console or Console(stderr=True)

    def open(self, auth_url: str) -> str | None:
        server = OAuthCallbackServer((self.host, self.port), self.callback_path)
        server_thread = threading.Thread(target=server.serve_forever, daemon=True)
        server_thread.start()

        try:
            if self.open_browser:
                _open_browser(auth_url, self.console)
            else:
                self.console.print(f"Visit this URL to log in:\n{auth_url}\n")

            redirect_url = server.wait_for_redirect(self.timeout)
            if redirect_url is None:
                _logger.warning("No login redirect received within %ss", self.timeout)
            return redirect_url
        finally:
            shutdown_after_delay(server)


__all__ = [
    "LoginSurface",
    "PasteRedirectSurface",
    "CallbackServerSurface",
]
