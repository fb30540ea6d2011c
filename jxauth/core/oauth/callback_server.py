"""HTTP callback listener for providers that redirect to localhost.

The server only captures the redirect URL; validating the state and
redeeming the code is left to AuthorizationFlow.
"""

from __future__ import annotations

import http.server
import threading
import time
import urllib.parse

from .constants import OAuthDefaults, OAuthProtocol

_LOGIN_RECEIVED_HTML = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Login received</title>
  </head>
  <body>
    <div style="max-width: 640px; margin: 80px auto;
                font-family: system-ui, -apple-system, sans-serif;">
      <h1>Login received</h1>
      <p>You can now close this window and return to the terminal.</p>
    </div>
  </body>
</html>
"""


class OAuthCallbackServer(http.server.HTTPServer):
    """HTTP server that waits for exactly one redirect on ``callback_path``.

    Thread-safe: the handler thread records the redirect and signals an
    event the waiting thread blocks on.
    """

    def __init__(self, server_address: tuple[str, int], callback_path: str) -> None:
        super().__init__(server_address, OAuthCallbackHandler, bind_and_activate=True)
        self.callback_path = callback_path.rstrip("/") or "/"
        self.redirect_base = f"http://{server_address[0]}:{self.server_address[1]}"

        self._redirect_url: str | None = None
        self._done = threading.Event()
        self._lock = threading.Lock()

    def record_redirect(self, request_path: str) -> None:
        with self._lock:
            if self._redirect_url is None:
                self._redirect_url = self.redirect_base + request_path
        self._done.set()

    def wait_for_redirect(self, timeout: float) -> str | None:
        """Block until a redirect arrives.

        Returns:
            The full redirect URL, or None on timeout
        """
        if not self._done.wait(timeout=timeout):
            return None
        with self._lock:
            return self._redirect_url


class OAuthCallbackHandler(http.server.BaseHTTPRequestHandler):
    """Record the redirect request and show a confirmation page."""

    server: OAuthCallbackServer

    def do_GET(self) -> None:
        path = urllib.parse.urlparse(self.path).path.rstrip("/") or "/"

        if path != self.server.callback_path:
            self.send_error(OAuthProtocol.HTTP_NOT_FOUND, "Not Found")
            return

        self._send_html(_LOGIN_RECEIVED_HTML)
        self.server.record_redirect(self.path)

    def log_message(self, fmt: str, *args: object) -> None:
        """Suppress per-request log lines; they would leak the code to stderr."""

    def _send_html(self, body: str) -> None:
        encoded = body.encode()
        self.send_response(OAuthProtocol.HTTP_OK)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(encoded)))
        self.end_headers()
        self.wfile.write(encoded)


def shutdown_after_delay(
    server: http.server.HTTPServer, seconds: float = OAuthDefaults.SUCCESS_PAGE_SHUTDOWN_DELAY
) -> None:
    """Stop ``server`` from a background thread once the page has been flushed."""

    def _later() -> None:
        try:
            time.sleep(seconds)
        finally:
            server.shutdown()
            server.server_close()

    threading.Thread(target=_later, daemon=True).start()


__all__ = [
    "OAuthCallbackServer",
    "OAuthCallbackHandler",
    "shutdown_after_delay",
]
