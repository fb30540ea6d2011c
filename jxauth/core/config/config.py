"""Runtime configuration for jxauth.

Values are read once from the environment (``.env`` files are loaded at
package import) using the declarative schema, then exposed as plain
properties. Collaborator configs (OAuthConfig, HttpClientConfig) are built
on demand so each command only pays for what it uses.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..oauth.exceptions import ValidationError
from ..oauth.http_client import HttpClientConfig
from ..oauth.oauth import OAuthConfig
from .schema import ConfigSchema
from .validation import ConfigError, load_env_var

_APP_DIR = "jxauth"


def default_data_home(environ: Mapping[str, str] | None = None) -> Path:
    """``$XDG_DATA_HOME/jxauth``, falling back to ``~/.local/share/jxauth``."""
    env = os.environ if environ is None else environ
    xdg = env.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / _APP_DIR


def validate_session_name(name: str) -> str:
    """A session name becomes a directory name: no separators, no dot names.

    Raises:
        ValidationError: If the name cannot be used as a directory
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\0" in name:
        raise ValidationError("session_name", name, "must be a plain name without path separators")
    return name


class Config:
    """Configuration with direct access to all settings.

    Example:
        >>> config = Config()
        >>> config.session_dir("default")
        PosixPath('/home/user/.local/share/jxauth/default')

    Raises:
        ConfigError: If any variable fails validation (first failure wins)
    """

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = os.environ if environ is None else environ
        self._values: dict[str, Any] = {
            name: load_env_var(spec, self._environ)
            for name, spec in ConfigSchema.all_specs().items()
        }

    def _get(self, name: str) -> Any:
        return self._values[name]

    # General
    @property
    def log_level(self) -> str:
        # Tolerate trailing comments such as "DEBUG  # noisy"
        return str(self._get("LOG_LEVEL")).split()[0].upper()

    @property
    def data_home(self) -> Path:
        home = self._get("HOME")
        if home:
            return Path(home).expanduser()
        return default_data_home(self._environ)

    def session_dir(self, session_name: str) -> Path:
        return self.data_home / validate_session_name(session_name)

    @property
    def open_browser(self) -> bool:
        return bool(self._get("OPEN_BROWSER"))

    # Network
    @property
    def http_timeout(self) -> float:
        return float(self._get("HTTP_TIMEOUT"))

    @property
    def max_retries(self) -> int:
        return int(self._get("MAX_RETRIES"))

    @property
    def http_client_config(self) -> HttpClientConfig:
        return HttpClientConfig(timeout=self.http_timeout, max_retries=self.max_retries)

    # Session
    @property
    def expiry_margin(self) -> int:
        return int(self._get("EXPIRY_MARGIN"))

    @property
    def callback_timeout(self) -> int:
        return int(self._get("CALLBACK_TIMEOUT"))

    # Identity provider
    @property
    def game_api(self) -> str:
        return str(self._get("GAME_API"))

    def oauth_config(self) -> OAuthConfig:
        """Build the identity provider config.

        Raises:
            ConfigError: If the configured values do not form a valid config
        """
        try:
            return OAuthConfig(
                client_id=self._get("CLIENT_ID"),
                origin=self._get("ORIGIN"),
                redirect_uri=self._get("REDIRECT_URI"),
                callback_timeout=self.callback_timeout,
            )
        except ValidationError as e:
            spec = ConfigSchema.get_spec(f"JXAUTH_{e.field.upper()}")
            env_var = spec.name if spec is not None else e.field
            raise ConfigError(env_var, str(e.value), e.message) from e
