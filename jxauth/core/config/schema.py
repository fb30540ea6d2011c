"""Declarative schema for environment variable configuration.

Every JXAUTH_* variable is defined once here with its default, type and
validation rule. ``jxauth.core.config.validation`` turns the raw
environment into typed values according to this schema.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..oauth.constants import JagexClient, OAuthDefaults, SessionDefaults, ValidationLimits

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EnvVarSpec:
    """Specification for a single environment variable.

    Attributes:
        name: Environment variable name (e.g., "JXAUTH_HOME")
        default: Default value if env var not set
        type_hint: Type for validation (int, str, float, bool)
        description: Human-readable description for docs
        validator: Optional custom validation function
        coerce: Optional function to convert string to target type
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    coerce: Callable[[str], Any] | None = None


class ConfigSchema:
    """Registry of all configuration environment variables."""

    # === General ===

    LOG_LEVEL = EnvVarSpec(
        name="JXAUTH_LOG_LEVEL",
        default="WARNING",
        type_hint=str,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validator=lambda x: x.split()[0].upper() in _LOG_LEVELS,
    )

    HOME = EnvVarSpec(
        name="JXAUTH_HOME",
        default=None,
        type_hint=str,
        description="Data directory (defaults to $XDG_DATA_HOME/jxauth or ~/.local/share/jxauth)",
    )

    OPEN_BROWSER = EnvVarSpec(
        name="JXAUTH_OPEN_BROWSER",
        default=True,
        type_hint=bool,
        description="Open the system browser automatically when logging in",
    )

    # === Network ===

    HTTP_TIMEOUT = EnvVarSpec(
        name="JXAUTH_HTTP_TIMEOUT",
        default=OAuthDefaults.HTTP_REQUEST_TIMEOUT,
        type_hint=float,
        description="HTTP request timeout in seconds",
        validator=lambda x: ValidationLimits.MIN_TIMEOUT_SECONDS
        <= x
        <= ValidationLimits.MAX_TIMEOUT_SECONDS,
    )

    MAX_RETRIES = EnvVarSpec(
        name="JXAUTH_MAX_RETRIES",
        default=OAuthDefaults.GAME_API_MAX_RETRIES,
        type_hint=int,
        description="Retry attempts for idempotent game API requests (token requests are never retried)",
        validator=lambda x: 0 <= x <= 10,
    )

    # === Session ===

    EXPIRY_MARGIN = EnvVarSpec(
        name="JXAUTH_EXPIRY_MARGIN",
        default=SessionDefaults.EXPIRY_MARGIN_SECONDS,
        type_hint=int,
        description="Seconds before expiry at which a session is already treated as expired",
        validator=lambda x: ValidationLimits.MIN_EXPIRY_MARGIN_SECONDS
        <= x
        <= ValidationLimits.MAX_EXPIRY_MARGIN_SECONDS,
    )

    CALLBACK_TIMEOUT = EnvVarSpec(
        name="JXAUTH_CALLBACK_TIMEOUT",
        default=OAuthDefaults.CALLBACK_TIMEOUT,
        type_hint=int,
        description="Seconds the local callback listener waits for the login redirect",
        validator=lambda x: ValidationLimits.MIN_TIMEOUT_SECONDS
        <= x
        <= ValidationLimits.MAX_TIMEOUT_SECONDS,
    )

    # === Identity provider ===

    ORIGIN = EnvVarSpec(
        name="JXAUTH_ORIGIN",
        default=JagexClient.ORIGIN,
        type_hint=str,
        description="Identity provider origin (must be HTTPS)",
        validator=lambda x: x.startswith("https://"),
    )

    CLIENT_ID = EnvVarSpec(
        name="JXAUTH_CLIENT_ID",
        default=JagexClient.CLIENT_ID,
        type_hint=str,
        description="OAuth client ID",
        validator=lambda x: bool(x.strip()),
    )

    REDIRECT_URI = EnvVarSpec(
        name="JXAUTH_REDIRECT_URI",
        default=JagexClient.REDIRECT_URI,
        type_hint=str,
        description="Registered OAuth redirect URI",
    )

    GAME_API = EnvVarSpec(
        name="JXAUTH_GAME_API",
        default=JagexClient.GAME_API,
        type_hint=str,
        description="Game session API base URL",
        validator=lambda x: x.startswith("https://"),
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Get all environment variable specifications, keyed by attribute name."""
        return {
            name: getattr(cls, name)
            for name in dir(cls)
            if isinstance(getattr(cls, name), EnvVarSpec)
        }

    @classmethod
    def get_spec(cls, name: str) -> EnvVarSpec | None:
        """Get specification for a specific env var by name.

        Args:
            name: The environment variable name (e.g., "JXAUTH_HOME")

        Returns:
            EnvVarSpec if found, None otherwise
        """
        for spec in cls.all_specs().values():
            if spec.name == name:
                return spec
        return None
