"""Type coercion and validation utilities for configuration loading.

Errors are raised with clear messages to help users fix configuration issues.
"""

import os
from collections.abc import Mapping
from typing import Any

from ..oauth.exceptions import ConfigurationError
from .schema import ConfigSchema, EnvVarSpec


class ConfigError(ConfigurationError):
    """Configuration validation error.

    Raised when an environment variable fails validation or cannot be
    converted to the expected type.

    Attributes:
        env_var: The environment variable name
        value: The raw value that failed validation
        message: Human-readable error message
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")


def _parse_bool(value: str) -> bool:
    """Parse string to boolean.

    Returns:
        True if value is "true", "1", "yes", or "on" (case-insensitive)
        False otherwise
    """
    return value.strip().lower() in ("true", "1", "yes", "on")


def load_env_var(spec: EnvVarSpec, environ: Mapping[str, str] | None = None) -> Any:
    """Load and validate a single environment variable.

    Args:
        spec: Environment variable specification from ConfigSchema
        environ: Mapping to read from (defaults to ``os.environ``)

    Returns:
        Validated and coerced value, or the spec default when unset

    Raises:
        ConfigError: If validation fails or type conversion is impossible
    """
    env = os.environ if environ is None else environ
    raw_value = env.get(spec.name)

    # Unset and empty both mean "use the default"
    if raw_value is None or raw_value.strip() == "":
        return spec.default

    try:
        if spec.coerce is not None:
            value = spec.coerce(raw_value)
        elif spec.type_hint is bool:
            value = _parse_bool(raw_value)
        elif spec.type_hint is int:
            value = int(raw_value)
        elif spec.type_hint is float:
            value = float(raw_value)
        else:
            value = raw_value.strip()
    except (ValueError, TypeError) as e:
        raise ConfigError(
            spec.name,
            raw_value,
            f"Cannot convert to {spec.type_hint.__name__}: {e}",
        ) from e

    if spec.validator is not None:
        try:
            valid = spec.validator(value)
        except (TypeError, AttributeError, IndexError) as e:
            raise ConfigError(spec.name, raw_value, f"Validation error: {e}") from e
        if not valid:
            raise ConfigError(spec.name, raw_value, f"Invalid value: expected {spec.description}")

    return value


def validate_all(environ: Mapping[str, str] | None = None) -> list[ConfigError]:
    """Validate all environment variables and return any errors.

    Shows every configuration problem at once instead of failing on the
    first one.

    Example:
        errors = validate_all()
        if errors:
            for error in errors:
                print(f"Configuration error: {error}")
    """
    errors: list[ConfigError] = []
    for spec in ConfigSchema.all_specs().values():
        try:
            load_env_var(spec, environ)
        except ConfigError as e:
            errors.append(e)
    return errors
