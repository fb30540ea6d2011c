"""
Validation utilities for the jxauth oauth package.

All validation functions raise ValidationError with descriptive
messages when validation fails, making it easy to debug configuration
issues and corrupted session files.

Example:
    >>> validate_url("http://account.jagex.com", "origin", require_https=True)
    ValidationError: Invalid 'origin': URL must use HTTPS scheme (got 'http://account.jagex.com')
"""

from __future__ import annotations

import datetime
import urllib.parse
from typing import Any

from .exceptions import ValidationError

# =============================================================================
# TYPE VALIDATION
# =============================================================================


def validate_type(value: object, expected_type: type | tuple[type, ...], field_name: str) -> None:
    """Validate that value is of expected type.

    Raises:
        ValidationError: If value is not of expected type
    """
    if not isinstance(value, expected_type):
        type_names = (
            expected_type.__name__
            if isinstance(expected_type, type)
            else " or ".join(t.__name__ for t in expected_type)
        )
        raise ValidationError(
            field_name, value, f"must be {type_names}, got {type(value).__name__}"
        )


def validate_string(value: object, field_name: str, allow_empty: bool = False) -> str:
    """Validate that value is a string (optionally non-empty).

    Args:
        value: The value to validate
        field_name: Name of the field (for error messages)
        allow_empty: If True, empty strings are allowed

    Returns:
        The validated string

    Raises:
        ValidationError: If value is not a string or is empty when not allowed
    """
    validate_type(value, str, field_name)

    assert isinstance(value, str)  # for type narrowing

    if not allow_empty and not value:
        raise ValidationError(field_name, value, "must be a non-empty string")

    return value


# =============================================================================
# RANGE VALIDATION
# =============================================================================


def validate_range(
    value: int,
    field_name: str,
    min_value: int | None = None,
    max_value: int | None = None,
) -> None:
    """Validate that integer is within specified range.

    Raises:
        ValidationError: If value is outside range
    """
    validate_type(value, int, field_name)

    if min_value is not None and value < min_value:
        raise ValidationError(field_name, value, f"must be at least {min_value}")

    if max_value is not None and value > max_value:
        raise ValidationError(field_name, value, f"must be at most {max_value}")


# =============================================================================
# FORMAT VALIDATION
# =============================================================================


def validate_url(value: str, field_name: str, require_https: bool = False) -> str:
    """Validate that value is a well-formed URL.

    Args:
        value: URL string to validate
        field_name: Name of the field (for error messages)
        require_https: If True, only HTTPS URLs are allowed

    Returns:
        The validated URL string

    Raises:
        ValidationError: If URL is malformed or has wrong scheme
    """
    validate_string(value, field_name)

    try:
        parsed = urllib.parse.urlparse(value)
    except ValueError as e:
        raise ValidationError(field_name, value, f"malformed URL: {e}") from e

    if not parsed.scheme or not parsed.netloc:
        raise ValidationError(field_name, value, "URL must have scheme and netloc")

    if require_https and parsed.scheme != "https":
        raise ValidationError(field_name, value, "URL must use HTTPS scheme")

    return value


def validate_iso_timestamp(value: str, field_name: str) -> datetime.datetime:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC.

    Raises:
        ValidationError: If timestamp is malformed
    """
    validate_string(value, field_name)

    try:
        parsed = datetime.datetime.fromisoformat(value)
    except ValueError as e:
        raise ValidationError(field_name, value, f"invalid ISO 8601 timestamp: {e}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    try:
        return parsed.astimezone(datetime.timezone.utc)
    except OverflowError as e:
        raise ValidationError(field_name, value, "timestamp out of range") from e


def validate_token(value: object, field_name: str = "token") -> str:
    """Validate that value looks like an opaque token.

    This is a basic sanity check, not cryptographic validation: tokens
    must be non-empty printable strings without whitespace.

    Raises:
        ValidationError: If token appears invalid
    """
    token = validate_string(value, field_name)

    if not token.isprintable() or any(ch.isspace() for ch in token):
        raise ValidationError(field_name, "<redacted>", "token contains invalid characters")

    return token


# =============================================================================
# INSTANCE VALIDATION
# =============================================================================


def validate_store_instance(store: Any, param_name: str = "store") -> None:
    """Validate that store is a proper SessionStore instance.

    Raises:
        ValidationError: If store is not a valid SessionStore
    """
    # Import here to avoid circular imports
    from .storage import SessionStore

    if not isinstance(store, SessionStore):
        raise ValidationError(
            param_name, store, f"must be an instance of SessionStore, got {type(store).__name__}"
        )


# =============================================================================
# DICT VALIDATION
# =============================================================================


def validate_dict_keys(data: dict[str, Any], allowed_keys: set[str], context: str) -> None:
    """Validate that dict contains only allowed keys.

    Raises:
        ValidationError: If dict contains unknown keys
    """
    unknown_keys = set(data.keys()) - allowed_keys

    if unknown_keys:
        raise ValidationError(
            f"{context}.keys",
            sorted(unknown_keys),
            f"unknown field(s): {', '.join(sorted(unknown_keys))}. "
            f"Valid fields are: {', '.join(sorted(allowed_keys))}",
        )


__all__ = [
    "validate_type",
    "validate_string",
    "validate_range",
    "validate_url",
    "validate_iso_timestamp",
    "validate_token",
    "validate_store_instance",
    "validate_dict_keys",
]
