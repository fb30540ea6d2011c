import datetime

import pytest

from jxauth.core.oauth import InMemorySessionStore, ValidationError
from jxauth.core.oauth.validation import (
    validate_dict_keys,
    validate_iso_timestamp,
    validate_range,
    validate_store_instance,
    validate_string,
    validate_token,
    validate_url,
)


@pytest.mark.unit
class TestValidateUrl:
    def test_accepts_https(self):
        assert validate_url("https://account.jagex.com", "origin", require_https=True)

    def test_rejects_http_when_https_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_url("http://account.jagex.com", "origin", require_https=True)
        assert exc_info.value.field == "origin"
        assert "HTTPS" in exc_info.value.message

    def test_rejects_missing_scheme(self):
        with pytest.raises(ValidationError):
            validate_url("account.jagex.com/oauth2", "origin")


@pytest.mark.unit
class TestValidateIsoTimestamp:
    def test_returns_aware_utc(self):
        parsed = validate_iso_timestamp("2024-01-01T14:00:00+02:00", "expires_at")
        assert parsed == datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
        assert parsed.tzinfo is datetime.timezone.utc

    def test_naive_is_assumed_utc(self):
        parsed = validate_iso_timestamp("2024-01-01T12:00:00", "expires_at")
        assert parsed.tzinfo is datetime.timezone.utc

    def test_rejects_garbage(self):
        with pytest.raises(ValidationError):
            validate_iso_timestamp("tomorrow", "expires_at")

    def test_rejects_out_of_range(self):
        with pytest.raises(ValidationError):
            validate_iso_timestamp("0001-01-01T00:00:00+23:59", "expires_at")


@pytest.mark.unit
class TestValidateToken:
    def test_accepts_opaque_token(self):
        assert validate_token("eyJhbGciOi.abc-123_x", "access_token") == "eyJhbGciOi.abc-123_x"

    @pytest.mark.parametrize("value", ["", "has space", "line\nbreak"])
    def test_rejects_bad_tokens(self, value):
        with pytest.raises(ValidationError):
            validate_token(value, "access_token")

    def test_error_does_not_echo_the_token(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_token("secret value", "refresh_token")
        assert "secret" not in str(exc_info.value)


@pytest.mark.unit
def test_validate_range_bounds():
    validate_range(5, "n", min_value=1, max_value=10)
    with pytest.raises(ValidationError):
        validate_range(0, "n", min_value=1)
    with pytest.raises(ValidationError):
        validate_range(11, "n", max_value=10)


@pytest.mark.unit
def test_validate_string_rejects_empty_and_non_strings():
    with pytest.raises(ValidationError):
        validate_string("", "session_id")
    with pytest.raises(ValidationError):
        validate_string(42, "session_id")


@pytest.mark.unit
def test_validate_store_instance():
    validate_store_instance(InMemorySessionStore())
    with pytest.raises(ValidationError):
        validate_store_instance(object())


@pytest.mark.unit
def test_validate_dict_keys_lists_unknown_fields():
    with pytest.raises(ValidationError) as exc_info:
        validate_dict_keys({"a": 1, "zz": 2}, {"a"}, "StoredSession")
    assert "zz" in exc_info.value.message
