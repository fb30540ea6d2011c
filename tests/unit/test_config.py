from pathlib import Path

import pytest

from jxauth.core.config import (
    Config,
    ConfigError,
    ConfigSchema,
    load_env_var,
    validate_all,
    validate_session_name,
)
from jxauth.core.config.validation import _parse_bool
from jxauth.core.oauth import ConfigurationError, ValidationError


@pytest.mark.unit
class TestLoadEnvVar:
    def test_default_when_unset(self):
        assert load_env_var(ConfigSchema.EXPIRY_MARGIN, {}) == 300

    def test_empty_means_default(self):
        assert load_env_var(ConfigSchema.EXPIRY_MARGIN, {"JXAUTH_EXPIRY_MARGIN": "  "}) == 300

    def test_coerces_int(self):
        assert load_env_var(ConfigSchema.EXPIRY_MARGIN, {"JXAUTH_EXPIRY_MARGIN": "60"}) == 60

    def test_rejects_non_numeric(self):
        with pytest.raises(ConfigError) as exc_info:
            load_env_var(ConfigSchema.EXPIRY_MARGIN, {"JXAUTH_EXPIRY_MARGIN": "soon"})
        assert exc_info.value.env_var == "JXAUTH_EXPIRY_MARGIN"

    def test_rejects_out_of_range(self):
        with pytest.raises(ConfigError):
            load_env_var(ConfigSchema.EXPIRY_MARGIN, {"JXAUTH_EXPIRY_MARGIN": "99999"})

    def test_rejects_plain_http_origin(self):
        with pytest.raises(ConfigError):
            load_env_var(ConfigSchema.ORIGIN, {"JXAUTH_ORIGIN": "http://account.jagex.com"})

    def test_config_error_is_a_configuration_error(self):
        assert issubclass(ConfigError, ConfigurationError)


@pytest.mark.unit
@pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("YES", True), ("on", True), ("false", False), ("0", False)])
def test_parse_bool(raw, expected):
    assert _parse_bool(raw) is expected


@pytest.mark.unit
def test_get_spec_by_variable_name():
    assert ConfigSchema.get_spec("JXAUTH_HOME") is ConfigSchema.HOME
    assert ConfigSchema.get_spec("HOME") is None


@pytest.mark.unit
def test_validate_all_collects_every_error():
    errors = validate_all({"JXAUTH_HTTP_TIMEOUT": "x", "JXAUTH_MAX_RETRIES": "-1"})
    assert sorted(e.env_var for e in errors) == ["JXAUTH_HTTP_TIMEOUT", "JXAUTH_MAX_RETRIES"]


@pytest.mark.unit
class TestConfig:
    def test_defaults(self):
        config = Config({})
        assert config.log_level == "WARNING"
        assert config.expiry_margin == 300
        assert config.http_timeout == 30.0
        assert config.max_retries == 3
        assert config.open_browser is True
        assert config.game_api == "https://auth.jagex.com/game-session/v1"
        assert config.oauth_config().token_url == "https://account.jagex.com/oauth2/token"

    def test_data_home_prefers_jxauth_home(self, tmp_path):
        config = Config({"JXAUTH_HOME": str(tmp_path / "custom"), "XDG_DATA_HOME": str(tmp_path / "xdg")})
        assert config.data_home == tmp_path / "custom"
        assert config.session_dir("alt") == tmp_path / "custom" / "alt"

    def test_data_home_uses_xdg(self, tmp_path):
        assert Config({"XDG_DATA_HOME": str(tmp_path)}).data_home == tmp_path / "jxauth"

    def test_data_home_falls_back_to_local_share(self):
        assert Config({}).data_home == Path.home() / ".local" / "share" / "jxauth"

    def test_http_client_config(self):
        http = Config({"JXAUTH_HTTP_TIMEOUT": "12.5", "JXAUTH_MAX_RETRIES": "0"}).http_client_config
        assert (http.timeout, http.max_retries) == (12.5, 0)

    def test_invalid_redirect_is_reported_by_variable(self):
        config = Config({"JXAUTH_REDIRECT_URI": "not-a-url"})
        with pytest.raises(ConfigError) as exc_info:
            config.oauth_config()
        assert exc_info.value.env_var == "JXAUTH_REDIRECT_URI"

    def test_invalid_value_fails_at_load(self):
        with pytest.raises(ConfigError):
            Config({"JXAUTH_CALLBACK_TIMEOUT": "0"})


@pytest.mark.unit
class TestValidateSessionName:
    @pytest.mark.parametrize("name", ["default", "alt-1", "my_main"])
    def test_accepts_plain_names(self, name):
        assert validate_session_name(name) == name

    @pytest.mark.parametrize("name", ["", ".", "..", "a/b", "../escape"])
    def test_rejects_paths(self, name):
        with pytest.raises(ValidationError):
            validate_session_name(name)
