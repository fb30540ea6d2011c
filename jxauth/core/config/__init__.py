"""Environment-driven configuration."""

from .config import Config, default_data_home, validate_session_name
from .schema import ConfigSchema, EnvVarSpec
from .validation import ConfigError, load_env_var, validate_all

__all__ = [
    "Config",
    "ConfigError",
    "ConfigSchema",
    "EnvVarSpec",
    "default_data_home",
    "load_env_var",
    "validate_all",
    "validate_session_name",
]
