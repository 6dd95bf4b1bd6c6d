"""Configuration loading and validation."""

from sentinelvid.config.loader import (
    ConfigError,
    ConfigErrorCode,
    format_validation_error,
    load_config,
    load_config_from_dict,
    resolve_env_var,
)

__all__ = [
    "ConfigError",
    "ConfigErrorCode",
    "format_validation_error",
    "load_config",
    "load_config_from_dict",
    "resolve_env_var",
]
