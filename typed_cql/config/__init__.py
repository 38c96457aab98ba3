"""Configuration management."""

from .config import (
    Config,
    ConfigurationMissingError,
    DataSourceConfig,
    KEYSPACE_ENV_VAR,
    LoggingConfig,
    get_active_config,
    keyspace,
    load_config,
    set_active_config,
)

__all__ = [
    "Config",
    "ConfigurationMissingError",
    "DataSourceConfig",
    "KEYSPACE_ENV_VAR",
    "LoggingConfig",
    "get_active_config",
    "keyspace",
    "load_config",
    "set_active_config",
]
