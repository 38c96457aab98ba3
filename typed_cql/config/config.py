"""Configuration management for typed-cql."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

KEYSPACE_ENV_VAR = "TYPED_CQL_KEYSPACE"


class ConfigurationMissingError(Exception):
    """Raised when a required configuration value is not available."""

    pass


@dataclass
class DataSourceConfig:
    """Configuration for the schema catalog data source."""

    type: str  # "duckdb"
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class LoggingConfig:
    """Configuration for log output."""

    level: str = "INFO"
    structured: bool = False
    file: Optional[str] = None


@dataclass
class Config:
    """Main configuration class."""

    keyspace: Optional[str] = None
    datasource: Optional[DataSourceConfig] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: str) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Parsed configuration

    Example YAML format:
        keyspace: shop

        datasource:
          type: duckdb
          path: /data/schema.duckdb
          read_only: true

        logging:
          level: DEBUG
          structured: false
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}

    # Parse data source
    datasource = None
    ds_data = data.get("datasource")
    if ds_data:
        ds_type = ds_data.pop("type")
        datasource = DataSourceConfig(type=ds_type, config=ds_data)

    # Parse logging config
    logging_data = data.get("logging", {})
    logging_config = LoggingConfig(**logging_data)

    return Config(
        keyspace=data.get("keyspace"),
        datasource=datasource,
        logging=logging_config,
    )


_active_config: Optional[Config] = None


def set_active_config(config: Optional[Config]) -> None:
    """Make a configuration the process-wide active one (None to reset)."""
    global _active_config
    _active_config = config


def get_active_config() -> Optional[Config]:
    """Return the process-wide active configuration, if any."""
    return _active_config


def keyspace() -> str:
    """Return the active keyspace name.

    The active configuration wins over the TYPED_CQL_KEYSPACE environment
    variable.

    Raises:
        ConfigurationMissingError: If no keyspace is configured
    """
    if _active_config is not None and _active_config.keyspace:
        return _active_config.keyspace
    value = os.environ.get(KEYSPACE_ENV_VAR)
    if value:
        return value
    raise ConfigurationMissingError(
        f"No keyspace configured; set 'keyspace' in the config file or {KEYSPACE_ENV_VAR}"
    )
