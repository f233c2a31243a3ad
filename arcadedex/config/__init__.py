"""Configuration loading and validation."""

from .loader import (
    ConfigError,
    DEFAULT_CONFIG,
    apply_cli_overrides,
    get_config_value,
    get_export_path,
    load_config,
)
from .validator import ValidationError, validate_config

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG",
    "ValidationError",
    "apply_cli_overrides",
    "get_config_value",
    "get_export_path",
    "load_config",
    "validate_config",
]
