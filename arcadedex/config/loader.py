"""Configuration loading and parsing."""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

CONFIG_FILE_NAME = "arcadedex.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'workspace': './playground',
    'sources': ['mame', 'languages', 'nplayers', 'catver', 'series', 'history', 'resources'],
    'export': {
        'formats': ['json'],
        'path': None,
    },
    'filters': {
        'remove': [],
        'categories': [],
    },
    'download': {
        'timeout': 60,
    },
    'logging': {
        'level': 'INFO',
        'console': True,
        'file': None,
    },
}


class ConfigError(Exception):
    """Configuration-related errors."""
    pass


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load and parse configuration file.

    Values missing from the file fall back to ``DEFAULT_CONFIG``.

    Args:
        config_path: Path to arcadedex.yaml. If None, uses ./arcadedex.yaml
            when present and the defaults otherwise.

    Returns:
        Parsed configuration dictionary

    Raises:
        ConfigError: If config file cannot be loaded or parsed
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILE_NAME
        if not config_path.exists():
            return copy.deepcopy(DEFAULT_CONFIG)
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}\n"
            f"Copy arcadedex.yaml.example to {CONFIG_FILE_NAME} and configure it."
        )

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {e}")

    if config is None:
        config = {}
    if not isinstance(config, dict):
        raise ConfigError("Configuration file must contain a YAML dictionary")

    return _merge(DEFAULT_CONFIG, config)


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., 'export.formats')
        default: Default value if path not found

    Returns:
        Configuration value or default

    Example:
        >>> get_config_value(config, 'export.formats')
        ['json', 'csv']
    """
    value = config

    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def apply_cli_overrides(config: Dict[str, Any], args) -> Dict[str, Any]:
    """
    Apply command-line overrides to a loaded configuration.

    Args:
        config: Configuration dictionary, updated in place
        args: argparse namespace; attributes left as None are ignored

    Returns:
        The updated configuration
    """
    if getattr(args, 'workspace', None):
        config['workspace'] = str(args.workspace)

    if getattr(args, 'sources', None):
        config['sources'] = list(args.sources)

    if getattr(args, 'formats', None):
        config.setdefault('export', {})['formats'] = list(args.formats)

    if getattr(args, 'output', None):
        config.setdefault('export', {})['path'] = str(args.output)

    if getattr(args, 'log_level', None):
        config.setdefault('logging', {})['level'] = args.log_level

    return config


def get_export_path(config: Dict[str, Any]) -> Path:
    """Get the export folder, defaulting to ``<workspace>/export``."""
    path = get_config_value(config, 'export.path')
    if path:
        return Path(path).expanduser()
    return Path(config['workspace']).expanduser() / 'export'
