"""Configuration validation."""

import logging
from typing import Any, Dict, List

from ..data_types import SourceType
from ..filters import MachineFilter

logger = logging.getLogger(__name__)

VALID_FORMATS = ['json', 'csv', 'sqlite']
VALID_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


class ValidationError(Exception):
    """Configuration validation errors."""
    pass


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary from loader

    Raises:
        ValidationError: If configuration is invalid
    """
    errors = []

    errors.extend(_validate_workspace(config.get('workspace')))
    errors.extend(_validate_sources(config.get('sources', [])))
    errors.extend(_validate_export(config.get('export', {})))
    errors.extend(_validate_filters(config.get('filters', {})))
    errors.extend(_validate_download(config.get('download', {})))
    errors.extend(_validate_logging(config.get('logging', {})))

    if errors:
        raise ValidationError(
            "Configuration validation failed:\n  - " + "\n  - ".join(errors)
        )


def _validate_workspace(workspace: Any) -> List[str]:
    if not workspace:
        return ["workspace is required"]
    if not isinstance(workspace, str):
        return ["workspace must be a string path"]
    return []


def _validate_sources(sources: Any) -> List[str]:
    """Validate the list of sources to process."""
    if not isinstance(sources, list):
        return ["sources must be a list"]

    errors = []
    valid = [s.value for s in SourceType]
    for source in sources:
        if not isinstance(source, str) or source.lower() not in valid:
            errors.append(f"sources entry '{source}' must be one of: {', '.join(valid)}")
    return errors


def _validate_export(section: Dict[str, Any]) -> List[str]:
    """Validate export options section."""
    errors = []

    formats = section.get('formats', [])
    if not isinstance(formats, list):
        errors.append("export.formats must be a list")
    else:
        for fmt in formats:
            if fmt not in VALID_FORMATS:
                errors.append(f"export.formats entries must be one of: {', '.join(VALID_FORMATS)}")
                break

    if section.get('path') is not None and not isinstance(section['path'], str):
        errors.append("export.path must be a string path or null")

    return errors


def _validate_filters(section: Dict[str, Any]) -> List[str]:
    """Validate filters section."""
    errors = []

    remove = section.get('remove', [])
    valid = [f.value for f in MachineFilter]
    if not isinstance(remove, list):
        errors.append("filters.remove must be a list")
    elif any(r not in valid for r in remove):
        errors.append(f"filters.remove entries must be one of: {', '.join(valid)}")

    categories = section.get('categories', [])
    if not isinstance(categories, list):
        errors.append("filters.categories must be a list")
    elif any(not isinstance(c, str) for c in categories):
        errors.append("filters.categories entries must be strings")

    return errors


def _validate_download(section: Dict[str, Any]) -> List[str]:
    timeout = section.get('timeout', 60)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        return ["download.timeout must be a positive number"]
    return []


def _validate_logging(section: Dict[str, Any]) -> List[str]:
    """Validate logging options section."""
    errors = []

    level = section.get('level', 'INFO')
    if level not in VALID_LEVELS:
        errors.append(f"logging.level must be one of: {', '.join(VALID_LEVELS)}")

    console = section.get('console', True)
    if not isinstance(console, bool):
        errors.append("logging.console must be a boolean")

    if 'file' in section and section['file'] is not None:
        if not isinstance(section['file'], str):
            errors.append("logging.file must be a string path or null")

    return errors
