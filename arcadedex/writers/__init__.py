"""Exporters for the canonical machine map."""

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, Union

from ..errors import ExportError
from ..models.machine import Machine
from ..progress import ProgressCallback, no_progress
from .csv_writer import write_csv
from .json_writer import write_json
from .sqlite_writer import write_sqlite

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    """Supported export formats."""
    JSON = 'json'
    CSV = 'csv'
    SQLITE = 'sqlite'


EXPORTERS = {
    ExportFormat.JSON: write_json,
    ExportFormat.CSV: write_csv,
    ExportFormat.SQLITE: write_sqlite,
}


def export(
    fmt: Union[str, ExportFormat],
    machines: Dict[str, Machine],
    output_dir: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Export the machine map in the given format.

    Args:
        fmt: Format name ("json", "csv", "sqlite") or ExportFormat
        machines: Canonical machine map
        output_dir: Folder to write into
        progress_callback: Receives INFO/PROGRESS/FINISH events

    Returns:
        Output location (folder, or database file for SQLite)

    Raises:
        ExportError: If the format is unsupported or the map is empty
    """
    if not isinstance(fmt, ExportFormat):
        try:
            fmt = ExportFormat(str(fmt).lower())
        except ValueError:
            raise ExportError(f"Unsupported export format: {fmt}") from None

    return EXPORTERS[fmt](machines, output_dir, progress_callback)


__all__ = [
    "EXPORTERS",
    "ExportFormat",
    "export",
    "write_csv",
    "write_json",
    "write_sqlite",
]
