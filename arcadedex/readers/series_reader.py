"""Reader for series.ini (game franchises)."""

import logging
from pathlib import Path
from typing import Dict

from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .base import PathLike, iter_section_entries, log_file_size, reporting_errors

logger = logging.getLogger(__name__)


def read_series_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse series.ini and return the series of each machine.

    Every ``[Series Name]`` section lists the machines belonging to that
    series. A machine listed under several sections keeps the last one.

    Args:
        file_path: Path to series.ini
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine with series set

    Raises:
        SourceIOError: If the file cannot be read
        FormatError: If the file is not valid UTF-8
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}
    series_names = set()

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing series file: {path}")
        log_file_size(path)

        total = sum(1 for _ in iter_section_entries(path))

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)

        for _, series, name in iter_section_entries(path):
            machine = machines.setdefault(name, Machine(name=name))
            machine.series = series
            series_names.add(series)
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"  - Found {len(series_names)} series")
    logger.info(f"  - Found {len(machines)} machines in a series")
    return machines
