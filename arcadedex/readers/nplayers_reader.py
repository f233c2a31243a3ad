"""Reader for nplayers.ini (player counts and modes)."""

import logging
from pathlib import Path
from typing import Dict

from ..models.machine import Machine
from ..normalization import normalize_players
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .base import PathLike, iter_key_values, reporting_errors

logger = logging.getLogger(__name__)


def read_nplayers_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse nplayers.ini and return player information per machine.

    Lines look like ``1942=2P alt``. The raw value is kept in ``players``
    and its normalized form in ``extended_data.players``.

    Args:
        file_path: Path to nplayers.ini
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine

    Raises:
        SourceIOError: If the file cannot be read
        FormatError: If the file is not valid UTF-8
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing players file: {path}")

        total = sum(1 for _ in iter_key_values(path))

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)

        for _, name, value in iter_key_values(path):
            if name:
                machine = machines.setdefault(name, Machine(name=name))
                machine.players = value
                machine.extended_data.players = normalize_players(value)
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"  - Found player info for {len(machines)} machines")
    return machines
