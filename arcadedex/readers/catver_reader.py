"""Reader for catver.ini (machine categories).

Each line under ``[Category]`` maps a machine to ``Category / Subcategory``,
optionally suffixed with `` * Mature *``. Other sections of the file, such as
``[VerAdded]``, carry single-part values and are ignored.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .base import PathLike, iter_key_values, log_file_size, reporting_errors

logger = logging.getLogger(__name__)

MATURE_SUFFIX = " * Mature *"


def parse_category(value: str) -> Optional[Tuple[str, str, bool]]:
    """
    Split a catver value into category, subcategory and mature flag.

    Args:
        value: Value part of a catver line (e.g. "Puzzle / Tile Matching * Mature *")

    Returns:
        Tuple of (category, subcategory, is_mature), or None if the value
        has fewer than two parts
    """
    parts = value.split(" / ")
    if len(parts) < 2:
        return None

    category = parts[0].strip()
    subcategory = parts[1].strip()
    is_mature = subcategory.endswith(MATURE_SUFFIX.strip())
    if is_mature:
        subcategory = subcategory[:-len(MATURE_SUFFIX.strip())].strip()

    return category, subcategory, is_mature


def read_catver_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse catver.ini and return category data per machine.

    Args:
        file_path: Path to catver.ini
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine with
        category, subcategory and is_mature set

    Raises:
        SourceIOError: If the file cannot be read
        FormatError: If the file is not valid UTF-8
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}
    skipped = 0

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing category file: {path}")
        log_file_size(path)

        total = sum(1 for _ in iter_key_values(path))

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)

        for _, name, value in iter_key_values(path):
            parsed = parse_category(value)
            if parsed is None or not name:
                skipped += 1
            else:
                category, subcategory, is_mature = parsed
                machine = machines.setdefault(name, Machine(name=name))
                machine.category = category
                machine.subcategory = subcategory
                machine.is_mature = is_mature
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"  - Found categories for {len(machines)} machines")
    if skipped:
        logger.debug(f"  - Ignored {skipped} lines without a machine name or subcategory")

    return machines
