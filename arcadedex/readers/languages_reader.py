"""Reader for languages.ini (languages displayed by each machine)."""

import logging
from pathlib import Path
from typing import Dict

from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .base import PathLike, iter_section_entries, log_file_size, reporting_errors

logger = logging.getLogger(__name__)


def is_canonical_language(section: str) -> bool:
    """Check if a section names a single language.

    Combined sections such as ``[English/Japanese]`` duplicate the
    single-language ones and are skipped.
    """
    return '/' not in section


def read_languages_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse languages.ini and return the languages of each machine.

    Args:
        file_path: Path to languages.ini
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine with languages set

    Raises:
        SourceIOError: If the file cannot be read
        FormatError: If the file is not valid UTF-8
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}
    skipped_sections = set()

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing languages file: {path}")
        log_file_size(path)

        total = sum(1 for _ in iter_section_entries(path))

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)

        for _, language, name in iter_section_entries(path):
            if is_canonical_language(language):
                machine = machines.setdefault(name, Machine(name=name))
                machine.languages.append(language)
            else:
                skipped_sections.add(language)
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"  - Found languages for {len(machines)} machines")
    if skipped_sections:
        logger.debug(f"  - Skipped combined sections: {sorted(skipped_sections)}")

    return machines
