"""Reader for history.xml (game history and trivia).

Each ``<entry>`` lists the systems it applies to and a free-text body.
The body is split into sections on header lines such as ``- TRIVIA -``.
"""

import logging
from pathlib import Path
from typing import Dict, List

from ..models.machine import HistorySection, Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .base import (
    PathLike,
    count_xml_elements,
    iter_xml,
    log_file_size,
    release,
    reporting_errors,
)

logger = logging.getLogger(__name__)

# Known section headers and their display rank
SECTION_ORDER = {
    "- DESCRIPTION -": 1,
    "- TECHNICAL -": 2,
    "- TRIVIA -": 3,
    "- UPDATES -": 4,
    "- SCORING -": 5,
    "- TIPS AND TRICKS -": 6,
    "- SERIES -": 7,
    "- STAFF -": 8,
    "- PORTS -": 9,
    "- CONTRIBUTE -": 10,
}

DEFAULT_SECTION = "description"


def section_name(header: str) -> str:
    """Turn ``- TIPS AND TRICKS -`` into ``tips and tricks``."""
    return header.replace('-', '').strip().lower()


def section_order(header: str) -> int:
    """Get the display rank of a header line, 0 when it is not a known header."""
    return SECTION_ORDER.get(header, 0)


def split_sections(text: str) -> List[HistorySection]:
    """
    Split a history text body into ranked sections.

    Only the known headers in ``SECTION_ORDER`` start a section; any other
    line, even one framed in dashes, stays in the current section text.
    Text before the first header belongs to the description section.
    Sections whose text is blank are dropped.

    Args:
        text: Content of a ``<text>`` element

    Returns:
        Sections in document order
    """
    sections: List[HistorySection] = []
    name = DEFAULT_SECTION
    order = SECTION_ORDER["- DESCRIPTION -"]
    lines: List[str] = []

    def flush() -> None:
        body = "\n".join(lines).strip()
        if body:
            sections.append(HistorySection(name=name, text=body, order=order))

    for line in text.splitlines():
        header = line.strip()
        if header in SECTION_ORDER:
            flush()
            lines = []
            name = section_name(header)
            order = section_order(header)
        else:
            lines.append(line)

    flush()
    return sections


def read_history_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse history.xml and return history sections per machine.

    Args:
        file_path: Path to history.xml
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine with
        history_sections set

    Raises:
        SourceIOError: If the file cannot be opened
        FormatError: If the XML is malformed
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing history XML: {path}")
        log_file_size(path)

        total = count_xml_elements(path, "entry")

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)

        for _, entry in iter_xml(path, events=("end",), tag="entry"):
            text_elem = entry.find("text")
            sections = split_sections(text_elem.text or "") if text_elem is not None else []

            for system in entry.iterfind("systems/system"):
                name = system.get("name")
                if not name:
                    continue
                machine = machines.setdefault(name, Machine(name=name))
                # A later entry for the same system replaces the earlier one
                machine.history_sections = list(sections)

            release(entry)
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"Parsed history for {len(machines)} machines")
    return machines
