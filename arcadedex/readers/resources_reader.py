"""Reader for the resources dat (flyers, snapshots, manuals, ...).

The dat groups files by resource type::

    <machine name="flyers">
        <rom name="flyers\\pacman.png" size="123" crc="..." sha1="..."/>
    </machine>
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..models.machine import Machine, Resource
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


def split_resource_path(path: str) -> Optional[Tuple[str, str]]:
    """
    Split ``type\\machine.ext`` into resource type and machine name.

    Returns:
        Tuple of (resource type, machine name), or None if the path has
        no type prefix or no machine name
    """
    parts = path.split("\\")
    if len(parts) < 2:
        return None
    name = parts[1].split('.')[0]
    if not name:
        return None
    return parts[0], name


def _size(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def read_resources_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse the resources dat and return resources per machine.

    Files whose type prefix does not match their enclosing group are
    skipped; the dat lists non-arcade material that way.

    Args:
        file_path: Path to the resources dat
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine name to a partial Machine with
        resources set

    Raises:
        SourceIOError: If the file cannot be opened
        FormatError: If the XML is malformed
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}
    skipped = 0

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing resources dat: {path}")
        log_file_size(path)

        total = count_xml_elements(path, "rom")

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)
        group: Optional[str] = None

        for event, elem in iter_xml(path, tag=("machine", "rom")):
            if elem.tag == "machine":
                if event == "start":
                    group = elem.get("name")
                else:
                    group = None
                    release(elem)
                continue

            if event != "end":
                continue

            split = split_resource_path(elem.get("name", ""))
            if split is not None and group is not None and split[0] == group:
                resource_type, name = split
                machine = machines.setdefault(name, Machine(name=name))
                machine.resources.append(Resource(
                    type=resource_type,
                    name=elem.get("name", ""),
                    size=_size(elem.get("size")),
                    crc=elem.get("crc", ""),
                    sha1=elem.get("sha1", ""),
                ))
            else:
                skipped += 1
            reporter.advance()

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"Parsed resources for {len(machines)} machines")
    if skipped:
        logger.debug(f"  - Skipped {skipped} resources outside their group")

    return machines
