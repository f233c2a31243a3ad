"""Reader for the MAME catalog (``MAME 0.xxx.dat`` / ``mame -listxml``).

Extracts machine definitions including metadata, ROM requirements, CHD
dependencies, BIOS sets, device references and clone/parent relationships.
The file is streamed with lxml's iterparse so 250MB catalogs never live in
memory at once.
"""

import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from ..models.machine import (
    BiosSet,
    DeviceRef,
    Disk,
    ExtendedData,
    Machine,
    Rom,
    Sample,
    Software,
)
from ..normalization import normalize_manufacturer, normalize_name
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

UNKNOWN_YEAR = "Unknown"


def _flag(elem, attribute: str) -> Optional[bool]:
    value = elem.get(attribute)
    if value is None:
        return None
    return value == "yes"


def _size(elem) -> int:
    try:
        return int(elem.get("size", 0))
    except ValueError:
        return 0


def _start_machine(elem) -> Machine:
    machine = Machine(
        name=elem.get("name", ""),
        source_file=elem.get("sourcefile"),
        rom_of=elem.get("romof"),
        clone_of=elem.get("cloneof"),
        is_bios=_flag(elem, "isbios"),
        is_device=_flag(elem, "isdevice"),
        runnable=_flag(elem, "runnable"),
        is_mechanical=_flag(elem, "ismechanical"),
        sample_of=elem.get("sampleof"),
        extended_data=ExtendedData(),
    )
    machine.extended_data.is_parent = not machine.is_clone()
    return machine


def _description(machine: Machine, elem) -> None:
    machine.description = elem.text or ""
    machine.extended_data.name = normalize_name(machine.description)


def _year(machine: Machine, elem) -> None:
    machine.year = elem.text or ""
    if not machine.year or '?' in machine.year:
        machine.extended_data.year = UNKNOWN_YEAR
    else:
        machine.extended_data.year = machine.year


def _manufacturer(machine: Machine, elem) -> None:
    machine.manufacturer = elem.text or ""
    machine.extended_data.manufacturer = normalize_manufacturer(machine.manufacturer)


def _biosset(machine: Machine, elem) -> None:
    machine.bios_sets.append(BiosSet(
        name=elem.get("name", ""),
        description=elem.get("description", ""),
    ))


def _rom(machine: Machine, elem) -> None:
    machine.roms.append(Rom(
        name=elem.get("name", ""),
        size=_size(elem),
        merge=elem.get("merge"),
        status=elem.get("status"),
        crc=elem.get("crc"),
        sha1=elem.get("sha1"),
    ))


def _device_ref(machine: Machine, elem) -> None:
    machine.device_refs.append(DeviceRef(name=elem.get("name", "")))


def _softwarelist(machine: Machine, elem) -> None:
    machine.software_list.append(Software(name=elem.get("name", "")))


def _sample(machine: Machine, elem) -> None:
    machine.samples.append(Sample(name=elem.get("name", "")))


def _disk(machine: Machine, elem) -> None:
    machine.disks.append(Disk(
        name=elem.get("name", ""),
        sha1=elem.get("sha1"),
        merge=elem.get("merge"),
        status=elem.get("status"),
        region=elem.get("region"),
    ))


def _driver(machine: Machine, elem) -> None:
    machine.driver_status = elem.get("status", "")


# Child elements of <machine>, dispatched on their closing tag so both
# attributes and text content are available.
ELEMENT_HANDLERS: Dict[str, Callable[[Machine, object], None]] = {
    "description": _description,
    "year": _year,
    "manufacturer": _manufacturer,
    "biosset": _biosset,
    "rom": _rom,
    "device_ref": _device_ref,
    "softwarelist": _softwarelist,
    "sample": _sample,
    "disk": _disk,
    "driver": _driver,
}


def _finish_machine(machine: Machine) -> None:
    # Machines without a <year> element have an unknown year as well
    if machine.extended_data.year is None:
        machine.extended_data.year = UNKNOWN_YEAR


def read_mame_file(
    file_path: PathLike,
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Parse the MAME catalog and return machine definitions.

    Args:
        file_path: Path to the MAME XML file (e.g. ``MAME 0.270.dat``)
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Dictionary mapping machine shortname to Machine

    Raises:
        SourceIOError: If the file cannot be opened
        FormatError: If the XML is malformed
    """
    path = Path(file_path)
    machines: Dict[str, Machine] = {}

    with reporting_errors(progress_callback, path):
        progress_callback(info(f"Getting total entries for {path.name}"))
        logger.info(f"Parsing MAME XML: {path}")
        log_file_size(path)

        total = count_xml_elements(path, "machine")

        progress_callback(info(f"Reading {path.name}"))
        reporter = BatchReporter(progress_callback, total)
        current: Optional[Machine] = None

        for event, elem in iter_xml(path):
            if event == "start":
                if elem.tag == "machine":
                    current = _start_machine(elem)
                continue

            if elem.tag == "machine":
                # Machines without a name are counted but not kept
                if current is not None and current.name:
                    _finish_machine(current)
                    # First definition wins when a name is repeated
                    machines.setdefault(current.name, current)
                current = None
                release(elem)
                reporter.advance()
            elif current is not None:
                handler = ELEMENT_HANDLERS.get(elem.tag)
                if handler:
                    handler(current, elem)

        reporter.finish(f"{path.name} loaded successfully")

    logger.info(f"Parsed {len(machines)} machines from MAME XML")

    games = sum(1 for m in machines.values() if m.is_game())
    with_chds = sum(1 for m in machines.values() if m.disks)
    clones = sum(1 for m in machines.values() if m.clone_of)

    logger.info(f"  - {games} playable games (runnable, non-BIOS, non-device)")
    logger.info(f"  - {with_chds} machines require CHDs")
    logger.info(f"  - {clones} clones (have parent machines)")

    return machines
