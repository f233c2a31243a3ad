"""CSV exporter: one file per table plus one per lookup list."""

import csv
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Dict, List, Union

from ..errors import SourceIOError
from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .common import COLLECTIONS, bool_text, collection_rows, prepare_export, sorted_machines

logger = logging.getLogger(__name__)

MACHINE_COLUMNS = [
    "name",
    "source_file",
    "rom_of",
    "clone_of",
    "is_bios",
    "is_device",
    "runnable",
    "is_mechanical",
    "sample_of",
    "description",
    "year",
    "manufacturer",
    "driver_status",
    "languages",
    "players",
    "series",
    "category",
    "subcategory",
    "is_mature",
    "extended_name",
    "extended_manufacturer",
    "extended_players",
    "extended_is_parent",
    "extended_year",
]

# Child tables keyed by file name: (columns after machine_name, machine attribute)
CHILD_TABLES = {
    "roms": (["name", "size", "merge", "status", "crc", "sha1"], "roms"),
    "bios_sets": (["name", "description"], "bios_sets"),
    "device_refs": (["name"], "device_refs"),
    "disks": (["name", "sha1", "merge", "status", "region"], "disks"),
    "softwares": (["name"], "software_list"),
    "samples": (["name"], "samples"),
    "history_sections": (["name", "text", "order"], "history_sections"),
    "resources": (["type", "name", "size", "crc", "sha1"], "resources"),
}


def _text(value) -> str:
    return "" if value is None else str(value)


def machine_row(machine: Machine) -> List[str]:
    """Flatten a machine into a machines.csv row."""
    ext = machine.extended_data
    return [
        machine.name,
        _text(machine.source_file),
        _text(machine.rom_of),
        _text(machine.clone_of),
        bool_text(machine.is_bios),
        bool_text(machine.is_device),
        bool_text(machine.runnable),
        bool_text(machine.is_mechanical),
        _text(machine.sample_of),
        _text(machine.description),
        _text(machine.year),
        _text(machine.manufacturer),
        _text(machine.driver_status),
        ", ".join(machine.languages),
        _text(machine.players),
        _text(machine.series),
        _text(machine.category),
        _text(machine.subcategory),
        bool_text(machine.is_mature),
        _text(ext.name) if ext else "",
        _text(ext.manufacturer) if ext else "",
        _text(ext.players) if ext else "",
        bool_text(ext.is_parent) if ext else "",
        _text(ext.year) if ext else "",
    ]


def _open_writer(stack: ExitStack, path: Path, header: List[str]):
    f = stack.enter_context(open(path, 'w', encoding='utf-8', newline=''))
    writer = csv.writer(f)
    writer.writerow(header)
    return writer


def _write_collection(name: str, machines: Dict[str, Machine], output_dir: Path) -> None:
    rows = collection_rows(name, machines)
    fieldnames = (
        ["category", "subcategory", "machines"] if name == "subcategories"
        else ["name", "machines"]
    )
    with open(output_dir / f"{name}.csv", 'w', encoding='utf-8', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)


def write_csv(
    machines: Dict[str, Machine],
    output_dir: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Export machines as a set of CSV tables.

    ``machines.csv`` holds one row per machine (sorted by name); each list
    field goes to its own table keyed by ``machine_name``. Lookup lists
    (manufacturers, series, ...) are written with their machine counts.

    Args:
        machines: Canonical machine map
        output_dir: Folder to write into
        progress_callback: Receives INFO/PROGRESS/FINISH events

    Returns:
        The output folder

    Raises:
        ExportError: If the machine map is empty
        SourceIOError: If a file cannot be written
    """
    output_dir = prepare_export(machines, output_dir)
    logger.info(f"Exporting {len(machines)} machines to CSV in {output_dir}")

    try:
        with ExitStack() as stack:
            machine_writer = _open_writer(stack, output_dir / "machines.csv", MACHINE_COLUMNS)
            child_writers = {
                table: _open_writer(stack, output_dir / f"{table}.csv", ["machine_name"] + columns)
                for table, (columns, _) in CHILD_TABLES.items()
            }

            progress_callback(info("Exporting machines"))
            reporter = BatchReporter(progress_callback, len(machines))

            for machine in sorted_machines(machines):
                machine_writer.writerow(machine_row(machine))
                for table, (columns, attribute) in CHILD_TABLES.items():
                    for item in getattr(machine, attribute):
                        child_writers[table].writerow(
                            [machine.name] + [_text(getattr(item, c)) for c in columns]
                        )
                reporter.advance()

        for name in COLLECTIONS:
            progress_callback(info(f"Adding {name}"))
            _write_collection(name, machines, output_dir)
    except OSError as e:
        raise SourceIOError(f"Failed to write CSV files in {output_dir} ({e})", output_dir) from e

    reporter.finish(f"CSVs exported successfully to {output_dir}")
    return output_dir
