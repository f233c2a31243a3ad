"""JSON exporter: machines.json plus one file per lookup list."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import SourceIOError
from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .common import COLLECTIONS, collection_rows, prepare_export, sorted_machines

logger = logging.getLogger(__name__)


def machine_to_dict(machine: Machine) -> Dict[str, Any]:
    """Convert a machine to its JSON representation."""
    ext = machine.extended_data
    return {
        "name": machine.name,
        "source_file": machine.source_file,
        "rom_of": machine.rom_of,
        "clone_of": machine.clone_of,
        "is_bios": machine.is_bios,
        "is_device": machine.is_device,
        "runnable": machine.runnable,
        "is_mechanical": machine.is_mechanical,
        "sample_of": machine.sample_of,
        "description": machine.description,
        "year": machine.year,
        "manufacturer": machine.manufacturer,
        "bios_sets": [
            {"name": b.name, "description": b.description} for b in machine.bios_sets
        ],
        "roms": [
            {
                "name": r.name,
                "size": r.size,
                "merge": r.merge,
                "status": r.status,
                "crc": r.crc,
                "sha1": r.sha1,
            }
            for r in machine.roms
        ],
        "device_refs": [d.name for d in machine.device_refs],
        "software_list": [s.name for s in machine.software_list],
        "samples": [s.name for s in machine.samples],
        "driver_status": machine.driver_status,
        "languages": machine.languages,
        "players": machine.players,
        "series": machine.series,
        "category": machine.category,
        "subcategory": machine.subcategory,
        "is_mature": machine.is_mature,
        "history_sections": [
            {"order": h.order, "name": h.name, "text": h.text}
            for h in machine.history_sections
        ],
        "disks": [
            {
                "name": d.name,
                "sha1": d.sha1,
                "merge": d.merge,
                "status": d.status,
                "region": d.region,
            }
            for d in machine.disks
        ],
        "extended_data": {
            "name": ext.name,
            "manufacturer": ext.manufacturer,
            "players": [p.strip() for p in (ext.players or "").split(',') if p.strip()],
            "is_parent": ext.is_parent,
            "year": ext.year,
        } if ext is not None else None,
        "resources": [
            {
                "type": r.type,
                "name": r.name,
                "size": r.size,
                "crc": r.crc,
                "sha1": r.sha1,
            }
            for r in machine.resources
        ],
    }


def _dump(data: Any, path: Path) -> None:
    try:
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise SourceIOError(f"Failed to write {path} ({e})", path) from e


def write_json(
    machines: Dict[str, Machine],
    output_dir: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Export machines and lookup lists as JSON.

    Writes ``machines.json`` (machines sorted by name) and one file per
    lookup list (``manufacturers.json``, ``series.json``, ...).

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
    logger.info(f"Exporting {len(machines)} machines to JSON in {output_dir}")

    progress_callback(info("Exporting machines"))
    reporter = BatchReporter(progress_callback, len(machines))
    records = []
    for machine in sorted_machines(machines):
        records.append(machine_to_dict(machine))
        reporter.advance()
    _dump(records, output_dir / "machines.json")

    for name in COLLECTIONS:
        progress_callback(info(f"Adding {name}"))
        _dump(collection_rows(name, machines), output_dir / f"{name}.json")

    reporter.finish(f"JSON exported successfully to {output_dir}")
    return output_dir
