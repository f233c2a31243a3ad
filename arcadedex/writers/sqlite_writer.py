"""
SQLite exporter.

Writes a normalized database: lookup tables for series, categories,
subcategories, manufacturers, languages and players; a machines table
referencing them; link tables for languages and players; and one child
table per list field.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Dict, Iterable, Union

from ..errors import ExportError
from ..models.machine import Machine
from ..progress import BatchReporter, ProgressCallback, info, no_progress
from .common import collection_rows, prepare_export, sorted_machines

logger = logging.getLogger(__name__)

DATABASE_NAME = "machines.db"

SCHEMA = """
CREATE TABLE series (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE subcategories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    category_id INTEGER,
    UNIQUE(name, category_id),
    FOREIGN KEY (category_id) REFERENCES categories(id)
);
CREATE TABLE manufacturers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE languages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE players (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);
CREATE TABLE machines (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    source_file TEXT,
    rom_of TEXT,
    clone_of TEXT,
    is_bios INTEGER,
    is_device INTEGER,
    runnable INTEGER,
    is_mechanical INTEGER,
    sample_of TEXT,
    description TEXT,
    year TEXT,
    manufacturer TEXT,
    driver_status TEXT,
    players TEXT,
    series TEXT,
    category TEXT,
    subcategory TEXT,
    is_mature INTEGER,
    languages TEXT,
    category_id INTEGER,
    subcategory_id INTEGER,
    series_id INTEGER,
    manufacturer_id INTEGER,
    FOREIGN KEY (category_id) REFERENCES categories(id),
    FOREIGN KEY (subcategory_id) REFERENCES subcategories(id),
    FOREIGN KEY (series_id) REFERENCES series(id),
    FOREIGN KEY (manufacturer_id) REFERENCES manufacturers(id)
);
CREATE TABLE machine_languages (
    machine_id INTEGER,
    language_id INTEGER,
    PRIMARY KEY (machine_id, language_id),
    FOREIGN KEY (machine_id) REFERENCES machines(id),
    FOREIGN KEY (language_id) REFERENCES languages(id)
);
CREATE TABLE machine_players (
    machine_id INTEGER,
    player_id INTEGER,
    PRIMARY KEY (machine_id, player_id),
    FOREIGN KEY (machine_id) REFERENCES machines(id),
    FOREIGN KEY (player_id) REFERENCES players(id)
);
CREATE TABLE extended_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    manufacturer TEXT,
    players TEXT,
    is_parent INTEGER,
    year TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE bios_sets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    description TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE roms (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    size INTEGER,
    merge TEXT,
    status TEXT,
    crc TEXT,
    sha1 TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE device_refs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE softwares (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE samples (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE disks (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    sha1 TEXT,
    merge TEXT,
    status TEXT,
    region TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE history_sections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    name TEXT,
    text TEXT,
    "order" INTEGER,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
CREATE TABLE resources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    machine_id INTEGER,
    type TEXT,
    name TEXT,
    size INTEGER,
    crc TEXT,
    sha1 TEXT,
    FOREIGN KEY (machine_id) REFERENCES machines(id)
);
"""

# Child table -> (columns, machine attribute)
CHILD_TABLES = {
    "bios_sets": (("name", "description"), "bios_sets"),
    "roms": (("name", "size", "merge", "status", "crc", "sha1"), "roms"),
    "device_refs": (("name",), "device_refs"),
    "softwares": (("name",), "software_list"),
    "samples": (("name",), "samples"),
    "disks": (("name", "sha1", "merge", "status", "region"), "disks"),
    "history_sections": (("name", "text", "order"), "history_sections"),
    "resources": (("type", "name", "size", "crc", "sha1"), "resources"),
}


def _insert_names(conn: sqlite3.Connection, table: str, names: Iterable[str]) -> Dict[str, int]:
    conn.executemany(
        f"INSERT OR IGNORE INTO {table} (name) VALUES (?)",
        [(name,) for name in names]
    )
    return {name: row_id for row_id, name in conn.execute(f"SELECT id, name FROM {table}")}


def _insert_lookups(conn: sqlite3.Connection, machines: Dict[str, Machine]) -> Dict[str, Dict]:
    lookups = {}
    for table in ("series", "categories", "manufacturers", "languages", "players"):
        names = [row["name"] for row in collection_rows(table, machines)]
        lookups[table] = _insert_names(conn, table, names)

    subcategory_ids = {}
    for row in collection_rows("subcategories", machines):
        category_id = lookups["categories"].get(row["category"])
        cursor = conn.execute(
            "INSERT INTO subcategories (name, category_id) VALUES (?, ?)",
            (row["subcategory"], category_id)
        )
        subcategory_ids[(row["category"], row["subcategory"])] = cursor.lastrowid
    lookups["subcategories"] = subcategory_ids
    return lookups


def _insert_machine(conn: sqlite3.Connection, machine: Machine, lookups: Dict[str, Dict]) -> None:
    ext = machine.extended_data
    subcategory_key = (machine.category, machine.subcategory)

    cursor = conn.execute(
        """INSERT INTO machines (
            name, source_file, rom_of, clone_of, is_bios, is_device, runnable,
            is_mechanical, sample_of, description, year, manufacturer,
            driver_status, players, series, category, subcategory, is_mature,
            languages, category_id, subcategory_id, series_id, manufacturer_id
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            machine.name, machine.source_file, machine.rom_of, machine.clone_of,
            machine.is_bios, machine.is_device, machine.runnable,
            machine.is_mechanical, machine.sample_of, machine.description,
            machine.year, machine.manufacturer, machine.driver_status,
            machine.players, machine.series, machine.category,
            machine.subcategory, machine.is_mature,
            ", ".join(machine.languages),
            lookups["categories"].get(machine.category),
            lookups["subcategories"].get(subcategory_key),
            lookups["series"].get(machine.series),
            lookups["manufacturers"].get(ext.manufacturer if ext else None),
        )
    )
    machine_id = cursor.lastrowid

    if ext is not None:
        conn.execute(
            "INSERT INTO extended_data (machine_id, name, manufacturer, players, is_parent, year) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (machine_id, ext.name, ext.manufacturer, ext.players, ext.is_parent, ext.year)
        )

        player_ids = {
            lookups["players"][mode.strip()]
            for mode in (ext.players or "").split(',')
            if mode.strip() in lookups["players"]
        }
        conn.executemany(
            "INSERT INTO machine_players (machine_id, player_id) VALUES (?, ?)",
            [(machine_id, player_id) for player_id in sorted(player_ids)]
        )

    language_ids = {
        lookups["languages"][language]
        for language in machine.languages
        if language in lookups["languages"]
    }
    conn.executemany(
        "INSERT INTO machine_languages (machine_id, language_id) VALUES (?, ?)",
        [(machine_id, language_id) for language_id in sorted(language_ids)]
    )

    for table, (columns, attribute) in CHILD_TABLES.items():
        items = getattr(machine, attribute)
        if not items:
            continue
        quoted = ", ".join(f'"{c}"' for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        conn.executemany(
            f"INSERT INTO {table} (machine_id, {quoted}) VALUES (?, {placeholders})",
            [(machine_id, *(getattr(item, c) for c in columns)) for item in items]
        )


def write_sqlite(
    machines: Dict[str, Machine],
    output_dir: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Export machines to a SQLite database.

    An existing database in the output folder is replaced.

    Args:
        machines: Canonical machine map
        output_dir: Folder to write ``machines.db`` into
        progress_callback: Receives INFO/PROGRESS/FINISH events

    Returns:
        Path of the database file

    Raises:
        ExportError: If the machine map is empty or the database cannot be
            written
    """
    output_dir = prepare_export(machines, output_dir)
    db_path = output_dir / DATABASE_NAME
    logger.info(f"Exporting {len(machines)} machines to SQLite database {db_path}")

    if db_path.exists():
        db_path.unlink()

    conn = sqlite3.connect(str(db_path))
    try:
        with conn:
            progress_callback(info("Creating database"))
            conn.executescript(SCHEMA)

            progress_callback(info("Adding lookup tables"))
            lookups = _insert_lookups(conn, machines)

            progress_callback(info("Exporting machines"))
            reporter = BatchReporter(progress_callback, len(machines))
            for machine in sorted_machines(machines):
                _insert_machine(conn, machine, lookups)
                reporter.advance()
    except sqlite3.Error as e:
        raise ExportError(f"Failed to write {db_path}: {e}") from e
    finally:
        conn.close()

    reporter.finish(f"Database exported successfully to {db_path}")
    return db_path
