import sqlite3

import pytest

from arcadedex.errors import ExportError
from arcadedex.models import Machine
from arcadedex.writers import write_sqlite


@pytest.fixture
def db(machines, tmp_path):
    path = write_sqlite(machines, tmp_path)
    conn = sqlite3.connect(str(path))
    yield conn
    conn.close()


@pytest.mark.unit
def test_write_sqlite_creates_database(machines, tmp_path):
    path = write_sqlite(machines, tmp_path)
    assert path == tmp_path / "machines.db"
    assert path.exists()


@pytest.mark.unit
def test_machines_reference_lookups(db):
    row = db.execute(
        """SELECT m.description, c.name, s.name, sc.name, mf.name
           FROM machines m
           JOIN categories c ON m.category_id = c.id
           JOIN series s ON m.series_id = s.id
           JOIN subcategories sc ON m.subcategory_id = sc.id
           JOIN manufacturers mf ON m.manufacturer_id = mf.id
           WHERE m.name = 'pacman'"""
    ).fetchone()

    assert row == ("Pac-Man (Midway)", "Maze", "Pac-Man", "Collect", "Namco")


@pytest.mark.unit
def test_language_and_player_links(db):
    languages = db.execute(
        """SELECT l.name FROM machine_languages ml
           JOIN machines m ON ml.machine_id = m.id
           JOIN languages l ON ml.language_id = l.id
           WHERE m.name = 'pacman' ORDER BY l.name"""
    ).fetchall()
    players = db.execute(
        """SELECT p.name FROM machine_players mp
           JOIN machines m ON mp.machine_id = m.id
           JOIN players p ON mp.player_id = p.id
           WHERE m.name = 'neogeo'"""
    ).fetchall()

    assert languages == [("English",), ("Japanese",)]
    assert players == [("BIOS",)]


@pytest.mark.unit
def test_child_tables(db):
    assert db.execute("SELECT COUNT(*) FROM roms").fetchone() == (1,)
    assert db.execute('SELECT name, "order" FROM history_sections').fetchone() == ("trivia", 3)
    assert db.execute("SELECT type, size FROM resources").fetchone() == ("flyers", 1024)
    assert db.execute("SELECT name, description FROM bios_sets").fetchone() == (
        "euro", "Europe MVS (Ver. 2)"
    )


@pytest.mark.unit
def test_flags_stored_as_integers(db):
    assert db.execute("SELECT is_bios FROM machines WHERE name = 'neogeo'").fetchone() == (1,)
    assert db.execute("SELECT is_parent FROM extended_data ORDER BY machine_id").fetchall() == [
        (1,), (0,)
    ]


@pytest.mark.unit
def test_existing_database_is_replaced(machines, tmp_path):
    write_sqlite(machines, tmp_path)
    write_sqlite({"pacman": machines["pacman"]}, tmp_path)

    conn = sqlite3.connect(str(tmp_path / "machines.db"))
    try:
        assert conn.execute("SELECT COUNT(*) FROM machines").fetchone() == (1,)
    finally:
        conn.close()


@pytest.mark.unit
def test_write_sqlite_empty_map(tmp_path):
    with pytest.raises(ExportError):
        write_sqlite({}, tmp_path)


@pytest.mark.unit
def test_subcategory_names_may_contain_separator(tmp_path):
    machines = {
        "gungame": Machine(
            name="gungame", category="Shooter - Gallery", subcategory="Gun - Light"
        ),
    }
    conn = sqlite3.connect(str(write_sqlite(machines, tmp_path)))
    try:
        row = conn.execute(
            """SELECT c.name, sc.name
               FROM machines m
               JOIN subcategories sc ON m.subcategory_id = sc.id
               JOIN categories c ON sc.category_id = c.id
               WHERE m.name = 'gungame'"""
        ).fetchone()
    finally:
        conn.close()

    assert row == ("Shooter - Gallery", "Gun - Light")
