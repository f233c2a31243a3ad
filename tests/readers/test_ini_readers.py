import pytest

from arcadedex.errors import FormatError
from arcadedex.progress import ProgressKind
from arcadedex.readers import (
    read_catver_file,
    read_languages_file,
    read_nplayers_file,
    read_series_file,
)
from arcadedex.readers.catver_reader import parse_category
from arcadedex.readers.languages_reader import is_canonical_language


@pytest.mark.unit
@pytest.mark.parametrize(
    "value,expected",
    [
        ("Maze / Maze", ("Maze", "Maze", False)),
        ("Maze / Collect", ("Maze", "Collect", False)),
        ("Puzzle / Tile Matching * Mature *", ("Puzzle", "Tile Matching", True)),
        ("Shooter / Flying Vertical / Extra", ("Shooter", "Flying Vertical", False)),
        (
            "Shooter / Flying Vertical / Extra * Mature *",
            ("Shooter", "Flying Vertical", False),
        ),
        ("Quiz / Japanese * Mature * / Extra", ("Quiz", "Japanese", True)),
        (".37b5", None),
        ("Maze", None),
    ],
)
def test_parse_category(value, expected):
    assert parse_category(value) == expected


@pytest.mark.unit
def test_read_catver(data_dir):
    machines = read_catver_file(data_dir / "catver.ini")

    assert set(machines) == {"005", "pacman", "puckman", "puzzlegame", "neogeo"}
    assert machines["pacman"].category == "Maze"
    assert machines["pacman"].subcategory == "Collect"
    assert machines["pacman"].is_mature is False

    mature = machines["puzzlegame"]
    assert (mature.category, mature.subcategory, mature.is_mature) == (
        "Puzzle", "Tile Matching", True
    )


@pytest.mark.unit
def test_read_catver_counts_ignored_lines(data_dir, events):
    read_catver_file(data_dir / "catver.ini", events.append)

    finish = events[-1]
    assert finish.kind is ProgressKind.FINISH
    # 5 category lines plus 2 single-part [VerAdded] lines
    assert finish.processed == finish.total == 7


@pytest.mark.unit
def test_read_catver_invalid_utf8(tmp_path, events):
    ini = tmp_path / "catver.ini"
    ini.write_bytes(b"[Category]\npacman=Maze / Collect\nbad=\xff\xfe\n")

    with pytest.raises(FormatError) as excinfo:
        read_catver_file(ini, events.append)

    assert excinfo.value.line == 3
    assert events[-1].kind is ProgressKind.ERROR


@pytest.mark.unit
def test_read_catver_strips_bom(tmp_path):
    ini = tmp_path / "catver.ini"
    ini.write_bytes(b"\xef\xbb\xbfpacman=Maze / Collect\n")

    machines = read_catver_file(ini)

    assert "pacman" in machines


@pytest.mark.unit
def test_read_catver_skips_lines_without_machine_name(tmp_path, events):
    ini = tmp_path / "catver.ini"
    ini.write_text("[Category]\npacman=Maze / Collect\n=Maze / Collect\n")

    machines = read_catver_file(ini, events.append)

    assert set(machines) == {"pacman"}
    assert events[-1].processed == events[-1].total == 2


@pytest.mark.unit
def test_read_nplayers(data_dir):
    machines = read_nplayers_file(data_dir / "nplayers.ini")

    assert set(machines) == {"005", "pacman", "puckman", "neogeo", "z80", "multi"}
    assert "RootFolderIcon" not in machines
    assert machines["pacman"].players == "2P alt"
    assert machines["pacman"].extended_data.players == "Alternate two-player mode"
    assert machines["multi"].players == "4P alt / 2P sim"
    assert machines["multi"].extended_data.players == (
        "Alternate four-player mode, Simultaneous two-player mode"
    )
    assert machines["z80"].extended_data.players == "Non-playable device"


@pytest.mark.unit
def test_read_nplayers_progress(data_dir, events):
    read_nplayers_file(data_dir / "nplayers.ini", events.append)

    finish = events[-1]
    assert finish.processed == finish.total == 6


@pytest.mark.unit
def test_read_nplayers_skips_lines_without_machine_name(tmp_path, events):
    ini = tmp_path / "nplayers.ini"
    ini.write_text("[NPlayers]\npacman=1P\n=2P alt\n")

    machines = read_nplayers_file(ini, events.append)

    assert set(machines) == {"pacman"}
    assert events[-1].processed == events[-1].total == 2


@pytest.mark.unit
def test_read_series_last_section_wins(data_dir):
    machines = read_series_file(data_dir / "series.ini")

    assert set(machines) == {"pacman", "puckman", "005"}
    assert machines["puckman"].series == "Pac-Man"
    assert machines["pacman"].series == "Namco Classics"
    assert machines["005"].series == "Sega Maze"


@pytest.mark.unit
def test_read_series_skips_placeholder_sections(tmp_path):
    ini = tmp_path / "series.ini"
    ini.write_text("orphan\n[ROOT_FOLDER]\nroot\n[Galaxian]\ngalaxian\n")

    machines = read_series_file(ini)

    assert list(machines) == ["galaxian"]


@pytest.mark.unit
def test_read_languages(data_dir, events):
    machines = read_languages_file(data_dir / "languages.ini", events.append)

    assert machines["005"].languages == ["English"]
    assert machines["pacman"].languages == ["English", "Japanese"]
    assert machines["puckman"].languages == ["Japanese"]

    # The combined section entry is counted even though it is skipped
    finish = events[-1]
    assert finish.processed == finish.total == 5


@pytest.mark.unit
def test_is_canonical_language():
    assert is_canonical_language("English")
    assert not is_canonical_language("English/Japanese")
