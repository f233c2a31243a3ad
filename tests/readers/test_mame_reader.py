import pytest

from arcadedex.errors import FormatError, SourceIOError
from arcadedex.progress import ProgressKind
from arcadedex.readers import read_mame_file


@pytest.fixture
def machines(data_dir):
    return read_mame_file(data_dir / "mame.xml")


@pytest.mark.unit
def test_reads_every_machine(machines):
    assert set(machines) == {"puckman", "pacman", "neogeo", "005", "z80"}


@pytest.mark.unit
def test_parent_machine_fields(machines):
    puckman = machines["puckman"]

    assert puckman.description == "Puck Man (Japan set 1)"
    assert puckman.year == "1980"
    assert puckman.manufacturer == "Namco"
    assert puckman.source_file == "pacman/pacman.cpp"
    assert puckman.driver_status == "good"
    assert [r.name for r in puckman.roms] == ["pm1_prg1.6e", "pm1_prg2.6k"]
    assert puckman.roms[0].size == 2048
    assert puckman.roms[0].crc == "f36e88ab"
    assert [d.name for d in puckman.device_refs] == ["z80"]
    assert puckman.is_game()


@pytest.mark.unit
def test_extended_data_is_derived(machines):
    puckman = machines["puckman"].extended_data
    pacman = machines["pacman"].extended_data

    assert puckman.name == "Puck Man"
    assert puckman.manufacturer == "Namco"
    assert puckman.year == "1980"
    assert puckman.is_parent is True

    assert pacman.name == "Pac-Man"
    assert pacman.manufacturer == "Namco"
    assert pacman.is_parent is False


@pytest.mark.unit
def test_clone_relationship(machines):
    pacman = machines["pacman"]
    assert pacman.clone_of == "puckman"
    assert pacman.rom_of == "puckman"
    assert pacman.manufacturer == "Namco (Midway license)"
    assert pacman.roms[1].merge == "pm1_prg1.6e"


@pytest.mark.unit
def test_bios_machine(machines):
    neogeo = machines["neogeo"]
    assert neogeo.is_bios is True
    assert [(b.name, b.description) for b in neogeo.bios_sets] == [
        ("euro", "Europe MVS (Ver. 2)"),
        ("japan", "Japan MVS (Ver. 3)"),
    ]
    assert [s.name for s in neogeo.software_list] == ["neogeo"]
    assert not neogeo.is_game()


@pytest.mark.unit
def test_uncertain_year_samples_and_disks(machines):
    machine = machines["005"]

    assert machine.year == "1981?"
    assert machine.extended_data.year == "Unknown"
    assert machine.sample_of == "005"
    assert [s.name for s in machine.samples] == ["lexplode", "sexplode"]
    assert len(machine.disks) == 1
    assert machine.disks[0].region == "ide:0:hdd"

    nodump = machine.roms[1]
    assert nodump.status == "nodump"
    assert nodump.crc is None


@pytest.mark.unit
def test_device_without_year(machines):
    z80 = machines["z80"]
    assert z80.is_device is True
    assert z80.runnable is False
    assert z80.year is None
    assert z80.extended_data.year == "Unknown"
    assert not z80.is_game()


@pytest.mark.unit
def test_progress_events(data_dir, events):
    read_mame_file(data_dir / "mame.xml", events.append)

    assert events[0].kind is ProgressKind.INFO
    progress = [e for e in events if e.kind is ProgressKind.PROGRESS]
    processed = [e.processed for e in progress]
    assert processed == sorted(processed)
    assert all(e.processed <= e.total for e in progress)

    finish = events[-1]
    assert finish.kind is ProgressKind.FINISH
    assert finish.processed == finish.total == 5
    assert "mame.xml" in finish.message


@pytest.mark.unit
def test_duplicate_machine_keeps_first(tmp_path):
    dat = tmp_path / "dup.xml"
    dat.write_text(
        '<mame>'
        '<machine name="dup"><description>First</description></machine>'
        '<machine name="dup"><description>Second</description></machine>'
        '</mame>'
    )

    machines = read_mame_file(dat)

    assert machines["dup"].description == "First"


@pytest.mark.unit
def test_machine_without_name_is_skipped(tmp_path, events):
    dat = tmp_path / "nameless.xml"
    dat.write_text(
        '<mame>'
        '<machine><description>Nameless</description></machine>'
        '<machine name="kept"><description>Kept</description></machine>'
        '</mame>'
    )

    machines = read_mame_file(dat, events.append)

    assert set(machines) == {"kept"}
    assert events[-1].kind is ProgressKind.FINISH
    assert events[-1].processed == events[-1].total == 2


@pytest.mark.unit
def test_malformed_xml_raises_format_error(data_dir, events):
    with pytest.raises(FormatError) as excinfo:
        read_mame_file(data_dir / "malformed.xml", events.append)

    assert excinfo.value.path.name == "malformed.xml"
    assert excinfo.value.line is not None
    assert events[-1].kind is ProgressKind.ERROR


@pytest.mark.unit
def test_missing_file_raises_source_io_error(tmp_path, events):
    with pytest.raises(SourceIOError):
        read_mame_file(tmp_path / "missing.xml", events.append)

    assert events[-1].kind is ProgressKind.ERROR
    assert not any(e.kind is ProgressKind.FINISH for e in events)
