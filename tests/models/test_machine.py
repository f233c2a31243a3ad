import pytest

from arcadedex.models import (
    BiosSet,
    ExtendedData,
    HistorySection,
    Machine,
    Resource,
    Rom,
    combine,
)


def _catalog_record() -> Machine:
    return Machine(
        name="pacman",
        clone_of="puckman",
        rom_of="puckman",
        description="Pac-Man (Midway)",
        year="1980",
        manufacturer="Namco (Midway license)",
        roms=[Rom(name="pacman.6e", size=4096, crc="c1e6ab10")],
        extended_data=ExtendedData(name="Pac-Man", manufacturer="Namco", is_parent=False, year="1980"),
    )


def _category_record() -> Machine:
    return Machine(name="pacman", category="Maze", subcategory="Collect", is_mature=False)


@pytest.mark.unit
def test_is_clone_uses_cloneof_or_romof():
    assert Machine(name="pacman", clone_of="puckman").is_clone()
    assert Machine(name="mslug", rom_of="neogeo").is_clone()
    assert not Machine(name="puckman").is_clone()


@pytest.mark.unit
def test_is_game_excludes_bios_devices_and_non_runnable():
    assert Machine(name="puckman").is_game()
    assert not Machine(name="neogeo", is_bios=True).is_game()
    assert not Machine(name="z80", is_device=True, runnable=False).is_game()
    assert not Machine(name="prop", runnable=False).is_game()


@pytest.mark.unit
def test_combine_disjoint_fields_is_commutative():
    a = _catalog_record()
    b = _category_record()

    assert a.combine(b) == b.combine(a)

    merged = a.combine(b)
    assert merged.description == "Pac-Man (Midway)"
    assert merged.category == "Maze"
    assert merged.subcategory == "Collect"
    assert merged.extended_data.manufacturer == "Namco"


@pytest.mark.unit
def test_combine_first_writer_wins_for_scalars():
    a = Machine(name="pacman", players="2P alt")
    b = Machine(name="pacman", players="4P sim", series="Pac-Man")

    merged = a.combine(b)

    assert merged.players == "2P alt"
    assert merged.series == "Pac-Man"


@pytest.mark.unit
def test_combine_concatenates_lists_without_dedup():
    a = Machine(name="pacman", languages=["English"], roms=[Rom(name="a")])
    b = Machine(name="pacman", languages=["English", "Japanese"], roms=[Rom(name="a")])

    merged = a.combine(b)

    assert merged.languages == ["English", "English", "Japanese"]
    assert [r.name for r in merged.roms] == ["a", "a"]


@pytest.mark.unit
def test_combine_does_not_mutate_inputs():
    a = _catalog_record()
    b = Machine(
        name="pacman",
        history_sections=[HistorySection(name="trivia", text="...", order=3)],
        resources=[Resource(type="flyers", name="flyers\\pacman.png")],
    )

    merged = a.combine(b)
    merged.roms.append(Rom(name="extra"))
    merged.extended_data.players = "Alternate two-player mode"

    assert len(a.roms) == 1
    assert a.history_sections == []
    assert len(b.history_sections) == 1
    assert a.extended_data.players is None
    assert b.extended_data.players is None


@pytest.mark.unit
def test_combine_extended_data_field_by_field():
    a = Machine(name="pacman", extended_data=ExtendedData(name="Pac-Man"))
    b = Machine(name="pacman", extended_data=ExtendedData(name="Other", players="BIOS"))

    merged = combine(a, b)

    assert merged.extended_data.name == "Pac-Man"
    assert merged.extended_data.players == "BIOS"


@pytest.mark.unit
def test_combine_with_missing_extended_data():
    a = Machine(name="neogeo", extended_data=None)
    b = Machine(name="neogeo", extended_data=ExtendedData(players="BIOS"))

    merged = a.combine(b)

    assert merged.extended_data == ExtendedData(players="BIOS")
    assert merged.extended_data is not b.extended_data


@pytest.mark.unit
def test_combine_keeps_value_types():
    a = Machine(name="neogeo", bios_sets=[BiosSet(name="euro", description="Europe MVS")])
    merged = a.combine(Machine(name="neogeo"))
    assert merged.bios_sets == [BiosSet(name="euro", description="Europe MVS")]
