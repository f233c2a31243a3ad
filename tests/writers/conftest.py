import pytest

from arcadedex.models import (
    BiosSet,
    ExtendedData,
    HistorySection,
    Machine,
    Resource,
    Rom,
)


@pytest.fixture
def machines():
    """Small reconciled machine map covering every list field."""
    return {
        "pacman": Machine(
            name="pacman",
            clone_of="puckman",
            rom_of="puckman",
            description="Pac-Man (Midway)",
            year="1980",
            manufacturer="Namco (Midway license)",
            runnable=True,
            players="2P alt",
            series="Pac-Man",
            category="Maze",
            subcategory="Collect",
            is_mature=False,
            languages=["English", "Japanese"],
            roms=[Rom(name="pacman.6e", size=4096, crc="c1e6ab10", sha1="e87e")],
            history_sections=[HistorySection(name="trivia", text="Waka waka.", order=3)],
            resources=[Resource(type="flyers", name="flyers\\pacman.png", size=1024)],
            extended_data=ExtendedData(
                name="Pac-Man",
                manufacturer="Namco",
                players="Alternate two-player mode",
                is_parent=False,
                year="1980",
            ),
        ),
        "neogeo": Machine(
            name="neogeo",
            description="Neo-Geo MV-6F",
            is_bios=True,
            manufacturer="SNK",
            players="BIOS",
            category="System",
            subcategory="BIOS",
            bios_sets=[BiosSet(name="euro", description="Europe MVS (Ver. 2)")],
            extended_data=ExtendedData(
                name="Neo-Geo MV-6F",
                manufacturer="SNK",
                players="BIOS",
                is_parent=True,
                year="1990",
            ),
        ),
    }
