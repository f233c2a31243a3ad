"""
Data source definitions for arcadedex.

Each source is one independently published MAME support file. The registry
records where it is published, how its archive and data file are named, and
which reader parses it.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Pattern

from .models.machine import Machine
from .progress import ProgressCallback
from .readers import (
    read_catver_file,
    read_history_file,
    read_languages_file,
    read_mame_file,
    read_nplayers_file,
    read_resources_file,
    read_series_file,
)


class SourceType(Enum):
    """
    Data sources, in the order their records are merged.

    The MAME catalog comes first so its scalar fields take precedence.
    """
    MAME = 'mame'
    LANGUAGES = 'languages'
    NPLAYERS = 'nplayers'
    CATVER = 'catver'
    SERIES = 'series'
    HISTORY = 'history'
    RESOURCES = 'resources'

    @classmethod
    def from_name(cls, name: str) -> "SourceType":
        """
        Look up a source by its value, case-insensitively.

        Raises:
            ValueError: If no source has that name
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ', '.join(s.value for s in cls)
            raise ValueError(f"Unknown source '{name}' (valid: {valid})") from None


Reader = Callable[[str, ProgressCallback], Dict[str, Machine]]


@dataclass(frozen=True)
class SourceDetails:
    """Where a source is published and how to process it.

    Attributes:
        name: Display name
        source: URL of the page linking to the archive
        source_match: Fragment identifying the archive link on that page
        archive_pattern: File name pattern of the downloaded archive
        data_file_pattern: File name pattern of the data file in the archive
        reader: Function parsing the data file
    """
    name: str
    source: str
    source_match: str
    archive_pattern: Pattern
    data_file_pattern: Pattern
    reader: Reader


SOURCE_DETAILS: Dict[SourceType, SourceDetails] = {
    SourceType.MAME: SourceDetails(
        name='Mame',
        source='https://www.progettosnaps.net/dats/MAME',
        source_match='download/?tipo=dat_mame&file=/dats/MAME/packs/MAME_Dats',
        archive_pattern=re.compile(r'^MAME_Dats_\d+\.7z$'),
        data_file_pattern=re.compile(r'MAME\s+[0-9]*\.[0-9]+\.dat'),
        reader=read_mame_file,
    ),
    SourceType.LANGUAGES: SourceDetails(
        name='Languages',
        source='https://www.progettosnaps.net/languages',
        source_match='download',
        archive_pattern=re.compile(r'^pS_Languages_\d+\.zip$'),
        data_file_pattern=re.compile(r'languages\.ini'),
        reader=read_languages_file,
    ),
    SourceType.NPLAYERS: SourceDetails(
        name='NPlayers',
        source='http://nplayers.arcadebelgium.be',
        source_match='files',
        archive_pattern=re.compile(r'^nplayers0\d+\.zip$'),
        data_file_pattern=re.compile(r'nplayers\.ini'),
        reader=read_nplayers_file,
    ),
    SourceType.CATVER: SourceDetails(
        name='Catver',
        source='https://www.progettosnaps.net/catver',
        source_match='download',
        archive_pattern=re.compile(r'^pS_CatVer_\d+\.zip$'),
        data_file_pattern=re.compile(r'catver\.ini'),
        reader=read_catver_file,
    ),
    SourceType.SERIES: SourceDetails(
        name='Series',
        source='https://www.progettosnaps.net/series',
        source_match='download',
        archive_pattern=re.compile(r'^pS_Series_\d+\.zip$'),
        data_file_pattern=re.compile(r'series\.ini'),
        reader=read_series_file,
    ),
    SourceType.HISTORY: SourceDetails(
        name='History',
        source='https://www.arcade-history.com/index.php?page=download',
        source_match='dats',
        archive_pattern=re.compile(r'^history\d+\.zip$'),
        data_file_pattern=re.compile(r'history\.xml'),
        reader=read_history_file,
    ),
    SourceType.RESOURCES: SourceDetails(
        name='Resources',
        source='https://www.progettosnaps.net/dats',
        source_match='download/?tipo=dat_resource&file=/dats/cmdats/pS_AllProject_',
        archive_pattern=re.compile(r'^pS_AllProject_\d{8}_\d+_\([a-zA-Z]+\)\.zip$'),
        data_file_pattern=re.compile(r'^pS_AllProject_\d{8}_\d+_\([a-zA-Z]+\)\.dat$'),
        reader=read_resources_file,
    ),
}


def get_source_details(source_type: SourceType) -> SourceDetails:
    """Get the registry entry for a source."""
    return SOURCE_DETAILS[source_type]


def all_sources() -> List[SourceType]:
    """Get every source in merge order."""
    return list(SourceType)


def unique_sources(sources: Iterable[SourceType]) -> List[SourceType]:
    """Drop repeated sources and sort the rest in merge order."""
    selected = set(sources)
    return [source for source in SourceType if source in selected]


def parse_sources(names: List[str]) -> List[SourceType]:
    """
    Convert source names to SourceTypes, keeping merge order.

    Args:
        names: Source names such as ["mame", "catver"]

    Returns:
        Matching SourceTypes, deduplicated and sorted in merge order

    Raises:
        ValueError: If a name is not a known source
    """
    return unique_sources(SourceType.from_name(name) for name in names)
