"""Readers turning each MAME data file into a partial machine map."""

from .catver_reader import read_catver_file
from .history_reader import read_history_file
from .languages_reader import read_languages_file
from .mame_reader import read_mame_file
from .nplayers_reader import read_nplayers_file
from .resources_reader import read_resources_file
from .series_reader import read_series_file

__all__ = [
    'read_catver_file',
    'read_history_file',
    'read_languages_file',
    'read_mame_file',
    'read_nplayers_file',
    'read_resources_file',
    'read_series_file',
]
