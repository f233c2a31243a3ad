"""Helpers shared by the exporters."""

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from ..errors import ExportError
from ..fetch.workspace import ensure_folder_exists
from ..models.collections import (
    get_categories_list,
    get_languages_list,
    get_manufacturers_list,
    get_players_list,
    get_series_list,
    get_subcategories_list,
)
from ..models.machine import Machine

logger = logging.getLogger(__name__)

# Lookup lists published next to the machine records
COLLECTIONS: Dict[str, Callable] = {
    'manufacturers': get_manufacturers_list,
    'series': get_series_list,
    'languages': get_languages_list,
    'players': get_players_list,
    'categories': get_categories_list,
    'subcategories': get_subcategories_list,
}


def prepare_export(machines: Dict[str, Machine], output_dir: Union[str, Path]) -> Path:
    """
    Validate the machine map and create the output folder.

    Raises:
        ExportError: If there are no machines to export
        SourceIOError: If the folder cannot be created
    """
    if not machines:
        raise ExportError("No machines data loaded, please read the data first.")
    return ensure_folder_exists(output_dir)


def sorted_machines(machines: Dict[str, Machine]) -> List[Machine]:
    """Get machines ordered by name."""
    return [machines[name] for name in sorted(machines)]


def collection_rows(name: str, machines: Dict[str, Machine]) -> List[Dict]:
    """
    Build the rows of one lookup list, ordered by name.

    Subcategory rows carry separate ``category`` and ``subcategory`` keys;
    every other list has a ``name`` key. All rows count their ``machines``.
    """
    counts = COLLECTIONS[name](machines)
    rows = []
    for key in sorted(counts):
        if name == 'subcategories':
            category, subcategory = key
            rows.append({'category': category, 'subcategory': subcategory, 'machines': counts[key]})
        else:
            rows.append({'name': key, 'machines': counts[key]})
    return rows


def bool_text(value: Optional[bool]) -> str:
    """Render an optional flag as "true", "false" or ""."""
    if value is None:
        return ""
    return "true" if value else "false"
