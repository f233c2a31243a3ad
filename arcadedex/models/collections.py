"""Occurrence counts over a machine map.

Used by the exporters to publish lookup lists (manufacturers, series,
languages, ...) next to the machine records.
"""

from collections import Counter
from typing import Dict

from .machine import Machine


def get_manufacturers_list(machines: Dict[str, Machine]) -> Counter:
    """
    Count normalized manufacturers.

    Args:
        machines: Machine map keyed by name

    Returns:
        Counter of manufacturer name -> number of machines
    """
    return Counter(
        machine.extended_data.manufacturer
        for machine in machines.values()
        if machine.extended_data and machine.extended_data.manufacturer
    )


def get_languages_list(machines: Dict[str, Machine]) -> Counter:
    """Count language memberships (a machine may count several times)."""
    return Counter(
        language
        for machine in machines.values()
        for language in machine.languages
    )


def get_players_list(machines: Dict[str, Machine]) -> Counter:
    """
    Count normalized player modes.

    The normalized players value is a comma-separated list of modes; each
    mode is counted on its own.

    Args:
        machines: Machine map keyed by name

    Returns:
        Counter of player mode -> number of machines
    """
    counts: Counter = Counter()
    for machine in machines.values():
        if not machine.extended_data or not machine.extended_data.players:
            continue
        for mode in machine.extended_data.players.split(','):
            counts[mode.strip()] += 1
    return counts


def get_series_list(machines: Dict[str, Machine]) -> Counter:
    """Count machines per series."""
    return Counter(m.series for m in machines.values() if m.series)


def get_categories_list(machines: Dict[str, Machine]) -> Counter:
    """Count machines per category."""
    return Counter(m.category for m in machines.values() if m.category)


def get_subcategories_list(machines: Dict[str, Machine]) -> Counter:
    """
    Count machines per subcategory.

    Keys are ``(category, subcategory)`` tuples.
    """
    return Counter(
        (m.category, m.subcategory)
        for m in machines.values()
        if m.category and m.subcategory
    )
