"""
Machine filters.

Remove devices, BIOS sets, mechanical machines, modified sets and clones,
or whole categories, from a canonical machine map.
"""

import logging
from enum import Enum
from typing import Dict, Iterable

from .models.machine import Machine

logger = logging.getLogger(__name__)


class MachineFilter(Enum):
    """Kinds of machines that can be removed."""
    DEVICE = 'device'
    BIOS = 'bios'
    MECHANICAL = 'mechanical'
    MODIFIED = 'modified'
    CLONES = 'clones'


# Descriptions of hacked, bootleg and non-standard hardware sets
MODIFIED_KEYWORDS = ('bootleg', 'playchoice-10', 'nintendo super system', 'prototype')
INVALID_MANUFACTURERS = ('unknown', 'bootleg')
INVALID_PLAYERS = ('bios', 'device', 'non-arcade')


def _contains_any(value, keywords) -> bool:
    if not value:
        return False
    value = value.lower()
    return any(keyword in value for keyword in keywords)


def is_modified(machine: Machine) -> bool:
    """Check if a machine is a bootleg, prototype or otherwise modified set."""
    return (
        _contains_any(machine.description, MODIFIED_KEYWORDS) or
        _contains_any(machine.manufacturer, INVALID_MANUFACTURERS) or
        _contains_any(machine.players, INVALID_PLAYERS)
    )


def filter_applies(machine: Machine, machine_filter: MachineFilter) -> bool:
    """Check if a filter selects a machine for removal."""
    if machine_filter is MachineFilter.DEVICE:
        return bool(machine.is_device)
    if machine_filter is MachineFilter.BIOS:
        return bool(machine.is_bios)
    if machine_filter is MachineFilter.MECHANICAL:
        return bool(machine.is_mechanical)
    if machine_filter is MachineFilter.MODIFIED:
        return is_modified(machine)
    if machine_filter is MachineFilter.CLONES:
        return machine.is_clone()
    raise ValueError(f"Unknown filter: {machine_filter}")


def remove_machines_by_filter(
    machines: Dict[str, Machine],
    filters: Iterable[MachineFilter]
) -> Dict[str, Machine]:
    """
    Remove the machines selected by any of the filters.

    Args:
        machines: Canonical machine map
        filters: Filters to apply

    Returns:
        New map without the removed machines

    Raises:
        ValueError: If the machine map is empty
    """
    if not machines:
        raise ValueError("No machines data loaded, please read the data first.")

    filters = list(filters)
    kept = {
        name: machine for name, machine in machines.items()
        if not any(filter_applies(machine, f) for f in filters)
    }

    logger.info(
        f"Filters {[f.value for f in filters]} removed "
        f"{len(machines) - len(kept)} of {len(machines)} machines"
    )
    return kept


def remove_machines_by_category(
    machines: Dict[str, Machine],
    categories: Iterable[str]
) -> Dict[str, Machine]:
    """
    Keep only machines that have a category outside the removal list.

    Machines without a category are removed as well.

    Args:
        machines: Canonical machine map
        categories: Category names to remove (e.g. "Casino", "Quiz")

    Returns:
        New map with the remaining machines

    Raises:
        ValueError: If the machine map is empty
    """
    if not machines:
        raise ValueError("No machines data loaded, please read the data first.")

    removed = set(categories)
    kept = {
        name: machine for name, machine in machines.items()
        if machine.category is not None and machine.category not in removed
    }

    logger.info(
        f"Category filter removed {len(machines) - len(kept)} of {len(machines)} machines"
    )
    return kept
