"""Reconciliation of partial machine maps into the canonical map."""

import logging
from typing import Dict, Iterable

from ..models.machine import Machine

logger = logging.getLogger(__name__)


def merge_machine_maps(into: Dict[str, Machine], incoming: Dict[str, Machine]) -> Dict[str, Machine]:
    """
    Fold a partial machine map into the canonical map.

    Machines seen for the first time are added as they are; machines already
    present are replaced by ``existing.combine(incoming)``. Never raises.

    Args:
        into: Canonical map, updated in place
        incoming: Partial map produced by one reader

    Returns:
        The updated canonical map
    """
    added = 0
    combined = 0

    for name, machine in incoming.items():
        existing = into.get(name)
        if existing is None:
            into[name] = machine
            added += 1
        else:
            into[name] = existing.combine(machine)
            combined += 1

    logger.debug(f"Merged {len(incoming)} machines ({added} new, {combined} combined)")
    return into


def reconcile(partial_maps: Iterable[Dict[str, Machine]]) -> Dict[str, Machine]:
    """
    Build the canonical map from partial maps, in the order given.

    Args:
        partial_maps: Partial maps, highest precedence first

    Returns:
        New canonical machine map
    """
    machines: Dict[str, Machine] = {}
    for partial in partial_maps:
        merge_machine_maps(machines, partial)
    return machines
