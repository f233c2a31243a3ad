"""Concurrent multi-source reading and reconciliation."""

from .orchestrator import (
    Orchestrator,
    ReadResult,
    RunState,
    SourceError,
    locate_data_file,
    read_file,
    read_files,
    read_sources,
)
from .reconciliation import merge_machine_maps, reconcile
from .workers import SourceWorker, run_per_source

__all__ = [
    "Orchestrator",
    "ReadResult",
    "RunState",
    "SourceError",
    "SourceWorker",
    "locate_data_file",
    "merge_machine_maps",
    "read_file",
    "read_files",
    "read_sources",
    "reconcile",
    "run_per_source",
]
