"""
Multi-source read orchestration.

Launches one reader thread per source, waits for all of them, then merges
their partial maps on the calling thread in the fixed source order. Sources
that fail are reported next to the canonical map built from the others.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ..data_types import SourceType, all_sources, get_source_details, unique_sources
from ..errors import ArcadeDexError, NotFoundError
from ..fetch.workspace import extract_folder, find_file_with_pattern
from ..models.machine import Machine
from ..progress import (
    ProgressCallback,
    ProgressMultiplexer,
    SharedProgressCallback,
    error,
    no_progress,
)
from .reconciliation import merge_machine_maps
from .workers import SourceTask, join_workers, start_workers

logger = logging.getLogger(__name__)


class RunState(Enum):
    """Lifecycle of an orchestrated run."""
    IDLE = "idle"
    DISPATCHING = "dispatching"
    AWAITING = "awaiting"
    MERGING = "merging"
    DONE = "done"
    PARTIALLY_FAILED = "partially_failed"


@dataclass
class SourceError:
    """Failure of a single source."""
    source: SourceType
    error: ArcadeDexError

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class ReadResult:
    """
    Outcome of a multi-source read.

    Attributes:
        machines: Canonical map built from the sources that succeeded
        errors: One entry per failed source
        state: DONE or PARTIALLY_FAILED
    """
    machines: Dict[str, Machine] = field(default_factory=dict)
    errors: List[SourceError] = field(default_factory=list)
    state: RunState = RunState.IDLE

    @property
    def ok(self) -> bool:
        return not self.errors


class Orchestrator:
    """
    Runs a reader task for each source and reconciles the results.

    Each orchestrator runs once:
    IDLE -> DISPATCHING -> AWAITING -> MERGING -> DONE | PARTIALLY_FAILED.

    Example:
        orchestrator = Orchestrator(task, [SourceType.MAME, SourceType.CATVER], sink)
        result = orchestrator.run()
        for source_error in result.errors:
            print(source_error.source, source_error.message)
    """

    def __init__(
        self,
        task: SourceTask,
        sources: Optional[Iterable[SourceType]] = None,
        progress_callback: SharedProgressCallback = no_progress
    ):
        """
        Initialize orchestrator.

        Args:
            task: Callable taking (source, progress callback) and returning
                the source's partial machine map
            sources: Sources to read; repeats are ignored (default: all)
            progress_callback: Shared sink receiving source-tagged events
        """
        self.task = task
        self.sources = unique_sources(sources) if sources is not None else all_sources()
        self.progress_callback = progress_callback
        self.state = RunState.IDLE

    def _set_state(self, state: RunState) -> None:
        logger.debug(f"Run state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> ReadResult:
        """
        Read every source and merge the results.

        Returns:
            ReadResult with the canonical map and per-source errors

        Raises:
            RuntimeError: If the orchestrator has already run
        """
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"Orchestrator already ran (state: {self.state.value})")

        with ProgressMultiplexer(self.progress_callback) as multiplexer:
            self._set_state(RunState.DISPATCHING)
            workers = start_workers(self.task, self.sources, multiplexer, "reader")

            self._set_state(RunState.AWAITING)
            join_workers(workers)

        self._set_state(RunState.MERGING)
        result = ReadResult()
        order = list(SourceType)

        for worker in sorted(workers, key=lambda w: order.index(w.source_type)):
            if worker.failed:
                result.errors.append(SourceError(worker.source_type, worker.error))
                continue
            merge_machine_maps(result.machines, worker.result)

        self._set_state(RunState.PARTIALLY_FAILED if result.errors else RunState.DONE)
        result.state = self.state

        logger.info(
            f"Read {len(self.sources)} sources: {len(result.machines)} machines, "
            f"{len(result.errors)} failed"
        )
        return result


def read_sources(
    paths: Dict[SourceType, Union[str, Path]],
    progress_callback: SharedProgressCallback = no_progress
) -> ReadResult:
    """
    Read the given data files concurrently and reconcile them.

    Args:
        paths: Data file path per source
        progress_callback: Shared sink receiving source-tagged events

    Returns:
        ReadResult with the canonical map and per-source errors
    """
    def task(source_type: SourceType, callback: ProgressCallback) -> Dict[str, Machine]:
        reader = get_source_details(source_type).reader
        return reader(str(paths[source_type]), callback)

    return Orchestrator(task, paths.keys(), progress_callback).run()


def locate_data_file(source_type: SourceType, workspace: Union[str, Path]) -> Path:
    """
    Find the extracted data file of a source in the workspace.

    Raises:
        NotFoundError: If the source has not been extracted, or several
            extracted files match its data file pattern
    """
    details = get_source_details(source_type)
    return find_file_with_pattern(
        extract_folder(workspace, details.name), details.data_file_pattern, unique=True
    )


def read_file(
    source_type: SourceType,
    workspace: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Dict[str, Machine]:
    """
    Read one source's extracted data file from the workspace.

    Args:
        source_type: Source to read
        workspace: Workspace folder
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Partial machine map produced by the source's reader

    Raises:
        NotFoundError: If the data file is not in the workspace
        SourceIOError: If the data file cannot be read
        FormatError: If the data file is malformed
    """
    details = get_source_details(source_type)
    try:
        data_file = locate_data_file(source_type, workspace)
    except NotFoundError:
        progress_callback(error(f"{details.name} data file not found"))
        raise

    logger.info(f"Reading {details.name} from {data_file}")
    return details.reader(str(data_file), progress_callback)


def read_files(
    workspace: Union[str, Path],
    progress_callback: SharedProgressCallback = no_progress,
    sources: Optional[Iterable[SourceType]] = None
) -> ReadResult:
    """
    Read every extracted source in the workspace concurrently.

    Args:
        workspace: Workspace folder
        progress_callback: Shared sink receiving source-tagged events
        sources: Sources to read (default: all)

    Returns:
        ReadResult with the canonical map and per-source errors
    """
    def task(source_type: SourceType, callback: ProgressCallback) -> Dict[str, Machine]:
        return read_file(source_type, workspace, callback)

    return Orchestrator(task, sources, progress_callback).run()
