"""
Thread-per-source workers.

Every selected source gets its own thread, launched eagerly with no pooling
or throttling. Failures are captured per worker so one source never stops
the others.
"""

import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..data_types import SourceType, all_sources, unique_sources
from ..errors import AggregationError, ArcadeDexError
from ..progress import (
    ProgressCallback,
    ProgressMultiplexer,
    SharedProgressCallback,
    no_progress,
)

logger = logging.getLogger(__name__)

SourceTask = Callable[[SourceType, ProgressCallback], Any]


class SourceWorker(threading.Thread):
    """
    Runs one task for one source and keeps its outcome.

    Errors from the arcadedex hierarchy are kept as they are; any other
    exception is wrapped in an AggregationError.
    """

    def __init__(
        self,
        source_type: SourceType,
        task: SourceTask,
        progress_callback: ProgressCallback,
        prefix: str = "worker"
    ):
        super().__init__(name=f"{prefix}-{source_type.value}", daemon=True)
        self.source_type = source_type
        self.task = task
        self.progress_callback = progress_callback
        self.result: Any = None
        self.error: Optional[ArcadeDexError] = None

    def run(self) -> None:
        logger.debug(f"Worker {self.name} started")
        try:
            self.result = self.task(self.source_type, self.progress_callback)
        except ArcadeDexError as e:
            logger.error(f"Worker {self.name} failed: {e}")
            self.error = e
        except Exception as e:
            logger.error(f"Worker {self.name} terminated abnormally: {e}", exc_info=True)
            aggregation_error = AggregationError(
                f"{self.source_type.value} worker terminated abnormally: {e}"
            )
            aggregation_error.__cause__ = e
            self.error = aggregation_error
        logger.debug(f"Worker {self.name} finished")

    @property
    def failed(self) -> bool:
        return self.error is not None

    def outcome(self) -> Any:
        """Get the task result, or the error that stopped it."""
        return self.error if self.failed else self.result


def start_workers(
    task: SourceTask,
    sources: Iterable[SourceType],
    multiplexer: ProgressMultiplexer,
    prefix: str = "worker"
) -> List[SourceWorker]:
    """Launch one worker per source, each reporting through its own view."""
    workers = [
        SourceWorker(source, task, multiplexer.for_source(source), prefix)
        for source in sources
    ]
    logger.info(f"Spawning {len(workers)} {prefix} worker(s)")
    for worker in workers:
        worker.start()
    return workers


def join_workers(workers: Iterable[SourceWorker]) -> None:
    """Wait for every worker to terminate."""
    for worker in workers:
        worker.join()
    logger.debug("All workers completed")


def run_per_source(
    task: SourceTask,
    sources: Optional[Iterable[SourceType]] = None,
    progress_callback: SharedProgressCallback = no_progress,
    name: str = "worker"
) -> Dict[SourceType, Union[Any, ArcadeDexError]]:
    """
    Run a task for several sources concurrently.

    Args:
        task: Callable taking (source, progress callback)
        sources: Sources to process; repeats are ignored (default: all)
        progress_callback: Shared sink receiving source-tagged events
        name: Thread name prefix

    Returns:
        Dictionary mapping each source, in merge order, to its task result
        or the error that stopped it
    """
    selected = unique_sources(sources) if sources is not None else all_sources()

    with ProgressMultiplexer(progress_callback) as multiplexer:
        workers = start_workers(task, selected, multiplexer, name)
        join_workers(workers)

    ordered = sorted(workers, key=lambda w: list(SourceType).index(w.source_type))
    return {worker.source_type: worker.outcome() for worker in ordered}
