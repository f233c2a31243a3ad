"""Progress reporting for long-running reads, downloads and exports.

Single-source operations report through a plain callable taking a
``ProgressInfo``. Multi-source runs share one sink between worker threads
through a ``ProgressMultiplexer``: each worker gets a source-tagged view that
only enqueues events, and a single consumer thread delivers them to the sink
in arrival order. The sink therefore never runs concurrently with itself.
"""

import logging
import queue
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .data_types import SourceType

logger = logging.getLogger(__name__)


class ProgressKind(Enum):
    """Type of progress event."""
    INFO = "info"            # status message, no counters
    PROGRESS = "progress"    # counters updated
    FINISH = "finish"        # operation completed, processed == total
    ERROR = "error"          # operation failed, message carries the reason


@dataclass(frozen=True)
class ProgressInfo:
    """Progress event emitted by readers, downloaders and writers.

    Attributes:
        processed: Amount of work completed so far
        total: Total amount of work (0 when unknown)
        message: Human readable status
        kind: Event type
        source: Originating data source in multi-source runs
    """
    processed: int
    total: int
    message: str
    kind: ProgressKind
    source: Optional["SourceType"] = None


ProgressCallback = Callable[[ProgressInfo], None]
SharedProgressCallback = Callable[[ProgressInfo], None]


def info(message: str) -> ProgressInfo:
    """Build an INFO event."""
    return ProgressInfo(0, 0, message, ProgressKind.INFO)


def error(message: str) -> ProgressInfo:
    """Build an ERROR event."""
    return ProgressInfo(0, 0, message, ProgressKind.ERROR)


def no_progress(progress_info: ProgressInfo) -> None:
    """Progress callback that discards every event."""
    pass


class BatchReporter:
    """
    Emits PROGRESS events roughly every tenth of the total and a final
    FINISH event.

    Counters only ever grow, and FINISH reports ``processed == total``.
    When the total is unknown (0) no PROGRESS events are emitted.

    Example:
        reporter = BatchReporter(callback, total=1200)
        for item in items:
            ...
            reporter.advance()
        reporter.finish("catver.ini loaded successfully")
    """

    def __init__(self, callback: ProgressCallback, total: int, steps: int = 10):
        self.callback = callback
        self.total = total
        self.processed = 0
        self._batch = max(total // steps, 1)

    def advance(self, count: int = 1) -> None:
        """Record processed items and report on batch boundaries."""
        for _ in range(count):
            self.processed += 1
            if (
                self.total
                and self.processed <= self.total
                and self.processed % self._batch == 0
            ):
                self.callback(ProgressInfo(
                    self.processed, self.total, "", ProgressKind.PROGRESS
                ))

    def finish(self, message: str) -> None:
        """Report completion."""
        if self.total and self.processed != self.total:
            logger.warning(
                f"Processed {self.processed} entries, counted {self.total}"
            )
        self.callback(ProgressInfo(
            self.processed, self.processed, message, ProgressKind.FINISH
        ))


_STOP = object()


class ProgressMultiplexer:
    """
    Fans a single progress sink out to concurrent workers.

    Workers call the views returned by ``for_source``; events are queued and
    forwarded to the sink by one consumer thread, tagged with their source.
    Errors raised by the sink are logged and do not stop delivery.

    Example:
        with ProgressMultiplexer(sink) as multiplexer:
            callback = multiplexer.for_source(SourceType.MAME)
            read_mame_file(path, callback)
    """

    def __init__(self, sink: SharedProgressCallback):
        """
        Initialize the multiplexer.

        Args:
            sink: Callable receiving every tagged ProgressInfo
        """
        self.sink = sink
        self._queue: "queue.Queue" = queue.Queue()
        self._consumer: Optional[threading.Thread] = None
        self._event_count = 0
        self._error_count = 0
        self._views: Dict["SourceType", ProgressCallback] = {}

    def start(self) -> None:
        """Start the consumer thread."""
        if self._consumer is not None:
            return
        self._consumer = threading.Thread(
            target=self._consume, name="progress-consumer", daemon=True
        )
        self._consumer.start()
        logger.debug("Progress consumer started")

    def stop(self) -> None:
        """Deliver pending events and stop the consumer thread."""
        if self._consumer is None:
            return
        self._queue.put(_STOP)
        self._consumer.join()
        self._consumer = None
        logger.debug(
            f"Progress consumer stopped. Delivered {self._event_count} events "
            f"with {self._error_count} sink errors"
        )

    def __enter__(self) -> "ProgressMultiplexer":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def for_source(self, source: "SourceType") -> ProgressCallback:
        """
        Get the progress callback for one source.

        Args:
            source: Source the worker is processing

        Returns:
            Thread-safe callable that tags and enqueues events
        """
        if source not in self._views:
            def view(progress_info: ProgressInfo) -> None:
                self._queue.put(replace(progress_info, source=source))

            self._views[source] = view
        return self._views[source]

    def _consume(self) -> None:
        while True:
            event = self._queue.get()
            if event is _STOP:
                break

            self._event_count += 1
            try:
                self.sink(event)
            except Exception as e:
                self._error_count += 1
                logger.error(
                    f"Error in progress sink for {event.source}: {e}",
                    exc_info=True
                )

    def get_stats(self) -> Dict[str, int]:
        """Get delivery statistics."""
        return {
            'events_delivered': self._event_count,
            'errors': self._error_count,
            'queue_size': self._queue.qsize(),
        }
