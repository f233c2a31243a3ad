"""
Rich progress display for multi-source runs.

One progress task per source, driven by the source-tagged events the
progress multiplexer delivers.
"""

import logging
from typing import Dict, List, Optional

from rich import box
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
)
from rich.table import Table

from ..data_types import SourceType, get_source_details
from ..progress import ProgressInfo, ProgressKind

logger = logging.getLogger(__name__)

# Retro theme color palette
THEME = {
    'primary': 'magenta',
    'secondary': 'cyan',
    'success': 'bright_green',
    'muted': 'dim cyan',
    'error': 'red',
}


class SourceProgressDisplay:
    """
    Progress bars for a multi-source run.

    Instances are callables and can be handed to the orchestrator as its
    shared progress sink. Events are delivered by a single consumer thread,
    so the display is never updated concurrently.

    Example:
        with SourceProgressDisplay(sources) as display:
            result = read_files(workspace, display, sources)
    """

    def __init__(self, sources: List[SourceType], console: Optional[Console] = None):
        """
        Initialize display.

        Args:
            sources: Sources that will report progress
            console: Optional rich console (default: stderr console)
        """
        self.console = console or Console(stderr=True)
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn(f"[{THEME['primary']}]{{task.fields[source]:<10}}"),
            BarColumn(complete_style=THEME['secondary'], finished_style=THEME['success']),
            MofNCompleteColumn(),
            TextColumn(f"[{THEME['muted']}]{{task.fields[status]}}"),
            console=self.console,
        )
        self.tasks: Dict[SourceType, TaskID] = {}
        self.failed: Dict[SourceType, str] = {}

        for source in sources:
            self.tasks[source] = self.progress.add_task(
                "", total=None, source=get_source_details(source).name, status="Waiting"
            )

    def __enter__(self) -> "SourceProgressDisplay":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.progress.stop()

    def __call__(self, progress_info: ProgressInfo) -> None:
        source = progress_info.source
        if source not in self.tasks:
            logger.debug(f"Progress event for unknown source: {progress_info}")
            return

        task_id = self.tasks[source]
        kind = progress_info.kind

        if kind is ProgressKind.INFO:
            self.progress.update(task_id, status=progress_info.message)
        elif kind is ProgressKind.PROGRESS:
            self.progress.update(
                task_id,
                total=progress_info.total or None,
                completed=progress_info.processed,
            )
        elif kind is ProgressKind.FINISH:
            total = progress_info.total or 1
            self.progress.update(
                task_id,
                total=total,
                completed=total,
                status=f"[{THEME['success']}]{progress_info.message}",
            )
        elif kind is ProgressKind.ERROR:
            self.failed[source] = progress_info.message
            self.progress.update(
                task_id,
                total=1,
                completed=0,
                status=f"[{THEME['error']}]{progress_info.message}",
            )


def render_summary(console: Console, counts: Dict[str, int], title: str = "Summary") -> None:
    """Print a two-column summary table."""
    table = Table(title=title, box=box.SIMPLE, title_style=THEME['primary'])
    table.add_column("Item", style=THEME['secondary'])
    table.add_column("Count", justify="right")
    for item, count in counts.items():
        table.add_row(item, str(count))
    console.print(table)


def render_errors(console: Console, errors: Dict[SourceType, str]) -> None:
    """Print per-source errors."""
    if not errors:
        return
    table = Table(title="Failed sources", box=box.SIMPLE, title_style=THEME['error'])
    table.add_column("Source", style=THEME['secondary'])
    table.add_column("Error", style=THEME['error'])
    for source, message in errors.items():
        table.add_row(get_source_details(source).name, message)
    console.print(table)
