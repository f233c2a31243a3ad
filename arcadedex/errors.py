"""Exception hierarchy shared by readers, fetchers and exporters."""

from pathlib import Path
from typing import Optional, Union


class ArcadeDexError(Exception):
    """Base exception for all arcadedex errors."""
    pass


class SourceIOError(ArcadeDexError, OSError):
    """A data file could not be opened or read."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class FormatError(ArcadeDexError):
    """
    A data file violates the grammar its reader expects.

    Carries the file path and, when known, the line and column where the
    reader gave up.
    """

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        line: Optional[int] = None,
        column: Optional[int] = None
    ):
        self.path = Path(path) if path is not None else None
        self.line = line
        self.column = column

        location = ""
        if self.path is not None:
            location = f" in {self.path.name}"
        if line is not None:
            location += f" at line {line}"
            if column is not None:
                location += f", column {column}"

        super().__init__(f"{message}{location}")


class NotFoundError(ArcadeDexError):
    """A required archive or data file is absent from the workspace."""
    pass


class AggregationError(ArcadeDexError):
    """A worker terminated abnormally before returning its result."""
    pass


class FetchError(ArcadeDexError):
    """A source page or archive could not be retrieved."""
    pass


class ExportError(ArcadeDexError):
    """The record set could not be exported."""
    pass
