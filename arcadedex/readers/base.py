"""Shared plumbing for the data file readers.

Line-oriented readers (catver, nplayers, series, languages) and XML readers
(mame, history, resources) both make two passes over their file: one to count
the entries that will be processed, one to parse them. The counting pass uses
the same predicates as the parsing pass so the final progress event always
reports ``processed == total``.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from lxml import etree

from ..errors import ArcadeDexError, FormatError, SourceIOError
from ..progress import ProgressCallback, error

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Sections used by folder INI files for frontend settings, not for data
PLACEHOLDER_SECTIONS = {"[FOLDER_SETTINGS]", "[ROOT_FOLDER]"}


@contextmanager
def open_data_file(path: Path) -> Iterator[BinaryIO]:
    """
    Open a data file for binary reading.

    Raises:
        SourceIOError: If the file cannot be opened
    """
    try:
        handle = open(path, 'rb')
    except OSError as e:
        raise SourceIOError(f"Failed to open file: {path} ({e})", path) from e

    with handle:
        yield handle


@contextmanager
def reporting_errors(progress_callback: ProgressCallback, path: Path) -> Iterator[None]:
    """Emit an ERROR progress event for reader failures before re-raising."""
    try:
        yield
    except ArcadeDexError as e:
        logger.error(f"Failed to read {path.name}: {e}")
        progress_callback(error(f"Couldn't read {path.name}: {e}"))
        raise


def log_file_size(path: Path) -> None:
    """Log the size of a data file about to be parsed."""
    try:
        file_size_mb = path.stat().st_size / (1024 * 1024)
    except OSError:
        return
    logger.info(f"File size: {file_size_mb:.1f} MB")


# ---------------------------------------------------------------------------
# Line-oriented files
# ---------------------------------------------------------------------------

def iter_lines(path: Path) -> Iterator[Tuple[int, str]]:
    """
    Iterate over the stripped lines of a text data file.

    Args:
        path: Path to the INI file

    Yields:
        Tuples of (line number, stripped line)

    Raises:
        SourceIOError: If the file cannot be read
        FormatError: If a line is not valid UTF-8
    """
    with open_data_file(path) as handle:
        lineno = 0
        try:
            for lineno, raw in enumerate(handle, start=1):
                try:
                    line = raw.decode('utf-8')
                except UnicodeDecodeError as e:
                    raise FormatError(
                        f"Invalid UTF-8 data ({e.reason})",
                        path, line=lineno, column=e.start + 1
                    ) from e
                if lineno == 1:
                    line = line.lstrip('\ufeff')
                yield lineno, line.strip()
        except OSError as e:
            raise SourceIOError(
                f"Failed to read line {lineno + 1} in file: {path} ({e})", path
            ) from e


def is_ignorable(line: str) -> bool:
    """Check if a stripped line is blank or a comment."""
    return not line or line.startswith(';')


def iter_key_values(path: Path) -> Iterator[Tuple[int, str, str]]:
    """
    Iterate over ``key = value`` lines, skipping comments and section headers.

    Settings under placeholder sections such as ``[FOLDER_SETTINGS]`` are
    skipped too.

    Yields:
        Tuples of (line number, key, value), both stripped
    """
    in_placeholder = False

    for lineno, line in iter_lines(path):
        if is_ignorable(line):
            continue
        if line.startswith('['):
            in_placeholder = line in PLACEHOLDER_SECTIONS
            continue
        if in_placeholder or '=' not in line:
            continue

        key, value = line.split('=', 1)
        yield lineno, key.strip(), value.strip()


def iter_section_entries(path: Path) -> Iterator[Tuple[int, str, str]]:
    """
    Iterate over the bare entries of a folder-style INI file.

    Entries listed before the first section header, or under a placeholder
    section such as ``[FOLDER_SETTINGS]``, are skipped, as are ``key=value``
    settings lines.

    Yields:
        Tuples of (line number, section name, entry)
    """
    section: Optional[str] = None

    for lineno, line in iter_lines(path):
        if is_ignorable(line):
            continue

        if line.startswith('[') and line.endswith(']'):
            section = None if line in PLACEHOLDER_SECTIONS else line[1:-1].strip()
            continue

        if section is None or '=' in line:
            continue

        yield lineno, section, line


# ---------------------------------------------------------------------------
# XML files
# ---------------------------------------------------------------------------

def format_error_from_xml(exc: etree.XMLSyntaxError, path: Path) -> FormatError:
    """Convert an lxml syntax error into a FormatError with its position."""
    line, column = getattr(exc, 'position', (None, None)) or (None, None)
    message = exc.msg if getattr(exc, 'msg', None) else str(exc)
    return FormatError(f"Malformed XML: {message}", path, line=line, column=column)


def iter_xml(path: Path, events: Tuple[str, ...] = ("start", "end"), tag=None):
    """
    Stream parse events from an XML data file.

    Args:
        path: Path to the XML file
        events: lxml iterparse events to report
        tag: Optional tag (or tags) to restrict events to

    Yields:
        Tuples of (event, element)

    Raises:
        SourceIOError: If the file cannot be opened
        FormatError: If the XML is malformed
    """
    with open_data_file(path) as handle:
        context = etree.iterparse(
            handle, events=events, tag=tag, huge_tree=True, remove_comments=True
        )
        try:
            for event, elem in context:
                yield event, elem
        except etree.XMLSyntaxError as e:
            raise format_error_from_xml(e, path) from e


def release(elem) -> None:
    """Free a fully processed element and its already processed siblings."""
    elem.clear()
    parent = elem.getparent()
    if parent is not None:
        while elem.getprevious() is not None:
            del parent[0]


def count_xml_elements(path: Path, tag: str) -> int:
    """
    Count elements with the given tag in a dedicated streaming pass.

    Args:
        path: Path to the XML file
        tag: Element tag to count (e.g. "machine")

    Returns:
        Number of matching elements

    Raises:
        SourceIOError: If the file cannot be opened
        FormatError: If the XML is malformed
    """
    count = 0
    for _, elem in iter_xml(path, events=("end",), tag=tag):
        count += 1
        release(elem)
    return count
