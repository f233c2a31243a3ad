"""
Archive unpacker.

Extracts each source's downloaded archive into
``<workspace>/extracted/<source>`` and returns the data file found there.
ZIP archives are handled with zipfile, 7z archives with py7zr.
"""

import logging
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import py7zr
from py7zr.exceptions import Bad7zFile

from ..data_types import SourceDetails, SourceType, get_source_details
from ..errors import ArcadeDexError, FormatError, NotFoundError, SourceIOError
from ..progress import (
    ProgressCallback,
    ProgressInfo,
    ProgressKind,
    SharedProgressCallback,
    error,
    info,
    no_progress,
)
from .workspace import (
    download_folder,
    ensure_folder_exists,
    extract_folder,
    find_file_with_pattern,
    find_files_with_pattern,
)

logger = logging.getLogger(__name__)


def unpack_file(
    source_type: SourceType,
    workspace: Union[str, Path],
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Extract one source's archive and return its data file.

    Extraction is skipped when the data file is already present.

    Args:
        source_type: Source to unpack
        workspace: Workspace folder
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events

    Returns:
        Path of the extracted data file

    Raises:
        NotFoundError: If the archive is missing, or the data file is not
            in it or is matched by several files
        FormatError: If the archive is corrupt or of an unsupported type
        SourceIOError: If files cannot be written
    """
    details = get_source_details(source_type)
    destination = ensure_folder_exists(extract_folder(workspace, details.name))

    progress_callback(info(f"Checking if {details.name} file already unpacked"))
    if find_files_with_pattern(destination, details.data_file_pattern):
        existing = _single_data_file(details, destination, progress_callback)
        logger.info(f"{details.name} already unpacked: {existing}")
        progress_callback(ProgressInfo(
            0, 0, f"{details.name} file already unpacked", ProgressKind.FINISH
        ))
        return existing

    progress_callback(info(f"Checking if {details.name} archive exists"))
    try:
        archive = find_file_with_pattern(download_folder(workspace), details.archive_pattern)
    except NotFoundError:
        logger.error(f"{details.name} archive not found in {download_folder(workspace)}")
        progress_callback(error(f"{details.name} archive not found"))
        raise

    progress_callback(info(f"Unpacking {archive.name}"))
    try:
        unpack_archive(archive, destination, progress_callback)
    except ArcadeDexError as e:
        progress_callback(error(f"Couldn't unpack {archive.name}: {e}"))
        raise

    if not find_files_with_pattern(destination, details.data_file_pattern):
        message = f"{details.name} data file not present after unpacking"
        logger.error(message)
        progress_callback(error(message))
        raise NotFoundError(message)

    return _single_data_file(details, destination, progress_callback)


def _single_data_file(
    details: SourceDetails,
    destination: Path,
    progress_callback: ProgressCallback
) -> Path:
    try:
        return find_file_with_pattern(
            destination, details.data_file_pattern, unique=True
        )
    except NotFoundError as e:
        logger.error(str(e))
        progress_callback(error(str(e)))
        raise


def unpack_archive(
    archive: Path,
    destination: Path,
    progress_callback: ProgressCallback = no_progress
) -> Path:
    """
    Extract a ZIP or 7z archive.

    Args:
        archive: Archive to extract
        destination: Folder to extract into
        progress_callback: Receives PROGRESS/FINISH events

    Returns:
        The destination folder

    Raises:
        FormatError: If the archive is corrupt or of an unsupported type
        SourceIOError: If files cannot be read or written
    """
    suffix = archive.suffix.lower()
    logger.info(f"Extracting {archive.name} to {destination}")

    try:
        if suffix == '.zip':
            _extract_zip(archive, destination, progress_callback)
        elif suffix == '.7z':
            _extract_7z(archive, destination, progress_callback)
        else:
            raise FormatError(f"Unsupported archive format '{suffix}'", archive)
    except (zipfile.BadZipFile, Bad7zFile) as e:
        raise FormatError(f"Corrupt archive ({e})", archive) from e
    except OSError as e:
        raise SourceIOError(f"Failed to extract {archive} ({e})", archive) from e

    return destination


def _extract_zip(archive: Path, destination: Path, progress_callback: ProgressCallback) -> None:
    with zipfile.ZipFile(archive) as zf:
        members = zf.infolist()
        total = len(members)
        for processed, member in enumerate(members, start=1):
            zf.extract(member, destination)
            progress_callback(ProgressInfo(processed, total, "", ProgressKind.PROGRESS))

    progress_callback(ProgressInfo(
        total, total, f"{archive.name} unpacked successfully", ProgressKind.FINISH
    ))


def _extract_7z(archive: Path, destination: Path, progress_callback: ProgressCallback) -> None:
    with py7zr.SevenZipFile(archive, mode='r') as sz:
        total = len(sz.getnames())
        sz.extractall(path=destination)

    progress_callback(ProgressInfo(
        total, total, f"{archive.name} unpacked successfully", ProgressKind.FINISH
    ))


def unpack_files(
    workspace: Union[str, Path],
    progress_callback: SharedProgressCallback = no_progress,
    sources: Optional[Iterable[SourceType]] = None
) -> Dict[SourceType, Union[Path, ArcadeDexError]]:
    """
    Unpack several sources concurrently, one thread per source.

    Args:
        workspace: Workspace folder
        progress_callback: Shared sink receiving source-tagged events
        sources: Sources to unpack (default: all)

    Returns:
        Dictionary mapping each source to its data file or to the error
        that stopped it
    """
    # Imported here to avoid a cycle with the workflow package
    from ..workflow.workers import run_per_source

    def worker(source_type: SourceType, callback: ProgressCallback) -> Path:
        return unpack_file(source_type, workspace, callback)

    return run_per_source(worker, sources, progress_callback, name="unpack")
