"""Workspace layout and file lookup helpers."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Pattern, Union

from ..errors import NotFoundError, SourceIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspacePaths:
    """Folder names inside a workspace."""
    download_path: str = 'downloads'
    extract_path: str = 'extracted'


WORKSPACE_PATHS = WorkspacePaths()


def ensure_folder_exists(path: Union[str, Path]) -> Path:
    """
    Create a folder (and its parents) if it does not exist.

    Raises:
        SourceIOError: If the folder cannot be created
    """
    path = Path(path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SourceIOError(f"Failed to create folder: {path} ({e})", path) from e
    return path


def find_files_with_pattern(folder: Union[str, Path], pattern: Pattern) -> List[Path]:
    """
    Find every file below a folder whose name matches a pattern.

    Args:
        folder: Folder to search recursively
        pattern: Compiled regex matched against file names

    Returns:
        Matching paths in sorted order (empty if the folder does not exist)
    """
    folder = Path(folder)
    if not folder.is_dir():
        return []
    return [
        path for path in sorted(folder.rglob('*'))
        if path.is_file() and pattern.search(path.name)
    ]


def find_file_with_pattern(
    folder: Union[str, Path],
    pattern: Pattern,
    unique: bool = False
) -> Path:
    """
    Find the first file below a folder whose name matches a pattern.

    Files are visited in sorted path order so the result is stable.

    Args:
        folder: Folder to search recursively
        pattern: Compiled regex matched against file names
        unique: Fail instead of picking the first file when several match

    Returns:
        Path of the matching file

    Raises:
        NotFoundError: If no file matches, or several match and ``unique``
            is set
    """
    matches = find_files_with_pattern(folder, pattern)
    if not matches:
        raise NotFoundError(
            f"No matching file with pattern {pattern.pattern} found in {folder}"
        )

    if unique and len(matches) > 1:
        names = ", ".join(path.name for path in matches)
        raise NotFoundError(
            f"Expected one file matching {pattern.pattern} in {folder}, "
            f"found {len(matches)}: {names}"
        )

    return matches[0]


def download_folder(workspace: Union[str, Path]) -> Path:
    """Get the folder downloaded archives are stored in."""
    return Path(workspace) / WORKSPACE_PATHS.download_path


def extract_folder(workspace: Union[str, Path], folder_name: str) -> Path:
    """Get the folder a source's archive is extracted to."""
    return Path(workspace) / WORKSPACE_PATHS.extract_path / folder_name.lower()
