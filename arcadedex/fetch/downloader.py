"""
Archive downloader.

Finds each source's current archive on its download page and streams it
into ``<workspace>/downloads``. Archives already present are not fetched
again.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import httpx

from ..data_types import SourceType, get_source_details
from ..errors import ArcadeDexError, FetchError, SourceIOError
from ..progress import (
    ProgressCallback,
    ProgressInfo,
    ProgressKind,
    SharedProgressCallback,
    error,
    info,
    no_progress,
)
from .data_source import USER_AGENT, get_data_source, get_file_name_from_url
from .workspace import download_folder, ensure_folder_exists

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def download_file(
    source_type: SourceType,
    workspace: Union[str, Path],
    progress_callback: ProgressCallback = no_progress,
    client: Optional[httpx.Client] = None,
    timeout: float = 60
) -> Path:
    """
    Download the current archive of one source.

    Args:
        source_type: Source to download
        workspace: Workspace folder
        progress_callback: Receives INFO/PROGRESS/FINISH/ERROR events
        client: Optional HTTP client to reuse
        timeout: Request timeout in seconds

    Returns:
        Path of the archive in the downloads folder

    Raises:
        FetchError: If the page or archive cannot be fetched
        SourceIOError: If the archive cannot be written
    """
    details = get_source_details(source_type)
    destination = ensure_folder_exists(download_folder(workspace))

    owns_client = client is None
    if owns_client:
        client = httpx.Client()

    try:
        progress_callback(info(f"Searching URL for {details.name}"))
        try:
            url = get_data_source(client, details.source, details.source_match, timeout)
        except FetchError as e:
            logger.error(f"Couldn't find URL for {details.name}: {e}")
            progress_callback(error(f"Couldn't find URL for {details.name}"))
            raise

        file_name = get_file_name_from_url(url)
        file_path = destination / file_name

        progress_callback(info(f"Checking if file {file_name} already exists"))
        if file_path.exists():
            logger.info(f"{file_name} already downloaded, skipping")
            progress_callback(ProgressInfo(0, 0, f"{file_name} already exists", ProgressKind.FINISH))
            return file_path

        progress_callback(info(f"Downloading {details.name} file"))
        try:
            _download(client, url, file_path, progress_callback, timeout)
        except ArcadeDexError as e:
            progress_callback(error(f"Couldn't download {file_name}: {e}"))
            raise

        return file_path
    finally:
        if owns_client:
            client.close()


def _download(
    client: httpx.Client,
    url: str,
    file_path: Path,
    progress_callback: ProgressCallback,
    timeout: float
) -> None:
    logger.info(f"Downloading {url} to {file_path}")
    temp_path = file_path.with_suffix(file_path.suffix + '.tmp')
    downloaded = 0

    try:
        with client.stream(
            'GET',
            url,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            follow_redirects=True
        ) as response:
            response.raise_for_status()
            total = int(response.headers.get('Content-Length', 0) or 0)

            with open(temp_path, 'wb') as f:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    f.write(chunk)
                    downloaded += len(chunk)
                    if total and downloaded <= total:
                        progress_callback(ProgressInfo(
                            downloaded, total, "", ProgressKind.PROGRESS
                        ))

        # Move to final location only on success
        temp_path.replace(file_path)
    except httpx.HTTPError as e:
        _remove(temp_path)
        raise FetchError(f"Failed to download {url}: {e}") from e
    except OSError as e:
        _remove(temp_path)
        raise SourceIOError(f"Failed to write {file_path} ({e})", file_path) from e

    logger.info(f"Downloaded {file_path.name} ({downloaded} bytes)")
    progress_callback(ProgressInfo(
        downloaded, downloaded, f"{file_path.name} downloaded successfully",
        ProgressKind.FINISH
    ))


def _remove(path: Path) -> None:
    if path.exists():
        path.unlink()


def download_files(
    workspace: Union[str, Path],
    progress_callback: SharedProgressCallback = no_progress,
    sources: Optional[Iterable[SourceType]] = None,
    timeout: float = 60
) -> Dict[SourceType, Union[Path, ArcadeDexError]]:
    """
    Download several sources concurrently, one thread per source.

    Args:
        workspace: Workspace folder
        progress_callback: Shared sink receiving source-tagged events
        sources: Sources to download (default: all)
        timeout: Request timeout in seconds

    Returns:
        Dictionary mapping each source to its archive path or to the error
        that stopped it
    """
    # Imported here to avoid a cycle with the workflow package
    from ..workflow.workers import run_per_source

    def worker(source_type: SourceType, callback: ProgressCallback) -> Path:
        return download_file(source_type, workspace, callback, timeout=timeout)

    return run_per_source(worker, sources, progress_callback, name="download")
