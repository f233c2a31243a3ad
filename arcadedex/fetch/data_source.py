"""Locate the current archive of a source on its download page."""

import logging
from pathlib import PurePosixPath
from typing import Optional

import httpx
from lxml import html

from ..errors import FetchError

logger = logging.getLogger(__name__)

USER_AGENT = 'arcadedex/0.7.2'
ARCHIVE_SUFFIXES = ('zip', '7z')


def find_archive_link(page: str, matching: str) -> Optional[str]:
    """
    Find the archive link in a download page.

    Args:
        page: HTML of the download page
        matching: Fragment the link's href must contain

    Returns:
        The last matching href, or None if no link matches
    """
    if not page.strip():
        return None

    document = html.fromstring(page)
    link = None
    for href in document.xpath('//a/@href'):
        if matching in href and href.endswith(ARCHIVE_SUFFIXES):
            link = href
    return link


def resolve_link(page_url: str, href: str) -> str:
    """
    Make an archive link absolute.

    Relative links on the source pages are rooted at the site, not at the
    page, so they are joined to the scheme and host only.
    """
    if href.startswith('http'):
        return href
    url = httpx.URL(page_url)
    return f"{url.scheme}://{url.host}/{href.lstrip('/')}"


def get_data_source(
    client: httpx.Client,
    url: str,
    matching: str,
    timeout: float = 60
) -> str:
    """
    Get the download URL of a source's archive.

    Args:
        client: HTTP client
        url: Download page URL
        matching: Fragment identifying the archive link
        timeout: Request timeout in seconds

    Returns:
        Absolute archive URL

    Raises:
        FetchError: If the page cannot be fetched or has no matching link
    """
    try:
        response = client.get(
            url,
            timeout=timeout,
            headers={'User-Agent': USER_AGENT},
            follow_redirects=True
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e

    link = find_archive_link(response.text, matching)
    if link is None:
        raise FetchError(f"No matching source found in {url}")

    source = resolve_link(url, link)
    logger.debug(f"Archive link for {url}: {source}")
    return source


def get_file_name_from_url(url: str) -> str:
    """
    Get the archive file name from its download URL.

    Download scripts carry the real path in a ``file`` query parameter
    (``download/?tipo=dat_mame&file=/dats/MAME/packs/MAME_Dats_270.7z``);
    otherwise the last path segment is used.
    """
    parsed = httpx.URL(url)
    file_param = parsed.params.get('file')
    if file_param:
        return PurePosixPath(file_param).name
    return PurePosixPath(parsed.path).name
