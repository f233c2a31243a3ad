import httpx
import pytest
import respx

from arcadedex.errors import FetchError
from arcadedex.fetch.data_source import (
    find_archive_link,
    get_data_source,
    get_file_name_from_url,
    resolve_link,
)

CATVER_PAGE = """
<html><body>
  <a href="/catver/history">History</a>
  <a href="download/?tipo=catver&amp;file=/dats/cats/pS_CatVer_260.zip">Previous</a>
  <a href="download/?tipo=catver&amp;file=/dats/cats/pS_CatVer_261.zip">Latest</a>
  <a href="download/?tipo=catver&amp;file=/dats/cats/readme.txt">Readme</a>
</body></html>
"""


@pytest.mark.unit
def test_find_archive_link_takes_last_matching_archive():
    link = find_archive_link(CATVER_PAGE, "download")
    assert link == "download/?tipo=catver&file=/dats/cats/pS_CatVer_261.zip"


@pytest.mark.unit
def test_find_archive_link_no_match():
    assert find_archive_link(CATVER_PAGE, "dats_mame") is None
    assert find_archive_link("", "download") is None


@pytest.mark.unit
def test_resolve_link_joins_relative_links_to_host():
    assert resolve_link(
        "https://www.progettosnaps.net/catver", "download/?file=/a.zip"
    ) == "https://www.progettosnaps.net/download/?file=/a.zip"
    assert resolve_link(
        "https://www.progettosnaps.net/catver", "https://cdn.example.com/a.zip"
    ) == "https://cdn.example.com/a.zip"


@pytest.mark.unit
def test_get_file_name_from_url():
    assert get_file_name_from_url(
        "https://www.progettosnaps.net/download/?tipo=catver&file=/dats/cats/pS_CatVer_261.zip"
    ) == "pS_CatVer_261.zip"
    assert get_file_name_from_url(
        "http://nplayers.arcadebelgium.be/files/nplayers0261.zip"
    ) == "nplayers0261.zip"


@pytest.mark.unit
def test_get_data_source_returns_absolute_url():
    with respx.mock(assert_all_called=True) as mock:
        mock.get("https://www.progettosnaps.net/catver").respond(200, text=CATVER_PAGE)

        with httpx.Client() as client:
            url = get_data_source(client, "https://www.progettosnaps.net/catver", "download")

    assert url == (
        "https://www.progettosnaps.net/download/?tipo=catver&file=/dats/cats/pS_CatVer_261.zip"
    )


@pytest.mark.unit
def test_get_data_source_http_error():
    with respx.mock(assert_all_called=True) as mock:
        mock.get("https://www.progettosnaps.net/catver").respond(503)

        with httpx.Client() as client:
            with pytest.raises(FetchError):
                get_data_source(client, "https://www.progettosnaps.net/catver", "download")


@pytest.mark.unit
def test_get_data_source_without_matching_link():
    with respx.mock(assert_all_called=True) as mock:
        mock.get("https://www.progettosnaps.net/catver").respond(200, text="<html></html>")

        with httpx.Client() as client:
            with pytest.raises(FetchError, match="No matching source"):
                get_data_source(client, "https://www.progettosnaps.net/catver", "download")
