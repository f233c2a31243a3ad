import io
import zipfile

import pytest
import respx

from arcadedex.data_types import SourceType
from arcadedex.errors import FetchError
from arcadedex.fetch import download_file, download_files
from arcadedex.progress import ProgressKind

PAGE_URL = "https://www.progettosnaps.net/catver"
ARCHIVE_PREFIX = "https://www.progettosnaps.net/download/"
PAGE = '<a href="download/?tipo=catver&amp;file=/dats/cats/pS_CatVer_261.zip">CatVer</a>'


def _zip_bytes(name: str, content: str) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr(name, content)
    return buffer.getvalue()


@pytest.mark.integration
def test_download_file_streams_archive(tmp_path, events):
    archive = _zip_bytes("catver.ini", "[Category]\npacman=Maze / Collect\n")

    with respx.mock(assert_all_called=True) as mock:
        mock.get(PAGE_URL).respond(200, text=PAGE)
        mock.get(url__startswith=ARCHIVE_PREFIX).respond(200, content=archive)

        path = download_file(SourceType.CATVER, tmp_path, events.append)

    assert path == tmp_path / "downloads" / "pS_CatVer_261.zip"
    assert path.read_bytes() == archive
    assert not (tmp_path / "downloads" / "pS_CatVer_261.zip.tmp").exists()

    finish = events[-1]
    assert finish.kind is ProgressKind.FINISH
    assert finish.processed == finish.total == len(archive)


@pytest.mark.integration
def test_download_file_skips_existing_archive(tmp_path, events):
    existing = tmp_path / "downloads" / "pS_CatVer_261.zip"
    existing.parent.mkdir(parents=True)
    existing.write_bytes(b"already here")

    with respx.mock(assert_all_called=True) as mock:
        mock.get(PAGE_URL).respond(200, text=PAGE)

        path = download_file(SourceType.CATVER, tmp_path, events.append)

    assert path == existing
    assert existing.read_bytes() == b"already here"
    assert events[-1].kind is ProgressKind.FINISH
    assert "already exists" in events[-1].message


@pytest.mark.integration
def test_download_file_archive_error_leaves_no_file(tmp_path, events):
    with respx.mock(assert_all_called=True) as mock:
        mock.get(PAGE_URL).respond(200, text=PAGE)
        mock.get(url__startswith=ARCHIVE_PREFIX).respond(404)

        with pytest.raises(FetchError):
            download_file(SourceType.CATVER, tmp_path, events.append)

    assert list((tmp_path / "downloads").iterdir()) == []
    assert events[-1].kind is ProgressKind.ERROR


@pytest.mark.integration
def test_download_file_page_error(tmp_path, events):
    with respx.mock(assert_all_called=True) as mock:
        mock.get(PAGE_URL).respond(500)

        with pytest.raises(FetchError):
            download_file(SourceType.CATVER, tmp_path, events.append)

    assert events[-1].kind is ProgressKind.ERROR
    assert "Couldn't find URL" in events[-1].message


@pytest.mark.integration
def test_download_files_reports_each_source(tmp_path, events):
    archive = _zip_bytes("catver.ini", "[Category]\n")

    with respx.mock(assert_all_called=True) as mock:
        mock.get(PAGE_URL).respond(200, text=PAGE)
        mock.get(url__startswith=ARCHIVE_PREFIX).respond(200, content=archive)
        mock.get("https://www.progettosnaps.net/series").respond(200, text="<html></html>")

        outcomes = download_files(
            tmp_path, events.append, [SourceType.SERIES, SourceType.CATVER]
        )

    assert list(outcomes) == [SourceType.CATVER, SourceType.SERIES]
    assert outcomes[SourceType.CATVER].name == "pS_CatVer_261.zip"
    assert isinstance(outcomes[SourceType.SERIES], FetchError)
    assert {e.source for e in events} == {SourceType.CATVER, SourceType.SERIES}
