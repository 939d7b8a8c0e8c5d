import pytest

from media_ingestion.errors import ResourceUnavailableError
from media_ingestion.services.fetch import HttpFetcher, local_path_for


def test_local_path_detection(tmp_path):
    assert local_path_for("https://example.com/a.pdf") is None
    assert local_path_for(str(tmp_path / "a.pdf")) == tmp_path / "a.pdf"
    assert local_path_for((tmp_path / "a.pdf").as_uri()) == tmp_path / "a.pdf"


def test_fetch_local_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes("café".encode("cp1252"))
    fetcher = HttpFetcher()
    assert fetcher.fetch(str(path)) == "café".encode("cp1252")
    assert fetcher.fetch_text(str(path)) == "café"
    assert fetcher.is_reachable(str(path))


def test_fetch_missing_local_file(tmp_path):
    with pytest.raises(ResourceUnavailableError):
        HttpFetcher().fetch(str(tmp_path / "missing.txt"))


def test_download_to_copies_local_file(tmp_path):
    source = tmp_path / "clip.mp4"
    source.write_bytes(b"video")
    target = tmp_path / "store" / "ab" / "abc.mp4"
    assert HttpFetcher().download_to(str(source), target) == target
    assert target.read_bytes() == b"video"
