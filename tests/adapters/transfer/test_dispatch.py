from __future__ import annotations

from csvsync.adapters.transfer import SourceFileFetcher
from tests.helpers.records import FakeFetcher, make_source


def _fetcher() -> tuple[SourceFileFetcher, FakeFetcher, FakeFetcher, FakeFetcher]:
    local, http, ftp = FakeFetcher(b"local"), FakeFetcher(b"http"), FakeFetcher(b"ftp")
    return SourceFileFetcher(local=local, http=http, ftp=ftp), local, http, ftp


def test_url_selector_uses_http() -> None:
    fetcher, _, http, _ = _fetcher()

    result = fetcher(make_source(selector="HTTPS://example.com/items.csv"))

    assert result.content == b"http"
    assert http.calls == ["items"]


def test_server_uses_ftp() -> None:
    fetcher, _, _, ftp = _fetcher()

    assert fetcher(make_source(server="ftp.example.com")).content == b"ftp"
    assert ftp.calls == ["items"]


def test_plain_path_uses_local() -> None:
    fetcher, local, _, _ = _fetcher()

    assert fetcher(make_source(selector="/data/items.csv")).content == b"local"
    assert local.calls == ["items"]
