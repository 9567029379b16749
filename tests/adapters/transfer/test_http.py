from __future__ import annotations

import httpx
import pytest

from csvsync.adapters.transfer import HttpFileFetcher
from csvsync.config.transfer import RetryPolicy, TransferConfig
from csvsync.domain.errors import TransferError
from tests.helpers.records import make_source

NO_RETRY = TransferConfig(retry=RetryPolicy(total=0))


def test_http_fetcher_downloads_content() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"id;name\n1;x\n")

    fetcher = HttpFileFetcher(NO_RETRY, transport=httpx.MockTransport(handler))

    result = fetcher(make_source(selector="https://example.com/exports/items.csv"))

    assert result.name == "items.csv"
    assert result.content == b"id;name\n1;x\n"
    assert "authorization" not in seen[0].headers


def test_http_fetcher_sends_basic_auth() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"id;name\n")

    fetcher = HttpFileFetcher(NO_RETRY, transport=httpx.MockTransport(handler))

    fetcher(make_source(selector="https://example.com/x.csv", user="alice", password="secret"))

    assert seen[0].headers["authorization"].startswith("Basic ")


def test_http_fetcher_uses_source_name_without_path() -> None:
    fetcher = HttpFileFetcher(
        NO_RETRY,
        transport=httpx.MockTransport(lambda _: httpx.Response(200, content=b"")),
    )

    result = fetcher(make_source(selector="https://example.com/"))

    assert result.name == "items"


def test_http_fetcher_maps_status_errors() -> None:
    fetcher = HttpFileFetcher(
        NO_RETRY,
        transport=httpx.MockTransport(lambda _: httpx.Response(404)),
    )

    with pytest.raises(TransferError, match="404"):
        fetcher(make_source(selector="https://example.com/missing.csv"))


def test_http_fetcher_retries_server_errors() -> None:
    responses = iter([httpx.Response(503), httpx.Response(200, content=b"ok")])
    config = TransferConfig(retry=RetryPolicy(total=2, backoff_factor=0.0, backoff_jitter=0.0))
    fetcher = HttpFileFetcher(
        config,
        transport=httpx.MockTransport(lambda _: next(responses)),
    )

    result = fetcher(make_source(selector="https://example.com/items.csv"))

    assert result.content == b"ok"


def test_http_fetcher_maps_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    fetcher = HttpFileFetcher(NO_RETRY, transport=httpx.MockTransport(handler))

    with pytest.raises(TransferError, match="refused"):
        fetcher(make_source(selector="https://example.com/items.csv"))
