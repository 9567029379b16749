"""Download source files over HTTP(S) with retries."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from httpx_retries import RetryTransport

from csvsync.config.transfer import TransferConfig, get_transfer_config
from csvsync.domain.errors import TransferError
from csvsync.domain.ports.fetching import SourceFile

if TYPE_CHECKING:
    from csvsync.domain.model import ImportSource

log = getLogger(__name__)


class HttpFileFetcher:
    """GET ``source.selector``; ``user``/``password`` are sent as basic auth when set."""

    def __init__(
        self,
        config: TransferConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = config or get_transfer_config()
        self._transport = transport

    def _client(self) -> httpx.Client:
        retry_transport = RetryTransport(transport=self._transport, retry=self.config.retry.build())
        return httpx.Client(
            transport=retry_transport,
            timeout=self.config.http_timeout_seconds,
            follow_redirects=True,
        )

    def __call__(self, source: ImportSource) -> SourceFile:
        auth = httpx.BasicAuth(source.user, source.password or "") if source.user else None
        log.info("Downloading %s", source.selector)
        with self._client() as client:
            try:
                response = client.get(source.selector, auth=auth)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise TransferError(f"Download of '{source.selector}' failed: {exc}") from exc
        name = response.url.path.rsplit("/", 1)[-1] or source.name
        return SourceFile(name=name, content=response.content)
