"""Source file fetchers for local paths, HTTP(S) and FTP(S)."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from .ftp import FtpFileFetcher
from .http import HttpFileFetcher
from .local import LocalFileFetcher

if TYPE_CHECKING:
    from csvsync.config.transfer import TransferConfig
    from csvsync.domain.model import ImportSource
    from csvsync.domain.ports.fetching import SourceFetcher, SourceFile

HTTP_SCHEMES = frozenset({"http", "https"})


class SourceFileFetcher:
    """Pick a transport per source: URL selectors use HTTP, a server means FTP."""

    def __init__(
        self,
        config: TransferConfig | None = None,
        *,
        local: SourceFetcher | None = None,
        http: SourceFetcher | None = None,
        ftp: SourceFetcher | None = None,
    ) -> None:
        self.local = local or LocalFileFetcher()
        self.http = http or HttpFileFetcher(config)
        self.ftp = ftp or FtpFileFetcher(config)

    def select(self, source: ImportSource) -> SourceFetcher:
        if urlsplit(source.selector).scheme.lower() in HTTP_SCHEMES:
            return self.http
        if source.server:
            return self.ftp
        return self.local

    def __call__(self, source: ImportSource) -> SourceFile:
        return self.select(source)(source)

__all__ = [
    "FtpFileFetcher",
    "HttpFileFetcher",
    "LocalFileFetcher",
    "SourceFileFetcher",
]
