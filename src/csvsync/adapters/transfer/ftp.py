"""Download source files from FTP servers, with TLS unless disabled."""

from __future__ import annotations

import ftplib
from logging import getLogger
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from csvsync.config.transfer import DEFAULT_FTP_PORT, TransferConfig, get_transfer_config
from csvsync.domain.errors import TransferError
from csvsync.domain.ports.fetching import SourceFile

if TYPE_CHECKING:
    from collections.abc import Callable

    from csvsync.domain.model import ImportSource

log = getLogger(__name__)

TLS_OPTION = "ftp.tls"

type FtpFactory = Callable[[bool], ftplib.FTP]


def _open_ftp(tls: bool) -> ftplib.FTP:  # noqa: FBT001
    return ftplib.FTP_TLS() if tls else ftplib.FTP()


class FtpFileFetcher:
    """Retrieve ``source.selector`` from ``source.server`` in binary mode.

    The ``ftp.tls`` source option switches explicit FTPS off when set to false.
    """

    def __init__(
        self,
        config: TransferConfig | None = None,
        *,
        ftp_factory: FtpFactory = _open_ftp,
    ) -> None:
        self.config = config or get_transfer_config()
        self._ftp_factory = ftp_factory

    def __call__(self, source: ImportSource) -> SourceFile:
        if not source.server:
            raise TransferError(f"No server configured for source '{source.name}'")
        tls = source.parsed_options().flag(TLS_OPTION, default=True)
        port = source.port or DEFAULT_FTP_PORT
        log.info("Retrieving %s from %s:%s (tls=%s)", source.selector, source.server, port, tls)

        chunks: list[bytes] = []
        ftp = self._ftp_factory(tls)
        try:
            ftp.connect(source.server, port, timeout=self.config.ftp_timeout_seconds)
            ftp.login(source.user or "anonymous", source.password or "")
            if isinstance(ftp, ftplib.FTP_TLS):
                ftp.prot_p()
            ftp.retrbinary(f"RETR {source.selector}", chunks.append)
        except ftplib.all_errors as exc:
            raise TransferError(
                f"FTP transfer of '{source.selector}' from {source.server} failed: {exc}"
            ) from exc
        finally:
            _close(ftp)
        return SourceFile(name=PurePosixPath(source.selector).name, content=b"".join(chunks))


def _close(ftp: ftplib.FTP) -> None:
    try:
        ftp.quit()
    except ftplib.all_errors:
        ftp.close()
