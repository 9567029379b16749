"""Configuration types for fetching remote source files."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from httpx_retries import Retry

from .env import optional_float_env

DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0
DEFAULT_FTP_TIMEOUT_SECONDS = 60.0
DEFAULT_FTP_PORT = 21


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = field(default_factory=lambda: frozenset({"GET", "HEAD"}))
    status_forcelist: frozenset[int] = field(
        default_factory=lambda: frozenset({429, 500, 502, 503, 504})
    )
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )
    backoff_jitter: float = 1.0

    def build(self) -> Retry:
        return Retry(
            total=self.total,
            backoff_factor=self.backoff_factor,
            max_backoff_wait=self.max_backoff_wait,
            respect_retry_after_header=self.respect_retry_after_header,
            allowed_methods=tuple(self.allowed_methods),
            status_forcelist=tuple(self.status_forcelist),
            retry_on_exceptions=self.retry_on_exceptions,
            backoff_jitter=self.backoff_jitter,
        )


@dataclass(slots=True, frozen=True)
class TransferConfig:
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    ftp_timeout_seconds: float = DEFAULT_FTP_TIMEOUT_SECONDS
    retry: RetryPolicy = field(default_factory=RetryPolicy)


def get_transfer_config() -> TransferConfig:
    return TransferConfig(
        http_timeout_seconds=optional_float_env(
            "CSVSYNC_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS
        ),
        ftp_timeout_seconds=optional_float_env("CSVSYNC_FTP_TIMEOUT", DEFAULT_FTP_TIMEOUT_SECONDS),
    )
