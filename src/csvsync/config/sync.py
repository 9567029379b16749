"""Synchronization defaults for import runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_int_env

DEFAULT_PAGE_SIZE = 100
DEFAULT_FLUSH_INTERVAL = 100


@dataclass(frozen=True, slots=True)
class SyncConfig:
    page_size: int = DEFAULT_PAGE_SIZE
    flush_interval: int = DEFAULT_FLUSH_INTERVAL


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        page_size=optional_int_env("CSVSYNC_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        flush_interval=optional_int_env("CSVSYNC_FLUSH_INTERVAL", DEFAULT_FLUSH_INTERVAL),
    )
