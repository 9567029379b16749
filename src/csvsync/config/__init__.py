"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)
from .sync import SyncConfig, get_sync_config
from .transfer import RetryPolicy, TransferConfig, get_transfer_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RetryPolicy",
    "StorageConfig",
    "SyncConfig",
    "TransferConfig",
    "configure_logging",
    "get_database_config",
    "get_database_uri",
    "get_storage_config",
    "get_sync_config",
    "get_transfer_config",
    "require_env_var",
    "require_env_vars",
]
