"""Environment variable loaders for configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from .errors import MissingConfigurationError

if TYPE_CHECKING:
    from collections.abc import Sequence


def require_env_vars(names: Sequence[str]) -> dict[str, str]:
    """Return the given environment variables or raise if any are missing/blank."""

    missing: list[str] = []
    values: dict[str, str] = {}
    for name in names:
        value = os.getenv(name)
        if value is None or not value.strip():
            missing.append(name)
            continue
        values[name] = value

    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return values


def require_env_var(name: str) -> str:
    """Return a required environment variable by name."""

    return require_env_vars([name])[name]


def optional_int_env(name: str, default: int) -> int:
    """Return an integer environment variable, falling back to ``default`` when unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value)
    except ValueError as exc:
        raise MissingConfigurationError(f"{name} must be an integer, got {value!r}") from exc
    if parsed <= 0:
        raise MissingConfigurationError(f"{name} must be positive, got {parsed}")
    return parsed


def optional_float_env(name: str, default: float) -> float:
    """Return a positive float environment variable, falling back to ``default`` when unset."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        parsed = float(value)
    except ValueError as exc:
        raise MissingConfigurationError(f"{name} must be a number, got {value!r}") from exc
    if parsed <= 0:
        raise MissingConfigurationError(f"{name} must be positive, got {parsed}")
    return parsed
