"""Error taxonomy for import runs."""

from __future__ import annotations

from csvsync.config.errors import ConfigurationError, MissingConfigurationError


class ImportRunError(RuntimeError):
    """Base class for failures raised while importing a source file."""

    def __init__(self, message: str, *, line: int | None = None, data: str | None = None) -> None:
        super().__init__(message)
        self.line = line
        self.data = data

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is not None:
            message = f"{message} (line {self.line})"
        if self.data is not None:
            message = f"{message} data={self.data}"
        return message


class MalformedHeaderError(ImportRunError):
    """Raised when the first line of a file is not a usable delimited header."""


class RecordParseError(ImportRunError):
    """Raised when a data line cannot be split into cells."""


class DuplicateKeyError(ImportRunError):
    """Raised (and logged) when a business key appears twice in one file."""

    def __init__(self, key_field: str, key: str, *, line: int | None = None) -> None:
        super().__init__(f"duplicate entry found: {key_field}={key}", line=line)
        self.key_field = key_field
        self.key = key


class ApplyError(ImportRunError):
    """Raised when a record could not be created, updated or removed."""


class TransferError(ImportRunError):
    """Raised when the raw source content could not be retrieved."""


class ImportAbortedError(ImportRunError):
    """Raised when an unexpected failure stops a run part-way through a file."""


class ScopeConfigurationError(ConfigurationError):
    """Raised when the record scope of an import is ambiguous."""


class PersistenceError(RuntimeError):
    """Raised by record stores when a write cannot be completed."""


class ProcessingError(RuntimeError):
    """Raised by record processors for operational (non-data) failures."""


__all__ = [
    "ApplyError",
    "ConfigurationError",
    "DuplicateKeyError",
    "ImportAbortedError",
    "ImportRunError",
    "MalformedHeaderError",
    "MissingConfigurationError",
    "PersistenceError",
    "ProcessingError",
    "RecordParseError",
    "ScopeConfigurationError",
    "TransferError",
]
