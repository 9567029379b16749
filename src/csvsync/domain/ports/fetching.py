"""Ports for retrieving raw source files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from csvsync.domain.model import ImportSource


@dataclass(frozen=True, slots=True)
class SourceFile:
    """Raw bytes of one retrieved source file."""

    name: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@runtime_checkable
class SourceFetcher(Protocol):
    """Callable port returning the current content of a source.

    Raises :class:`~csvsync.domain.errors.TransferError` when retrieval fails.
    """

    def __call__(self, source: ImportSource) -> SourceFile: ...


__all__ = ["SourceFetcher", "SourceFile"]
