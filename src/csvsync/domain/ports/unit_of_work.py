"""Transaction boundary of an import run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from csvsync.domain.ports.persistence import ImportSourceRepository, RecordStore


@dataclass(slots=True)
class ImportRepositories:
    """Repositories sharing the transaction of one unit of work."""

    records: RecordStore
    sources: ImportSourceRepository


@runtime_checkable
class ImportUnitOfWork(Protocol):
    """Context manager that rolls back when the block raises.

    ``commit`` may be called several times; each call makes the work so far
    durable, which is how long runs flush in batches.
    """

    @property
    def repositories(self) -> ImportRepositories: ...

    def __enter__(self) -> Self: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
