"""Domain port definitions for adapters."""

from __future__ import annotations

from .applying import RecordApplier, RecordProcessor
from .fetching import SourceFetcher, SourceFile
from .persistence import ImportSourceRepository, RecordStore, Repository
from .unit_of_work import ImportRepositories, ImportUnitOfWork

__all__ = [
    "ImportRepositories",
    "ImportSourceRepository",
    "ImportUnitOfWork",
    "RecordApplier",
    "RecordProcessor",
    "RecordStore",
    "Repository",
    "SourceFetcher",
    "SourceFile",
]
