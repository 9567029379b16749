"""SQLAlchemy adapter package for csvsync."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import SqlAlchemyImportSourceRepository, SqlAlchemyRecordRepository
from .unit_of_work import SqlAlchemyImportUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyImportSourceRepository",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyRecordRepository",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
