"""Database lifecycle and the SQLAlchemy unit of work used by import runs."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Literal, Self

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from csvsync.adapters.sqlalchemy.mappings import start_mappers
from csvsync.adapters.sqlalchemy.migrations import upgrade_head
from csvsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyImportSourceRepository,
    SqlAlchemyRecordRepository,
)
from csvsync.config.storage import get_database_uri
from csvsync.domain.ports.unit_of_work import ImportRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the database is used before :func:`startup` or started twice."""


@dataclass(slots=True)
class _Database:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None


_DATABASE = _Database()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Bring the schema up to date and bind new units of work to the engine."""

    if _DATABASE.engine is not None and not force:
        raise StartupError("Database already started. Pass force=True to switch engines.")

    resolved = engine or create_engine(database_uri or get_database_uri())
    start_mappers()
    upgrade_head(engine=resolved)
    _DATABASE.engine = resolved
    _DATABASE.sessions = sessionmaker(bind=resolved, expire_on_commit=False)
    log.info("Database ready: %s", resolved.url.render_as_string(hide_password=True))
    return resolved


def is_started() -> bool:
    return _DATABASE.engine is not None


def shutdown() -> None:
    """Dispose the engine; the next unit of work needs a new :func:`startup`."""

    if _DATABASE.engine is not None:
        _DATABASE.engine.dispose()
    _DATABASE.engine = None
    _DATABASE.sessions = None


class SqlAlchemyImportUnitOfWork:
    """One session per ``with`` block; records and sources share its transaction."""

    def __init__(self) -> None:
        if _DATABASE.sessions is None:
            raise StartupError(
                "Database not started. Call csvsync.adapters.sqlalchemy.startup() first."
            )
        self._sessions = _DATABASE.sessions
        self._session: Session | None = None
        self._repositories: ImportRepositories | None = None

    def __enter__(self) -> Self:
        if self._session is not None:
            raise StartupError("Unit of work is already active")
        self._session = self._sessions()
        self._repositories = ImportRepositories(
            records=SqlAlchemyRecordRepository(self._session),
            sources=SqlAlchemyImportSourceRepository(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        if exc_type is not None:
            session.rollback()
        session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not active, use it in a with block")
        return self._session

    @property
    def repositories(self) -> ImportRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not active, use it in a with block")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from csvsync.domain.ports.unit_of_work import ImportUnitOfWork

    _uow_check: ImportUnitOfWork = SqlAlchemyImportUnitOfWork()
