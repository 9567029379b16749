"""Alembic environment for the csvsync record store.

``upgrade_head`` hands over an open connection through ``config.attributes``.
Without one, the URL comes from ``sqlalchemy.url`` or the configured database.
"""

from __future__ import annotations

from alembic import context
from sqlalchemy import create_engine, pool

from csvsync.adapters.sqlalchemy import mapper_registry, start_mappers
from csvsync.config import get_database_config

config = context.config

start_mappers()

# batch mode: SQLite cannot ALTER most column properties in place
_CONTEXT_OPTIONS: dict[str, object] = {
    "target_metadata": mapper_registry.metadata,
    "render_as_batch": True,
    "compare_type": True,
}


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_config().uri


def _migrate(**options: object) -> None:
    context.configure(**_CONTEXT_OPTIONS, **options)  # pyright: ignore[reportArgumentType]
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """Emit the migration SQL for the configured URL without connecting."""

    _migrate(url=_database_url(), literal_binds=True)


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _migrate(connection=connection)
        return

    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as fresh_connection:
            _migrate(connection=fresh_connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
