"""SQLAlchemy mapping metadata for the csvsync domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from csvsync.domain.model import ImportSource, SourceType, StoredRecord

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class FieldMapType(TypeDecorator[dict[str, str]]):
    """Text-encoded JSON object of item name to value, key order preserved."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: dict[str, str] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))

    def process_result_value(self, value: str | None, dialect: Dialect) -> dict[str, str]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        items = cast(dict[str, Any], loaded)
        return {str(key): "" if item is None else str(item) for key, item in items.items()}


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Core tables -----------------------------------------------------------------

record_table = Table(
    "record",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("record_type", String, nullable=False),
    Column("business_key", String, nullable=False),
    Column("workflow_group", String, nullable=True),
    Column("model_version", String, nullable=True),
    Column("task_id", Integer, nullable=True),
    Column("fields", FieldMapType(), nullable=False, default=dict),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("modified_at", UTCDateTime(), nullable=True),
    Index("ix_record_scope", "record_type", "workflow_group", "model_version", "created_at"),
    Index("ix_record_business_key", "record_type", "business_key"),
)

import_source_table = Table(
    "import_source",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("type", Enum(SourceType, native_enum=False), nullable=False),
    Column("selector", String, nullable=False),
    Column("server", String, nullable=True),
    Column("port", Integer, nullable=True),
    Column("user", String, nullable=True),
    Column("password", String, nullable=True),
    Column("options", Text, nullable=True),
    Column("model_version", String, nullable=True),
    Column("workflow_group", String, nullable=True),
    Column("task_id", Integer, nullable=True),
    Column("event_id", Integer, nullable=True),
    Column("checksum", String, nullable=True),
    Column("last_log", Text, nullable=True),
    Column("last_run_at", UTCDateTime(), nullable=True),
    UniqueConstraint("name"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(StoredRecord, record_table)
    mapper_registry.map_imperatively(ImportSource, import_source_table)

    configure_mappers()
    return mapper_registry
