"""Custom SQLAlchemy column types and statements for multi-database compatibility."""

from __future__ import annotations

import uuid
from typing import Any, Iterable, Mapping

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session
from sqlalchemy.types import CHAR, TypeDecorator

from .database import dialect_name


class GUID(TypeDecorator):
    """Platform-independent GUID/UUID type.

    Stores UUID values as ``UUID`` in PostgreSQL and as 36-character strings
    elsewhere. Values are normalised to strings when read so the application
    code can keep treating identifiers as text.
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):  # type: ignore[override]
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        if dialect.name == "postgresql":
            if isinstance(value, uuid.UUID):
                return value
            return uuid.UUID(str(value))
        return str(value)

    def process_result_value(self, value: Any, dialect):  # type: ignore[override]
        if value is None:
            return value
        return str(value)


def upsert(
    db: Session,
    model: Any,
    values: Mapping[str, Any],
    *,
    index_elements: Iterable[str],
    update_columns: Iterable[str],
) -> Any:
    """Execute a single ``INSERT ... ON CONFLICT DO UPDATE`` statement.

    ``index_elements`` must match a unique constraint of ``model``. Columns
    listed in ``update_columns`` are overwritten with the incoming values when
    the row already exists; every other column keeps its stored value.
    """

    dialect = dialect_name(db)
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise NotImplementedError(f"Upserts are not supported for the {dialect!r} dialect")
    stmt = stmt.on_conflict_do_update(
        index_elements=list(index_elements),
        set_={column: getattr(stmt.excluded, column) for column in update_columns},
    )
    return db.execute(stmt)
