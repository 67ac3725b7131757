"""
Engine-specific query behaviour behind one interface.

The dialect is chosen once from the configured engine at startup and injected into
repositories, so call sites never branch on the backend name.
"""

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy import ColumnElement, delete, insert, update
from sqlalchemy.dialects import mysql, postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Session
from sqlalchemy.sql import ClauseElement

LIKE_ESCAPE = "/"


def escape_like(value: str) -> str:
    """Escape LIKE metacharacters so user input matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


class QueryDialect(ABC):
    """Placeholder style, substring matching and write-result retrieval for one engine family."""

    name: str
    sql_dialect: Dialect

    @abstractmethod
    def contains(self, column: Any, value: str) -> ColumnElement[bool]:
        """Case-insensitive substring predicate."""

    @abstractmethod
    def insert(self, session: Session, model: type, values: dict[str, Any]) -> Any:
        """Insert one row and return the persisted ORM instance."""

    @abstractmethod
    def update(self, session: Session, model: type, pk: int, values: dict[str, Any]) -> Any | None:
        """Update one row by primary key; None when no row matched."""

    @abstractmethod
    def delete(self, session: Session, model: type, pk: int) -> bool:
        """Delete one row by primary key; False when no row matched."""

    def render(self, stmt: ClauseElement) -> tuple[str, list[Any]]:
        """SQL text in this engine's placeholder style plus the positional parameter list."""
        compiled = stmt.compile(
            dialect=self.sql_dialect,
            compile_kwargs={"render_postcompile": True},
        )
        params = compiled.params
        return str(compiled), [params[name] for name in compiled.positiontup or ()]

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PostgresDialect(QueryDialect):
    """$n placeholders, ILIKE, and RETURNING for every write."""

    name = "postgresql"
    sql_dialect = postgresql.dialect(paramstyle="numeric_dollar")

    def contains(self, column: Any, value: str) -> ColumnElement[bool]:
        return column.ilike(f"%{escape_like(value)}%", escape=LIKE_ESCAPE)

    def insert(self, session: Session, model: type, values: dict[str, Any]) -> Any:
        return session.scalars(insert(model).returning(model), [values]).one()

    def update(self, session: Session, model: type, pk: int, values: dict[str, Any]) -> Any | None:
        stmt = update(model).where(model.id == pk).values(**values).returning(model)
        return session.scalars(stmt).one_or_none()

    def delete(self, session: Session, model: type, pk: int) -> bool:
        stmt = delete(model).where(model.id == pk).returning(model.id)
        return session.execute(stmt).first() is not None


class MySQLDialect(QueryDialect):
    """
    ? placeholders, LIKE under the column's case-insensitive collation, and
    last-insert-id / affected-row counts instead of RETURNING.

    Also serves SQLite, which shares both conventions.
    """

    name = "mysql"
    sql_dialect = mysql.dialect(paramstyle="qmark")

    def contains(self, column: Any, value: str) -> ColumnElement[bool]:
        return column.like(f"%{escape_like(value)}%", escape=LIKE_ESCAPE)

    def insert(self, session: Session, model: type, values: dict[str, Any]) -> Any:
        result = session.execute(insert(model.__table__).values(**values))
        pk = result.inserted_primary_key[0]
        return session.get(model, pk)

    def update(self, session: Session, model: type, pk: int, values: dict[str, Any]) -> Any | None:
        table = model.__table__
        result = session.execute(update(table).where(table.c.id == pk).values(**values))
        if result.rowcount == 0:
            return None
        return session.get(model, pk, populate_existing=True)

    def delete(self, session: Session, model: type, pk: int) -> bool:
        table = model.__table__
        result = session.execute(delete(table).where(table.c.id == pk))
        return result.rowcount > 0


_DIALECTS: dict[str, type[QueryDialect]] = {
    "postgresql": PostgresDialect,
    "mysql": MySQLDialect,
    "mariadb": MySQLDialect,
    "sqlite": MySQLDialect,
}


def get_query_dialect(backend_name: str) -> QueryDialect:
    """Map an engine backend name (engine.dialect.name) to its query dialect."""
    try:
        return _DIALECTS[backend_name]()
    except KeyError:
        raise ValueError(f"Unsupported database backend: {backend_name!r}") from None
