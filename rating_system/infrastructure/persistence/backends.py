"""Dialect strategies for the relational repositories.

One set of repository classes runs on every supported database. Everything
that differs between dialects lives here:

- how a uniqueness or foreign key violation is reported by the driver
- how the atomic rating upsert is spelled

Placeholder syntax is left to SQLAlchemy's compiler and each driver's DBAPI
paramstyle, and sort columns only ever reach SQL as column objects.
"""

from enum import StrEnum
from typing import Any

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.sql import Executable

from rating_system.infrastructure.persistence.database.db_models import DBRating

RATING_NATURAL_KEY = ("user_id", "service_id")


class IntegrityViolation(StrEnum):
    """Backend-independent classification of an IntegrityError."""

    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"


def _driver_error(error: IntegrityError) -> Any:
    """The DBAPI exception wrapped by SQLAlchemy."""
    return getattr(error, "orig", None) or error


class SQLBackend:
    """Base strategy. Subclasses supply vendor signals and the upsert."""

    name: str = "generic"
    dialect_names: frozenset[str] = frozenset()

    def is_unique_violation(self, error: IntegrityError) -> bool:
        raise NotImplementedError

    def is_foreign_key_violation(self, error: IntegrityError) -> bool:
        raise NotImplementedError

    def classify(self, error: IntegrityError) -> IntegrityViolation:
        """Map a driver error onto an IntegrityViolation."""
        if self.is_unique_violation(error):
            return IntegrityViolation.UNIQUE
        if self.is_foreign_key_violation(error):
            return IntegrityViolation.FOREIGN_KEY
        return IntegrityViolation.OTHER

    def upsert_rating_statement(self, values: dict[str, Any]) -> Executable:
        """INSERT a rating row, or overwrite score and updated_at on its key."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class PostgresBackend(SQLBackend):
    """PostgreSQL through asyncpg. Violations are reported by SQLSTATE."""

    name = "postgresql"
    dialect_names = frozenset({"postgresql"})

    UNIQUE_VIOLATION = "23505"
    FOREIGN_KEY_VIOLATION = "23503"

    @staticmethod
    def sqlstate(error: IntegrityError) -> str | None:
        """SQLSTATE from the driver error or its cause.

        asyncpg exposes ``sqlstate``, psycopg exposes ``pgcode``.
        """
        orig = _driver_error(error)
        for candidate in (orig, getattr(orig, "__cause__", None)):
            if candidate is None:
                continue
            code = getattr(candidate, "sqlstate", None) or getattr(
                candidate, "pgcode", None
            )
            if code:
                return str(code)
        return None

    def is_unique_violation(self, error: IntegrityError) -> bool:
        return self.sqlstate(error) == self.UNIQUE_VIOLATION

    def is_foreign_key_violation(self, error: IntegrityError) -> bool:
        return self.sqlstate(error) == self.FOREIGN_KEY_VIOLATION

    def upsert_rating_statement(self, values: dict[str, Any]) -> Executable:
        stmt = pg_insert(DBRating).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(RATING_NATURAL_KEY),
            set_={
                "score": stmt.excluded.score,
                "updated_at": stmt.excluded.updated_at,
            },
        )


class MySQLBackend(SQLBackend):
    """MySQL/MariaDB through aiomysql. Violations carry a numeric errno."""

    name = "mysql"
    dialect_names = frozenset({"mysql", "mariadb"})

    ER_DUP_ENTRY = 1062
    ER_NO_REFERENCED_ROW_2 = 1452

    @staticmethod
    def errno(error: IntegrityError) -> int | None:
        args = getattr(_driver_error(error), "args", ())
        if args and isinstance(args[0], int):
            return args[0]
        return None

    def is_unique_violation(self, error: IntegrityError) -> bool:
        if self.errno(error) == self.ER_DUP_ENTRY:
            return True
        return "Duplicate entry" in str(_driver_error(error))

    def is_foreign_key_violation(self, error: IntegrityError) -> bool:
        if self.errno(error) == self.ER_NO_REFERENCED_ROW_2:
            return True
        return "a foreign key constraint fails" in str(_driver_error(error))

    def upsert_rating_statement(self, values: dict[str, Any]) -> Executable:
        stmt = mysql_insert(DBRating).values(**values)
        return stmt.on_duplicate_key_update(
            score=stmt.inserted.score,
            updated_at=stmt.inserted.updated_at,
        )


class SQLiteBackend(SQLBackend):
    """SQLite through aiosqlite. Violations are only told apart by message."""

    name = "sqlite"
    dialect_names = frozenset({"sqlite"})

    def is_unique_violation(self, error: IntegrityError) -> bool:
        return "UNIQUE constraint failed" in str(_driver_error(error))

    def is_foreign_key_violation(self, error: IntegrityError) -> bool:
        return "FOREIGN KEY constraint failed" in str(_driver_error(error))

    def upsert_rating_statement(self, values: dict[str, Any]) -> Executable:
        stmt = sqlite_insert(DBRating).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=list(RATING_NATURAL_KEY),
            set_={
                "score": stmt.excluded.score,
                "updated_at": stmt.excluded.updated_at,
            },
        )


_BACKENDS: tuple[SQLBackend, ...] = (PostgresBackend(), MySQLBackend(), SQLiteBackend())


def backend_for(dialect_name: str) -> SQLBackend:
    """Select the backend for a SQLAlchemy dialect name.

    Raises:
        ValueError: If no backend supports the dialect
    """
    for backend in _BACKENDS:
        if dialect_name in backend.dialect_names:
            return backend
    supported = sorted(name for b in _BACKENDS for name in b.dialect_names)
    raise ValueError(f"Unsupported database dialect {dialect_name!r}; expected one of {supported}")
