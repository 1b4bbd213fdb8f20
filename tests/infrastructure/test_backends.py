"""Tests for the dialect backends - vendor signal detection and SQL shape.

Each backend must recognize its own driver's uniqueness and foreign key
signals and ignore every other backend's.
"""

from datetime import UTC, datetime
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.dialects.mysql.aiomysql import MySQLDialect_aiomysql
from sqlalchemy.dialects.postgresql.asyncpg import PGDialect_asyncpg
from sqlalchemy.dialects.sqlite.aiosqlite import SQLiteDialect_aiosqlite
from sqlalchemy.exc import IntegrityError

from rating_system.infrastructure.persistence.backends import (
    IntegrityViolation,
    MySQLBackend,
    PostgresBackend,
    SQLiteBackend,
    backend_for,
)
from rating_system.infrastructure.persistence.database.db_models import DBRating


class FakePostgresError(Exception):
    """Stand-in for asyncpg's exception, which exposes ``sqlstate``."""

    def __init__(self, sqlstate: str, message: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


class FakeAdaptedPostgresError(Exception):
    """SQLAlchemy's asyncpg adapter error: the sqlstate lives on ``__cause__``."""


def integrity_error(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT INTO ...", {}, orig)


def adapted_postgres_error(sqlstate: str) -> IntegrityError:
    wrapper = FakeAdaptedPostgresError("adapted")
    wrapper.__cause__ = FakePostgresError(sqlstate, "cause")
    return integrity_error(wrapper)


SIGNALS = {
    "postgres_unique": integrity_error(
        FakePostgresError("23505", 'duplicate key value violates unique constraint "uq_ratings_user_id_service_id"')
    ),
    "postgres_fk": integrity_error(
        FakePostgresError("23503", 'insert or update on table "reviews" violates foreign key constraint')
    ),
    "mysql_unique": integrity_error(
        Exception(1062, "Duplicate entry 'x-y' for key 'ratings.uq_ratings_user_id_service_id'")
    ),
    "mysql_fk": integrity_error(
        Exception(1452, "Cannot add or update a child row: a foreign key constraint fails")
    ),
    "sqlite_unique": integrity_error(
        Exception("UNIQUE constraint failed: ratings.user_id, ratings.service_id")
    ),
    "sqlite_fk": integrity_error(Exception("FOREIGN KEY constraint failed")),
}


@pytest.mark.parametrize(
    ("backend", "own_unique", "own_fk"),
    [
        (PostgresBackend(), "postgres_unique", "postgres_fk"),
        (MySQLBackend(), "mysql_unique", "mysql_fk"),
        (SQLiteBackend(), "sqlite_unique", "sqlite_fk"),
    ],
    ids=["postgres", "mysql", "sqlite"],
)
class TestViolationDetection:
    """Every backend recognizes only its own vendor signals."""

    def test_recognizes_own_unique_violation(self, backend, own_unique, own_fk):
        assert backend.classify(SIGNALS[own_unique]) is IntegrityViolation.UNIQUE

    def test_recognizes_own_foreign_key_violation(self, backend, own_unique, own_fk):
        assert backend.classify(SIGNALS[own_fk]) is IntegrityViolation.FOREIGN_KEY

    def test_ignores_other_backends_signals(self, backend, own_unique, own_fk):
        foreign = [name for name in SIGNALS if name not in (own_unique, own_fk)]
        for name in foreign:
            assert backend.classify(SIGNALS[name]) is IntegrityViolation.OTHER, name

    def test_unrelated_integrity_error_is_other(self, backend, own_unique, own_fk):
        check_failure = integrity_error(Exception("CHECK constraint failed: score_range"))
        assert backend.classify(check_failure) is IntegrityViolation.OTHER


class TestPostgresSqlstate:
    def test_reads_sqlstate_from_cause(self):
        assert PostgresBackend().classify(adapted_postgres_error("23505")) is IntegrityViolation.UNIQUE

    def test_reads_psycopg_pgcode(self):
        orig = Exception("duplicate")
        orig.pgcode = "23505"  # type: ignore[attr-defined]
        assert PostgresBackend.sqlstate(integrity_error(orig)) == "23505"


class TestMySQLMessageFallback:
    def test_duplicate_entry_without_errno(self):
        error = integrity_error(Exception("Duplicate entry 'a' for key 'uq_reviews_rating_id'"))
        assert MySQLBackend().is_unique_violation(error)


class TestBackendSelection:
    @pytest.mark.parametrize(
        ("dialect", "backend_class"),
        [
            ("postgresql", PostgresBackend),
            ("mysql", MySQLBackend),
            ("mariadb", MySQLBackend),
            ("sqlite", SQLiteBackend),
        ],
    )
    def test_known_dialects(self, dialect, backend_class):
        assert isinstance(backend_for(dialect), backend_class)

    def test_unknown_dialect_raises(self):
        with pytest.raises(ValueError, match="oracle"):
            backend_for("oracle")


def _mysql_dialect() -> MySQLDialect_aiomysql:
    """Offline MySQL dialect; the upsert compiler consults the server version."""
    dialect = MySQLDialect_aiomysql()
    dialect.server_version_info = (8, 0, 36)
    return dialect


def _rating_values():
    now = datetime.now(UTC)
    return {
        "id": uuid4(),
        "user_id": uuid4(),
        "service_id": uuid4(),
        "score": 4,
        "created_at": now,
        "updated_at": now,
    }


class TestUpsertStatements:
    """Each backend spells the atomic upsert in its own dialect."""

    def test_postgres_on_conflict(self):
        stmt = PostgresBackend().upsert_rating_statement(_rating_values())
        sql = str(stmt.compile(dialect=PGDialect_asyncpg()))

        assert "ON CONFLICT (user_id, service_id) DO UPDATE" in sql
        assert "score = excluded.score" in sql
        assert "created_at = " not in sql.split("DO UPDATE")[1]

    def test_mysql_on_duplicate_key(self):
        stmt = MySQLBackend().upsert_rating_statement(_rating_values())
        sql = str(stmt.compile(dialect=_mysql_dialect()))

        assert "ON DUPLICATE KEY UPDATE" in sql
        update_clause = sql.split("ON DUPLICATE KEY UPDATE")[1]
        assert "score" in update_clause
        assert "created_at" not in update_clause

    def test_sqlite_on_conflict(self):
        stmt = SQLiteBackend().upsert_rating_statement(_rating_values())
        sql = str(stmt.compile(dialect=SQLiteDialect_aiosqlite()))

        assert "ON CONFLICT (user_id, service_id) DO UPDATE" in sql


class TestPlaceholders:
    """Parameters are bound in each driver's own placeholder style."""

    @pytest.mark.parametrize(
        ("dialect", "placeholder"),
        [
            (PGDialect_asyncpg(), "$1"),
            (_mysql_dialect(), "%s"),
            (SQLiteDialect_aiosqlite(), "?"),
        ],
        ids=["asyncpg", "aiomysql", "aiosqlite"],
    )
    def test_bound_parameter_style(self, dialect, placeholder):
        stmt = select(DBRating).where(DBRating.score == 3)
        assert placeholder in str(stmt.compile(dialect=dialect))
