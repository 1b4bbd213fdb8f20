"""Shared fixtures.

Every test gets its own in-memory SQLite database. The repository conformance
and integration suites also run against PostgreSQL and MySQL when
RATING_SYSTEM_TEST_POSTGRES_URL / RATING_SYSTEM_TEST_MYSQL_URL are set.
"""

import os
from uuid import uuid4

from loguru import logger
import pytest

from rating_system.application.services import AccountService, RatingService
from rating_system.config import DatabaseConfig
from rating_system.infrastructure.persistence.database.db_connection import (
    create_db_engine,
    create_session_factory,
)
from rating_system.infrastructure.persistence.database.db_models import (
    drop_db,
    init_db,
)
from rating_system.infrastructure.persistence.repositories.factories import (
    get_unit_of_work_factory,
)

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"

BACKEND_URLS = {
    "sqlite": SQLITE_MEMORY_URL,
    "postgres": os.environ.get("RATING_SYSTEM_TEST_POSTGRES_URL"),
    "mysql": os.environ.get("RATING_SYSTEM_TEST_MYSQL_URL"),
}


@pytest.fixture(
    params=[
        pytest.param("sqlite"),
        pytest.param("postgres", marks=pytest.mark.postgres),
        pytest.param("mysql", marks=pytest.mark.mysql),
    ]
)
async def engine(request):
    """Engine with a fresh schema, for every configured backend."""
    url = BACKEND_URLS[request.param]
    if not url:
        pytest.skip(f"{request.param} test database not configured")

    engine = create_db_engine(DatabaseConfig(url=url))
    await drop_db(engine)
    await init_db(engine)
    try:
        yield engine
    finally:
        await drop_db(engine)
        await engine.dispose()


@pytest.fixture
async def sqlite_engine():
    """In-memory SQLite engine for tests that only need one backend."""
    engine = create_db_engine(DatabaseConfig(url=SQLITE_MEMORY_URL))
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def uow_factory(engine):
    """Unit-of-work factory bound to the parametrized engine."""
    return get_unit_of_work_factory(engine)


@pytest.fixture
def session_factory(engine):
    """Raw session factory for checking rows behind the repositories' back."""
    return create_session_factory(engine)


@pytest.fixture
def rating_service(uow_factory):
    """RatingService with the default (non-enforcing) ownership policy."""
    return RatingService(uow_factory)


@pytest.fixture
def account_service(uow_factory):
    """AccountService with a cheap bcrypt cost."""
    return AccountService(uow_factory, bcrypt_rounds=4)


@pytest.fixture
def user_id():
    return uuid4()


@pytest.fixture
def service_id():
    return uuid4()


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test."""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="TRACE")
    try:
        yield records
    finally:
        logger.remove(handler_id)
