"""Async helpers for CLI commands.

Each command builds its engine from the settings, runs one coroutine and
disposes the engine again.
"""

import asyncio
from collections.abc import AsyncIterator, Callable, Coroutine
from contextlib import asynccontextmanager
from functools import wraps
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine

from rating_system.application.services import RatingService
from rating_system.config import Settings
from rating_system.infrastructure.cli.ui import command_error_handler
from rating_system.infrastructure.persistence.database.db_connection import (
    create_db_engine,
)
from rating_system.infrastructure.persistence.repositories.factories import (
    get_unit_of_work_factory,
)


@asynccontextmanager
async def engine_scope(settings: Settings) -> AsyncIterator[AsyncEngine]:
    """Engine for the configured database, disposed on exit."""
    engine = create_db_engine(settings.database)
    try:
        yield engine
    finally:
        await engine.dispose()


@asynccontextmanager
async def rating_service_scope(settings: Settings) -> AsyncIterator[RatingService]:
    """RatingService wired to a fresh engine, disposed on exit."""
    async with engine_scope(settings) as engine:
        yield RatingService(
            get_unit_of_work_factory(engine),
            enforce_review_ownership=settings.service.enforce_review_ownership,
            default_page_size=settings.service.default_page_size,
        )


def async_command[**P, R](
    func: Callable[P, Coroutine[Any, Any, R]],
) -> Callable[P, R]:
    """Run an async command body with asyncio.run and standard error handling."""

    @command_error_handler
    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        return asyncio.run(func(*args, **kwargs))

    return wrapper
