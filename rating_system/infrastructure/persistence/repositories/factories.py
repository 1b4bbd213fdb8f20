"""Repository factory functions for Clean Architecture compliance.

These factory functions handle session-aware repository creation while keeping
session management concerns in the infrastructure layer. Application layer
services depend only on domain protocols, not these factory functions.
"""

from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from rating_system.domain.repositories.interfaces import (
    CommentRepositoryProtocol,
    RatingRepositoryProtocol,
    ReviewRepositoryProtocol,
    UnitOfWorkProtocol,
    UserRepositoryProtocol,
)
from rating_system.infrastructure.persistence.backends import SQLBackend, backend_for
from rating_system.infrastructure.persistence.database.db_connection import (
    create_session_factory,
)
from rating_system.infrastructure.persistence.repositories.comment import (
    CommentRepository,
)
from rating_system.infrastructure.persistence.repositories.rating import (
    RatingRepository,
)
from rating_system.infrastructure.persistence.repositories.review import (
    ReviewRepository,
)
from rating_system.infrastructure.persistence.repositories.user import UserRepository
from rating_system.infrastructure.persistence.unit_of_work import DatabaseUnitOfWork


def get_backend(session: AsyncSession) -> SQLBackend:
    """Dialect backend for the engine a session is bound to."""
    bind = session.bind
    if bind is None:
        raise ValueError("Session is not bound to an engine")
    return backend_for(bind.dialect.name)


def get_user_repository(session: AsyncSession) -> UserRepositoryProtocol:
    """Get user repository with session management."""
    return UserRepository(session, get_backend(session))


def get_rating_repository(session: AsyncSession) -> RatingRepositoryProtocol:
    """Get rating repository with session management."""
    return RatingRepository(session, get_backend(session))


def get_review_repository(session: AsyncSession) -> ReviewRepositoryProtocol:
    """Get review repository with session management."""
    return ReviewRepository(session, get_backend(session))


def get_comment_repository(session: AsyncSession) -> CommentRepositoryProtocol:
    """Get comment repository with session management."""
    return CommentRepository(session, get_backend(session))


def get_unit_of_work_factory(
    engine: AsyncEngine,
) -> Callable[[], UnitOfWorkProtocol]:
    """Build the unit-of-work factory the application services take.

    The backend is chosen once from the engine's dialect; every call returns
    a fresh unit of work with its own session.

    Raises:
        ValueError: If the engine's dialect is not supported
    """
    backend = backend_for(engine.dialect.name)
    session_factory = create_session_factory(engine)

    def factory() -> UnitOfWorkProtocol:
        return DatabaseUnitOfWork(session_factory, backend)

    return factory
