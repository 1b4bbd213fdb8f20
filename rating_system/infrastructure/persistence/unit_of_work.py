"""Database Unit of Work implementation for transaction boundary management.

This module provides the concrete implementation of the UnitOfWork pattern,
handling transaction management and repository creation using a shared
database session.
"""

from typing import Self

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from rating_system.config import get_logger
from rating_system.domain.repositories.interfaces import (
    CommentRepositoryProtocol,
    RatingRepositoryProtocol,
    ReviewRepositoryProtocol,
    UserRepositoryProtocol,
)
from rating_system.infrastructure.persistence.backends import SQLBackend
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

logger = get_logger(__name__)


class DatabaseUnitOfWork:
    """Database implementation of the Unit of Work pattern.

    The session is opened on enter and closed on exit. Leaving the block
    commits unless a commit already happened; any exception, cancellation
    included, rolls back instead.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        backend: SQLBackend,
    ) -> None:
        """Initialize with a session factory and the dialect backend.

        Args:
            session_factory: Factory for the session this unit of work owns
            backend: Dialect strategy handed to every repository
        """
        self._session_factory = session_factory
        self._backend = backend
        self._session: AsyncSession | None = None
        self._committed = False

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of work used outside 'async with'")
        return self._session

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        self._session = self._session_factory()
        self._committed = False
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager with automatic commit/rollback.

        If an exception occurred, automatically rollback the transaction.
        If no exception occurred and commit wasn't called explicitly, commit the transaction.
        """
        try:
            if exc_type is not None:
                logger.debug(f"Rolling back unit of work after {exc_type.__name__}")
                await self.rollback()
            elif not self._committed:
                await self.commit()
        finally:
            await self.session.close()
            self._session = None

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        await self.session.rollback()

    def get_user_repository(self) -> UserRepositoryProtocol:
        """Get user repository using this unit of work's transaction."""
        return UserRepository(self.session, self._backend)

    def get_rating_repository(self) -> RatingRepositoryProtocol:
        """Get rating repository using this unit of work's transaction."""
        return RatingRepository(self.session, self._backend)

    def get_review_repository(self) -> ReviewRepositoryProtocol:
        """Get review repository using this unit of work's transaction."""
        return ReviewRepository(self.session, self._backend)

    def get_comment_repository(self) -> CommentRepositoryProtocol:
        """Get comment repository using this unit of work's transaction."""
        return CommentRepository(self.session, self._backend)
