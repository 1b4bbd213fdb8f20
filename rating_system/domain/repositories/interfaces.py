"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the storage contract the orchestration layer depends
on. They know nothing about SQL dialects; every relational backend satisfies
the same protocols with the same behavior.

Shared contract:
    - Point lookups raise ``NotFoundError`` when the row is absent.
    - Updates raise ``NotFoundError`` when no row matched.
    - Inserts that hit a uniqueness constraint raise ``ConflictError``.
    - Inserts whose referenced row vanished raise ``NotFoundError``.
    - Any other storage failure raises ``StorageError``.
    - List operations return a ``Page`` whose ``total`` comes from an
      independent COUNT over the same predicate.
"""

from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol, Self
from uuid import UUID

if TYPE_CHECKING:
    from rating_system.domain.entities import (
        AverageRating,
        Comment,
        Rating,
        Review,
        ReviewWithRating,
        User,
    )
    from rating_system.domain.pagination import Page, PageParams


class UserRepositoryProtocol(Protocol):
    """Repository interface for user persistence operations."""

    def create_user(self, user: "User") -> Awaitable["User"]:
        """Insert a user. Duplicate email or username raises ConflictError."""
        ...

    def get_user_by_id(self, user_id: UUID) -> Awaitable["User"]:
        """Get user by ID."""
        ...

    def get_user_by_email(self, email: str) -> Awaitable["User"]:
        """Get user by (lower-cased) email."""
        ...

    def get_user_by_username(self, username: str) -> Awaitable["User"]:
        """Get user by username."""
        ...

    def update_password(self, user: "User") -> Awaitable["User"]:
        """Persist the password hash and updated_at of an existing user."""
        ...


class RatingRepositoryProtocol(Protocol):
    """Repository interface for rating persistence operations."""

    def create_rating(self, rating: "Rating") -> Awaitable["Rating"]:
        """Insert a rating. A second rating for the same pair raises ConflictError."""
        ...

    def upsert_rating(self, rating: "Rating") -> Awaitable["Rating"]:
        """Insert a rating or overwrite the score of the existing one.

        Runs as a single statement keyed on (user_id, service_id). When a row
        already exists its id and created_at are kept and only score and
        updated_at change.

        Returns:
            The rating as stored
        """
        ...

    def get_rating_by_id(self, rating_id: UUID) -> Awaitable["Rating"]:
        """Get rating by ID."""
        ...

    def get_rating_by_user_and_service(
        self, user_id: UUID, service_id: UUID
    ) -> Awaitable["Rating"]:
        """Get the rating a user gave a service."""
        ...

    def list_ratings_by_service(
        self, service_id: UUID, params: "PageParams"
    ) -> Awaitable["Page[Rating]"]:
        """List ratings for a service. Default order is newest first."""
        ...

    def update_rating(self, rating: "Rating") -> Awaitable["Rating"]:
        """Persist score and updated_at of an existing rating."""
        ...

    def calculate_average_rating(
        self, service_id: UUID
    ) -> Awaitable["AverageRating"]:
        """Aggregate score for a service. Average is 0.0 with no ratings."""
        ...


class ReviewRepositoryProtocol(Protocol):
    """Repository interface for review persistence operations."""

    def create_review(self, review: "Review") -> Awaitable["Review"]:
        """Insert a review. A second review for one rating raises ConflictError."""
        ...

    def get_review_by_id(self, review_id: UUID) -> Awaitable["ReviewWithRating"]:
        """Get review by ID, joined with the score of its rating."""
        ...

    def get_review_by_rating(
        self, rating_id: UUID
    ) -> Awaitable["ReviewWithRating"]:
        """Get the review attached to a rating."""
        ...

    def list_reviews_by_service(
        self, service_id: UUID, params: "PageParams"
    ) -> Awaitable["Page[ReviewWithRating]"]:
        """List reviews for a service. Default order is newest first."""
        ...

    def update_review(self, review: "Review") -> Awaitable["Review"]:
        """Persist title, content and updated_at of an existing review."""
        ...


class CommentRepositoryProtocol(Protocol):
    """Repository interface for comment persistence operations."""

    def create_comment(self, comment: "Comment") -> Awaitable["Comment"]:
        """Insert a comment. A vanished review raises NotFoundError."""
        ...

    def get_comment_by_id(self, comment_id: UUID) -> Awaitable["Comment"]:
        """Get comment by ID."""
        ...

    def list_comments_by_review(
        self, review_id: UUID, params: "PageParams"
    ) -> Awaitable["Page[Comment]"]:
        """List comments on a review. Default order is oldest first."""
        ...

    def update_comment(self, comment: "Comment") -> Awaitable["Comment"]:
        """Persist content and updated_at of an existing comment."""
        ...


class UnitOfWorkProtocol(Protocol):
    """Unit of Work interface for transaction boundary management.

    Each instance manages a single database transaction and provides access
    to all repositories sharing that transaction. Leaving the context commits
    on success and rolls back on any exception, cancellation included.
    """

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit async context manager with automatic commit/rollback."""
        ...

    async def commit(self) -> None:
        """Explicitly commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Explicitly rollback the current transaction."""
        ...

    def get_user_repository(self) -> UserRepositoryProtocol:
        """Get user repository using this unit of work's transaction."""
        ...

    def get_rating_repository(self) -> RatingRepositoryProtocol:
        """Get rating repository using this unit of work's transaction."""
        ...

    def get_review_repository(self) -> ReviewRepositoryProtocol:
        """Get review repository using this unit of work's transaction."""
        ...

    def get_comment_repository(self) -> CommentRepositoryProtocol:
        """Get comment repository using this unit of work's transaction."""
        ...
