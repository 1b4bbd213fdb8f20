"""Repository for reviews.

Reads always join the owning rating so callers get its score alongside the
review text.
"""

from typing import Any
from uuid import UUID

from attrs import define
from sqlalchemy import ColumnElement, Select
from sqlalchemy.ext.asyncio import AsyncSession

from rating_system.domain.entities import Review, ReviewWithRating
from rating_system.domain.errors import NotFoundError
from rating_system.domain.pagination import REVIEW_SORT_FIELDS, Page, PageParams
from rating_system.infrastructure.persistence.backends import SQLBackend
from rating_system.infrastructure.persistence.database.db_models import (
    DBRating,
    DBReview,
)
from rating_system.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
)
from rating_system.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)


@define(frozen=True, slots=True)
class ReviewMapper(BaseModelMapper[DBReview, Review]):
    """Maps between DBReview and Review domain models."""

    @staticmethod
    def to_domain(db_model: DBReview) -> Review:
        return Review(
            id=db_model.id,
            user_id=db_model.user_id,
            service_id=db_model.service_id,
            rating_id=db_model.rating_id,
            title=db_model.title,
            content=db_model.content,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )

    @staticmethod
    def to_values(domain_model: Review) -> dict[str, Any]:
        return {
            "id": domain_model.id,
            "user_id": domain_model.user_id,
            "service_id": domain_model.service_id,
            "rating_id": domain_model.rating_id,
            "title": domain_model.title,
            "content": domain_model.content,
            "created_at": domain_model.created_at,
            "updated_at": domain_model.updated_at,
        }

    @staticmethod
    def model_class() -> type[DBReview]:
        return DBReview

    @staticmethod
    def to_domain_with_rating(db_model: DBReview, score: int) -> ReviewWithRating:
        """Convert a review row joined with its rating's score."""
        return ReviewWithRating(
            id=db_model.id,
            user_id=db_model.user_id,
            service_id=db_model.service_id,
            rating_id=db_model.rating_id,
            title=db_model.title,
            content=db_model.content,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
            score=score,
        )


class ReviewRepository(BaseRepository[DBReview, Review]):
    """Repository for review operations."""

    entity_name = "review"
    parent_entity = "rating"

    def __init__(self, session: AsyncSession, backend: SQLBackend) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            backend=backend,
            model_class=DBReview,
            mapper=ReviewMapper(),
        )

    def select_with_rating(self) -> Select[tuple[DBReview, int]]:
        """Reviews joined with the score of their rating."""
        return self.select(DBReview, DBRating.score).join(
            DBRating, DBReview.rating_id == DBRating.id
        )

    def review_sort_columns(self) -> dict[str, ColumnElement[Any]]:
        """Allow-listed sort columns; score comes from the joined rating."""
        columns = self.sort_columns(REVIEW_SORT_FIELDS - {"score"})
        columns["score"] = DBRating.score
        return columns

    async def _find_with_rating(
        self, condition: ColumnElement[bool], key: Any
    ) -> ReviewWithRating:
        result = await self.session.execute(self.select_with_rating().where(condition))
        row = result.one_or_none()
        if row is None:
            raise NotFoundError(self.entity_name, key)
        db_review, score = row
        return ReviewMapper.to_domain_with_rating(db_review, score)

    @db_operation("create_review")
    async def create_review(self, review: Review) -> Review:
        """Insert a new review. One review per rating."""
        return await self._insert(review)

    @db_operation("get_review_by_id")
    async def get_review_by_id(self, review_id: UUID) -> ReviewWithRating:
        """Get review by ID, joined with its rating's score."""
        return await self._find_with_rating(DBReview.id == review_id, review_id)

    @db_operation("get_review_by_rating")
    async def get_review_by_rating(self, rating_id: UUID) -> ReviewWithRating:
        """Get the review attached to a rating."""
        return await self._find_with_rating(DBReview.rating_id == rating_id, rating_id)

    @db_operation("list_reviews_by_service")
    async def list_reviews_by_service(
        self, service_id: UUID, params: PageParams
    ) -> Page[ReviewWithRating]:
        """List reviews for a service, newest first unless sorted explicitly."""
        conditions = [DBReview.service_id == service_id]
        stmt = self.select_with_rating().where(*conditions)
        stmt = self.order_by(
            stmt, params, self.review_sort_columns(), default_descending=True
        )
        return await self._list_page(
            stmt,
            conditions,
            params,
            lambda row: ReviewMapper.to_domain_with_rating(row[0], row[1]),
        )

    @db_operation("update_review")
    async def update_review(self, review: Review) -> Review:
        """Persist title, content and updated_at of an existing review."""
        await self._update_values(
            review.id,
            {
                "title": review.title,
                "content": review.content,
                "updated_at": review.updated_at,
            },
        )
        return review
