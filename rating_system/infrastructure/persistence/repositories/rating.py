"""Repository for ratings, including the atomic upsert and the average."""

from typing import Any
from uuid import UUID

from attrs import define
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rating_system.domain.entities import AverageRating, Rating
from rating_system.domain.pagination import RATING_SORT_FIELDS, Page, PageParams
from rating_system.infrastructure.persistence.backends import SQLBackend
from rating_system.infrastructure.persistence.database.db_models import DBRating
from rating_system.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
)
from rating_system.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)


@define(frozen=True, slots=True)
class RatingMapper(BaseModelMapper[DBRating, Rating]):
    """Maps between DBRating and Rating domain models."""

    @staticmethod
    def to_domain(db_model: DBRating) -> Rating:
        return Rating(
            id=db_model.id,
            user_id=db_model.user_id,
            service_id=db_model.service_id,
            score=db_model.score,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )

    @staticmethod
    def to_values(domain_model: Rating) -> dict[str, Any]:
        return {
            "id": domain_model.id,
            "user_id": domain_model.user_id,
            "service_id": domain_model.service_id,
            "score": domain_model.score,
            "created_at": domain_model.created_at,
            "updated_at": domain_model.updated_at,
        }

    @staticmethod
    def model_class() -> type[DBRating]:
        return DBRating


class RatingRepository(BaseRepository[DBRating, Rating]):
    """Repository for rating operations."""

    entity_name = "rating"

    def __init__(self, session: AsyncSession, backend: SQLBackend) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            backend=backend,
            model_class=DBRating,
            mapper=RatingMapper(),
        )

    @db_operation("create_rating")
    async def create_rating(self, rating: Rating) -> Rating:
        """Insert a new rating."""
        return await self._insert(rating)

    @db_operation("upsert_rating")
    async def upsert_rating(self, rating: Rating) -> Rating:
        """Insert a rating or overwrite score/updated_at on (user_id, service_id).

        The statement is atomic on every backend, so concurrent first ratings
        for the same pair converge on one row. The stored row is read back
        because an existing row keeps its own id and created_at.
        """
        stmt = self.backend.upsert_rating_statement(self.mapper.to_values(rating))
        await self.session.execute(stmt)
        return await self._find_one(
            [
                DBRating.user_id == rating.user_id,
                DBRating.service_id == rating.service_id,
            ],
            key=f"user {rating.user_id} / service {rating.service_id}",
        )

    @db_operation("get_rating_by_id")
    async def get_rating_by_id(self, rating_id: UUID) -> Rating:
        """Get rating by ID."""
        return await self._find_one([DBRating.id == rating_id], key=rating_id)

    @db_operation("get_rating_by_user_and_service")
    async def get_rating_by_user_and_service(
        self, user_id: UUID, service_id: UUID
    ) -> Rating:
        """Get the rating a user gave a service."""
        return await self._find_one(
            [DBRating.user_id == user_id, DBRating.service_id == service_id],
            key=f"user {user_id} / service {service_id}",
        )

    @db_operation("list_ratings_by_service")
    async def list_ratings_by_service(
        self, service_id: UUID, params: PageParams
    ) -> Page[Rating]:
        """List ratings for a service, newest first unless sorted explicitly."""
        conditions = [DBRating.service_id == service_id]
        stmt = self.select().where(*conditions)
        stmt = self.order_by(
            stmt, params, self.sort_columns(RATING_SORT_FIELDS), default_descending=True
        )
        return await self._list_page(
            stmt, conditions, params, lambda row: self.mapper.to_domain(row[0])
        )

    @db_operation("update_rating")
    async def update_rating(self, rating: Rating) -> Rating:
        """Persist score and updated_at of an existing rating."""
        await self._update_values(
            rating.id, {"score": rating.score, "updated_at": rating.updated_at}
        )
        return rating

    @db_operation("calculate_average_rating")
    async def calculate_average_rating(self, service_id: UUID) -> AverageRating:
        """Aggregate score for a service in a single query.

        AVG over no rows is NULL; that is reported as 0.0.
        """
        stmt = select(
            func.coalesce(func.avg(DBRating.score), 0),
            func.count(DBRating.id),
        ).where(DBRating.service_id == service_id)
        result = await self.session.execute(stmt)
        average, total = result.one()
        return AverageRating(
            service_id=service_id,
            average_score=float(average or 0),
            total_ratings=int(total or 0),
        )
