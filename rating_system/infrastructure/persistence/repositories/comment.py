"""Repository for comments."""

from typing import Any
from uuid import UUID

from attrs import define
from sqlalchemy.ext.asyncio import AsyncSession

from rating_system.domain.entities import Comment
from rating_system.domain.pagination import COMMENT_SORT_FIELDS, Page, PageParams
from rating_system.infrastructure.persistence.backends import SQLBackend
from rating_system.infrastructure.persistence.database.db_models import DBComment
from rating_system.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
)
from rating_system.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)


@define(frozen=True, slots=True)
class CommentMapper(BaseModelMapper[DBComment, Comment]):
    """Maps between DBComment and Comment domain models."""

    @staticmethod
    def to_domain(db_model: DBComment) -> Comment:
        return Comment(
            id=db_model.id,
            user_id=db_model.user_id,
            review_id=db_model.review_id,
            content=db_model.content,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )

    @staticmethod
    def to_values(domain_model: Comment) -> dict[str, Any]:
        return {
            "id": domain_model.id,
            "user_id": domain_model.user_id,
            "review_id": domain_model.review_id,
            "content": domain_model.content,
            "created_at": domain_model.created_at,
            "updated_at": domain_model.updated_at,
        }

    @staticmethod
    def model_class() -> type[DBComment]:
        return DBComment


class CommentRepository(BaseRepository[DBComment, Comment]):
    """Repository for comment operations."""

    entity_name = "comment"
    parent_entity = "review"

    def __init__(self, session: AsyncSession, backend: SQLBackend) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            backend=backend,
            model_class=DBComment,
            mapper=CommentMapper(),
        )

    @db_operation("create_comment")
    async def create_comment(self, comment: Comment) -> Comment:
        return await self._insert(comment)

    @db_operation("get_comment_by_id")
    async def get_comment_by_id(self, comment_id: UUID) -> Comment:
        return await self._find_one([DBComment.id == comment_id], key=comment_id)

    @db_operation("list_comments_by_review")
    async def list_comments_by_review(
        self, review_id: UUID, params: PageParams
    ) -> Page[Comment]:
        """List comments on a review in conversation order (oldest first)."""
        conditions = [DBComment.review_id == review_id]
        stmt = self.select().where(*conditions)
        stmt = self.order_by(
            stmt,
            params,
            self.sort_columns(COMMENT_SORT_FIELDS),
            default_descending=False,
        )
        return await self._list_page(
            stmt, conditions, params, lambda row: self.mapper.to_domain(row[0])
        )

    @db_operation("update_comment")
    async def update_comment(self, comment: Comment) -> Comment:
        await self._update_values(
            comment.id,
            {"content": comment.content, "updated_at": comment.updated_at},
        )
        return comment
