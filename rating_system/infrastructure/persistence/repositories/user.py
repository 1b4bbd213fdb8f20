"""Repository for users."""

from typing import Any
from uuid import UUID

from attrs import define
from sqlalchemy.ext.asyncio import AsyncSession

from rating_system.domain.entities import User
from rating_system.infrastructure.persistence.backends import SQLBackend
from rating_system.infrastructure.persistence.database.db_models import DBUser
from rating_system.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
)
from rating_system.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)


@define(frozen=True, slots=True)
class UserMapper(BaseModelMapper[DBUser, User]):
    """Maps between DBUser and User domain models."""

    @staticmethod
    def to_domain(db_model: DBUser) -> User:
        return User(
            id=db_model.id,
            username=db_model.username,
            email=db_model.email,
            password_hash=db_model.password_hash,
            created_at=db_model.created_at,
            updated_at=db_model.updated_at,
        )

    @staticmethod
    def to_values(domain_model: User) -> dict[str, Any]:
        return {
            "id": domain_model.id,
            "username": domain_model.username,
            "email": domain_model.email,
            "password_hash": domain_model.password_hash,
            "created_at": domain_model.created_at,
            "updated_at": domain_model.updated_at,
        }

    @staticmethod
    def model_class() -> type[DBUser]:
        return DBUser


class UserRepository(BaseRepository[DBUser, User]):
    """Repository for user accounts."""

    entity_name = "user"

    def __init__(self, session: AsyncSession, backend: SQLBackend) -> None:
        """Initialize repository with session and mapper."""
        super().__init__(
            session=session,
            backend=backend,
            model_class=DBUser,
            mapper=UserMapper(),
        )

    @db_operation("create_user")
    async def create_user(self, user: User) -> User:
        """Insert a user. Email and username are unique."""
        return await self._insert(user)

    @db_operation("get_user_by_id")
    async def get_user_by_id(self, user_id: UUID) -> User:
        return await self._find_one([DBUser.id == user_id], key=user_id)

    @db_operation("get_user_by_email")
    async def get_user_by_email(self, email: str) -> User:
        normalized = email.strip().lower()
        return await self._find_one([DBUser.email == normalized], key=normalized)

    @db_operation("get_user_by_username")
    async def get_user_by_username(self, username: str) -> User:
        normalized = username.strip()
        return await self._find_one([DBUser.username == normalized], key=normalized)

    @db_operation("update_password")
    async def update_password(self, user: User) -> User:
        """Persist the password hash of an existing user."""
        await self._update_values(
            user.id,
            {"password_hash": user.password_hash, "updated_at": user.updated_at},
        )
        return user
