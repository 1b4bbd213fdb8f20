"""User registration and credential checks.

Password hashing is CPU bound, so bcrypt work runs in a worker thread.
"""

import asyncio
from uuid import UUID

from rating_system.config import get_logger, resilient_operation
from rating_system.domain.entities import User, UserProfile
from rating_system.domain.entities.user import DEFAULT_BCRYPT_ROUNDS
from rating_system.domain.errors import AuthenticationError, NotFoundError

from .rating_service import UnitOfWorkFactory

logger = get_logger(__name__)


class AccountService:
    """Registers users and verifies their passwords."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ) -> None:
        self._uow_factory = uow_factory
        self._bcrypt_rounds = bcrypt_rounds

    @resilient_operation("register")
    async def register(self, username: str, email: str, password: str) -> UserProfile:
        """Create an account.

        Raises:
            ValidationError: On blank username/email or an unacceptable password
            ConflictError: If the email or username is already registered
        """
        user = await asyncio.to_thread(
            User.create, username, email, password, self._bcrypt_rounds
        )
        async with self._uow_factory() as uow:
            created = await uow.get_user_repository().create_user(user)

        logger.info("User registered", user_id=str(created.id))
        return created.to_public()

    @resilient_operation("authenticate")
    async def authenticate(self, email: str, password: str) -> UserProfile:
        """Check credentials.

        Unknown email and wrong password are reported identically.

        Raises:
            AuthenticationError: If the credentials do not match
        """
        async with self._uow_factory() as uow:
            try:
                user = await uow.get_user_repository().get_user_by_email(email)
            except NotFoundError:
                raise AuthenticationError("invalid credentials") from None

        if not await asyncio.to_thread(user.check_password, password):
            raise AuthenticationError("invalid credentials")
        return user.to_public()

    @resilient_operation("change_password")
    async def change_password(
        self, user_id: UUID, old_password: str, new_password: str
    ) -> UserProfile:
        """Replace a user's password after verifying the current one.

        Raises:
            NotFoundError: If the user does not exist
            AuthenticationError: If ``old_password`` is wrong
            ValidationError: If ``new_password`` is unacceptable
        """
        async with self._uow_factory() as uow:
            users = uow.get_user_repository()
            user = await users.get_user_by_id(user_id)

            if not await asyncio.to_thread(user.check_password, old_password):
                raise AuthenticationError("invalid credentials")

            updated = await asyncio.to_thread(
                user.with_password, new_password, self._bcrypt_rounds
            )
            stored = await users.update_password(updated)

        logger.info("Password changed", user_id=str(user_id))
        return stored.to_public()
