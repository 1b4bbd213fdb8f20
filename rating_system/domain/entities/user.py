"""User entities.

Users are immutable apart from their password hash. Hashing uses bcrypt.
"""

from datetime import datetime
from uuid import UUID, uuid4

import attrs
from attrs import define, field
import bcrypt

from rating_system.domain.errors import ValidationError

from .shared import ensure_utc, required_text, required_uuid, utc_now

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes of input
MAX_PASSWORD_BYTES = 72
DEFAULT_BCRYPT_ROUNDS = 12


def _normalize_email(value: str) -> str:
    return value.strip().lower() if isinstance(value, str) else value


def _strip(value: str) -> str:
    return value.strip() if isinstance(value, str) else value


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Validate and hash a plain-text password.

    Raises:
        ValidationError: If the password is too short or too long for bcrypt
    """
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password must not exceed {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("ascii")


@define(frozen=True, slots=True)
class UserProfile:
    """Public view of a user, without credentials."""

    id: UUID
    username: str
    email: str
    created_at: datetime
    updated_at: datetime


@define(frozen=True, slots=True)
class User:
    """Registered user with a bcrypt password hash."""

    username: str = field(converter=_strip, validator=required_text)
    email: str = field(converter=_normalize_email, validator=required_text)
    password_hash: str = field(validator=required_text, repr=False)
    id: UUID = field(factory=uuid4, validator=required_uuid)
    created_at: datetime = field(factory=utc_now, converter=ensure_utc)
    updated_at: datetime = field(factory=utc_now, converter=ensure_utc)

    @classmethod
    def create(
        cls,
        username: str,
        email: str,
        password: str,
        rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ) -> "User":
        """Register a new user, hashing the password.

        Args:
            username: Display name, must not be blank
            email: Login address, stored lower-cased
            password: Plain text, at least 8 characters
            rounds: bcrypt cost factor

        Raises:
            ValidationError: On blank username/email or an unacceptable password
        """
        now = utc_now()
        return cls(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds),
            created_at=now,
            updated_at=now,
        )

    def check_password(self, password: str) -> bool:
        """Return True if ``password`` matches the stored hash."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), self.password_hash.encode("ascii")
            )
        except ValueError:
            # Malformed hash or over-long input
            return False

    def with_password(
        self, password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS
    ) -> "User":
        """Create a new user with a fresh password hash."""
        return attrs.evolve(
            self,
            password_hash=hash_password(password, rounds),
            updated_at=utc_now(),
        )

    def to_public(self) -> UserProfile:
        return UserProfile(
            id=self.id,
            username=self.username,
            email=self.email,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
