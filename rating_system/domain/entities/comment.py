"""Comment entity."""

from datetime import datetime
from uuid import UUID, uuid4

import attrs
from attrs import define, field

from .shared import ensure_utc, required_text, required_uuid, utc_now


@define(frozen=True, slots=True)
class Comment:
    """Immutable comment on a review. Anyone may comment on any review."""

    user_id: UUID = field(validator=required_uuid)
    review_id: UUID = field(validator=required_uuid)
    content: str = field(validator=required_text)
    id: UUID = field(factory=uuid4, validator=required_uuid)
    created_at: datetime = field(factory=utc_now, converter=ensure_utc)
    updated_at: datetime = field(factory=utc_now, converter=ensure_utc)

    @classmethod
    def create(cls, user_id: UUID, review_id: UUID, content: str) -> "Comment":
        now = utc_now()
        return cls(
            user_id=user_id,
            review_id=review_id,
            content=content,
            created_at=now,
            updated_at=now,
        )

    def with_content(self, content: str) -> "Comment":
        """Create a new comment with replaced text and a bumped updated_at."""
        return attrs.evolve(self, content=content, updated_at=utc_now())
