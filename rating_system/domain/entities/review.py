"""Review entities.

Each review belongs to exactly one rating, written by the same user for the
same service.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import attrs
from attrs import define, field

from .rating import validate_score
from .shared import ensure_utc, required_text, required_uuid, utc_now


@define(frozen=True, slots=True)
class Review:
    """Immutable review attached to a rating."""

    user_id: UUID = field(validator=required_uuid)
    service_id: UUID = field(validator=required_uuid)
    rating_id: UUID = field(validator=required_uuid)
    title: str = field(validator=required_text)
    content: str = field(validator=required_text)
    id: UUID = field(factory=uuid4, validator=required_uuid)
    created_at: datetime = field(factory=utc_now, converter=ensure_utc)
    updated_at: datetime = field(factory=utc_now, converter=ensure_utc)

    @classmethod
    def create(
        cls,
        user_id: UUID,
        service_id: UUID,
        rating_id: UUID,
        title: str,
        content: str,
    ) -> "Review":
        """Build a new review with a fresh id and matching timestamps."""
        now = utc_now()
        return cls(
            user_id=user_id,
            service_id=service_id,
            rating_id=rating_id,
            title=title,
            content=content,
            created_at=now,
            updated_at=now,
        )

    def with_content(self, title: str, content: str) -> "Review":
        """Create a new review with replaced text and a bumped updated_at."""
        return attrs.evolve(self, title=title, content=content, updated_at=utc_now())


def _score_validator(instance: Any, attribute: Any, value: Any) -> None:
    validate_score(value)


@define(frozen=True, slots=True)
class ReviewWithRating(Review):
    """Read-only view of a review joined with the score of its rating."""

    score: int = field(kw_only=True, validator=_score_validator)

    def as_review(self) -> Review:
        """Drop the joined score."""
        return Review(
            user_id=self.user_id,
            service_id=self.service_id,
            rating_id=self.rating_id,
            title=self.title,
            content=self.content,
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
