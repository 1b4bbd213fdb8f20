"""Rating entities.

A rating is a user's 1-5 score for a service. A user holds at most one
rating per service; rating again overwrites the score.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

import attrs
from attrs import define, field

from rating_system.domain.errors import ValidationError

from .shared import ensure_utc, required_uuid, utc_now

MIN_SCORE = 1
MAX_SCORE = 5


def validate_score(score: Any) -> int:
    """Return ``score`` if it is an integer in [MIN_SCORE, MAX_SCORE].

    Raises:
        ValidationError: For any other value, booleans included
    """
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError(f"score must be an integer, got {score!r}")
    if not MIN_SCORE <= score <= MAX_SCORE:
        raise ValidationError(
            f"score must be between {MIN_SCORE} and {MAX_SCORE}, got {score}"
        )
    return score


def _score_validator(instance: Any, attribute: Any, value: Any) -> None:
    validate_score(value)


@define(frozen=True, slots=True)
class Rating:
    """Immutable rating of a service by a user."""

    user_id: UUID = field(validator=required_uuid)
    service_id: UUID = field(validator=required_uuid)
    score: int = field(validator=_score_validator)
    id: UUID = field(factory=uuid4, validator=required_uuid)
    created_at: datetime = field(factory=utc_now, converter=ensure_utc)
    updated_at: datetime = field(factory=utc_now, converter=ensure_utc)

    @classmethod
    def create(cls, user_id: UUID, service_id: UUID, score: int) -> "Rating":
        """Build a new rating with a fresh id and matching timestamps."""
        now = utc_now()
        return cls(
            user_id=user_id,
            service_id=service_id,
            score=score,
            created_at=now,
            updated_at=now,
        )

    def with_score(self, score: int) -> "Rating":
        """Create a new rating with a changed score and a bumped updated_at."""
        return attrs.evolve(self, score=score, updated_at=utc_now())


@define(frozen=True, slots=True)
class AverageRating:
    """Aggregate score for a service, computed on demand.

    ``average_score`` is 0.0 when the service has no ratings.
    """

    service_id: UUID
    average_score: float = field(default=0.0, converter=float)
    total_ratings: int = field(default=0, converter=int)
