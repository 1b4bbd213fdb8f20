"""Core domain entities for ratings, reviews, comments and users."""

from .comment import Comment
from .rating import MAX_SCORE, MIN_SCORE, AverageRating, Rating, validate_score
from .review import Review, ReviewWithRating
from .shared import NIL_UUID, ensure_utc, utc_now
from .user import User, UserProfile, hash_password

__all__ = [
    # Rating entities
    "MAX_SCORE",
    "MIN_SCORE",
    "AverageRating",
    "Rating",
    "validate_score",
    # Review entities
    "Review",
    "ReviewWithRating",
    # Comment entities
    "Comment",
    # User entities
    "User",
    "UserProfile",
    "hash_password",
    # Shared utilities
    "NIL_UUID",
    "ensure_utc",
    "utc_now",
]
