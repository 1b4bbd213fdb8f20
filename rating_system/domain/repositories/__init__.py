"""Domain repository interfaces following Clean Architecture principles.

These interfaces define the contracts for data access without depending on
infrastructure implementations, following the dependency inversion principle.
"""

from .interfaces import (
    CommentRepositoryProtocol,
    RatingRepositoryProtocol,
    ReviewRepositoryProtocol,
    UnitOfWorkProtocol,
    UserRepositoryProtocol,
)

__all__ = [
    "CommentRepositoryProtocol",
    "RatingRepositoryProtocol",
    "ReviewRepositoryProtocol",
    "UnitOfWorkProtocol",
    "UserRepositoryProtocol",
]
