"""Application services orchestrating the domain."""

from .account_service import AccountService
from .rating_service import RatingService, UnitOfWorkFactory

__all__ = [
    "AccountService",
    "RatingService",
    "UnitOfWorkFactory",
]
