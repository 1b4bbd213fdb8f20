"""Repository layer for database operations with SQLAlchemy 2.0."""

# Re-export core components
from rating_system.infrastructure.persistence.repositories.base_repo import (
    BaseModelMapper,
    BaseRepository,
    ModelMapper,
)
from rating_system.infrastructure.persistence.repositories.comment import (
    CommentMapper,
    CommentRepository,
)
from rating_system.infrastructure.persistence.repositories.rating import (
    RatingMapper,
    RatingRepository,
)
from rating_system.infrastructure.persistence.repositories.repo_decorator import (
    db_operation,
)
from rating_system.infrastructure.persistence.repositories.review import (
    ReviewMapper,
    ReviewRepository,
)
from rating_system.infrastructure.persistence.repositories.user import (
    UserMapper,
    UserRepository,
)

# Define public API
__all__ = [
    "BaseModelMapper",
    "BaseRepository",
    "CommentMapper",
    "CommentRepository",
    "ModelMapper",
    "RatingMapper",
    "RatingRepository",
    "ReviewMapper",
    "ReviewRepository",
    "UserMapper",
    "UserRepository",
    "db_operation",
]
