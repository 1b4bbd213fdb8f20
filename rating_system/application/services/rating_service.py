"""Rating, review and comment orchestration.

This service owns the cross-entity rules:

- a user holds at most one rating per service; rating again overwrites it
- a review must reference a rating owned by the same user and service
- a comment must reference an existing review

Each operation runs inside one unit of work and awaits its repository calls
in sequence. Failures surface as the typed errors of
``rating_system.domain.errors``; nothing is retried.
"""

from collections.abc import Callable
from uuid import UUID

from rating_system.config import get_logger, resilient_operation
from rating_system.domain.entities import (
    AverageRating,
    Comment,
    Rating,
    Review,
    ReviewWithRating,
    validate_score,
)
from rating_system.domain.errors import OwnershipMismatchError
from rating_system.domain.pagination import DEFAULT_LIMIT, Page, PageParams
from rating_system.domain.repositories import UnitOfWorkProtocol

logger = get_logger(__name__)

UnitOfWorkFactory = Callable[[], UnitOfWorkProtocol]


class RatingService:
    """Orchestrates ratings, reviews and comments on top of the repository port.

    Args:
        uow_factory: Returns a fresh unit of work per call
        enforce_review_ownership: When True, ``update_review`` rejects an
            acting user other than the review's author
        default_page_size: Limit used when a list call passes no params
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        enforce_review_ownership: bool = False,
        default_page_size: int = DEFAULT_LIMIT,
    ) -> None:
        self._uow_factory = uow_factory
        self.enforce_review_ownership = enforce_review_ownership
        self.default_page_size = default_page_size

    def _params(self, params: PageParams | None) -> PageParams:
        return params if params is not None else PageParams(limit=self.default_page_size)

    # -------------------------------------------------------------------------
    # RATINGS
    # -------------------------------------------------------------------------

    @resilient_operation("create_rating")
    async def create_rating(self, user_id: UUID, service_id: UUID, score: int) -> Rating:
        """Rate a service, overwriting the user's previous score if there is one.

        Raises:
            ValidationError: If score is outside [1, 5] or an id is nil
        """
        validate_score(score)
        candidate = Rating.create(user_id, service_id, score)

        async with self._uow_factory() as uow:
            rating = await uow.get_rating_repository().upsert_rating(candidate)

        logger.info(
            "Rating stored",
            rating_id=str(rating.id),
            service_id=str(service_id),
            score=score,
            replaced=rating.id != candidate.id,
        )
        return rating

    @resilient_operation("get_rating_by_id")
    async def get_rating_by_id(self, rating_id: UUID) -> Rating:
        async with self._uow_factory() as uow:
            return await uow.get_rating_repository().get_rating_by_id(rating_id)

    @resilient_operation("get_rating_by_user_and_service")
    async def get_rating_by_user_and_service(
        self, user_id: UUID, service_id: UUID
    ) -> Rating:
        async with self._uow_factory() as uow:
            return await uow.get_rating_repository().get_rating_by_user_and_service(
                user_id, service_id
            )

    @resilient_operation("list_ratings_by_service")
    async def list_ratings_by_service(
        self, service_id: UUID, params: PageParams | None = None
    ) -> Page[Rating]:
        async with self._uow_factory() as uow:
            return await uow.get_rating_repository().list_ratings_by_service(
                service_id, self._params(params)
            )

    @resilient_operation("update_rating")
    async def update_rating(self, rating_id: UUID, score: int) -> Rating:
        """Change the score of an existing rating."""
        validate_score(score)
        async with self._uow_factory() as uow:
            ratings = uow.get_rating_repository()
            existing = await ratings.get_rating_by_id(rating_id)
            return await ratings.update_rating(existing.with_score(score))

    @resilient_operation("get_average_rating")
    async def get_average_rating(self, service_id: UUID) -> AverageRating:
        """Average score and rating count, computed by one aggregate query."""
        async with self._uow_factory() as uow:
            return await uow.get_rating_repository().calculate_average_rating(
                service_id
            )

    # -------------------------------------------------------------------------
    # REVIEWS
    # -------------------------------------------------------------------------

    @resilient_operation("create_review")
    async def create_review(
        self,
        user_id: UUID,
        service_id: UUID,
        rating_id: UUID,
        title: str,
        content: str,
    ) -> Review:
        """Attach a review to the caller's own rating of the service.

        Raises:
            NotFoundError: If the rating does not exist
            OwnershipMismatchError: If the rating belongs to another user or service
            ValidationError: If title or content is blank
            ConflictError: If the rating already has a review
        """
        async with self._uow_factory() as uow:
            rating = await uow.get_rating_repository().get_rating_by_id(rating_id)

            if rating.user_id != user_id or rating.service_id != service_id:
                raise OwnershipMismatchError(
                    f"rating {rating_id} does not belong to user {user_id} "
                    f"for service {service_id}"
                )

            review = Review.create(user_id, service_id, rating_id, title, content)
            created = await uow.get_review_repository().create_review(review)

        logger.info(
            "Review created",
            review_id=str(created.id),
            rating_id=str(rating_id),
            service_id=str(service_id),
        )
        return created

    @resilient_operation("get_review_by_id")
    async def get_review_by_id(self, review_id: UUID) -> ReviewWithRating:
        async with self._uow_factory() as uow:
            return await uow.get_review_repository().get_review_by_id(review_id)

    @resilient_operation("list_reviews_by_service")
    async def list_reviews_by_service(
        self, service_id: UUID, params: PageParams | None = None
    ) -> Page[ReviewWithRating]:
        async with self._uow_factory() as uow:
            return await uow.get_review_repository().list_reviews_by_service(
                service_id, self._params(params)
            )

    @resilient_operation("update_review")
    async def update_review(
        self,
        review_id: UUID,
        title: str,
        content: str,
        acting_user_id: UUID | None = None,
    ) -> Review:
        """Replace the title and content of a review.

        Authorship is checked only when ``enforce_review_ownership`` is on and
        an ``acting_user_id`` is supplied.

        Raises:
            NotFoundError: If the review does not exist
            OwnershipMismatchError: If enforcement is on and the actor is not the author
            ValidationError: If title or content is blank
        """
        async with self._uow_factory() as uow:
            reviews = uow.get_review_repository()
            existing = await reviews.get_review_by_id(review_id)

            if (
                self.enforce_review_ownership
                and acting_user_id is not None
                and acting_user_id != existing.user_id
            ):
                raise OwnershipMismatchError(
                    f"review {review_id} was not written by user {acting_user_id}"
                )

            updated = existing.as_review().with_content(title, content)
            return await reviews.update_review(updated)

    # -------------------------------------------------------------------------
    # COMMENTS
    # -------------------------------------------------------------------------

    @resilient_operation("create_comment")
    async def create_comment(
        self, user_id: UUID, review_id: UUID, content: str
    ) -> Comment:
        """Comment on a review. Any user may comment on any review.

        Raises:
            NotFoundError: If the review does not exist
            ValidationError: If content is blank
        """
        async with self._uow_factory() as uow:
            await uow.get_review_repository().get_review_by_id(review_id)
            comment = Comment.create(user_id, review_id, content)
            created = await uow.get_comment_repository().create_comment(comment)

        logger.info(
            "Comment created", comment_id=str(created.id), review_id=str(review_id)
        )
        return created

    @resilient_operation("get_comment_by_id")
    async def get_comment_by_id(self, comment_id: UUID) -> Comment:
        async with self._uow_factory() as uow:
            return await uow.get_comment_repository().get_comment_by_id(comment_id)

    @resilient_operation("list_comments_by_review")
    async def list_comments_by_review(
        self, review_id: UUID, params: PageParams | None = None
    ) -> Page[Comment]:
        async with self._uow_factory() as uow:
            return await uow.get_comment_repository().list_comments_by_review(
                review_id, self._params(params)
            )

    @resilient_operation("update_comment")
    async def update_comment(self, comment_id: UUID, content: str) -> Comment:
        """Replace the content of a comment."""
        async with self._uow_factory() as uow:
            comments = uow.get_comment_repository()
            existing = await comments.get_comment_by_id(comment_id)
            return await comments.update_comment(existing.with_content(content))
