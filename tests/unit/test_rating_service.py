"""Unit tests for RatingService orchestration rules."""

from uuid import uuid4

import pytest

from rating_system.application.services import RatingService
from rating_system.domain.entities import (
    NIL_UUID,
    AverageRating,
    Comment,
    Rating,
    ReviewWithRating,
)
from rating_system.domain.errors import (
    NotFoundError,
    OwnershipMismatchError,
    StorageError,
    ValidationError,
)
from rating_system.domain.pagination import Page, PageParams


def _review_with_rating(author_id, service_id) -> ReviewWithRating:
    return ReviewWithRating(
        user_id=author_id,
        service_id=service_id,
        rating_id=uuid4(),
        title="Solid",
        content="Would book again",
        score=4,
    )


class TestCreateRating:
    @pytest.mark.parametrize("score", [0, 6, -1, 3.5, "4", True, None])
    async def test_invalid_score_never_reaches_repository(
        self, mock_uow_factory, mock_uow, score
    ):
        service = RatingService(mock_uow_factory)

        with pytest.raises(ValidationError):
            await service.create_rating(uuid4(), uuid4(), score)

        mock_uow.get_rating_repository.return_value.upsert_rating.assert_not_called()
        mock_uow_factory.assert_not_called()

    async def test_nil_ids_rejected(self, mock_uow_factory):
        service = RatingService(mock_uow_factory)
        with pytest.raises(ValidationError):
            await service.create_rating(NIL_UUID, uuid4(), 3)

    async def test_upserts_and_returns_stored_rating(self, mock_uow_factory, mock_uow):
        user_id, service_id = uuid4(), uuid4()
        stored = Rating.create(user_id, service_id, 5)
        repo = mock_uow.get_rating_repository.return_value
        repo.upsert_rating.return_value = stored

        result = await RatingService(mock_uow_factory).create_rating(user_id, service_id, 5)

        assert result is stored
        (candidate,) = repo.upsert_rating.await_args.args
        assert (candidate.user_id, candidate.service_id, candidate.score) == (
            user_id,
            service_id,
            5,
        )


class TestUpdateRating:
    async def test_updates_existing(self, mock_uow_factory, mock_uow):
        existing = Rating.create(uuid4(), uuid4(), 2)
        repo = mock_uow.get_rating_repository.return_value
        repo.get_rating_by_id.return_value = existing
        repo.update_rating.side_effect = lambda rating: rating

        result = await RatingService(mock_uow_factory).update_rating(existing.id, 4)

        assert result.score == 4
        assert result.id == existing.id
        assert result.created_at == existing.created_at

    async def test_missing_rating_propagates(self, mock_uow_factory, mock_uow):
        repo = mock_uow.get_rating_repository.return_value
        repo.get_rating_by_id.side_effect = NotFoundError("rating", "x")

        with pytest.raises(NotFoundError):
            await RatingService(mock_uow_factory).update_rating(uuid4(), 3)
        repo.update_rating.assert_not_called()

    async def test_invalid_score(self, mock_uow_factory):
        with pytest.raises(ValidationError):
            await RatingService(mock_uow_factory).update_rating(uuid4(), 9)


class TestCreateReview:
    async def test_rejects_rating_of_another_user(self, mock_uow_factory, mock_uow):
        service_id = uuid4()
        rating = Rating.create(uuid4(), service_id, 4)
        mock_uow.get_rating_repository.return_value.get_rating_by_id.return_value = rating

        with pytest.raises(OwnershipMismatchError):
            await RatingService(mock_uow_factory).create_review(
                uuid4(), service_id, rating.id, "Title", "Body"
            )

        mock_uow.get_review_repository.return_value.create_review.assert_not_called()

    async def test_rejects_rating_of_another_service(self, mock_uow_factory, mock_uow):
        user_id = uuid4()
        rating = Rating.create(user_id, uuid4(), 4)
        mock_uow.get_rating_repository.return_value.get_rating_by_id.return_value = rating

        with pytest.raises(OwnershipMismatchError):
            await RatingService(mock_uow_factory).create_review(
                user_id, uuid4(), rating.id, "Title", "Body"
            )

    async def test_missing_rating(self, mock_uow_factory, mock_uow):
        rating_id = uuid4()
        mock_uow.get_rating_repository.return_value.get_rating_by_id.side_effect = (
            NotFoundError("rating", rating_id)
        )

        with pytest.raises(NotFoundError) as exc_info:
            await RatingService(mock_uow_factory).create_review(
                uuid4(), uuid4(), rating_id, "Title", "Body"
            )
        assert exc_info.value.entity == "rating"

    async def test_blank_title(self, mock_uow_factory, mock_uow):
        user_id, service_id = uuid4(), uuid4()
        rating = Rating.create(user_id, service_id, 4)
        mock_uow.get_rating_repository.return_value.get_rating_by_id.return_value = rating

        with pytest.raises(ValidationError):
            await RatingService(mock_uow_factory).create_review(
                user_id, service_id, rating.id, "   ", "Body"
            )

    async def test_creates_review_for_own_rating(self, mock_uow_factory, mock_uow):
        user_id, service_id = uuid4(), uuid4()
        rating = Rating.create(user_id, service_id, 4)
        mock_uow.get_rating_repository.return_value.get_rating_by_id.return_value = rating
        reviews = mock_uow.get_review_repository.return_value
        reviews.create_review.side_effect = lambda review: review

        review = await RatingService(mock_uow_factory).create_review(
            user_id, service_id, rating.id, "Title", "Body"
        )

        assert review.rating_id == rating.id
        assert review.user_id == user_id
        reviews.create_review.assert_awaited_once()


class TestUpdateReview:
    async def test_any_user_may_edit_by_default(self, mock_uow_factory, mock_uow):
        existing = _review_with_rating(uuid4(), uuid4())
        reviews = mock_uow.get_review_repository.return_value
        reviews.get_review_by_id.return_value = existing
        reviews.update_review.side_effect = lambda review: review

        updated = await RatingService(mock_uow_factory).update_review(
            existing.id, "New", "Text", acting_user_id=uuid4()
        )

        assert (updated.title, updated.content) == ("New", "Text")
        assert updated.id == existing.id
        assert not isinstance(updated, ReviewWithRating)

    async def test_enforced_ownership_rejects_other_user(self, mock_uow_factory, mock_uow):
        existing = _review_with_rating(uuid4(), uuid4())
        reviews = mock_uow.get_review_repository.return_value
        reviews.get_review_by_id.return_value = existing

        service = RatingService(mock_uow_factory, enforce_review_ownership=True)
        with pytest.raises(OwnershipMismatchError):
            await service.update_review(existing.id, "New", "Text", acting_user_id=uuid4())

        reviews.update_review.assert_not_called()

    async def test_enforced_ownership_allows_author(self, mock_uow_factory, mock_uow):
        author = uuid4()
        existing = _review_with_rating(author, uuid4())
        reviews = mock_uow.get_review_repository.return_value
        reviews.get_review_by_id.return_value = existing
        reviews.update_review.side_effect = lambda review: review

        service = RatingService(mock_uow_factory, enforce_review_ownership=True)
        updated = await service.update_review(existing.id, "New", "Text", acting_user_id=author)

        assert updated.title == "New"

    async def test_enforced_without_actor_is_not_checked(self, mock_uow_factory, mock_uow):
        existing = _review_with_rating(uuid4(), uuid4())
        reviews = mock_uow.get_review_repository.return_value
        reviews.get_review_by_id.return_value = existing
        reviews.update_review.side_effect = lambda review: review

        service = RatingService(mock_uow_factory, enforce_review_ownership=True)
        await service.update_review(existing.id, "New", "Text")

        reviews.update_review.assert_awaited_once()


class TestComments:
    async def test_create_comment_requires_review(self, mock_uow_factory, mock_uow):
        review_id = uuid4()
        mock_uow.get_review_repository.return_value.get_review_by_id.side_effect = (
            NotFoundError("review", review_id)
        )

        with pytest.raises(NotFoundError):
            await RatingService(mock_uow_factory).create_comment(uuid4(), review_id, "Hi")

        mock_uow.get_comment_repository.return_value.create_comment.assert_not_called()

    async def test_update_comment(self, mock_uow_factory, mock_uow):
        existing = Comment.create(uuid4(), uuid4(), "Before")
        comments = mock_uow.get_comment_repository.return_value
        comments.get_comment_by_id.return_value = existing
        comments.update_comment.side_effect = lambda comment: comment

        updated = await RatingService(mock_uow_factory).update_comment(existing.id, "After")

        assert updated.content == "After"
        assert updated.updated_at >= existing.updated_at


class TestListing:
    async def test_default_params_use_configured_page_size(self, mock_uow_factory, mock_uow):
        repo = mock_uow.get_rating_repository.return_value
        repo.list_ratings_by_service.return_value = Page(items=[], total=0)
        service_id = uuid4()

        await RatingService(mock_uow_factory, default_page_size=25).list_ratings_by_service(
            service_id
        )

        repo.list_ratings_by_service.assert_awaited_once_with(
            service_id, PageParams(limit=25)
        )

    async def test_explicit_params_pass_through(self, mock_uow_factory, mock_uow):
        repo = mock_uow.get_comment_repository.return_value
        repo.list_comments_by_review.return_value = Page(items=[], total=0)
        params = PageParams(limit=5, offset=10, sort_by="content", sort_direction="asc")
        review_id = uuid4()

        await RatingService(mock_uow_factory).list_comments_by_review(review_id, params)

        repo.list_comments_by_review.assert_awaited_once_with(review_id, params)

    async def test_average_passthrough(self, mock_uow_factory, mock_uow):
        service_id = uuid4()
        average = AverageRating(service_id=service_id, average_score=4.5, total_ratings=2)
        repo = mock_uow.get_rating_repository.return_value
        repo.calculate_average_rating.return_value = average

        assert await RatingService(mock_uow_factory).get_average_rating(service_id) is average


class TestErrorLogging:
    async def test_storage_error_logged_and_reraised(
        self, mock_uow_factory, mock_uow, log_records
    ):
        repo = mock_uow.get_rating_repository.return_value
        repo.get_rating_by_id.side_effect = StorageError("database unavailable")

        with pytest.raises(StorageError):
            await RatingService(mock_uow_factory).get_rating_by_id(uuid4())

        errors = [r for r in log_records if r["level"].name == "ERROR"]
        assert any(
            "Storage failure in get_rating_by_id" in r["message"] for r in errors
        )

    async def test_rejections_logged_with_kind(self, mock_uow_factory, log_records):
        with pytest.raises(ValidationError):
            await RatingService(mock_uow_factory).create_rating(uuid4(), uuid4(), 0)

        rejected = [r for r in log_records if "create_rating rejected" in r["message"]]
        assert rejected
        assert rejected[-1]["extra"]["kind"] == "validation"
