"""Unit test fixtures - services over a mocked unit of work."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_uow():
    """Unit of work whose repositories are AsyncMocks."""
    uow = MagicMock()
    uow.__aenter__.return_value = uow
    uow.__aexit__.return_value = False
    uow.get_user_repository.return_value = AsyncMock()
    uow.get_rating_repository.return_value = AsyncMock()
    uow.get_review_repository.return_value = AsyncMock()
    uow.get_comment_repository.return_value = AsyncMock()
    return uow


@pytest.fixture
def mock_uow_factory(mock_uow):
    return MagicMock(return_value=mock_uow)
