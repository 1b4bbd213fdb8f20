"""Tests for the pagination contract - normalization and sort allow-lists."""

import pytest

from rating_system.domain.pagination import (
    COMMENT_SORT_FIELDS,
    RATING_SORT_FIELDS,
    REVIEW_SORT_FIELDS,
    Page,
    PageParams,
    resolve_sort_field,
)


class TestPageParamsNormalization:
    """Out-of-range inputs fall back to defaults."""

    @pytest.mark.parametrize("limit", [0, -1, -50])
    def test_non_positive_limit_becomes_ten(self, limit):
        assert PageParams.from_offset(limit=limit).limit == 10

    def test_negative_offset_becomes_zero(self):
        assert PageParams.from_offset(offset=-5).offset == 0

    @pytest.mark.parametrize("direction", ["", "up", "ascending", None])
    def test_unknown_direction_becomes_desc(self, direction):
        assert PageParams.from_offset(sort_direction=direction).sort_direction == "desc"

    @pytest.mark.parametrize(("direction", "expected"), [("ASC", "asc"), ("Desc", "desc")])
    def test_direction_is_case_insensitive(self, direction, expected):
        assert PageParams.from_offset(sort_direction=direction).sort_direction == expected

    @pytest.mark.parametrize("page", [0, -3])
    def test_non_positive_page_becomes_first(self, page):
        params = PageParams.from_page(page=page, limit=5)
        assert params.page == 1
        assert params.offset == 0

    def test_page_offset_uses_normalized_limit(self):
        params = PageParams.from_page(page=3, limit=0)
        assert params.limit == 10
        assert params.offset == 20

    def test_defaults(self):
        params = PageParams()
        assert (params.limit, params.offset, params.sort_by, params.sort_direction) == (
            10,
            0,
            "",
            "desc",
        )
        assert not params.has_sort


class TestPageOffsetConsistency:
    """Page-based and offset-based construction describe the same window."""

    @pytest.mark.parametrize("limit", [1, 3, 10, 25])
    @pytest.mark.parametrize("page", [1, 2, 7])
    def test_from_page_matches_from_offset(self, page, limit):
        by_page = PageParams.from_page(page=page, limit=limit, sort_by="score")
        by_offset = PageParams.from_offset(
            limit=limit, offset=(page - 1) * limit, sort_by="score"
        )

        assert by_page == by_offset
        assert by_offset.page == page

    def test_unaligned_offset_is_preserved(self):
        params = PageParams.from_offset(limit=10, offset=15)
        assert params.offset == 15
        assert params.page == 2


class TestPage:
    def test_has_next_and_page_count(self):
        params = PageParams.from_offset(limit=2, offset=2)
        page = Page(items=["c", "d"], total=5, params=params)

        assert page.has_next
        assert page.page_count == 3

    def test_last_page(self):
        params = PageParams.from_offset(limit=2, offset=4)
        page = Page(items=["e"], total=5, params=params)
        assert not page.has_next

    def test_empty(self):
        page = Page(items=[], total=0)
        assert page.page_count == 0
        assert not page.has_next


class TestResolveSortField:
    """Caller-supplied sort fields only reach SQL through the allow-lists."""

    @pytest.mark.parametrize("field", sorted(REVIEW_SORT_FIELDS))
    def test_allowed_review_fields_pass(self, field):
        assert resolve_sort_field(field.upper(), REVIEW_SORT_FIELDS) == field

    @pytest.mark.parametrize(
        "field", ["id", "user_id", "score; DROP TABLE ratings", "", None, "password"]
    )
    def test_unknown_fields_fall_back_to_created_at(self, field):
        assert resolve_sort_field(field, REVIEW_SORT_FIELDS) == "created_at"

    def test_allow_lists_differ_per_entity(self):
        assert resolve_sort_field("title", RATING_SORT_FIELDS) == "created_at"
        assert resolve_sort_field("score", COMMENT_SORT_FIELDS) == "created_at"
        assert resolve_sort_field("content", COMMENT_SORT_FIELDS) == "content"
