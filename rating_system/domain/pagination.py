"""Pagination and sorting contract shared by every list operation.

``PageParams`` normalizes caller input. The offset is the stored quantity and
the page number is derived from it, so page-based and offset-based
construction agree for equivalent values and unaligned offsets survive
unchanged.

Sort fields are resolved through per-entity allow-lists before they reach a
query. Anything outside the list falls back to ``created_at``.
"""

from typing import Literal

from attrs import define, field

DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "created_at"

SortDirection = Literal["asc", "desc"]

RATING_SORT_FIELDS = frozenset({"score", "created_at", "updated_at"})
REVIEW_SORT_FIELDS = frozenset(
    {"score", "created_at", "updated_at", "title", "content"}
)
COMMENT_SORT_FIELDS = frozenset({"created_at", "updated_at", "content"})


def _normalize_limit(value: int) -> int:
    return value if value > 0 else DEFAULT_LIMIT


def _normalize_offset(value: int) -> int:
    return max(value, 0)


def _normalize_direction(value: str | None) -> str:
    direction = (value or "").strip().lower()
    return direction if direction in ("asc", "desc") else "desc"


def _normalize_sort_by(value: str | None) -> str:
    return (value or "").strip()


@define(frozen=True, slots=True)
class PageParams:
    """Normalized limit/offset/sort request.

    Normalization:
        - limit <= 0 becomes 10
        - offset < 0 becomes 0
        - a direction other than "asc"/"desc" (any case) becomes "desc"
    """

    limit: int = field(default=DEFAULT_LIMIT, converter=_normalize_limit)
    offset: int = field(default=0, converter=_normalize_offset)
    sort_by: str = field(default="", converter=_normalize_sort_by)
    sort_direction: str = field(default="desc", converter=_normalize_direction)

    @classmethod
    def from_offset(
        cls,
        limit: int = DEFAULT_LIMIT,
        offset: int = 0,
        sort_by: str = "",
        sort_direction: str = "desc",
    ) -> "PageParams":
        return cls(
            limit=limit, offset=offset, sort_by=sort_by, sort_direction=sort_direction
        )

    @classmethod
    def from_page(
        cls,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        sort_by: str = "",
        sort_direction: str = "desc",
    ) -> "PageParams":
        """Build params from a 1-based page number. Pages below 1 become 1."""
        page = page if page > 0 else 1
        limit = _normalize_limit(limit)
        return cls(
            limit=limit,
            offset=(page - 1) * limit,
            sort_by=sort_by,
            sort_direction=sort_direction,
        )

    @property
    def page(self) -> int:
        """1-based page containing ``offset``."""
        return self.offset // self.limit + 1

    @property
    def has_sort(self) -> bool:
        return bool(self.sort_by)

    @property
    def descending(self) -> bool:
        return self.sort_direction == "desc"


@define(frozen=True, slots=True)
class Page[T]:
    """One page of results plus the total row count for the same filter.

    ``total`` comes from a separate COUNT query and may drift slightly from
    ``items`` under concurrent writes.
    """

    items: list[T]
    total: int
    params: PageParams = field(factory=PageParams)

    @property
    def has_next(self) -> bool:
        return self.params.offset + len(self.items) < self.total

    @property
    def page_count(self) -> int:
        if self.total <= 0:
            return 0
        return -(-self.total // self.params.limit)


def resolve_sort_field(sort_by: str | None, allowed: frozenset[str]) -> str:
    """Map a caller-supplied sort field onto the allow-list.

    Example:
        >>> resolve_sort_field("SCORE", RATING_SORT_FIELDS)
        'score'
        >>> resolve_sort_field("password", RATING_SORT_FIELDS)
        'created_at'
    """
    candidate = (sort_by or "").strip().lower()
    return candidate if candidate in allowed else DEFAULT_SORT_FIELD
