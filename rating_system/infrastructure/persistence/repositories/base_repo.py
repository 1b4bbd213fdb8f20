"""Repository layer for database operations with SQLAlchemy 2.0 best practices."""

from collections.abc import Callable, Mapping
from typing import Any, ClassVar, Protocol
from uuid import UUID

from attrs import define
from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from rating_system.config import get_logger
from rating_system.domain.errors import NotFoundError
from rating_system.domain.pagination import (
    DEFAULT_SORT_FIELD,
    Page,
    PageParams,
    resolve_sort_field,
)
from rating_system.infrastructure.persistence.backends import SQLBackend
from rating_system.infrastructure.persistence.database.db_models import (
    RatingSystemDBBase,
)

logger = get_logger(__name__)


class ModelMapper[TDBModel: RatingSystemDBBase, TDomainModel](Protocol):
    """Protocol for bidirectional mapping between models."""

    @staticmethod
    def to_domain(db_model: TDBModel) -> TDomainModel:
        """Convert database model to domain model."""
        ...

    @staticmethod
    def to_db(domain_model: TDomainModel) -> TDBModel:
        """Convert domain model to database model."""
        ...

    @staticmethod
    def to_values(domain_model: TDomainModel) -> dict[str, Any]:
        """Column values for core INSERT statements."""
        ...


@define(frozen=True, slots=True)
class BaseModelMapper[TDBModel: RatingSystemDBBase, TDomainModel]:
    """Base implementation of ModelMapper with common functionality.

    Usage:
        @define(frozen=True, slots=True)
        class CommentMapper(BaseModelMapper[DBComment, Comment]):
            @staticmethod
            def to_domain(db_model: DBComment) -> Comment:
                return Comment(...)

            @staticmethod
            def to_values(domain_model: Comment) -> dict[str, Any]:
                return {...}
    """

    @staticmethod
    def to_domain(db_model: TDBModel) -> TDomainModel:
        raise NotImplementedError("Subclasses must implement to_domain")

    @staticmethod
    def to_values(domain_model: TDomainModel) -> dict[str, Any]:
        raise NotImplementedError("Subclasses must implement to_values")

    @classmethod
    def to_db(cls, domain_model: TDomainModel) -> TDBModel:
        """Build an ORM row from the column values of a domain model."""
        model_class = cls.model_class()
        return model_class(**cls.to_values(domain_model))

    @staticmethod
    def model_class() -> type[TDBModel]:
        raise NotImplementedError("Subclasses must implement model_class")

    @classmethod
    def map_collection(cls, db_models: list[TDBModel]) -> list[TDomainModel]:
        """Map a collection of DB models to domain models.

        Uses cls.to_domain to ensure the subclass implementation is called,
        not BaseModelMapper.to_domain directly.
        """
        return [cls.to_domain(db_model) for db_model in db_models]


class BaseRepository[TDBModel: RatingSystemDBBase, TDomainModel]:
    """Base repository for database operations with SQLAlchemy 2.0 best practices.

    Subclasses set ``entity_name`` (used in error messages) and, when their
    rows reference a parent, ``parent_entity``.
    """

    entity_name: ClassVar[str] = "record"
    parent_entity: ClassVar[str | None] = None

    def __init__(
        self,
        session: AsyncSession,
        backend: SQLBackend,
        model_class: type[TDBModel],
        mapper: ModelMapper[TDBModel, TDomainModel],
    ) -> None:
        """Initialize repository with session, dialect backend and model mappings."""
        self.session = session
        self.backend = backend
        self.model_class = model_class
        self.mapper = mapper
        logger.trace(
            f"Initialized {self.__class__.__name__} for {model_class.__name__} on {backend.name}",
        )

    # -------------------------------------------------------------------------
    # SELECT STATEMENT BUILDERS
    # -------------------------------------------------------------------------

    def select(self, *columns: Any) -> Select[Any]:
        """Create select statement that always refreshes identity-mapped rows."""
        stmt = select(*columns) if columns else select(self.model_class)
        return stmt.execution_options(populate_existing=True)

    def select_by_id(self, id_: UUID) -> Select[Any]:
        """Create select statement for a record by ID."""
        return self.select().where(self.model_class.id == id_)

    def count(self, conditions: list[ColumnElement[bool]]) -> Select[tuple[int]]:
        """Create a count statement for records matching conditions."""
        stmt = select(func.count(self.model_class.id))
        for condition in conditions:
            stmt = stmt.where(condition)
        return stmt

    def paginate(self, stmt: Select[Any], params: PageParams) -> Select[Any]:
        """Add limit and offset to a select statement."""
        return stmt.offset(params.offset).limit(params.limit)

    def order_by(
        self,
        stmt: Select[Any],
        params: PageParams,
        sort_columns: Mapping[str, ColumnElement[Any]],
        default_descending: bool = True,
    ) -> Select[Any]:
        """Add allow-listed ordering with ``id`` as a deterministic tie-breaker.

        Without a sort field the entity's default order on created_at applies.
        With one, the field is resolved through ``sort_columns`` (unknown names
        fall back to created_at) and the requested direction is used.
        """
        if params.has_sort:
            field = resolve_sort_field(params.sort_by, frozenset(sort_columns))
            descending = params.descending
        else:
            field = DEFAULT_SORT_FIELD
            descending = default_descending

        column = sort_columns[field]
        tiebreak = self.model_class.id
        if descending:
            return stmt.order_by(column.desc(), tiebreak.desc())
        return stmt.order_by(column.asc(), tiebreak.asc())

    def sort_columns(self, fields: frozenset[str]) -> dict[str, ColumnElement[Any]]:
        """Resolve allow-listed field names to this model's columns."""
        return {field: getattr(self.model_class, field) for field in fields}

    # -------------------------------------------------------------------------
    # DIRECT DATABASE OPERATIONS (non-decorated helpers)
    # -------------------------------------------------------------------------

    async def _execute_query(self, stmt: Select[Any]) -> list[TDBModel]:
        """Execute a query and return all results directly."""
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def _execute_query_one(self, stmt: Select[Any]) -> TDBModel | None:
        """Execute a query and return the first result directly."""
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _execute_scalar(self, stmt: Select[Any]) -> Any:
        """Execute a scalar query and return the first result."""
        return await self.session.scalar(stmt)

    async def _find_one(
        self, conditions: list[ColumnElement[bool]], key: Any
    ) -> TDomainModel:
        """Fetch exactly one row or raise NotFoundError naming ``key``."""
        stmt = self.select()
        for condition in conditions:
            stmt = stmt.where(condition)
        db_entity = await self._execute_query_one(stmt)
        if db_entity is None:
            raise NotFoundError(self.entity_name, key)
        return self.mapper.to_domain(db_entity)

    async def _insert(self, domain_model: TDomainModel) -> TDomainModel:
        """Add a new row and flush so constraint violations surface here."""
        db_entity = self.mapper.to_db(domain_model)
        self.session.add(db_entity)
        await self.session.flush()
        return self.mapper.to_domain(db_entity)

    async def _update_values(self, id_: UUID, values: dict[str, Any]) -> None:
        """UPDATE one row by id. Raises NotFoundError when nothing matched."""
        stmt = (
            update(self.model_class)
            .where(self.model_class.id == id_)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError(self.entity_name, id_)

    async def _list_page[TItem](
        self,
        stmt: Select[Any],
        conditions: list[ColumnElement[bool]],
        params: PageParams,
        map_row: Callable[[Any], TItem],
    ) -> Page[TItem]:
        """Run the COUNT and the page query for the same predicate.

        ``stmt`` must already carry the conditions and ordering. ``map_row``
        receives each result row.
        """
        total = await self._execute_scalar(self.count(conditions)) or 0
        if params.offset >= total:
            return Page(items=[], total=total, params=params)

        result = await self.session.execute(self.paginate(stmt, params))
        items = [map_row(row) for row in result.all()]
        return Page(items=items, total=total, params=params)
