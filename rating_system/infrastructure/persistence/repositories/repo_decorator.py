"""Repository decorator for standardizing DB operations.

This module provides the decorator applied to every public repository method.
It handles:
- Structured logging with identifier context and timing information
- Translation of SQLAlchemy errors into the domain error taxonomy
- Pass-through of domain errors raised by the repository itself

Integrity errors are classified by the repository's ``backend`` so that the
vendor-specific signal never leaves the persistence layer.
"""

import asyncio
from collections.abc import Callable, Coroutine
import functools
import inspect
import time
from typing import Any, ParamSpec, TypeVar

from sqlalchemy.exc import (
    IntegrityError,
    NoResultFound,
    OperationalError,
    SQLAlchemyError,
    TimeoutError,
)

from rating_system.config import build_log_context, get_logger
from rating_system.domain.errors import (
    ConflictError,
    NotFoundError,
    RatingSystemError,
    StorageError,
)
from rating_system.infrastructure.persistence.backends import IntegrityViolation

# Type variables for generic function signatures
P = ParamSpec("P")
T = TypeVar("T")

# Initialize logger
logger = get_logger(__name__)


def db_operation(operation_name: str | None = None):
    """Decorate repository methods with consistent logging and error handling.

    The decorated method's ``self`` must expose ``backend`` (a SQLBackend)
    and ``entity_name``. Repositories with a parent row also set
    ``parent_entity`` so foreign key violations name what is missing.

    Args:
        operation_name: Optional name for the operation (defaults to function name)

    Returns:
        A decorator function that wraps async repository methods

    Example:
        @db_operation("get_rating_by_id")
        async def get_rating_by_id(self, rating_id: UUID) -> Rating:
            ...
    """

    def decorator(
        func: Callable[P, Coroutine[Any, Any, T]],
    ) -> Callable[P, Coroutine[Any, Any, T]]:
        """Wrap an async repository method with logging, timing and error handling."""
        func_name = operation_name or func.__name__

        if not asyncio.iscoroutinefunction(func):
            raise TypeError(
                f"db_operation can only be used with async functions, but {func_name} is not async",
            )

        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            """Execute the repository method with logging and error handling."""
            start_time = time.perf_counter()

            # Extract repository from first argument (self)
            repo = args[0] if args else None
            repo_name = repo.__class__.__name__ if repo is not None else "Repository"
            entity_name = getattr(repo, "entity_name", "record")

            # Build context for logging
            context = build_log_context(signature, args, kwargs)

            try:
                logger.trace(
                    f"DB operation starting: {repo_name}.{func_name}",
                    operation=func_name,
                    **context,
                )

                result = await func(*args, **kwargs)

                exec_time = (time.perf_counter() - start_time) * 1000
                logger.trace(
                    f"DB operation completed: {repo_name}.{func_name}",
                    operation=func_name,
                    exec_time_ms=exec_time,
                    **context,
                )

                return result

            except NotFoundError as e:
                # Expected outcome for point lookups
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    f"DB record not found: {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise

            except RatingSystemError:
                raise

            except NoResultFound as e:
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.debug(
                    f"DB record not found: {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise NotFoundError(entity_name, _primary_key(context)) from e

            except IntegrityError as e:
                # Handle constraint violations and other integrity errors
                exec_time = (time.perf_counter() - start_time) * 1000
                backend = getattr(repo, "backend", None)
                violation = (
                    backend.classify(e)
                    if backend is not None
                    else IntegrityViolation.OTHER
                )
                logger.warning(
                    f"DB integrity error: {repo_name}.{func_name}",
                    operation=func_name,
                    violation=str(violation),
                    backend=getattr(backend, "name", "unknown"),
                    error=str(e.orig),
                    exec_time_ms=exec_time,
                    **context,
                )
                match violation:
                    case IntegrityViolation.UNIQUE:
                        raise ConflictError(f"{entity_name} already exists") from e
                    case IntegrityViolation.FOREIGN_KEY:
                        parent = getattr(repo, "parent_entity", None) or "referenced row"
                        raise NotFoundError(
                            parent, context.get(f"{parent}_id", _parent_key(args, parent))
                        ) from e
                    case _:
                        raise StorageError(
                            f"{repo_name}.{func_name} violated a constraint"
                        ) from e

            except (TimeoutError, OperationalError) as e:
                # Handle connection/operational errors and pool timeouts
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"DB operational error: {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise StorageError(f"{repo_name}.{func_name} failed: database unavailable") from e

            except SQLAlchemyError as e:
                # Handle any other SQLAlchemy-specific errors
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"SQLAlchemy error: {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise StorageError(f"{repo_name}.{func_name} failed") from e

            except ConnectionError as e:
                # Driver-level socket failures not wrapped by SQLAlchemy
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.error(
                    f"DB connection error: {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise StorageError(f"{repo_name}.{func_name} failed: connection lost") from e

            except Exception as e:
                # Handle unexpected errors
                exec_time = (time.perf_counter() - start_time) * 1000
                logger.exception(
                    f"Unhandled exception in {repo_name}.{func_name}",
                    operation=func_name,
                    error=str(e),
                    exec_time_ms=exec_time,
                    **context,
                )
                raise

        return wrapper

    return decorator


def _primary_key(context: dict[str, Any]) -> Any:
    """Best identifier available for a not-found message."""
    for key, value in context.items():
        if key.endswith("_id"):
            return value
    return None


def _parent_key(args: tuple[Any, ...], parent: str) -> Any:
    """Foreign key value of the entity being written, if one was passed."""
    attribute = f"{parent}_id"
    for arg in args[1:]:
        value = getattr(arg, attribute, None)
        if value is not None:
            return value
    return None
