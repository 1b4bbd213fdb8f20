"""Logging configuration and utilities using Loguru.

This module provides centralized logging setup for the rating system,
including structured logging with Loguru, a context builder shared by the
repository and service decorators, and the service boundary decorator.

Public API:
----------
setup_loguru_logger(settings: Settings | None = None, verbose: bool = False) -> None
    Configure Loguru logger for the application

get_logger(name: str) -> Logger
    Get a context-aware logger for your module
    Usage: logger = get_logger(__name__)

log_startup_info(settings: Settings) -> None
    Log configuration at startup

build_log_context(signature, args, kwargs) -> dict
    Extract loggable identifiers from a call

@resilient_operation(operation_name: str)
    Decorator for service operations: logs failures with context and re-raises

Quick Start:
-----------
1. Get a logger for your module:
    ```python
    from rating_system.config import get_logger
    logger = get_logger(__name__)
    ```

2. Log with structured context:
    ```python
    logger.info("Rating stored", rating_id=str(rating.id))
    ```
"""

from collections.abc import Awaitable, Callable
import functools
import inspect
from pathlib import Path
import sys
from typing import Any
from uuid import UUID

from loguru import logger
from sqlalchemy.engine import make_url

from rating_system.domain.errors import (
    NotFoundError,
    RatingSystemError,
    StorageError,
)

from .settings import Settings, load_settings

SERVICE_NAME = "rating-system"

# Never copy these argument values into log records
_REDACTED_ARGUMENTS = frozenset({"password", "old_password", "new_password"})
_MAX_LOGGED_TEXT = 80

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================


def setup_loguru_logger(settings: Settings | None = None, verbose: bool = False) -> None:
    """Configure Loguru logger for the application.

    Args:
        settings: Application settings (loaded from the environment if omitted)
        verbose: Enable debug level console output and detailed tracebacks

    Note:
        - Removes default logger and sets up console and file handlers
        - Console format is colorized and simplified
        - File format is serialized JSON with rotation and retention
    """
    settings = settings or load_settings()

    logger.remove()
    logger.configure(extra={"service": SERVICE_NAME, "module": "root"})

    console_level = "DEBUG" if verbose else settings.logging.console_level
    logger.add(
        sink=sys.stderr,
        level=console_level,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:"
            "<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=verbose,
        diagnose=verbose,
    )

    log_file = settings.logging.log_file
    if log_file is None:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        sink=str(log_file),
        level=settings.logging.file_level,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[service]} | {extra[module]} | {name}:{function}:{line} | {message}",
        rotation="10 MB",
        retention="1 week",
        compression="zip",
        backtrace=True,
        diagnose=False,  # locals may hold password hashes
        catch=True,
        serialize=settings.logging.serialize,
    )


# =============================================================================
# LOGGER FACTORY
# =============================================================================


def get_logger(name: str) -> Any:  # Use Any for Loguru logger type
    """Get a logger bound to the given module name.

    Args:
        name: Module name (typically __name__)

    Returns:
        Loguru logger with ``module`` and ``service`` context
    """
    return logger.bind(module=name, service=SERVICE_NAME)


# =============================================================================
# STARTUP LOGGING
# =============================================================================


def log_startup_info(settings: Settings) -> None:
    """Log configuration on startup, one debug line per setting."""
    local_logger = get_logger(__name__)
    local_logger.info("Starting rating system")

    for section_name, section_values in settings.model_dump().items():
        local_logger.debug("  {}:", section_name.upper())
        for key, value in section_values.items():
            if key == "url":
                value = _mask_url(value)
            local_logger.debug("    {}: {}", key.upper(), value)


def _mask_url(url: str) -> str:
    """Hide the password part of a database URL."""
    return make_url(url).render_as_string(hide_password=True)


# =============================================================================
# LOG CONTEXT
# =============================================================================


def build_log_context(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Build a context dictionary for logging from a call's arguments.

    Identifiers are rendered as strings, entities are reduced to their ``id``,
    scalars are kept, long text is truncated and passwords are dropped.
    """
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return {}

    context: dict[str, Any] = {}
    for name, value in bound.arguments.items():
        if name in {"self", "cls"} or name.startswith("_"):
            continue
        if name in _REDACTED_ARGUMENTS:
            continue

        match value:
            case UUID():
                context[name] = str(value)
            case bool() | int() | float():
                context[name] = value
            case str():
                context[name] = value[:_MAX_LOGGED_TEXT]
            case _ if isinstance(getattr(value, "id", None), UUID):
                context[f"{name}_id"] = str(value.id)

    return context


# =============================================================================
# ERROR HANDLING DECORATORS
# =============================================================================


def resilient_operation[**P, R](
    operation_name: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator for service boundary operations with standardized logging.

    Domain errors are logged at a level matching their severity and re-raised
    unchanged; nothing is retried or swallowed.

    Args:
        operation_name: Optional name for the operation (defaults to function name)

    Example:
        >>> @resilient_operation("create_rating")
        >>> async def create_rating(self, user_id, service_id, score):
        >>>     ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        op_name = operation_name or func.__name__
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return await func(*args, **kwargs)
            except StorageError as e:
                context = build_log_context(signature, args, kwargs)
                logger.bind(operation=op_name, **context).error(
                    f"Storage failure in {op_name}: {e!s}"
                )
                raise
            except NotFoundError as e:
                context = build_log_context(signature, args, kwargs)
                logger.bind(operation=op_name, **context).debug(
                    f"{op_name}: {e!s}"
                )
                raise
            except RatingSystemError as e:
                context = build_log_context(signature, args, kwargs)
                logger.bind(operation=op_name, kind=str(e.kind), **context).info(
                    f"{op_name} rejected: {e!s}"
                )
                raise
            except Exception:
                logger.bind(operation=op_name).exception(f"Error in {op_name}")
                raise

        return wrapper

    return decorator
