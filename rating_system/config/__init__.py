"""Configuration module for the rating system.

Public API:
----------
load_settings(**overrides) -> Settings
    Build settings from the environment plus explicit overrides

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(settings: Settings | None = None, verbose: bool = False) -> None
    Configure Loguru logger for the application

resilient_operation(operation_name: str)
    Decorator for service operations: logs failures with context and re-raises

log_startup_info(settings: Settings) -> None
    Log configuration at startup

Usage:
------
```python
from rating_system.config import get_logger, load_settings

settings = load_settings()
logger = get_logger(__name__)
logger.info("Starting operation")
```
"""

from .logging import (
    build_log_context,
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import (
    DatabaseConfig,
    LoggingConfig,
    ServiceConfig,
    Settings,
    load_settings,
)

__all__ = [
    # Settings
    "DatabaseConfig",
    "LoggingConfig",
    "ServiceConfig",
    "Settings",
    # Logging
    "build_log_context",
    "get_logger",
    "load_settings",
    "log_startup_info",
    "resilient_operation",
    "setup_loguru_logger",
]
