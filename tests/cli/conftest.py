"""CLI fixtures - every invocation gets its own database file and log file."""

from loguru import logger
import pytest
from typer.testing import CliRunner


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture(autouse=True)
def cli_environment(monkeypatch, tmp_path, cli_database_url):
    """Point the CLI at temporary storage and restore loguru afterwards."""
    monkeypatch.setenv("RATING_SYSTEM_DATABASE__URL", cli_database_url)
    monkeypatch.setenv("RATING_SYSTEM_LOGGING__LOG_FILE", str(tmp_path / "logs" / "cli.log"))
    monkeypatch.setenv("RATING_SYSTEM_LOGGING__CONSOLE_LEVEL", "WARNING")
    yield
    # The app callback replaces the global handlers
    logger.remove()
