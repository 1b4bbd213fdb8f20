"""Smoke tests for CLI command structure."""

from rating_system import __version__
from rating_system.infrastructure.cli.app import app


class TestCommandStructure:
    """Every command is registered and documents itself."""

    def test_main_help_lists_commands(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("init-db", "rate", "average", "reviews", "comments", "version"):
            assert command in result.stdout

    def test_version_command(self, runner):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "Rating system" in result.stdout
        assert __version__ in result.stdout

    def test_list_commands_document_paging_options(self, runner):
        for command in ("reviews", "comments"):
            result = runner.invoke(app, [command, "--help"])

            assert result.exit_code == 0
            assert "--page" in result.stdout
            assert "--sort-by" in result.stdout

    def test_rate_requires_arguments(self, runner):
        result = runner.invoke(app, ["rate"])
        assert result.exit_code != 0
