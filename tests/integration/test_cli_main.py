#!/usr/bin/env python3
"""
Integration tests for CLI Main Entry Point

Tests end-to-end CLI command execution with real command invocation.
"""

import pytest
from click.testing import CliRunner

from income_analytics.cli.main import main


@pytest.mark.integration
class TestCLIMainIntegration:
    """Test main CLI entry point with real command execution."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_help_lists_analytics_group(self):
        """Test --help shows the registered subcommands."""
        result = self.runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "Income Analytics" in result.output
        for command in ["analytics", "config", "version"]:
            assert command in result.output

    def test_analytics_help_lists_reports(self):
        result = self.runner.invoke(main, ["analytics", "--help"])

        assert result.exit_code == 0
        for command in [
            "daily-rate",
            "compare",
            "distribution",
            "top",
            "trend",
            "stream-trends",
            "seasonality",
            "project",
            "monte-carlo",
            "time-series",
            "stacked",
            "summary",
        ]:
            assert command in result.output

    def test_version_command_shows_version_info(self):
        """Test version displays version and author."""
        result = self.runner.invoke(main, ["version"])

        assert result.exit_code == 0
        assert "Income Analytics v" in result.output
        assert "Author:" in result.output

    def test_config_command_shows_configuration(self):
        """Test config displays current configuration."""
        result = self.runner.invoke(main, ["config"])

        assert result.exit_code == 0
        assert "Current Configuration:" in result.output
        assert "Environment: test" in result.output
        assert "Streams File:" in result.output
        assert "Simulations: 10000" in result.output
        assert "Log Level:" in result.output

    def test_verbose_flag_prints_environment(self):
        result = self.runner.invoke(main, ["--verbose", "config"])

        assert result.exit_code == 0
        assert "Environment: test" in result.output
        assert "Data directory:" in result.output

    def test_invalid_command_shows_error(self):
        """Test an unknown command exits non-zero."""
        result = self.runner.invoke(main, ["nonexistent"])

        assert result.exit_code != 0
        assert "No such command" in result.output
