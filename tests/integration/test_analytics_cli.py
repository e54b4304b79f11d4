#!/usr/bin/env python3
"""
Integration tests for the analytics report commands.

Each test writes a synthetic streams file and runs a command against it
through --streams-file.
"""

import json
import shutil
import tempfile
from datetime import date
from pathlib import Path

import pytest
from click.testing import CliRunner

from income_analytics.cli.main import main
from income_analytics.core.models import FixedPeriod, StreamType

from tests.fixtures.synthetic_data import make_stream, monthly_points, write_streams_file


def _streams():
    salary = make_stream(
        "salary",
        [(date(2024, 1, 5), 100.0), (date(2024, 1, 15), 100.0), (date(2024, 1, 25), 100.0)],
    )
    rent = make_stream(
        "rent",
        [(date(2024, 1, 10), 40.0), (date(2024, 1, 20), 40.0)],
        category="Housing",
        stream_type=StreamType.OUTCOME,
        provider_id="provider-exchange",
    )
    pension = make_stream(
        "pension",
        monthly_points(date(2023, 7, 1), [500.0] * 6),
        category="Pension",
        is_fixed=True,
        fixed_period=FixedPeriod.MONTHLY,
    )
    return [salary, rent, pension]


@pytest.mark.integration
class TestAnalyticsCLI:
    """Test analytics commands end to end."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()
        self.temp_dir = Path(tempfile.mkdtemp())
        self.streams_file = write_streams_file(self.temp_dir / "streams.json", _streams())

    def teardown_method(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def invoke(self, *args: str):
        return self.runner.invoke(main, ["analytics", "--streams-file", str(self.streams_file), *args])

    def test_daily_rate(self):
        """Test the net-flow daily rate headline."""
        result = self.invoke("daily-rate", "--days", "30", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Average: $7.33/day" in result.output
        assert "Total: $220.00 over 30 days" in result.output

    def test_daily_rate_income_only(self):
        result = self.invoke("daily-rate", "--stream-type", "income", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Average: $10.00/day" in result.output

    def test_daily_rate_writes_json_report(self):
        output = self.temp_dir / "reports" / "daily.json"

        result = self.invoke("daily-rate", "--today", "2024-01-30", "--output", str(output))

        assert result.exit_code == 0, result.output
        assert f"Report saved to: {output}" in result.output
        payload = json.loads(output.read_text())
        assert payload["success"] is True
        assert payload["value"]["average_daily_usd"] == 7.33
        assert payload["value"]["from_date"] == "2024-01-01"

    def test_invalid_date_is_rejected(self):
        result = self.invoke("daily-rate", "--today", "30/01/2024")

        assert result.exit_code != 0
        assert "YYYY-MM-DD" in result.output

    def test_invalid_parameter_fails_with_kind(self):
        result = self.invoke("daily-rate", "--days", "0", "--today", "2024-01-30")

        assert result.exit_code == 1
        assert "invalid_parameter" in result.output

    def test_missing_streams_file_is_upstream_failure(self):
        result = self.runner.invoke(
            main, ["analytics", "--streams-file", str(self.temp_dir / "absent.json"), "summary"]
        )

        assert result.exit_code == 1
        assert "upstream_failure" in result.output

    def test_compare(self):
        result = self.invoke("compare", "--type", "MoM", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "MoM comparison (equivalent)" in result.output
        assert "Current:  2024-01-01 to 2024-01-30: $220.00" in result.output

    def test_distribution(self):
        result = self.invoke("distribution", "--group-by", "category", "--stream-type", "income")

        assert result.exit_code == 0, result.output
        assert "Distribution by category: $3,300.00" in result.output
        assert "Pension: $3,000.00" in result.output

    def test_top(self):
        result = self.invoke("top", "--limit", "2")

        assert result.exit_code == 0, result.output
        assert "1. Pension (Test Employer): $3,000.00" in result.output
        assert "2. Salary" in result.output

    def test_trend(self):
        result = self.invoke("trend", "--period", "monthly", "--stream", "pension", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Trend (monthly): Stable, 0.0% overall" in result.output
        assert "2023-08-01: $500.00" in result.output

    def test_stream_trends(self):
        result = self.invoke("stream-trends", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Growing: 2" in result.output

    def test_seasonality(self):
        result = self.invoke("seasonality", "--months-back", "12", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Days analyzed: 11" in result.output

    def test_project(self):
        result = self.invoke("project", "--months", "3", "--today", "2024-01-30")

        assert result.exit_code == 0, result.output
        assert "Fixed: $500.00" in result.output
        assert "2024-02-01:" in result.output

    def test_monte_carlo_with_seed_is_reproducible(self):
        args = ("monte-carlo", "--simulations", "500", "--months", "6", "--goal", "5000", "--seed", "42")

        first = self.invoke(*args, "--today", "2024-01-30")
        second = self.invoke(*args, "--today", "2024-01-30")

        assert first.exit_code == 0, first.output
        assert "500 simulations over 6 months" in first.output
        assert "Probability of reaching $5,000.00" in first.output
        assert first.output == second.output

    def test_monte_carlo_without_goal(self):
        result = self.invoke("monte-carlo", "--simulations", "200", "--months", "3", "--seed", "1")

        assert result.exit_code == 0, result.output
        assert "200 simulations over 3 months" in result.output
        assert "Probability of reaching" not in result.output

    def test_time_series_requires_dates(self):
        result = self.invoke("time-series", "--start", "2024-01-01")

        assert result.exit_code != 0
        assert "--end" in result.output

    def test_time_series(self):
        result = self.invoke(
            "time-series", "--start", "2024-01-01", "--end", "2024-01-31", "--stream", "salary"
        )

        assert result.exit_code == 0, result.output
        assert "2024-01-05: $100.00 (1 snapshots)" in result.output
        assert "Total: $300.00" in result.output

    def test_stacked(self):
        result = self.invoke("stacked", "--periods-back", "1", "--today", "2024-01-31")

        assert result.exit_code == 0, result.output
        assert "2024-01-01: $220.00" in result.output
        assert "Rent: -$80.00" in result.output

    def test_summary(self):
        result = self.invoke("summary", "--today", "2024-02-10")

        assert result.exit_code == 0, result.output
        assert "Streams: 3 (3 active)" in result.output
        assert "Fixed monthly: $500.00" in result.output
        assert "Variable last month: $220.00" in result.output
        assert "History: 2023-07-01 to 2024-01-25" in result.output
