#!/usr/bin/env python3
"""
Analytics CLI - Report Commands

One command per report. Every command reads the configured streams file
(or --streams-file), prints the headline figures and can write the full
JSON payload with --output.
"""

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any, TypeVar

import click

from ..analysis import AnalyticsEngine
from ..core.config import get_config
from ..core.currency import format_usd
from ..core.datastore import JsonStreamStore
from ..core.dates import parse_iso_date
from ..core.json_utils import write_json
from ..core.results import ReportResult

T = TypeVar("T")

STREAM_TYPES = ["income", "outcome"]


def _parse_date(value: str | None, option: str) -> date | None:
    try:
        return parse_iso_date(value)
    except ValueError as e:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option) from e


def _engine(ctx: click.Context) -> AnalyticsEngine:
    config = get_config()
    streams_file = ctx.obj.get("streams_file") or config.data.streams_file
    return AnalyticsEngine.from_config(config, JsonStreamStore(Path(streams_file)))


def _unwrap(result: ReportResult[T], output: str | None) -> T:
    """Return the payload, writing it to --output; failures become ClickExceptions."""
    if result.is_failed:
        raise click.ClickException(f"{result.error_kind.value if result.error_kind else 'error'}: {result.error_message}")
    if output:
        write_json(output, result.to_dict())
        click.echo(f"Report saved to: {output}")
    return result.unwrap()


def output_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option("--output", "-o", help="Write the full JSON report to this file")(func)


def today_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option("--today", help="Evaluate as of this date (YYYY-MM-DD), defaults to today")(func)


def stream_type_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--stream-type",
        type=click.Choice(STREAM_TYPES, case_sensitive=False),
        help="Only income or only outcome streams (default: net flow)",
    )(func)


@click.group()
@click.option("--streams-file", type=click.Path(dir_okay=False), help="Override the streams JSON file")
@click.pass_context
def analytics(ctx: click.Context, streams_file: str | None) -> None:
    """Income and expense analytics reports."""
    ctx.ensure_object(dict)
    ctx.obj["streams_file"] = streams_file


@analytics.command("daily-rate")
@click.option("--days", default=30, show_default=True, help="Trailing window in days")
@click.option("--provider", help="Only streams of this provider")
@stream_type_option
@today_option
@output_option
@click.pass_context
def daily_rate_command(
    ctx: click.Context, days: int, provider: str | None, stream_type: str | None, today: str | None, output: str | None
) -> None:
    """
    Average daily flow over a trailing window.

    Examples:
      income-analytics analytics daily-rate --days 30
      income-analytics analytics daily-rate --stream-type income --today 2024-01-30
    """
    report = _unwrap(
        _engine(ctx).daily_rate(days, stream_type, provider, today=_parse_date(today, "--today")), output
    )
    click.echo(f"Daily rate {report.from_date} to {report.to_date}")
    click.echo(f"   Average: {format_usd(report.average_daily_usd)}/day")
    click.echo(f"   Median: {format_usd(report.median_daily_usd)}/day")
    click.echo(f"   Total: {format_usd(report.total_usd)} over {report.days_analyzed} days")
    click.echo(f"   Std dev: {format_usd(report.stdev_usd)} (CV {report.coefficient_of_variation})")


@analytics.command("compare")
@click.option("--type", "comparison_type", default="MoM", show_default=True, help="MoM, WoW, QoQ or YoY")
@click.option("--reference", help="Reference date (YYYY-MM-DD), defaults to today")
@click.option(
    "--mode",
    type=click.Choice(["auto", "equivalent", "complete"]),
    default="auto",
    show_default=True,
    help="Window alignment",
)
@stream_type_option
@today_option
@output_option
@click.pass_context
def compare_command(
    ctx: click.Context,
    comparison_type: str,
    reference: str | None,
    mode: str,
    stream_type: str | None,
    today: str | None,
    output: str | None,
) -> None:
    """Compare the current period with the previous one."""
    report = _unwrap(
        _engine(ctx).period_comparison(
            comparison_type,
            _parse_date(reference, "--reference"),
            mode,
            stream_type,
            today=_parse_date(today, "--today"),
        ),
        output,
    )
    current, previous = report.current_period, report.previous_period
    click.echo(f"{report.comparison_type} comparison ({report.mode})")
    click.echo(f"   Current:  {current.start_date} to {current.end_date}: {format_usd(current.total_usd)}")
    click.echo(f"   Previous: {previous.start_date} to {previous.end_date}: {format_usd(previous.total_usd)}")
    click.echo(f"   Change: {format_usd(report.change_usd)} ({report.change_pct}%) {report.trend.value}")


@analytics.command("distribution")
@click.option("--group-by", default="category", show_default=True, help="category, provider, stream or currency")
@click.option("--start", help="Start date (YYYY-MM-DD)")
@click.option("--end", help="End date (YYYY-MM-DD)")
@stream_type_option
@output_option
@click.pass_context
def distribution_command(
    ctx: click.Context,
    group_by: str,
    start: str | None,
    end: str | None,
    stream_type: str | None,
    output: str | None,
) -> None:
    """Share of flow per group."""
    report = _unwrap(
        _engine(ctx).distribution(
            group_by, _parse_date(start, "--start"), _parse_date(end, "--end"), stream_type
        ),
        output,
    )
    click.echo(f"Distribution by {report.group_by.value}: {format_usd(report.total_usd)}")
    for item in report.items:
        click.echo(f"   {item.label}: {format_usd(item.amount_usd)} ({item.percentage}%)")


@analytics.command("top")
@click.option("--limit", "top_n", default=10, show_default=True, help="Number of streams")
@click.option("--start", help="Start date (YYYY-MM-DD)")
@click.option("--end", help="End date (YYYY-MM-DD)")
@stream_type_option
@output_option
@click.pass_context
def top_command(
    ctx: click.Context, top_n: int, start: str | None, end: str | None, stream_type: str | None, output: str | None
) -> None:
    """Highest-earning streams."""
    report = _unwrap(
        _engine(ctx).top_performers(top_n, _parse_date(start, "--start"), _parse_date(end, "--end"), stream_type),
        output,
    )
    for item in report.items:
        click.echo(
            f"   {item.rank}. {item.stream_name} ({item.provider_name}): "
            f"{format_usd(item.total_usd)} ({item.percentage}%)"
        )
    click.echo(f"Total: {format_usd(report.total_usd)}")


@analytics.command("trend")
@click.option("--period", default="monthly", show_default=True, help="daily, weekly, monthly, quarterly or yearly")
@click.option("--periods-back", default=12, show_default=True, help="Number of periods to include")
@click.option("--stream", "stream_id", help="Only this stream")
@click.option("--category", help="Only this category")
@stream_type_option
@today_option
@output_option
@click.pass_context
def trend_command(
    ctx: click.Context,
    period: str,
    periods_back: int,
    stream_id: str | None,
    category: str | None,
    stream_type: str | None,
    today: str | None,
    output: str | None,
) -> None:
    """Trend line with growth and direction."""
    report = _unwrap(
        _engine(ctx).trend(
            period, periods_back, stream_id, category, stream_type, today=_parse_date(today, "--today")
        ),
        output,
    )
    click.echo(f"Trend ({report.period.value}): {report.direction.value}, {report.growth_rate_pct}% overall")
    for point in report.points:
        click.echo(f"   {point.date}: {format_usd(point.amount_usd)}")
    click.echo(f"Average growth per period: {format_usd(report.average_growth_per_period_usd)}")


@analytics.command("stream-trends")
@click.option("--type", "comparison_type", default="MoM", show_default=True, help="MoM, WoW, QoQ or YoY")
@stream_type_option
@today_option
@output_option
@click.pass_context
def stream_trends_command(
    ctx: click.Context, comparison_type: str, stream_type: str | None, today: str | None, output: str | None
) -> None:
    """Growing, declining and stable streams."""
    report = _unwrap(
        _engine(ctx).stream_trends(comparison_type, stream_type, today=_parse_date(today, "--today")), output
    )
    click.echo(
        f"Growing: {report.growing_count}  Declining: {report.declining_count}  Stable: {report.stable_count}"
    )
    for item in report.streams:
        click.echo(f"   {item.stream_name}: {item.direction.value} ({item.change_pct}%)")


@analytics.command("seasonality")
@click.option("--months-back", default=12, show_default=True, help="Lookback window in months")
@stream_type_option
@today_option
@output_option
@click.pass_context
def seasonality_command(
    ctx: click.Context, months_back: int, stream_type: str | None, today: str | None, output: str | None
) -> None:
    """Weekday and month-of-year patterns."""
    report = _unwrap(
        _engine(ctx).seasonality(months_back, stream_type, today=_parse_date(today, "--today")), output
    )
    click.echo(f"Days analyzed: {report.total_days_analyzed}")
    click.echo(f"   Best day: {report.best_day.name} ({format_usd(report.best_day.average_usd)})")
    click.echo(f"   Worst day: {report.worst_day.name} ({format_usd(report.worst_day.average_usd)})")
    click.echo(f"   Best month: {report.best_month.name} ({format_usd(report.best_month.average_usd)})")
    click.echo(f"   Worst month: {report.worst_month.name} ({format_usd(report.worst_month.average_usd)})")


@analytics.command("project")
@click.option("--months", "months_ahead", default=12, show_default=True, help="Months to project")
@click.option("--stream-type", type=click.Choice(STREAM_TYPES, case_sensitive=False), default="income")
@today_option
@output_option
@click.pass_context
def project_command(
    ctx: click.Context, months_ahead: int, stream_type: str, today: str | None, output: str | None
) -> None:
    """Deterministic projection with confidence bands."""
    report = _unwrap(
        _engine(ctx).projection(months_ahead, stream_type, today=_parse_date(today, "--today")), output
    )
    click.echo(f"Projected monthly: {format_usd(report.projected_monthly_usd)}")
    click.echo(f"   Fixed: {format_usd(report.fixed_component_usd)}")
    click.echo(f"   Variable: {format_usd(report.variable_component_usd)}")
    click.echo(f"Projected annual: {format_usd(report.projected_annual_usd)}")
    click.echo(f"Confidence: {report.confidence_score * 100:.0f}%")
    for point in report.monthly_projections:
        click.echo(
            f"   {point.month}: {format_usd(point.projected_usd)} "
            f"[{format_usd(point.lower_bound_usd)} - {format_usd(point.upper_bound_usd)}]"
        )


@analytics.command("monte-carlo")
@click.option("--simulations", type=int, help="Number of simulated paths (default from configuration)")
@click.option("--months", "months_ahead", type=int, help="Horizon in months (default from configuration)")
@click.option("--goal", "goal_amount", type=float, help="Cumulative goal amount")
@click.option("--seed", type=int, help="Random seed for a reproducible run")
@click.option("--stream-type", type=click.Choice(STREAM_TYPES, case_sensitive=False), default="income")
@today_option
@output_option
@click.pass_context
def monte_carlo_command(
    ctx: click.Context,
    simulations: int | None,
    months_ahead: int | None,
    goal_amount: float | None,
    seed: int | None,
    stream_type: str,
    today: str | None,
    output: str | None,
) -> None:
    """
    Monte Carlo projection of cumulative flow.

    Examples:
      income-analytics analytics monte-carlo --simulations 5000 --months 12 --goal 60000
      income-analytics analytics monte-carlo --seed 42 --output mc.json
    """
    report = _unwrap(
        _engine(ctx).monte_carlo(
            simulations, months_ahead, goal_amount, stream_type, seed=seed, today=_parse_date(today, "--today")
        ),
        output,
    )
    pct = report.percentiles
    click.echo(f"{report.simulation_count} simulations over {report.months_ahead} months")
    click.echo(f"   P10: {format_usd(pct.p10)}  P50: {format_usd(pct.p50)}  P90: {format_usd(pct.p90)}")
    click.echo(f"   Mean: {format_usd(pct.mean)} (std dev {format_usd(pct.stdev)})")
    if report.goal_amount is not None and report.goal_amount > 0:
        click.echo(f"   Probability of reaching {format_usd(report.goal_amount)}: {report.goal_probability}%")


@analytics.command("time-series")
@click.option("--start", required=True, help="Start date (YYYY-MM-DD)")
@click.option("--end", required=True, help="End date (YYYY-MM-DD)")
@click.option("--granularity", default="daily", show_default=True, help="daily, weekly, monthly, quarterly or yearly")
@click.option("--stream", "stream_id", help="Only this stream")
@click.option("--provider", help="Only streams of this provider")
@click.option("--category", help="Only this category")
@stream_type_option
@output_option
@click.pass_context
def time_series_command(
    ctx: click.Context,
    start: str,
    end: str,
    granularity: str,
    stream_id: str | None,
    provider: str | None,
    category: str | None,
    stream_type: str | None,
    output: str | None,
) -> None:
    """Bucketed totals between two dates."""
    report = _unwrap(
        _engine(ctx).time_series(
            _parse_date(start, "--start"),
            _parse_date(end, "--end"),
            granularity,
            stream_id,
            provider,
            category,
            stream_type,
        ),
        output,
    )
    for point in report.points:
        click.echo(f"   {point.date}: {format_usd(point.amount_usd)} ({point.snapshot_count} snapshots)")
    click.echo(f"Total: {format_usd(report.total_usd)}  Average: {format_usd(report.average_usd)}")


@analytics.command("stacked")
@click.option("--granularity", default="monthly", show_default=True, help="daily, weekly, monthly, quarterly or yearly")
@click.option("--periods-back", default=12, show_default=True, help="Number of periods to include")
@click.option("--provider", help="Only streams of this provider")
@stream_type_option
@today_option
@output_option
@click.pass_context
def stacked_command(
    ctx: click.Context,
    granularity: str,
    periods_back: int,
    provider: str | None,
    stream_type: str | None,
    today: str | None,
    output: str | None,
) -> None:
    """Per-period totals broken down by stream."""
    report = _unwrap(
        _engine(ctx).stacked_time_series(
            granularity, periods_back, stream_type, provider, today=_parse_date(today, "--today")
        ),
        output,
    )
    for point in report.points:
        click.echo(f"   {point.date}: {format_usd(point.total_usd)}")
        for contribution in point.streams:
            click.echo(f"      {contribution.stream_name}: {format_usd(contribution.amount_usd)}")
    click.echo(f"Total: {format_usd(report.total_usd)} across {len(report.stream_names)} streams")


@analytics.command("summary")
@stream_type_option
@today_option
@output_option
@click.pass_context
def summary_command(ctx: click.Context, stream_type: str | None, today: str | None, output: str | None) -> None:
    """Portfolio summary with month-over-month change."""
    summary = _unwrap(
        _engine(ctx).dashboard_summary(stream_type, today=_parse_date(today, "--today")), output
    )
    portfolio = summary.portfolio
    click.echo(f"Total: {format_usd(portfolio.total_usd)}")
    click.echo(f"   Streams: {portfolio.stream_count} ({portfolio.active_stream_count} active)")
    click.echo(f"   Providers: {portfolio.provider_count}")
    click.echo(f"   Fixed monthly: {format_usd(portfolio.fixed_monthly_usd)}")
    click.echo(f"   Variable last month: {format_usd(portfolio.variable_monthly_usd)}")
    click.echo(f"   History: {portfolio.earliest_snapshot_date} to {portfolio.latest_snapshot_date}")
    if summary.month_over_month is not None:
        mom = summary.month_over_month
        click.echo(f"   Month over month: {format_usd(mom.change_usd)} ({mom.change_pct}%) {mom.trend.value}")
