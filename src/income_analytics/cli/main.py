#!/usr/bin/env python3
"""
Main CLI Entry Point for Income Analytics

Provides the command-line interface for every analytics report.
"""

import logging
import os

import click

from ..core.config import get_config, reload_config


@click.group()
@click.option(
    "--config-env",
    type=click.Choice(["development", "test", "production"]),
    help="Override environment configuration",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, config_env: str | None, verbose: bool, debug: bool) -> None:
    """
    Income Analytics - Trend, Forecast and Simulation Engine

    Reports on income and expense streams: daily rates, period comparisons,
    distributions, trends, seasonality, projections and Monte Carlo runs.
    """
    ctx.ensure_object(dict)

    if config_env:
        os.environ["ANALYTICS_ENV"] = config_env

    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"

    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["config"] = reload_config() if (config_env or debug) else get_config()

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.getLogger("income_analytics").setLevel(logging.DEBUG)
        click.echo("Debug logging enabled")

    if verbose:
        click.echo(f"Environment: {ctx.obj['config'].environment.value}")
        click.echo(f"Data directory: {ctx.obj['config'].data_dir}")


@main.command()
def version() -> None:
    """Show version information."""
    from income_analytics import __author__, __version__

    click.echo(f"Income Analytics v{__version__}")
    click.echo(f"Author: {__author__}")


@main.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    config_obj = ctx.obj["config"]

    click.echo("Current Configuration:")
    click.echo(f"  Environment: {config_obj.environment.value}")
    click.echo(f"  Data Directory: {config_obj.data_dir}")
    click.echo(f"  Streams File: {config_obj.data.streams_file}")
    click.echo(f"  Output Directory: {config_obj.data.output_dir}")
    click.echo(f"  Simulations: {config_obj.simulation.default_simulations}")
    click.echo(f"  Simulation Seed: {config_obj.simulation.seed}")
    click.echo(f"  Debug Mode: {config_obj.debug}")
    click.echo(f"  Log Level: {config_obj.log_level}")


from .analytics import analytics  # noqa: E402

main.add_command(analytics)


if __name__ == "__main__":
    main()
