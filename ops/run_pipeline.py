#!/usr/bin/env python3
"""
Popular Vote Analysis Pipeline with Click CLI

This script runs the popular vote analysis and 2024 forecast with the
ability to override configuration values via command line arguments,
eliminating the need for manual config.yaml editing.

Usage:
    popvote-forecast [OPTIONS] [COMMAND]

    # Full pipeline (tables + charts):
    popvote-forecast

    # Only the printed tables:
    popvote-forecast --skip-maps

    # Override config values:
    popvote-forecast --config forecast.weights=[0.5,0.5] --config forecast.base_year=2016

    # Individual steps:
    popvote-forecast summary            # Races won per party
    popvote-forecast forecast           # Projected electoral votes

    # Verbose logging:
    popvote-forecast --verbose          # Enable DEBUG level logging
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import pandas as pd
import yaml
from loguru import logger

from ops.config_loader import Config

SCRIPT_DIR = Path(__file__).parent

# Console level chosen by setup_logging; read back when reporting failures
ACTIVE_LOG_LEVEL = "INFO"


class ConfigContext:
    """Click context object for config management."""

    def __init__(self, config_file: Optional[str] = None):
        self.overrides: Dict[str, Any] = {}
        env_config = os.environ.get("PIPELINE_CONFIG_PATH")
        if config_file:
            self.base_config_path = Path(config_file)
        elif env_config:
            self.base_config_path = Path(env_config)
        else:
            self.base_config_path = SCRIPT_DIR / "config.yaml"
        self.config: Optional[Config] = None
        self.kwargs: Dict[str, Any] = {}

    def add_override(self, key: str, value: Any):
        """Add config override using dot notation."""
        self.overrides[key] = value
        logger.debug(f"Added override: {key} = {value}")

    def get_config(self) -> Config:
        """Get config with overrides applied."""
        config = Config(self.base_config_path)
        for key, value in self.overrides.items():
            config.set(key, value)
        return config


# Custom Click types for better validation
class ConfigOverride(click.ParamType):
    """Custom parameter type for config overrides."""

    name = "config_override"

    def convert(self, value, param, ctx) -> Tuple[str, Any]:
        if isinstance(value, tuple):
            return value
        if "=" not in value:
            self.fail(f"Invalid format: {value}. Use KEY=VALUE", param, ctx)

        key, val = value.split("=", 1)
        if not key:
            self.fail(f"Invalid format: {value}. Key is empty", param, ctx)

        # YAML parsing gives ints, floats, booleans and [a, b] lists
        try:
            parsed_val = yaml.safe_load(val)
        except yaml.YAMLError:
            parsed_val = val
        if parsed_val is None:
            parsed_val = val

        return key, parsed_val


def print_table(df: pd.DataFrame, title: str) -> None:
    """Print a summary table to stdout."""
    click.echo(f"\n{title}")
    click.echo("-" * len(title))
    click.echo(df.to_string(index=False))


# Main CLI group
@click.group(invoke_without_command=True)
@click.option(
    "--config-file",
    type=click.Path(exists=False, dir_okay=False),
    help="Path to config.yaml (defaults to PIPELINE_CONFIG_PATH or ops/config.yaml)",
)
@click.option(
    "--config",
    "config_overrides",
    multiple=True,
    type=ConfigOverride(),
    help="Set config values using dot notation (e.g., forecast.base_year=2016)",
)
@click.option("--skip-maps", is_flag=True, help="Skip chart and map rendering")
@click.option("--dry-run", is_flag=True, help="Show what would be run without executing")
@click.option("-v", "--verbose", is_flag=True, help="Enable DEBUG level logging")
@click.option(
    "--trace", is_flag=True, help="Enable TRACE level logging for deep debugging (maximum detail)"
)
@click.option("--log-file", type=str, help="Also log to specified file")
@click.pass_context
def cli(ctx, **kwargs):
    """
    Popular Vote Analysis and Simplified Electoral Cycle Forecast

    Summarizes presidential popular vote history, maps state winners and
    projects 2024 state vote shares as 3/4 of 2020 plus 1/4 of 2016.

    \b
    Examples:
      popvote-forecast                                      # Full pipeline
      popvote-forecast --skip-maps                          # Tables only
      popvote-forecast summary                              # Races won per party
      popvote-forecast forecast                             # Projected electoral votes
      popvote-forecast --config forecast.weights=[0.5,0.5]  # Equal weights
    """
    setup_logging(verbose=kwargs.get("verbose", False), enable_trace=kwargs.get("trace", False))

    if kwargs.get("log_file"):
        log_level = (
            "TRACE" if kwargs.get("trace") else ("DEBUG" if kwargs.get("verbose") else "INFO")
        )
        logger.add(
            kwargs["log_file"],
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )
        logger.info(f"📄 Also logging to file: {kwargs['log_file']}")

    logger.debug(f"🔧 CLI arguments received: {kwargs}")

    config_ctx = ConfigContext(kwargs.get("config_file"))
    ctx.obj = config_ctx

    if not config_ctx.base_config_path.exists():
        logger.critical(f"Base configuration file not found: {config_ctx.base_config_path}")
        logger.info("💡 Pass --config-file or set PIPELINE_CONFIG_PATH")
        ctx.exit(1)

    for key, value in kwargs["config_overrides"]:
        config_ctx.add_override(key, value)

    try:
        config = config_ctx.get_config()
        logger.info(f"📋 Project: {config.get('project_name')}")
        config.print_config_summary()
    except Exception as e:
        handle_critical_error(e, "Loading configuration")
        ctx.exit(1)

    ctx.obj.config = config
    ctx.obj.kwargs = kwargs

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.pass_context
def run(ctx):
    """Run the full analysis: tables, forecast and charts."""
    from analysis.run_analysis import run_analysis

    config = ctx.obj.config
    kwargs = ctx.obj.kwargs

    if kwargs["dry_run"]:
        show_dry_run_info(config, kwargs)
        return

    try:
        result = run_analysis(config, render=not kwargs["skip_maps"])
    except Exception as e:
        handle_critical_error(e, "Pipeline execution")
        ctx.exit(1)

    print_table(result.latest_election, "Most recent election")
    print_table(result.popvote_wide, "Two-party popular vote by year")
    print_table(result.race_summary, "Races won per party")
    print_table(result.electoral_votes, "Projected electoral votes")

    if result.charts:
        logger.info("🗺️ Charts:")
        for name, path in result.charts.items():
            logger.info(f"   📊 {name}: {path}")


@cli.command()
@click.pass_context
def summary(ctx):
    """Summarize the national popular vote and races won per party."""
    from analysis.run_analysis import summarize_popular_vote

    try:
        tables = summarize_popular_vote(ctx.obj.config)
    except Exception as e:
        handle_critical_error(e, "Popular vote summary")
        ctx.exit(1)

    print_table(tables["popvote_wide"], "Two-party popular vote by year")
    print_table(tables["race_summary"], "Races won per party")


@cli.command()
@click.pass_context
def forecast(ctx):
    """Forecast state vote shares and tally projected electoral votes."""
    from analysis.run_analysis import forecast_electoral_college

    try:
        tables = forecast_electoral_college(ctx.obj.config)
    except Exception as e:
        handle_critical_error(e, "Electoral college forecast")
        ctx.exit(1)

    print_table(tables["forecast"], "Projected state vote shares")
    print_table(tables["electoral_votes"], "Projected electoral votes")


def show_dry_run_info(config: Config, kwargs: Dict):
    """Show dry run information."""
    logger.info("🔍 DRY RUN MODE - Nothing will be executed")
    logger.info("=" * 60)

    logger.info("Configuration Summary:")
    logger.info(f"  📋 Project: {config.get('project_name')}")
    logger.info(
        f"  🔮 Forecast: {config.get('forecast.base_year')} -> {config.get('forecast.target_year')}"
        f" weights={config.get_forecast_weights()}"
    )

    for file_key, exists in config.validate_input_files().items():
        logger.info(f"  📄 {file_key}: {config.get_input_path(file_key)} {'✅' if exists else '❌'}")

    logger.info("Steps that would be executed:")
    logger.info("  1. Popular vote summary")
    logger.info("  2. Electoral college forecast")
    if not kwargs["skip_maps"]:
        logger.info(f"  3. Charts and maps -> {config.maps_dir}")


def setup_logging(verbose: bool = False, enable_trace: bool = False) -> None:
    """
    Configure loguru logging with appropriate levels.

    Args:
        verbose: If True, set log level to DEBUG
        enable_trace: If True, enable TRACE level logging for deep debugging
    """
    global ACTIVE_LOG_LEVEL
    logger.remove()

    if enable_trace:
        log_level = "TRACE"
        log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
    elif verbose:
        log_level = "DEBUG"
        log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
    else:
        log_level = "INFO"
        log_format = (
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
        )

    logger.add(
        sys.stderr,
        format=log_format,
        level=log_level,
        colorize=True,
        backtrace=enable_trace,
        diagnose=enable_trace,
    )

    ACTIVE_LOG_LEVEL = log_level

    if verbose:
        logger.debug("🔧 Verbose logging enabled (DEBUG level)")
    if enable_trace:
        logger.trace("🔍 Trace logging enabled - maximum detail mode")


def handle_critical_error(error: Exception, context: str = "") -> None:
    """
    Handle critical errors with optional trace logging.

    Args:
        error: The exception that occurred
        context: Additional context about where the error occurred
    """
    enable_trace = ACTIVE_LOG_LEVEL == "TRACE"

    if enable_trace:
        logger.opt(exception=error).trace(f"💥 TRACE MODE: {context}")

    logger.critical(f"💥 CRITICAL ERROR: {context}")
    logger.critical(f"Exception: {type(error).__name__}: {error}")

    if not enable_trace:
        logger.info("💡 For detailed debugging, run with --trace flag")


if __name__ == "__main__":
    cli()
