"""Journal statistics command."""

import dataclasses
import sys
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from tradelog.cli.commands.common import load_run_config
from tradelog.services.analytics import AnalyticsService
from tradelog.services.journal import TradeLoadError, load_trades
from tradelog.services.reporting import display_journal_report

console = Console()


@click.command("stats")
@click.option(
    "--file",
    "-f",
    "journal_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to journal export (JSON or CSV)",
)
@click.option(
    "--initial-balance",
    "-b",
    type=str,
    help="Account balance before the first trade (for drawdown %)",
)
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="First trade date to include (YYYY-MM-DD)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Last trade date to include (YYYY-MM-DD)",
)
@click.option(
    "--strategy",
    "-s",
    "strategy_ids",
    multiple=True,
    help="Only trades tagged with this strategy id (repeatable)",
)
@click.option(
    "--detail",
    "-d",
    type=click.Choice(["summary", "standard", "full"], case_sensitive=False),
    help="Report detail level (default from config)",
)
@click.option(
    "--all-trades",
    is_flag=True,
    help="Include open trades (default: closed trades only)",
)
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="System config file (default: config/system.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Set logging level",
)
def stats_command(
    journal_file: Path,
    initial_balance: Optional[str],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    strategy_ids: tuple[str, ...],
    detail: Optional[str],
    all_trades: bool,
    config_file: Optional[Path],
    log_level: Optional[str],
):
    """
    Show performance statistics for a journal export.

    \b
    Examples:
        # Standard report
        tradelog stats --file exports/trades.json

        # Full report with drawdown % against a 10k account
        tradelog stats -f exports/trades.csv -b 10000 -d full

        # One strategy, Q1 only
        tradelog stats -f exports/trades.json -s breakout \\
            --start-date 2025-01-01 --end-date 2025-03-31
    """
    try:
        system_config = load_run_config(config_file, log_level)

        analytics_config = system_config.analytics
        if initial_balance is not None:
            try:
                balance = Decimal(initial_balance)
            except ArithmeticError:
                balance = None
            if balance is None or not balance.is_finite():
                raise click.BadParameter(f"not a finite number: {initial_balance!r}", param_hint="--initial-balance")
            analytics_config = dataclasses.replace(analytics_config, initial_balance=initial_balance)
        if all_trades:
            analytics_config = dataclasses.replace(analytics_config, closed_only=False)

        trades = load_trades(journal_file)

        service = AnalyticsService(analytics_config)
        report = service.build_report(
            trades,
            start=start_date.date() if start_date else None,
            end=end_date.date() if end_date else None,
            strategy_ids=list(strategy_ids) or None,
        )

        console.rule(f"[bold blue]tradelog: {journal_file.name}[/bold blue]")
        display_journal_report(
            report,
            detail_level=(detail or analytics_config.default_detail_level).lower(),  # type: ignore[arg-type]
            console=console,
            currency_symbol=system_config.output.currency_symbol,
            date_format=system_config.output.date_display_format,
        )

    except (TradeLoadError, ValueError) as e:
        console.print(f"[bold red]✗ Failed to build report:[/bold red] {e}")
        sys.exit(1)
