"""Equity curve command."""

import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from tradelog.cli.commands.common import load_run_config
from tradelog.libraries.performance import closed_trades, filter_trades_by_date_range, generate_equity_curve
from tradelog.services.journal import TradeLoadError, load_trades
from tradelog.services.reporting import create_equity_curve_table

console = Console()


@click.command("curve")
@click.option(
    "--file",
    "-f",
    "journal_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Path to journal export (JSON or CSV)",
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
    "--json",
    "as_json",
    is_flag=True,
    help="Print one JSON object per point instead of a table",
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
def curve_command(
    journal_file: Path,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    as_json: bool,
    config_file: Optional[Path],
    log_level: Optional[str],
):
    """
    Print the cumulative P&L curve of a journal export.

    \b
    Examples:
        tradelog curve --file exports/trades.csv
        tradelog curve -f exports/trades.json --json > curve.jsonl
    """
    try:
        system_config = load_run_config(config_file, log_level)

        trades = load_trades(journal_file)
        if system_config.analytics.closed_only:
            trades = closed_trades(trades)
        if start_date or end_date:
            trades = filter_trades_by_date_range(
                trades,
                start_date.date() if start_date else None,
                end_date.date() if end_date else None,
            )

        points = generate_equity_curve(trades)

        if as_json:
            for point in points:
                click.echo(point.model_dump_json())
        else:
            table = create_equity_curve_table(
                points,
                currency=system_config.output.currency_symbol,
                date_format=system_config.output.date_display_format,
            )
            console.print(table)

    except TradeLoadError as e:
        console.print(f"[bold red]✗ Failed to load journal:[/bold red] {e}")
        sys.exit(1)
