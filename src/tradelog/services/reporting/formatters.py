"""Rich console formatters for journal reports.

Provides terminal display of journal statistics with tables, colors and
formatting using the Rich library.
"""

from decimal import Decimal
from typing import Literal, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tradelog.libraries.performance.models import (
    EquityCurvePoint,
    StrategyPerformance,
    StreakAnalysis,
    StreakRecord,
    TradingStats,
)
from tradelog.services.analytics.service import JournalReport

DetailLevel = Literal["summary", "standard", "full"]

INFINITY_SYMBOL = "∞"
EQUITY_CURVE_TAIL = 10


def _format_pct(value: Decimal, precision: int = 2) -> str:
    """Format percentage."""
    return f"{float(value):.{precision}f}%"


def _format_currency(value: Decimal, precision: int = 2, symbol: str = "$") -> str:
    """Format currency value with the sign before the symbol."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{float(abs(value)):,.{precision}f}"


def _format_number(value: int | float | Decimal, precision: int = 0) -> str:
    """Format numeric value."""
    if isinstance(value, int):
        return f"{value:,}"
    return f"{float(value):,.{precision}f}"


def _format_ratio(value: Decimal, precision: int = 2) -> str:
    """Format a ratio; Infinity shows as the infinity sign."""
    if value.is_infinite():
        return INFINITY_SYMBOL
    return f"{float(value):.{precision}f}"


def _get_color(value: Decimal) -> str:
    """Get color based on positive/negative value."""
    if value > 0:
        return "green"
    elif value < 0:
        return "red"
    return "white"


def _colored(text: str, value: Decimal) -> str:
    color = _get_color(value)
    return f"[{color}]{text}[/{color}]"


def _create_summary_table(report: JournalReport, currency: str) -> Table:
    """Create summary table."""
    stats = report.stats
    table = Table(title="📊 Journal Summary", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    if report.equity_curve:
        table.add_row("Period", f"{report.equity_curve[0].trade_date} to {report.equity_curve[-1].trade_date}")
    table.add_row("Trades", _format_number(report.trade_count))
    table.add_row("", "")  # Spacer

    table.add_row("Total P&L", _colored(_format_currency(stats.total_pnl, symbol=currency), stats.total_pnl))
    table.add_row("Avg P&L / Trade", _colored(_format_currency(stats.avg_pnl, symbol=currency), stats.avg_pnl))

    win_rate_color = (
        "green" if stats.win_rate > Decimal("50") else "yellow" if stats.win_rate > Decimal("40") else "red"
    )
    table.add_row("Win Rate", f"[{win_rate_color}]{_format_pct(stats.win_rate)}[/{win_rate_color}]")

    pf = stats.profit_factor
    pf_color = "green" if pf > Decimal("2.0") else "yellow" if pf > Decimal("1.0") else "red"
    table.add_row("Profit Factor", f"[{pf_color}]{_format_ratio(pf)}[/{pf_color}]")

    return table


def _create_risk_table(stats: TradingStats, initial_balance: Decimal, currency: str) -> Table:
    """Create risk metrics table."""
    table = Table(title="⚠️  Risk Metrics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Initial Balance", _format_currency(initial_balance, symbol=currency))
    table.add_row("Max Drawdown", f"[red]{_format_currency(stats.max_drawdown, symbol=currency)}[/red]")
    table.add_row("Max Drawdown %", f"[red]{_format_pct(stats.max_drawdown_percent)}[/red]")

    sharpe_color = (
        "green" if stats.sharpe_ratio > Decimal("1.0") else "yellow" if stats.sharpe_ratio > Decimal("0") else "red"
    )
    table.add_row("Sharpe Ratio", f"[{sharpe_color}]{_format_ratio(stats.sharpe_ratio)}[/{sharpe_color}]")
    table.add_row("Avg R-Multiple", f"{_format_ratio(stats.avg_rr)}R")

    return table


def _create_trade_stats_table(stats: TradingStats, currency: str) -> Table:
    """Create trade statistics table."""
    table = Table(title="💼 Trade Statistics", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Trades", _format_number(stats.total_trades))
    table.add_row("Winning Trades", f"[green]{_format_number(stats.wins)}[/green]")
    table.add_row("Losing Trades", f"[red]{_format_number(stats.losses)}[/red]")
    table.add_row("Breakeven Trades", _format_number(stats.breakeven))

    table.add_row("Expectancy", _colored(_format_currency(stats.expectancy, symbol=currency), stats.expectancy))

    table.add_row("", "")  # Spacer
    table.add_row("Gross Profit", f"[green]{_format_currency(stats.gross_profit, symbol=currency)}[/green]")
    table.add_row("Gross Loss", f"[red]{_format_currency(stats.gross_loss, symbol=currency)}[/red]")
    table.add_row("Avg Win", f"[green]{_format_currency(stats.avg_win, symbol=currency)}[/green]")
    table.add_row("Avg Loss", f"[red]{_format_currency(stats.avg_loss, symbol=currency)}[/red]")
    table.add_row("Largest Win", f"[green]{_format_currency(stats.largest_win, symbol=currency)}[/green]")
    table.add_row("Largest Loss", f"[red]{_format_currency(stats.largest_loss, symbol=currency)}[/red]")

    table.add_row("Max Consecutive Wins", _format_number(stats.consecutive_wins))
    table.add_row("Max Consecutive Losses", _format_number(stats.consecutive_losses))

    return table


def _create_strategy_table(strategies: Sequence[StrategyPerformance], currency: str) -> Table | None:
    """Create per-strategy performance table."""
    if not strategies:
        return None

    table = Table(title="🎯 Strategy Performance", box=None, padding=(0, 1))

    table.add_column("Strategy", style="cyan")
    table.add_column("Trades", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Avg R", justify="right")
    table.add_column("Profit Factor", justify="right")
    table.add_column("Contribution", justify="right")

    for performance in strategies:
        table.add_row(
            performance.strategy.name,
            _format_number(performance.total_trades),
            _format_pct(performance.win_rate),
            _colored(_format_currency(performance.total_pnl, symbol=currency), performance.total_pnl),
            _format_ratio(performance.avg_rr),
            _format_ratio(performance.stats.profit_factor),
            _colored(_format_pct(performance.contribution), performance.contribution),
        )

    return table


def _format_streak(streak: StreakRecord | None, currency: str) -> str:
    if streak is None:
        return "—"
    color = "green" if streak.type == "win" else "red"
    label = streak.type if streak.length == 1 else {"win": "wins", "loss": "losses"}[streak.type]
    return (
        f"[{color}]{streak.length} {label}[/{color}] "
        f"({streak.start_date} to {streak.end_date}, {_format_currency(streak.total_pnl, symbol=currency)})"
    )


def _create_streak_table(streaks: StreakAnalysis, currency: str) -> Table:
    """Create streak summary table."""
    table = Table(title="🔁 Streaks", show_header=False, box=None, padding=(0, 2))

    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Current Streak", _format_streak(streaks.current_streak, currency))
    table.add_row("Longest Win Streak", _format_streak(streaks.longest_win_streak, currency))
    table.add_row("Longest Loss Streak", _format_streak(streaks.longest_loss_streak, currency))
    table.add_row("", "")  # Spacer
    table.add_row("Avg Win Streak", _format_number(streaks.avg_win_streak_length, precision=1))
    table.add_row("Avg Loss Streak", _format_number(streaks.avg_loss_streak_length, precision=1))
    table.add_row(
        "Avg P&L in Win Streaks",
        _colored(
            _format_currency(streaks.avg_pnl_during_win_streaks, symbol=currency), streaks.avg_pnl_during_win_streaks
        ),
    )
    table.add_row(
        "Avg P&L in Loss Streaks",
        _colored(
            _format_currency(streaks.avg_pnl_during_loss_streaks, symbol=currency), streaks.avg_pnl_during_loss_streaks
        ),
    )
    table.add_row(
        "Avg P&L Isolated Trades",
        _colored(_format_currency(streaks.avg_pnl_baseline, symbol=currency), streaks.avg_pnl_baseline),
    )
    table.add_row("Avg Trades to Recover", _format_number(streaks.avg_recovery_trades, precision=1))

    return table


def _create_streak_distribution_table(streaks: StreakAnalysis) -> Table | None:
    """Create streak length histogram table."""
    lengths = sorted(set(streaks.win_streak_distribution) | set(streaks.loss_streak_distribution))
    if not lengths:
        return None

    table = Table(title="📶 Streak Distribution", box=None, padding=(0, 1))

    table.add_column("Length", justify="right", style="cyan")
    table.add_column("Win Streaks", justify="right", style="green")
    table.add_column("Loss Streaks", justify="right", style="red")

    for length in lengths:
        table.add_row(
            str(length),
            _format_number(streaks.win_streak_distribution.get(length, 0)),
            _format_number(streaks.loss_streak_distribution.get(length, 0)),
        )

    return table


def create_equity_curve_table(
    points: Sequence[EquityCurvePoint],
    title: str = "📈 Equity Curve",
    currency: str = "$",
    date_format: str = "%Y-%m-%d %H:%M",
) -> Table:
    """Create a table with one row per equity curve point."""
    table = Table(title=title, box=None, padding=(0, 1))

    table.add_column("Date", style="cyan")
    table.add_column("Trade", style="dim")
    table.add_column("Pair")
    table.add_column("Side", justify="center")
    table.add_column("P&L", justify="right")
    table.add_column("Cumulative", justify="right")

    for point in points:
        table.add_row(
            point.timestamp.strftime(date_format),
            point.trade_id,
            point.pair,
            point.direction,
            _colored(_format_currency(point.pnl, symbol=currency), point.pnl),
            _colored(_format_currency(point.cumulative, symbol=currency), point.cumulative),
        )

    return table


def display_journal_report(
    report: JournalReport,
    detail_level: DetailLevel = "standard",
    console: Console | None = None,
    currency_symbol: str = "$",
    date_format: str = "%Y-%m-%d %H:%M",
) -> None:
    """
    Display a journal report in Rich-formatted console output.

    Args:
        report: Report built by AnalyticsService
        detail_level: Level of detail to display:
            - "summary": Key numbers only (P&L, win rate, profit factor)
            - "standard": Summary + risk metrics + trade statistics
            - "full": Everything including strategies, streaks and the
              most recent equity curve points
        console: Rich Console instance (creates new if None)
        currency_symbol: Symbol printed before money values
        date_format: strftime format for equity curve dates

    Example:
        >>> report = AnalyticsService().build_report(trades)
        >>> display_journal_report(report, detail_level="full")
    """
    if console is None:
        console = Console()

    stats = report.stats
    currency = currency_symbol

    console.print()  # Blank line

    # Always show summary
    console.print(_create_summary_table(report, currency))
    console.print()

    if detail_level in ["standard", "full"]:
        console.print(_create_risk_table(stats, report.initial_balance, currency))
        console.print()

        if stats.total_trades > 0:
            console.print(_create_trade_stats_table(stats, currency))
            console.print()

    if detail_level == "full":
        table = _create_strategy_table(report.strategy_performance, currency)
        if table:
            console.print(table)
            console.print()

        if report.streaks.all_streaks:
            console.print(_create_streak_table(report.streaks, currency))
            console.print()

            distribution = _create_streak_distribution_table(report.streaks)
            if distribution:
                console.print(distribution)
                console.print()

        if report.equity_curve:
            tail = report.equity_curve[-EQUITY_CURVE_TAIL:]
            console.print(
                create_equity_curve_table(
                    tail, title=f"📈 Last {len(tail)} Trades", currency=currency, date_format=date_format
                )
            )
            console.print()

    # Final summary panel
    summary_text = Text()
    summary_text.append("🏁 Journal: ", style="bold")
    summary_text.append(f"{_format_number(report.trade_count)} trades, ", style="bold cyan")
    summary_text.append(
        _format_currency(stats.total_pnl, symbol=currency), style=f"bold {_get_color(stats.total_pnl)}"
    )
    summary_text.append(f" (PF {_format_ratio(stats.profit_factor)})", style="bold")

    console.print(Panel(summary_text, border_style="green" if stats.total_pnl > 0 else "red"))
    console.print()
