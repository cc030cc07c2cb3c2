"""Trading performance calculation functions.

Pure functions that turn a collection of journal trades into performance
statistics, an equity curve and per-strategy breakdowns. Dashboards, exports
and tests call these same functions so that their numbers always agree.

Philosophy:
- Pure functions: same inputs always produce same outputs
- No side effects: inputs are never modified, nothing is cached
- Order-independent: functions that need time order sort internally
- Explicit edge cases: zero trades, no losses, zero risk return 0 or Infinity, never NaN

P&L standard:
    Every calculation reads a trade's P&L through ``net_pnl``:
    ``realized_pnl``, else ``pnl``, else 0.

Drawdown standard:
    ``(peak - cumulative) / (initial_balance + peak) * 100``, capped at 100%.

Usage:
    >>> from tradelog.libraries.performance import metrics
    >>> stats = metrics.calculate_trading_stats(trades, initial_balance=Decimal("10000"))
    >>> stats.profit_factor
    Decimal('2.5')
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Iterable, Sequence

from tradelog.libraries.performance.models import (
    EquityCurvePoint,
    StrategyPerformance,
    StrategyTag,
    TradeRecord,
    TradingStats,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
INFINITY = Decimal("Infinity")

# Per-trade returns are annualised as if they were daily returns
TRADING_DAYS_PER_YEAR = 252


def _to_decimal(value: Decimal | int | float | str) -> Decimal:
    """Convert a numeric input to Decimal without float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def sort_by_trade_date(trades: Iterable[TradeRecord]) -> list[TradeRecord]:
    """
    Return a new list of trades in ascending trade-date order.

    The sort is stable: trades on the same date keep their relative order.
    """
    return sorted(trades, key=lambda t: t.traded_at)


def net_pnl(trade: TradeRecord) -> Decimal:
    """
    Resolve the single P&L figure of a trade.

    Exchange-synced trades carry ``realized_pnl``; manual and paper trades
    carry an estimated ``pnl``.

    Args:
        trade: Trade to evaluate

    Returns:
        ``realized_pnl`` if set, else ``pnl`` if set, else 0

    Example:
        >>> net_pnl(TradeRecord(..., realized_pnl=Decimal("12"), pnl=Decimal("10")))
        Decimal('12')
    """
    if trade.realized_pnl is not None:
        return trade.realized_pnl
    if trade.pnl is not None:
        return trade.pnl
    return ZERO


def calculate_rr(trade: TradeRecord) -> Decimal:
    """
    Calculate the R-multiple achieved on a trade.

    ``R = reward / risk`` with ``risk = |entry - stop|`` and
    ``reward = |exit - entry|``. The sign follows the outcome label, not the
    price move: anything that is not a ``win`` is reported as non-positive.
    Direction does not change the magnitude since both legs are absolute.

    Args:
        trade: Trade to evaluate

    Returns:
        R-multiple, or 0 if there is no stop loss, no entry price or zero risk

    Example:
        >>> # entry=100, stop=95, exit=110, result="win" -> risk=5, reward=10
        >>> calculate_rr(trade)
        Decimal('2')
    """
    if trade.stop_loss is None or trade.entry_price is None:
        return ZERO

    risk = abs(trade.entry_price - trade.stop_loss)
    if risk == ZERO:
        return ZERO

    reward = abs(trade.exit_price - trade.entry_price) if trade.exit_price is not None else ZERO

    rr = reward / risk
    if trade.result != "win":
        rr = -rr

    return rr


def calculate_average_rr(trades: Sequence[TradeRecord]) -> Decimal:
    """
    Calculate the average absolute R-multiple.

    Trades whose R-multiple is exactly 0 (no stop, zero risk, or no move) are
    treated as not applicable and left out.

    Returns:
        Mean of |R| over qualifying trades, or 0 if none qualify
    """
    rr_values = [calculate_rr(t) for t in trades]
    rr_values = [rr for rr in rr_values if rr != ZERO]

    if not rr_values:
        return ZERO

    return _sum(abs(rr) for rr in rr_values) / Decimal(len(rr_values))


def calculate_profit_factor(gross_profit: Decimal, gross_loss: Decimal) -> Decimal:
    """
    Calculate profit factor (gross profit / gross loss).

    Args:
        gross_profit: Sum of winning P&L
        gross_loss: Sum of losing P&L as a positive number

    Returns:
        The ratio when there are losses, Infinity when there is profit and no
        loss, otherwise 0

    Example:
        >>> calculate_profit_factor(Decimal("30"), Decimal("10"))
        Decimal('3')
        >>> calculate_profit_factor(Decimal("30"), Decimal("0"))
        Decimal('Infinity')
    """
    if gross_loss > ZERO:
        return gross_profit / gross_loss
    if gross_profit > ZERO:
        return INFINITY
    return ZERO


def calculate_max_drawdown(
    trades: Sequence[TradeRecord],
    initial_balance: Decimal = ZERO,
) -> tuple[Decimal, Decimal]:
    """
    Calculate maximum peak-to-trough decline of cumulative P&L.

    Trades are put in trade-date order first. The peak starts at 0 (no P&L
    yet), so a book that only loses still shows a drawdown.

    Args:
        trades: Trades in any order
        initial_balance: Account balance before the first trade, used only
            for the percentage

    Returns:
        Tuple of (max_drawdown, max_drawdown_percent). The percentage is
        ``max_drawdown / (initial_balance + peak) * 100`` capped at 100, or 0
        when that base is not positive.

    Example:
        >>> # P&L +20, -15, -10 -> peak 20, trough -5
        >>> calculate_max_drawdown(trades)
        (Decimal('25'), Decimal('100'))
    """
    peak = ZERO
    cumulative = ZERO
    max_drawdown = ZERO

    for trade in sort_by_trade_date(trades):
        cumulative += net_pnl(trade)
        if cumulative > peak:
            peak = cumulative
        drawdown = peak - cumulative
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    drawdown_base = initial_balance + peak
    if drawdown_base > ZERO:
        max_drawdown_percent = min(max_drawdown / drawdown_base * HUNDRED, HUNDRED)
    else:
        max_drawdown_percent = ZERO

    return max_drawdown, max_drawdown_percent


def calculate_sharpe_ratio(
    pnl_values: Sequence[Decimal],
    annualization_factor: int = TRADING_DAYS_PER_YEAR,
) -> Decimal:
    """
    Calculate a Sharpe-like ratio from per-trade P&L.

    ``(mean / std_dev) * sqrt(annualization_factor)`` with population
    variance and a 0% risk-free rate.

    This treats each trade as one daily return. It is an approximation kept
    for consistency with existing dashboards and exports, not a time-weighted
    Sharpe ratio.

    Returns:
        Ratio, or 0 if there are no values or no dispersion
    """
    if not pnl_values:
        return ZERO

    count = Decimal(len(pnl_values))
    mean = _sum(pnl_values) / count
    variance = _sum((p - mean) ** 2 for p in pnl_values) / count
    std_dev = variance.sqrt()

    if std_dev <= ZERO:
        return ZERO

    return (mean / std_dev) * Decimal(annualization_factor).sqrt()


def calculate_consecutive_streaks(trades: Sequence[TradeRecord]) -> tuple[int, int]:
    """
    Find the longest run of wins and of losses in trade-date order.

    Breakeven trades and trades without a result reset both counters.

    Returns:
        Tuple of (max_consecutive_wins, max_consecutive_losses)
    """
    win_streak = 0
    loss_streak = 0
    max_win_streak = 0
    max_loss_streak = 0

    for trade in sort_by_trade_date(trades):
        if trade.result == "win":
            win_streak += 1
            loss_streak = 0
            max_win_streak = max(max_win_streak, win_streak)
        elif trade.result == "loss":
            loss_streak += 1
            win_streak = 0
            max_loss_streak = max(max_loss_streak, loss_streak)
        else:
            win_streak = 0
            loss_streak = 0

    return max_win_streak, max_loss_streak


def calculate_trading_stats(
    trades: Sequence[TradeRecord],
    initial_balance: Decimal | int | float | str = 0,
) -> TradingStats:
    """
    Compute the full statistics record for a set of trades.

    Trades are classified by their ``result`` label. Trades with no label
    count toward ``total_trades`` and the P&L sums but not toward wins,
    losses or breakeven.

    Calculation details:
    - Win rate: ``wins / total_trades * 100``
    - Profit factor: ``gross_profit / gross_loss``, Infinity if no losses, 0 if no profit
    - Expectancy: ``win% * avg_win - (1 - win%) * avg_loss``
    - Max drawdown: peak-to-trough on the date-ordered cumulative P&L
    - Sharpe-like ratio: ``mean / std_dev * sqrt(252)`` over per-trade P&L
    - Streaks: longest win and loss runs in date order

    Args:
        trades: Trades in any order
        initial_balance: Starting balance for the drawdown percentage

    Returns:
        TradingStats built from scratch; equal inputs give equal results

    Example:
        >>> stats = calculate_trading_stats(closed_trades, initial_balance=10000)
        >>> stats.win_rate, stats.profit_factor
        (Decimal('50'), Decimal('3'))
    """
    if not trades:
        return TradingStats()

    balance = _to_decimal(initial_balance)

    winning_trades = [t for t in trades if t.result == "win"]
    losing_trades = [t for t in trades if t.result == "loss"]
    breakeven_trades = [t for t in trades if t.result == "breakeven"]

    total_trades = len(trades)
    wins = len(winning_trades)
    losses = len(losing_trades)

    win_rate = Decimal(wins) / Decimal(total_trades) * HUNDRED

    pnl_values = [net_pnl(t) for t in trades]
    total_pnl = _sum(pnl_values)
    avg_pnl = total_pnl / Decimal(total_trades)

    winner_pnls = [net_pnl(t) for t in winning_trades]
    loser_pnls = [net_pnl(t) for t in losing_trades]

    gross_profit = _sum(winner_pnls)
    gross_loss = abs(_sum(loser_pnls))

    avg_win = gross_profit / Decimal(wins) if wins else ZERO
    avg_loss = gross_loss / Decimal(losses) if losses else ZERO

    win_fraction = win_rate / HUNDRED
    expectancy = (win_fraction * avg_win) - ((Decimal("1") - win_fraction) * avg_loss)

    largest_win = max(winner_pnls) if winner_pnls else ZERO
    largest_loss = abs(min(loser_pnls)) if loser_pnls else ZERO

    max_drawdown, max_drawdown_percent = calculate_max_drawdown(trades, balance)
    consecutive_wins, consecutive_losses = calculate_consecutive_streaks(trades)

    return TradingStats(
        total_trades=total_trades,
        wins=wins,
        losses=losses,
        breakeven=len(breakeven_trades),
        win_rate=win_rate,
        total_pnl=total_pnl,
        avg_pnl=avg_pnl,
        avg_rr=calculate_average_rr(trades),
        profit_factor=calculate_profit_factor(gross_profit, gross_loss),
        expectancy=expectancy,
        max_drawdown=max_drawdown,
        max_drawdown_percent=max_drawdown_percent,
        sharpe_ratio=calculate_sharpe_ratio(pnl_values),
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        largest_win=largest_win,
        largest_loss=largest_loss,
        avg_win=avg_win,
        avg_loss=avg_loss,
        consecutive_wins=consecutive_wins,
        consecutive_losses=consecutive_losses,
    )


def generate_equity_curve(trades: Sequence[TradeRecord]) -> list[EquityCurvePoint]:
    """
    Build the cumulative P&L curve, one point per trade.

    Trades are sorted by trade date (stable on ties) before accumulating, so
    passing an already sorted list yields the same curve.

    Args:
        trades: Trades in any order

    Returns:
        List of EquityCurvePoint in ascending date order

    Example:
        >>> # P&L +10 then -3
        >>> [p.cumulative for p in generate_equity_curve(trades)]
        [Decimal('10'), Decimal('7')]
    """
    points: list[EquityCurvePoint] = []
    cumulative = ZERO

    for trade in sort_by_trade_date(trades):
        pnl = net_pnl(trade)
        cumulative += pnl
        points.append(
            EquityCurvePoint(
                trade_id=trade.id,
                trade_date=trade.trade_date,
                timestamp=trade.traded_at,
                pnl=pnl,
                cumulative=cumulative,
                pair=trade.pair,
                direction=trade.direction,
            )
        )

    return points


def calculate_strategy_performance(
    trades: Sequence[TradeRecord],
    strategies: Sequence[StrategyTag],
) -> list[StrategyPerformance]:
    """
    Compute performance for each strategy.

    Every requested strategy appears exactly once; a strategy with no tagged
    trades gets zeroed stats. Results are ordered by strategy P&L, best first.

    Contribution is ``strategy_pnl / |portfolio_pnl| * 100`` (0 when the
    portfolio P&L is 0), so a losing strategy always shows a negative
    contribution even when the whole portfolio is losing.

    Args:
        trades: All trades of the portfolio
        strategies: Strategies to report on

    Returns:
        List of StrategyPerformance sorted by total P&L descending
    """
    portfolio_pnl = _sum(net_pnl(t) for t in trades)

    results: list[StrategyPerformance] = []
    for strategy in strategies:
        strategy_trades = [t for t in trades if strategy.id in t.strategy_ids]
        stats = calculate_trading_stats(strategy_trades)

        if portfolio_pnl != ZERO:
            contribution = stats.total_pnl / abs(portfolio_pnl) * HUNDRED
        else:
            contribution = ZERO

        results.append(StrategyPerformance(strategy=strategy, stats=stats, contribution=contribution))

    return sorted(results, key=lambda p: p.total_pnl, reverse=True)


def _as_bound(value: date | datetime, end_of_day: bool) -> datetime:
    """Turn a date or datetime filter bound into an aware datetime."""
    if isinstance(value, datetime):
        bound = value
    else:
        bound = datetime.combine(value, time.max if end_of_day else time.min)

    if bound.tzinfo is None:
        bound = bound.replace(tzinfo=timezone.utc)
    return bound


def filter_trades_by_date_range(
    trades: Sequence[TradeRecord],
    start: date | datetime | None,
    end: date | datetime | None,
) -> list[TradeRecord]:
    """
    Keep trades whose trade date falls within [start, end].

    Args:
        trades: Trades to filter
        start: Earliest trade date to include (None = no lower bound)
        end: Latest trade date to include (None = no upper bound). A plain
            date covers the whole day.

    Returns:
        Filtered trades in their original order
    """
    lower = _as_bound(start, end_of_day=False) if start is not None else None
    upper = _as_bound(end, end_of_day=True) if end is not None else None

    filtered: list[TradeRecord] = []
    for trade in trades:
        traded_at = trade.traded_at
        if lower is not None and traded_at < lower:
            continue
        if upper is not None and traded_at > upper:
            continue
        filtered.append(trade)

    return filtered


def filter_trades_by_strategies(
    trades: Sequence[TradeRecord],
    strategy_ids: Sequence[str],
) -> list[TradeRecord]:
    """
    Keep trades tagged with at least one of the given strategies.

    An empty id list applies no filter.
    """
    if not strategy_ids:
        return list(trades)

    wanted = set(strategy_ids)
    return [t for t in trades if wanted.intersection(t.strategy_ids)]


def closed_trades(trades: Sequence[TradeRecord]) -> list[TradeRecord]:
    """Keep only trades with status ``closed``."""
    return [t for t in trades if t.status == "closed"]
