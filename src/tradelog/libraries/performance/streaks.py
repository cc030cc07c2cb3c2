"""Win/loss streak analysis.

Segments a trade history into maximal runs of consecutive wins or losses and
derives records, length distributions, in-streak P&L and recovery metrics.

Rules:
- Trades are put in trade-date order first (stable on ties)
- Only ``win`` and ``loss`` results build runs; breakeven and unlabelled
  trades end the current run and belong to none
- Runs of length 1 are isolated trades: they count in distributions and the
  P&L baseline, not in the in-streak P&L averages

Usage:
    >>> from tradelog.libraries.performance.streaks import analyze_streaks
    >>> analysis = analyze_streaks(trades)
    >>> analysis.longest_win_streak.length
    4
"""

from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from tradelog.libraries.performance.metrics import ZERO, net_pnl, sort_by_trade_date
from tradelog.libraries.performance.models import StreakAnalysis, StreakRecord, StreakType, TradeRecord


@dataclass
class _Run:
    """Run under construction: positions refer to the date-sorted trade list."""

    type: StreakType
    start_index: int
    trades: list[TradeRecord] = field(default_factory=list)

    @property
    def end_index(self) -> int:
        return self.start_index + len(self.trades) - 1

    def to_record(self) -> StreakRecord:
        return StreakRecord(
            type=self.type,
            length=len(self.trades),
            start_date=self.trades[0].trade_date,
            end_date=self.trades[-1].trade_date,
            total_pnl=sum((net_pnl(t) for t in self.trades), ZERO),
            pairs=list(dict.fromkeys(t.pair for t in self.trades)),
            trade_ids=[t.id for t in self.trades],
        )


def _mean(values: Sequence[Decimal]) -> Decimal:
    if not values:
        return ZERO
    return sum(values, ZERO) / Decimal(len(values))


def _split_runs(trades: Sequence[TradeRecord]) -> list[_Run]:
    """Split date-sorted trades into maximal win/loss runs."""
    runs: list[_Run] = []
    current: _Run | None = None

    for index, trade in enumerate(trades):
        if trade.result not in ("win", "loss"):
            current = None
            continue

        if current is None or current.type != trade.result:
            current = _Run(type=trade.result, start_index=index)
            runs.append(current)

        current.trades.append(trade)

    return runs


def _distribution(runs: Sequence[_Run]) -> dict[int, int]:
    counts = Counter(len(run.trades) for run in runs)
    return dict(sorted(counts.items()))


def _longest(runs: Sequence[_Run]) -> _Run | None:
    """Longest run; the earliest one wins a tie."""
    longest: _Run | None = None
    for run in runs:
        if longest is None or len(run.trades) > len(longest.trades):
            longest = run
    return longest


def _recovery_counts(trades: Sequence[TradeRecord], loss_runs: Sequence[_Run]) -> list[int]:
    """
    Count trades needed after each loss run to win back its losses.

    The target is the cumulative P&L just before the run started. Counting
    starts after the run's last trade; a run already back at the target when
    it ends needs 0 trades. Runs that never get back are left out.
    """
    cumulative_after: list[Decimal] = []
    cumulative = ZERO
    for trade in trades:
        cumulative += net_pnl(trade)
        cumulative_after.append(cumulative)

    counts: list[int] = []
    for run in loss_runs:
        target = cumulative_after[run.start_index - 1] if run.start_index > 0 else ZERO

        for index in range(run.end_index, len(trades)):
            if cumulative_after[index] >= target:
                counts.append(index - run.end_index)
                break

    return counts


def analyze_streaks(trades: Sequence[TradeRecord]) -> StreakAnalysis:
    """
    Analyze consecutive win/loss streaks.

    Args:
        trades: Trades in any order

    Returns:
        StreakAnalysis with:
        - current_streak: run containing the most recent trade, if that trade
          is a win or loss
        - longest_win_streak / longest_loss_streak: earliest maximal run
        - all_streaks: every run in date order
        - win/loss_streak_distribution: length -> number of runs
        - avg_win/loss_streak_length: mean run length per type
        - avg_pnl_during_win/loss_streaks: mean per-trade P&L over runs of 2+
        - avg_pnl_baseline: mean per-trade P&L over isolated trades
        - avg_recovery_trades: mean trades needed to recover after a loss run

    Example:
        >>> # W W L W W W L L
        >>> analysis = analyze_streaks(trades)
        >>> analysis.win_streak_distribution
        {2: 1, 3: 1}
        >>> analysis.current_streak.type, analysis.current_streak.length
        ('loss', 2)
    """
    ordered = sort_by_trade_date(trades)
    if not ordered:
        return StreakAnalysis()

    runs = _split_runs(ordered)
    win_runs = [r for r in runs if r.type == "win"]
    loss_runs = [r for r in runs if r.type == "loss"]

    current_streak = None
    if runs and ordered[-1].result in ("win", "loss") and runs[-1].end_index == len(ordered) - 1:
        current_streak = runs[-1].to_record()

    longest_win = _longest(win_runs)
    longest_loss = _longest(loss_runs)

    win_streak_pnls = [net_pnl(t) for r in win_runs if len(r.trades) >= 2 for t in r.trades]
    loss_streak_pnls = [net_pnl(t) for r in loss_runs if len(r.trades) >= 2 for t in r.trades]
    isolated_pnls = [net_pnl(t) for r in runs if len(r.trades) == 1 for t in r.trades]

    recovery_counts = _recovery_counts(ordered, loss_runs)

    return StreakAnalysis(
        current_streak=current_streak,
        longest_win_streak=longest_win.to_record() if longest_win else None,
        longest_loss_streak=longest_loss.to_record() if longest_loss else None,
        all_streaks=[r.to_record() for r in runs],
        win_streak_distribution=_distribution(win_runs),
        loss_streak_distribution=_distribution(loss_runs),
        avg_win_streak_length=_mean([Decimal(len(r.trades)) for r in win_runs]),
        avg_loss_streak_length=_mean([Decimal(len(r.trades)) for r in loss_runs]),
        avg_pnl_during_win_streaks=_mean(win_streak_pnls),
        avg_pnl_during_loss_streaks=_mean(loss_streak_pnls),
        avg_pnl_baseline=_mean(isolated_pnls),
        avg_recovery_trades=_mean([Decimal(c) for c in recovery_counts]),
    )
