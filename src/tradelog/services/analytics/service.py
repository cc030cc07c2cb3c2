"""Analytics service.

Builds a complete journal report from a set of trades: applies the report
filters, then runs the performance library functions over what is left.
"""

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

from tradelog.libraries.performance import (
    EquityCurvePoint,
    StrategyPerformance,
    StrategyTag,
    StreakAnalysis,
    TradeRecord,
    TradingStats,
    analyze_streaks,
    calculate_strategy_performance,
    calculate_trading_stats,
    closed_trades,
    filter_trades_by_date_range,
    filter_trades_by_strategies,
    generate_equity_curve,
)
from tradelog.system import LoggerFactory
from tradelog.system.config import AnalyticsConfig

logger = LoggerFactory.get_logger()


class JournalReport(BaseModel):
    """Everything the dashboard shows for one set of trades."""

    stats: TradingStats
    equity_curve: list[EquityCurvePoint] = Field(default_factory=list)
    strategy_performance: list[StrategyPerformance] = Field(default_factory=list)
    streaks: StreakAnalysis = Field(default_factory=StreakAnalysis)
    trade_count: int = 0
    initial_balance: Decimal = Decimal("0")
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = ConfigDict(frozen=True)


def collect_strategies(trades: Sequence[TradeRecord]) -> list[StrategyTag]:
    """Distinct strategies referenced by the trades, in first-seen order."""
    seen: dict[str, StrategyTag] = {}
    for trade in trades:
        for strategy in trade.strategies:
            seen.setdefault(strategy.id, strategy)
    return list(seen.values())


class AnalyticsService:
    """Report builder over journal trades.

    Filters run in this order: closed trades only (if configured), trade-date
    range, strategy ids. Every build recomputes from the given trades.

    Example:
        >>> service = AnalyticsService(AnalyticsConfig(initial_balance="10000"))
        >>> report = service.build_report(trades, start=date(2025, 1, 1))
        >>> report.stats.win_rate
        Decimal('62.5')
    """

    def __init__(self, config: AnalyticsConfig | None = None) -> None:
        """Initialize analytics service.

        Args:
            config: Analytics configuration; defaults are used if None

        Raises:
            ValueError: If initial_balance is not a finite number
        """
        self.config = config or AnalyticsConfig()
        try:
            self.initial_balance = Decimal(str(self.config.initial_balance))
        except InvalidOperation:
            raise ValueError(f"initial_balance must be a number, got {self.config.initial_balance!r}") from None
        if not self.initial_balance.is_finite():
            raise ValueError(f"initial_balance must be finite, got {self.config.initial_balance!r}")

    def select_trades(
        self,
        trades: Sequence[TradeRecord],
        start: date | datetime | None = None,
        end: date | datetime | None = None,
        strategy_ids: Sequence[str] | None = None,
    ) -> list[TradeRecord]:
        """Apply the configured and requested filters."""
        selected = closed_trades(trades) if self.config.closed_only else list(trades)
        if start is not None or end is not None:
            selected = filter_trades_by_date_range(selected, start, end)
        if strategy_ids:
            selected = filter_trades_by_strategies(selected, strategy_ids)

        logger.debug(
            "analytics.trades_selected",
            input_trades=len(trades),
            selected_trades=len(selected),
            closed_only=self.config.closed_only,
        )
        return selected

    def build_report(
        self,
        trades: Sequence[TradeRecord],
        strategies: Sequence[StrategyTag] | None = None,
        start: date | datetime | None = None,
        end: date | datetime | None = None,
        strategy_ids: Sequence[str] | None = None,
    ) -> JournalReport:
        """
        Build the full report.

        Args:
            trades: All journal trades
            strategies: Strategies to break down. If None, uses the strategies
                referenced by the selected trades (limited to strategy_ids
                when given).
            start: Earliest trade date to include
            end: Latest trade date to include (a date covers the whole day)
            strategy_ids: Keep only trades tagged with one of these strategies

        Returns:
            JournalReport over the selected trades
        """
        selected = self.select_trades(trades, start=start, end=end, strategy_ids=strategy_ids)

        if not selected and trades:
            logger.warning("analytics.no_trades_selected", input_trades=len(trades))

        if strategies is None:
            strategies = collect_strategies(selected)
            if strategy_ids:
                wanted = set(strategy_ids)
                strategies = [s for s in strategies if s.id in wanted]

        report = JournalReport(
            stats=calculate_trading_stats(selected, initial_balance=self.initial_balance),
            equity_curve=generate_equity_curve(selected),
            strategy_performance=calculate_strategy_performance(selected, strategies),
            streaks=analyze_streaks(selected),
            trade_count=len(selected),
            initial_balance=self.initial_balance,
        )

        logger.info(
            "analytics.report_built",
            trades=report.trade_count,
            strategies=len(report.strategy_performance),
            total_pnl=str(report.stats.total_pnl),
        )
        return report
