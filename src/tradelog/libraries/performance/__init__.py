"""Performance analytics library for trading journals.

This library turns journal trades into deterministic performance analytics:

1. **Models** (`models.py`): Pydantic data structures
   - TradeRecord: One journal trade (read-only input)
   - StrategyTag: Strategy a trade can be tagged with
   - TradingStats: Aggregate statistics value object
   - EquityCurvePoint: Cumulative P&L point per trade
   - StrategyPerformance: Per-strategy statistics and contribution
   - StreakRecord / StreakAnalysis: Win/loss run analytics

2. **Metrics** (`metrics.py`): Pure calculation functions
   - P&L resolution: net_pnl
   - Risk: calculate_rr, calculate_max_drawdown, calculate_sharpe_ratio
   - Trade stats: calculate_trading_stats, calculate_profit_factor
   - Curves and breakdowns: generate_equity_curve, calculate_strategy_performance
   - Filters: filter_trades_by_date_range, filter_trades_by_strategies, closed_trades

3. **Streaks** (`streaks.py`): Run segmentation
   - analyze_streaks

Usage:
    >>> from tradelog.libraries.performance import calculate_trading_stats
    >>> stats = calculate_trading_stats(trades, initial_balance=Decimal("10000"))
    >>> print(f"Win rate: {stats.win_rate:.1f}%")

Design Principles:
    - Decimal precision for financial calculations
    - Explicit edge case handling (zero trades, no losses, zero risk)
    - Every call recomputes from scratch; nothing is cached
"""

# Pure calculation functions
from tradelog.libraries.performance.metrics import (
    calculate_average_rr,
    calculate_consecutive_streaks,
    calculate_max_drawdown,
    calculate_profit_factor,
    calculate_rr,
    calculate_sharpe_ratio,
    calculate_strategy_performance,
    calculate_trading_stats,
    closed_trades,
    filter_trades_by_date_range,
    filter_trades_by_strategies,
    generate_equity_curve,
    net_pnl,
    sort_by_trade_date,
)

# Models
from tradelog.libraries.performance.models import (
    EquityCurvePoint,
    StrategyPerformance,
    StrategyTag,
    StreakAnalysis,
    StreakRecord,
    TradeRecord,
    TradingStats,
)

# Streak analysis
from tradelog.libraries.performance.streaks import analyze_streaks

__all__ = [
    # Models
    "TradeRecord",
    "StrategyTag",
    "TradingStats",
    "EquityCurvePoint",
    "StrategyPerformance",
    "StreakRecord",
    "StreakAnalysis",
    # Metrics (pure functions)
    "net_pnl",
    "calculate_rr",
    "calculate_average_rr",
    "calculate_profit_factor",
    "calculate_max_drawdown",
    "calculate_sharpe_ratio",
    "calculate_consecutive_streaks",
    "calculate_trading_stats",
    "generate_equity_curve",
    "calculate_strategy_performance",
    "filter_trades_by_date_range",
    "filter_trades_by_strategies",
    "closed_trades",
    "sort_by_trade_date",
    # Streaks
    "analyze_streaks",
]
