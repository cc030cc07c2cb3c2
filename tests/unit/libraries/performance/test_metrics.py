"""Tests for performance metrics calculations."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

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
from tradelog.libraries.performance.models import StrategyTag, TradingStats

BREAKOUT = StrategyTag(id="s1", name="Breakout")
REVERSAL = StrategyTag(id="s2", name="Reversal")
UNUSED = StrategyTag(id="s3", name="Unused")


@pytest.fixture
def mixed_trades(make_trade):
    """Two wins and two losses: +30, -10, +20, -10 on consecutive days."""
    return [make_trade(30), make_trade(-10), make_trade(20), make_trade(-10)]


class TestNetPnl:
    """Test P&L resolution."""

    def test_realized_pnl_wins(self, make_trade):
        trade = make_trade(10, realized_pnl=Decimal("12"))

        assert net_pnl(trade) == Decimal("12")

    def test_falls_back_to_manual_pnl(self, make_trade):
        assert net_pnl(make_trade(10)) == Decimal("10")

    def test_zero_when_nothing_set(self, make_trade):
        assert net_pnl(make_trade(None, result=None)) == Decimal("0")

    def test_realized_zero_is_not_skipped(self, make_trade):
        trade = make_trade(10, realized_pnl=Decimal("0"))

        assert net_pnl(trade) == Decimal("0")


class TestRMultiple:
    """Test R-multiple calculation and sign convention."""

    def test_winning_long(self, make_trade):
        # Arrange - risk 5, reward 10
        trade = make_trade(10, entry_price="100", stop_loss="95", exit_price="110")

        # Act & Assert
        assert calculate_rr(trade) == Decimal("2")

    def test_losing_trade_is_negative(self, make_trade):
        trade = make_trade(-10, entry_price="100", stop_loss="95", exit_price="90")

        assert calculate_rr(trade) == Decimal("-2")

    def test_winning_short(self, make_trade):
        trade = make_trade(10, direction="SHORT", entry_price="100", stop_loss="105", exit_price="90")

        assert calculate_rr(trade) == Decimal("2")

    def test_sign_follows_label_not_price_move(self, make_trade):
        # Price moved up but the trade is labelled a loss
        trade = make_trade(-1, entry_price="100", stop_loss="95", exit_price="105")

        assert calculate_rr(trade) == Decimal("-1")

    def test_no_stop_loss_is_zero(self, make_trade):
        trade = make_trade(10, entry_price="100", exit_price="110")

        assert calculate_rr(trade) == Decimal("0")

    def test_zero_risk_is_zero(self, make_trade):
        trade = make_trade(10, entry_price="100", stop_loss="100", exit_price="110")

        assert calculate_rr(trade) == Decimal("0")

    def test_average_uses_absolute_values_and_skips_zero(self, make_trade):
        # Arrange - R of 2, -1 and one trade without a stop
        trades = [
            make_trade(10, entry_price="100", stop_loss="95", exit_price="110"),
            make_trade(-5, entry_price="100", stop_loss="95", exit_price="95"),
            make_trade(10, entry_price="100", exit_price="110"),
        ]

        # Act & Assert
        assert calculate_average_rr(trades) == Decimal("1.5")

    def test_average_without_qualifying_trades_is_zero(self, make_trade):
        assert calculate_average_rr([make_trade(10)]) == Decimal("0")


class TestProfitFactor:
    """Test profit factor edge cases."""

    def test_ratio(self):
        assert calculate_profit_factor(Decimal("30"), Decimal("10")) == Decimal("3")

    def test_no_losses_is_infinity(self):
        result = calculate_profit_factor(Decimal("30"), Decimal("0"))

        assert result.is_infinite()
        assert result > 0

    def test_no_profit_and_no_loss_is_zero(self):
        assert calculate_profit_factor(Decimal("0"), Decimal("0")) == Decimal("0")

    def test_only_losses_is_zero(self):
        assert calculate_profit_factor(Decimal("0"), Decimal("10")) == Decimal("0")


class TestMaxDrawdown:
    """Test peak-to-trough drawdown."""

    def test_peak_to_trough(self, make_trade):
        # Arrange - cumulative 20, 5, -5
        trades = [make_trade(20), make_trade(-15), make_trade(-10)]

        # Act
        drawdown, percent = calculate_max_drawdown(trades)

        # Assert - base is 0 + peak 20, so 125% caps at 100
        assert drawdown == Decimal("25")
        assert percent == Decimal("100")

    def test_percent_uses_initial_balance(self, make_trade):
        trades = [make_trade(20), make_trade(-15), make_trade(-10)]

        _, percent = calculate_max_drawdown(trades, Decimal("1000"))

        # 25 / 1020 * 100
        assert abs(percent - Decimal("2.4510")) < Decimal("0.0001")

    def test_input_order_does_not_matter(self, make_trade):
        trades = [make_trade(20), make_trade(-15), make_trade(-10)]

        assert calculate_max_drawdown(list(reversed(trades))) == calculate_max_drawdown(trades)

    def test_losing_from_the_start(self, make_trade):
        trades = [make_trade(-10), make_trade(-5)]

        drawdown, percent = calculate_max_drawdown(trades, Decimal("100"))

        assert drawdown == Decimal("15")
        assert percent == Decimal("15")

    def test_no_positive_base_gives_zero_percent(self, make_trade):
        _, percent = calculate_max_drawdown([make_trade(-10)], Decimal("0"))

        assert percent == Decimal("0")

    def test_empty(self):
        assert calculate_max_drawdown([]) == (Decimal("0"), Decimal("0"))


class TestSharpeRatio:
    """Test per-trade Sharpe-like ratio."""

    def test_empty_is_zero(self):
        assert calculate_sharpe_ratio([]) == Decimal("0")

    def test_constant_values_are_zero(self):
        assert calculate_sharpe_ratio([Decimal("5")] * 3) == Decimal("0")

    def test_annualized_with_population_std(self):
        # mean 15, population std 5 -> 3 * sqrt(252)
        result = calculate_sharpe_ratio([Decimal("10"), Decimal("20")])

        assert abs(result - Decimal("47.6235")) < Decimal("0.001")

    def test_zero_mean_is_zero(self):
        assert calculate_sharpe_ratio([Decimal("10"), Decimal("-10")]) == Decimal("0")


class TestConsecutiveStreaks:
    """Test longest win/loss runs."""

    def test_win_win_loss(self, make_trade):
        trades = [make_trade(10), make_trade(5), make_trade(-3)]

        assert calculate_consecutive_streaks(trades) == (2, 1)

    def test_breakeven_resets(self, make_trade):
        trades = [make_trade(10), make_trade(10), make_trade(0), make_trade(10)]

        assert calculate_consecutive_streaks(trades) == (2, 0)

    def test_unlabelled_resets(self, make_trade):
        trades = [make_trade(-1), make_trade(5, result=None), make_trade(-1)]

        assert calculate_consecutive_streaks(trades) == (0, 1)

    def test_counted_in_date_order(self, make_trade):
        trades = [make_trade(10), make_trade(-3), make_trade(10)]

        # Reversed input still reads W L W by date
        assert calculate_consecutive_streaks(list(reversed(trades))) == (1, 1)


class TestTradingStats:
    """Test the full statistics record."""

    def test_empty_input(self):
        assert calculate_trading_stats([]) == TradingStats()

    def test_mixed_trades(self, mixed_trades):
        # Act
        stats = calculate_trading_stats(mixed_trades)

        # Assert - counts
        assert stats.total_trades == 4
        assert stats.wins == 2
        assert stats.losses == 2
        assert stats.breakeven == 0
        assert stats.win_rate == Decimal("50")

        # Assert - P&L
        assert stats.total_pnl == Decimal("30")
        assert stats.avg_pnl == Decimal("7.5")
        assert stats.gross_profit == Decimal("50")
        assert stats.gross_loss == Decimal("20")
        assert stats.profit_factor == Decimal("2.5")
        assert stats.avg_win == Decimal("25")
        assert stats.avg_loss == Decimal("10")
        assert stats.expectancy == Decimal("7.5")
        assert stats.largest_win == Decimal("30")
        assert stats.largest_loss == Decimal("10")

        # Assert - risk and streaks
        assert stats.max_drawdown == Decimal("10")
        assert stats.consecutive_wins == 1
        assert stats.consecutive_losses == 1

    def test_deterministic(self, mixed_trades):
        first = calculate_trading_stats(mixed_trades, initial_balance=1000)
        second = calculate_trading_stats(mixed_trades, initial_balance=1000)

        assert first == second

    def test_order_independent(self, mixed_trades):
        assert calculate_trading_stats(list(reversed(mixed_trades))) == calculate_trading_stats(mixed_trades)

    def test_no_losses_gives_infinite_profit_factor(self, make_trade):
        stats = calculate_trading_stats([make_trade(10), make_trade(5)])

        assert stats.has_unbounded_profit_factor
        assert stats.avg_loss == Decimal("0")

    def test_unlabelled_trades_count_in_totals_only(self, make_trade):
        stats = calculate_trading_stats([make_trade(10), make_trade(5, result=None)])

        assert stats.total_trades == 2
        assert stats.wins == 1
        assert stats.losses == 0
        assert stats.breakeven == 0
        assert stats.win_rate == Decimal("50")
        assert stats.total_pnl == Decimal("15")

    def test_breakeven_counted(self, make_trade):
        stats = calculate_trading_stats([make_trade(10), make_trade(0)])

        assert stats.breakeven == 1
        assert stats.win_rate == Decimal("50")

    def test_realized_pnl_used_everywhere(self, make_trade):
        trades = [make_trade(10, realized_pnl=Decimal("8")), make_trade(-5)]

        stats = calculate_trading_stats(trades)

        assert stats.total_pnl == Decimal("3")
        assert stats.gross_profit == Decimal("8")

    def test_initial_balance_accepts_plain_numbers(self, mixed_trades):
        stats = calculate_trading_stats(mixed_trades, initial_balance="960")

        # final peak 40, base 1000, drawdown 10
        assert stats.max_drawdown_percent == Decimal("1")


class TestEquityCurve:
    """Test cumulative P&L curve."""

    def test_accumulates(self, make_trade):
        curve = generate_equity_curve([make_trade(10), make_trade(-3)])

        assert [p.cumulative for p in curve] == [Decimal("10"), Decimal("7")]
        assert [p.pnl for p in curve] == [Decimal("10"), Decimal("-3")]

    def test_sorted_by_trade_date(self, make_trade):
        later = make_trade(10, trade_date="2025-02-01")
        earlier = make_trade(-3, trade_date="2025-01-01")

        curve = generate_equity_curve([later, earlier])

        assert [p.trade_id for p in curve] == [earlier.id, later.id]
        assert curve[-1].cumulative == Decimal("7")

    def test_resorting_is_idempotent(self, mixed_trades):
        curve = generate_equity_curve(list(reversed(mixed_trades)))

        assert generate_equity_curve(sort_by_trade_date(mixed_trades)) == curve

    def test_same_date_keeps_input_order(self, make_trade):
        first = make_trade(1, trade_date="2025-01-01")
        second = make_trade(2, trade_date="2025-01-01")

        curve = generate_equity_curve([first, second])

        assert [p.trade_id for p in curve] == [first.id, second.id]

    def test_mixed_date_formats(self, make_trade):
        date_only = make_trade(1, trade_date="2025-01-02")
        with_time = make_trade(2, trade_date="2025-01-01T23:00:00Z")

        curve = generate_equity_curve([date_only, with_time])

        assert [p.trade_id for p in curve] == [with_time.id, date_only.id]
        assert curve[0].timestamp == datetime(2025, 1, 1, 23, tzinfo=timezone.utc)

    def test_passes_through_labels(self, make_trade):
        trade = make_trade(5, pair="ETHUSDT", direction="SHORT")

        point = generate_equity_curve([trade])[0]

        assert point.pair == "ETHUSDT"
        assert point.direction == "SHORT"
        assert point.trade_date == trade.trade_date

    def test_empty(self):
        assert generate_equity_curve([]) == []


class TestStrategyPerformance:
    """Test per-strategy breakdown."""

    def test_breakdown_and_ordering(self, make_trade):
        # Arrange - portfolio P&L 25
        trades = [
            make_trade(30, strategies=[BREAKOUT]),
            make_trade(-10, strategies=[REVERSAL]),
            make_trade(5, strategies=[BREAKOUT, REVERSAL]),
        ]

        # Act
        results = calculate_strategy_performance(trades, [REVERSAL, UNUSED, BREAKOUT])

        # Assert - best P&L first
        assert [r.strategy.id for r in results] == ["s1", "s3", "s2"]

        breakout, unused, reversal = results
        assert breakout.total_pnl == Decimal("35")
        assert breakout.total_trades == 2
        assert breakout.contribution == Decimal("140")
        assert reversal.total_pnl == Decimal("-5")
        assert reversal.contribution == Decimal("-20")

    def test_strategy_without_trades_is_present(self, make_trade):
        results = calculate_strategy_performance([make_trade(10, strategies=[BREAKOUT])], [BREAKOUT, UNUSED])

        unused = next(r for r in results if r.strategy.id == "s3")
        assert unused.total_trades == 0
        assert unused.stats == TradingStats()
        assert unused.contribution == Decimal("0")

    def test_losing_portfolio_keeps_contribution_sign(self, make_trade):
        # Portfolio P&L -5
        trades = [make_trade(-10, strategies=[BREAKOUT]), make_trade(5, strategies=[REVERSAL])]

        results = {r.strategy.id: r for r in calculate_strategy_performance(trades, [BREAKOUT, REVERSAL])}

        assert results["s1"].contribution == Decimal("-200")
        assert results["s2"].contribution == Decimal("100")

    def test_zero_portfolio_pnl_gives_zero_contribution(self, make_trade):
        trades = [make_trade(10, strategies=[BREAKOUT]), make_trade(-10, strategies=[REVERSAL])]

        results = calculate_strategy_performance(trades, [BREAKOUT, REVERSAL])

        assert all(r.contribution == Decimal("0") for r in results)

    def test_nested_stats_use_same_engine(self, make_trade):
        trades = [make_trade(10, strategies=[BREAKOUT]), make_trade(-4, strategies=[BREAKOUT])]

        result = calculate_strategy_performance(trades, [BREAKOUT])[0]

        assert result.stats == calculate_trading_stats(trades)

    def test_ties_keep_requested_order(self, make_trade):
        results = calculate_strategy_performance([make_trade(10)], [UNUSED, BREAKOUT, REVERSAL])

        assert [r.strategy.id for r in results] == ["s3", "s1", "s2"]


class TestFilters:
    """Test trade filters."""

    def test_date_range_end_date_covers_whole_day(self, make_trade):
        inside = make_trade(1, trade_date="2025-01-31T15:00:00Z")
        outside = make_trade(1, trade_date="2025-02-01T00:00:00Z")

        result = filter_trades_by_date_range([inside, outside], None, date(2025, 1, 31))

        assert result == [inside]

    def test_date_range_start_inclusive(self, make_trade):
        before = make_trade(1, trade_date="2024-12-31")
        on_start = make_trade(1, trade_date="2025-01-01")

        result = filter_trades_by_date_range([before, on_start], date(2025, 1, 1), None)

        assert result == [on_start]

    def test_date_range_accepts_datetimes(self, make_trade):
        trade = make_trade(1, trade_date="2025-01-10T12:00:00Z")

        assert filter_trades_by_date_range([trade], datetime(2025, 1, 10, 13), None) == []

    def test_no_bounds_keeps_all(self, mixed_trades):
        assert filter_trades_by_date_range(mixed_trades, None, None) == mixed_trades

    def test_by_strategies(self, make_trade):
        tagged = make_trade(1, strategies=[BREAKOUT])
        other = make_trade(1, strategies=[REVERSAL])
        untagged = make_trade(1)

        assert filter_trades_by_strategies([tagged, other, untagged], ["s1"]) == [tagged]
        assert filter_trades_by_strategies([tagged, other, untagged], []) == [tagged, other, untagged]

    def test_closed_trades(self, make_trade):
        closed = make_trade(1)
        still_open = make_trade(None, result=None, status="open")

        assert closed_trades([closed, still_open]) == [closed]
