"""Performance analytics data models.

Pydantic models for journal trades and the value objects derived from them.
Trades are read-only inputs; every derived model is rebuilt from scratch on
each calculation and never updated in place.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

StreakType = Literal["win", "loss"]

_FRACTION_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_trade_date(value: str) -> datetime:
    """
    Parse a journal trade date into a timezone-aware datetime.

    Accepts date-only ("2025-01-05") and date-time strings, including a
    trailing "Z" and fractional seconds of any precision (padded or cut to
    microseconds). Naive values are taken as UTC so that mixed inputs still
    sort against each other.

    Args:
        value: ISO-8601 date or date-time string

    Returns:
        Timezone-aware datetime

    Raises:
        ValueError: If the string is not an ISO date
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _FRACTION_PATTERN.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class StrategyTag(BaseModel):
    """
    Strategy a trade can be tagged with.

    Trades and strategies are many-to-many; a trade carries zero or more tags
    and per-strategy analytics match on ``id``.
    """

    id: str
    name: str
    description: str | None = None
    color: str | None = None
    is_active: bool = True

    model_config = ConfigDict(frozen=True)


class TradeRecord(BaseModel):
    """
    One journal trade as supplied by the persistence layer.

    A trade may carry two independent P&L figures: ``realized_pnl`` (synced
    from the exchange) and ``pnl`` (entered manually or estimated). Always
    read P&L through ``net_pnl`` so that every calculation resolves it the
    same way.

    Example:
        >>> trade = TradeRecord(
        ...     id="t-001",
        ...     pair="BTCUSDT",
        ...     direction="long",
        ...     entry_price="100",
        ...     exit_price="110",
        ...     stop_loss="95",
        ...     pnl="10",
        ...     result="win",
        ...     trade_date="2025-01-05",
        ... )
        >>> trade.direction
        'LONG'
    """

    # Identity
    id: str
    user_id: str | None = None

    # Instrument
    pair: str
    direction: Literal["LONG", "SHORT"]

    # Prices
    entry_price: Decimal | None = None
    exit_price: Decimal | None = None
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None

    # Size
    quantity: Decimal = Field(default=Decimal("0"), ge=0)

    # Outcome
    realized_pnl: Decimal | None = None  # Exchange-reported
    pnl: Decimal | None = None  # Manual / planned
    fees: Decimal | None = None
    result: Literal["win", "loss", "breakeven"] | None = None
    status: Literal["open", "closed"] = "closed"

    # Time
    trade_date: str
    entry_time: datetime | None = None  # Holding-time analytics only
    exit_time: datetime | None = None

    # Associations
    strategies: list[StrategyTag] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    confluence_score: Decimal | None = None
    ai_quality_score: Decimal | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        """Accept direction in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("result", mode="before")
    @classmethod
    def normalize_result(cls, v: Any) -> Any:
        """Accept result in any case; blank means no result."""
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Accept status in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("trade_date")
    @classmethod
    def validate_trade_date(cls, v: str) -> str:
        """Validate trade_date is an ISO date; the raw string is kept."""
        try:
            parse_trade_date(v)
        except ValueError:
            raise ValueError(f"trade_date must be an ISO-8601 date or date-time, got {v!r}") from None
        return v

    @property
    def traded_at(self) -> datetime:
        """Parsed trade date (timezone-aware)."""
        return parse_trade_date(self.trade_date)

    @property
    def net_pnl(self) -> Decimal:
        """Resolved P&L: realized, else manual, else zero."""
        from tradelog.libraries.performance.metrics import net_pnl

        return net_pnl(self)

    @property
    def strategy_ids(self) -> list[str]:
        """Ids of all strategies this trade is tagged with."""
        return [s.id for s in self.strategies]


class TradingStats(BaseModel):
    """
    Aggregate trading statistics for a set of trades.

    Built by ``calculate_trading_stats``. Defaults describe the empty set, so
    ``TradingStats()`` is the result for no trades.

    Notes:
        profit_factor is ``Decimal("Infinity")`` when there is profit and no
        loss. Formatting it is left to presentation.
    """

    # Counts
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0

    # Rates and P&L
    win_rate: Decimal = Decimal("0")  # Percentage (0-100)
    total_pnl: Decimal = Decimal("0")
    avg_pnl: Decimal = Decimal("0")
    avg_rr: Decimal = Decimal("0")
    profit_factor: Decimal = Field(default=Decimal("0"), allow_inf_nan=True)
    expectancy: Decimal = Decimal("0")

    # Risk
    max_drawdown: Decimal = Decimal("0")
    max_drawdown_percent: Decimal = Decimal("0")  # Capped at 100
    sharpe_ratio: Decimal = Decimal("0")  # Per-trade returns annualised with sqrt(252)

    # Trade distribution
    gross_profit: Decimal = Decimal("0")
    gross_loss: Decimal = Decimal("0")  # Positive number
    largest_win: Decimal = Decimal("0")
    largest_loss: Decimal = Decimal("0")  # Positive number
    avg_win: Decimal = Decimal("0")
    avg_loss: Decimal = Decimal("0")  # Positive number

    # Streaks
    consecutive_wins: int = 0
    consecutive_losses: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def has_unbounded_profit_factor(self) -> bool:
        """True if there was profit and no loss."""
        return self.profit_factor.is_infinite()


class EquityCurvePoint(BaseModel):
    """
    Single point on the cumulative P&L curve.

    One point per trade, in trade-date order. Pair and direction are passed
    through for chart labels.
    """

    trade_id: str
    trade_date: str  # Raw value from the trade
    timestamp: datetime
    pnl: Decimal
    cumulative: Decimal
    pair: str
    direction: Literal["LONG", "SHORT"]

    model_config = ConfigDict(frozen=True)


class StrategyPerformance(BaseModel):
    """
    Performance of the trades tagged with one strategy.

    ``stats`` is computed with the same engine as the portfolio totals.
    ``contribution`` is the strategy's P&L as a percentage of the absolute
    portfolio P&L, so its sign always follows the strategy's own P&L.
    """

    strategy: StrategyTag
    stats: TradingStats
    contribution: Decimal = Decimal("0")

    model_config = ConfigDict(frozen=True)

    @property
    def total_trades(self) -> int:
        """Number of trades tagged with this strategy."""
        return self.stats.total_trades

    @property
    def wins(self) -> int:
        """Winning trades."""
        return self.stats.wins

    @property
    def losses(self) -> int:
        """Losing trades."""
        return self.stats.losses

    @property
    def win_rate(self) -> Decimal:
        """Win rate percentage."""
        return self.stats.win_rate

    @property
    def total_pnl(self) -> Decimal:
        """Net P&L of this strategy."""
        return self.stats.total_pnl

    @property
    def avg_pnl(self) -> Decimal:
        """Average net P&L per trade."""
        return self.stats.avg_pnl

    @property
    def avg_rr(self) -> Decimal:
        """Average absolute R-multiple."""
        return self.stats.avg_rr


class StreakRecord(BaseModel):
    """
    A maximal run of consecutive winning or losing trades.

    Dates are the raw trade_date values of the first and last trade in the
    run. ``pairs`` lists each traded pair once, in the order first seen.
    """

    type: StreakType
    length: int
    start_date: str
    end_date: str
    total_pnl: Decimal
    pairs: list[str] = Field(default_factory=list)
    trade_ids: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class StreakAnalysis(BaseModel):
    """
    Streak analytics over a trade history.

    Distributions map streak length to the number of runs of that length.
    P&L averages are per trade. ``avg_pnl_baseline`` covers isolated trades
    (runs of length 1) and is the reference for the in-streak averages.
    """

    current_streak: StreakRecord | None = None
    longest_win_streak: StreakRecord | None = None
    longest_loss_streak: StreakRecord | None = None
    all_streaks: list[StreakRecord] = Field(default_factory=list)

    win_streak_distribution: dict[int, int] = Field(default_factory=dict)
    loss_streak_distribution: dict[int, int] = Field(default_factory=dict)

    avg_win_streak_length: Decimal = Decimal("0")
    avg_loss_streak_length: Decimal = Decimal("0")

    avg_pnl_during_win_streaks: Decimal = Decimal("0")
    avg_pnl_during_loss_streaks: Decimal = Decimal("0")
    avg_pnl_baseline: Decimal = Decimal("0")

    avg_recovery_trades: Decimal = Decimal("0")  # Loss streaks that never recover are excluded

    model_config = ConfigDict(frozen=True)
