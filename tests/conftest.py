"""Root conftest for all tests - sys.path setup and shared trade factory."""

import itertools
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

# Add src to sys.path so tests run without an installed package
src_root = Path(__file__).parent.parent / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from tradelog.libraries.performance.models import TradeRecord  # noqa: E402

_AUTO = object()


@pytest.fixture
def make_trade():
    """
    Factory fixture for TradeRecord.

    Each call gets the next id (t-001, t-002, ...) and, unless given, the next
    calendar day starting 2025-01-01. The result label follows the P&L sign
    unless passed explicitly (pass result=None for an unlabelled trade).

    Example:
        >>> trade = make_trade(30)  # win, pnl=30
        >>> trade = make_trade(-10, strategies=[breakout])
    """
    counter = itertools.count(1)

    def _make(pnl=None, result=_AUTO, trade_date=None, **overrides) -> TradeRecord:
        n = next(counter)

        if result is _AUTO:
            if pnl is None or Decimal(str(pnl)) == 0:
                result = "breakeven"
            elif Decimal(str(pnl)) > 0:
                result = "win"
            else:
                result = "loss"

        data = {
            "id": f"t-{n:03d}",
            "pair": "BTCUSDT",
            "direction": "LONG",
            "result": result,
            "trade_date": trade_date or (date(2025, 1, 1) + timedelta(days=n - 1)).isoformat(),
        }
        if pnl is not None:
            data["pnl"] = Decimal(str(pnl))
        data.update(overrides)
        return TradeRecord(**data)

    return _make
