"""Journal loading service.

Exports:
    - load_trades: Read a JSON or CSV journal export into TradeRecord models
    - TradeLoadError: Raised for unreadable files and invalid trades
"""

from tradelog.services.journal.loader import TradeLoadError, load_trades

__all__ = [
    "load_trades",
    "TradeLoadError",
]
