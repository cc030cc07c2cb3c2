"""
tradelog - Trading Journal Analytics

Performance statistics, equity curves, strategy breakdowns and streak
analysis computed from journal trades.
"""

from importlib.metadata import version

try:
    __version__ = version("tradelog")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
