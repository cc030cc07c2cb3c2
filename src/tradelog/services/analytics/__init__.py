"""Analytics service.

Exports:
    - AnalyticsService: Builds journal reports from trades
    - JournalReport: Stats, equity curve, strategy breakdown and streaks
    - collect_strategies: Distinct strategies referenced by a trade set
"""

from tradelog.services.analytics.service import AnalyticsService, JournalReport, collect_strategies

__all__ = [
    "AnalyticsService",
    "JournalReport",
    "collect_strategies",
]
