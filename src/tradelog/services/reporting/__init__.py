"""Console reporting for journal analytics."""

from tradelog.services.reporting.formatters import create_equity_curve_table, display_journal_report

__all__ = [
    "display_journal_report",
    "create_equity_curve_table",
]
