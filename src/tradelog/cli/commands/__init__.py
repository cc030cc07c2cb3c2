"""Commands __init__ - exports all commands."""

from tradelog.cli.commands.curve import curve_command
from tradelog.cli.commands.stats import stats_command

__all__ = ["stats_command", "curve_command"]
