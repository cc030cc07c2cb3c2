"""Shared setup for commands."""

from pathlib import Path
from typing import Literal, Optional, cast

from tradelog.system import LoggerFactory
from tradelog.system.config import SystemConfig, reload_system_config


def load_run_config(config_file: Optional[Path], log_level: Optional[str]) -> SystemConfig:
    """
    Load system config for one command run and configure logging from it.

    Args:
        config_file: Explicit system.yaml path (default location if None)
        log_level: Override for the console log level

    Returns:
        Loaded SystemConfig
    """
    system_config = reload_system_config(config_file)

    if log_level:
        # Click already validated the choice
        level = cast(Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], log_level.upper())
        system_config.logging.level = level

    LoggerFactory.configure(system_config.logging.to_logger_config())
    return system_config
