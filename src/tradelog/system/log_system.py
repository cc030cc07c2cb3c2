"""Structured logging for tradelog.

Events are dotted names (``journal_loader.loaded``, ``analytics.report_built``)
with keyword context. The console handler writes to stderr so that command
output on stdout (``tradelog curve --json``) stays machine-readable; the
optional file handler always writes JSON lines.
"""

import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Literal

import structlog
from pydantic import BaseModel, Field

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_LOG_FILE = Path("logs/tradelog.log")

# Key used for the render timestamp; trades carry their own dates.
TIMESTAMP_KEY = "log_timestamp"

_TIMESTAMP_FORMATS = {
    "compact": "%y%m%d-%H%M%S",
    "time": "%H:%M:%S",
}

_RESET = "\033[0m"
_DIM = "\033[2m"
_BOLD = "\033[1m"
_GRAY = "\033[90m"
_CYAN = "\033[36m"
_LEVEL_STYLES = {
    "debug": "\033[36m",
    "info": "\033[32m",
    "warning": "\033[33m",
    "error": "\033[31m",
    "critical": "\033[35m",
}


class LoggingConfig(BaseModel):
    """Logging settings.

    ``level`` filters the console; ``file_level`` filters the file handler
    independently. Routine progress (file loaded, report built) is INFO,
    per-step filter counts are DEBUG, and journals or filters that leave no
    trades are WARNING.

    Timestamp formats: ``iso`` (2025-01-05T10:30:00.123456+00:00),
    ``compact`` (250105-103000.12) and ``time`` (10:30:00.12).
    """

    level: LogLevel = "INFO"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time"] = "compact"
    enable_file: bool = False
    file_path: Path | None = Field(default=None, description="Log file; logs/tradelog.log if None")
    file_level: LogLevel = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = Field(default=10, ge=1)
    backup_count: int = Field(default=3, ge=0)


def _timestamper(fmt: str) -> Callable[[Any, str, dict[str, Any]], dict[str, Any]]:
    pattern = _TIMESTAMP_FORMATS.get(fmt)

    def add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        if pattern is None:
            event_dict[TIMESTAMP_KEY] = now.isoformat()
        else:
            event_dict[TIMESTAMP_KEY] = f"{now.strftime(pattern)}.{now.microsecond // 10000:02d}"
        return event_dict

    return add_timestamp


def _render_console(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """One line per event: time, level, event name, context, then origin."""
    timestamp = event_dict.pop(TIMESTAMP_KEY, "")
    level = str(event_dict.pop("level", "info")).lower()
    event = event_dict.pop("event", "")
    source = event_dict.pop("logger", "") or "tradelog"
    lineno = event_dict.pop("lineno", None)

    line = f"{_DIM}{timestamp}{_RESET} [{_LEVEL_STYLES.get(level, '')}{level}{_RESET}] {_BOLD}{event}{_RESET}"

    context = " ".join(
        f"{key}={_CYAN}{value}{_RESET}" for key, value in sorted(event_dict.items()) if not key.startswith("_")
    )
    if context:
        line += f" {_GRAY}|{_RESET} {context}"

    origin = f"{source}:{lineno}" if lineno else source
    return f"{line} {_GRAY}({origin}){_RESET}"


class LoggerFactory:
    """
    Process-wide structlog setup.

    ``configure()`` runs once per command (``load_run_config`` calls it); any
    module grabs its logger at import time with ``get_logger()``, which falls
    back to the default configuration if nothing configured logging yet.

    Example:
        >>> LoggerFactory.configure(LoggingConfig(level="DEBUG", format="json"))
        >>> logger = LoggerFactory.get_logger()
        >>> logger.info("journal_loader.loaded", path="trades.json", trades=42)
    """

    _config: LoggingConfig | None = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: LoggingConfig | None = None) -> None:
        """
        Install handlers on the root logger and configure structlog.

        Args:
            config: Logging settings; defaults are used if None
        """
        config = config or LoggingConfig()
        if config.enable_file and config.file_path is None:
            config = config.model_copy(update={"file_path": DEFAULT_LOG_FILE})
        cls._config = config

        pre_chain: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _timestamper(config.timestamp_format),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.CallsiteParameterAdder([structlog.processors.CallsiteParameter.LINENO]),
        ]

        console_renderer = _render_console if config.format == "console" else structlog.processors.JSONRenderer()
        handlers: list[logging.Handler] = [
            cls._handler(logging.StreamHandler(sys.stderr), config.level, console_renderer, pre_chain)
        ]
        if config.enable_file:
            handlers.append(cls._file_handler(config, pre_chain))

        root_level = min(handler.level for handler in handlers)
        logging.basicConfig(level=root_level, handlers=handlers, force=True)

        structlog.configure(
            processors=[
                *pre_chain,
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        cls._configured = True

    @staticmethod
    def _handler(
        handler: logging.Handler,
        level: str,
        renderer: Any,
        pre_chain: list[Any],
    ) -> logging.Handler:
        handler.setLevel(level)
        handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain))
        return handler

    @classmethod
    def _file_handler(cls, config: LoggingConfig, pre_chain: list[Any]) -> logging.Handler:
        """JSON lines file handler, rotating by size unless disabled."""
        file_path = config.file_path or DEFAULT_LOG_FILE
        file_path.parent.mkdir(parents=True, exist_ok=True)

        handler: logging.Handler
        if config.file_rotation:
            handler = RotatingFileHandler(
                file_path,
                maxBytes=config.max_file_size_mb * 1024 * 1024,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        else:
            handler = logging.FileHandler(file_path, encoding="utf-8")

        return cls._handler(handler, config.file_level, structlog.processors.JSONRenderer(), pre_chain)

    @classmethod
    def get_logger(cls, name: str | None = None):
        """
        Get a bound logger, configuring defaults on first use.

        Args:
            name: Logger name; the calling module's ``__name__`` if None
        """
        if not cls._configured:
            cls.configure()
        if name is None:
            name = sys._getframe(1).f_globals.get("__name__", "tradelog")
        return structlog.get_logger(name)

    @classmethod
    def get_config(cls) -> LoggingConfig:
        return cls._config or LoggingConfig()

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured

    @classmethod
    def reset(cls) -> None:
        """Drop handlers and structlog configuration (used by tests)."""
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(logging.NOTSET)
        cls._config = None
        cls._configured = False
        structlog.reset_defaults()
