"""
System configuration.

One YAML file configures the whole tool: analytics defaults, output display
and logging. Every section has built-in defaults, so the file is optional and
may override only the keys it cares about.

Example ``config/system.yaml``:

    analytics:
      initial_balance: "10000"
      closed_only: true
      default_detail_level: standard

    output:
      currency_symbol: "$"

    logging:
      level: INFO
      enable_file: true
      file_path: ${TRADELOG_LOG_DIR}/tradelog.log

``${VAR}`` references are replaced from the environment; undefined variables
are left as written.
"""

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from tradelog.system import log_system

DEFAULT_CONFIG_PATH = Path("config/system.yaml")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass
class AnalyticsConfig:
    """How reports are computed."""

    initial_balance: str = "0"  # Kept as text so YAML floats never reach Decimal
    closed_only: bool = True
    default_detail_level: str = "standard"


@dataclass
class OutputConfig:
    """How values are displayed."""

    date_display_format: str = "%Y-%m-%d %H:%M"
    currency_symbol: str = "$"


@dataclass
class LoggingConfig:
    """Logging settings as read from YAML."""

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/tradelog.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> log_system.LoggingConfig:
        """Convert to the LoggerFactory configuration model."""
        return log_system.LoggingConfig(
            level=self.level,  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level,  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete tool configuration."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "SystemConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Config file. Defaults to config/system.yaml in the working
                directory. A missing or empty file gives the built-in defaults.

        Returns:
            SystemConfig with file values merged over the defaults
        """
        config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

        raw: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}

        merged = _deep_merge(asdict(cls()), _substitute_env_vars(raw))
        return cls._from_dict(merged)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary."""
        return cls(
            analytics=AnalyticsConfig(**data.get("analytics", {})),
            output=OutputConfig(**data.get("output", {})),
            logging=LoggingConfig(**data.get("logging", {})),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} references in strings, recursing into dicts and lists."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config(path: Path | str | None = None) -> SystemConfig:
    """
    Get the system configuration singleton.

    The first call loads it; later calls return the cached instance unless an
    explicit path is given, which reloads from that file.
    """
    global _system_config
    if _system_config is None or path is not None:
        _system_config = SystemConfig.load(path)
    return _system_config


def reload_system_config(path: Path | str | None = None) -> SystemConfig:
    """Force a reload of the system configuration."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
