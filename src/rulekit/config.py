"""Configuration management for rulekit using Pydantic models.

The active configuration lives in a process-wide cell. Rules resolve their
cascade mode through that cell at evaluation time, so replacing the global
configuration changes the behaviour of rules that were declared earlier.
"""

import json
import logging
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rulekit.results import Severity

CONFIG_FILE_NAME = ".rulekit.json"


class CascadeMode(str, Enum):
    """Whether a rule keeps running validators after one fails."""
    CONTINUE = "continue"
    STOP = "stop"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    def to_logging_level(self) -> int:
        return {
            LogLevel.ERROR: logging.ERROR,
            LogLevel.WARN: logging.WARNING,
            LogLevel.INFO: logging.INFO,
            LogLevel.DEBUG: logging.DEBUG,
        }[self]


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.INFO


class RulekitConfig(BaseModel):
    """Complete rulekit configuration model."""
    cascade_mode: CascadeMode = Field(alias="cascadeMode", default=CascadeMode.CONTINUE)
    class_level_cascade_mode: CascadeMode = Field(alias="classLevelCascadeMode", default=CascadeMode.CONTINUE)
    default_severity: Severity = Field(alias="defaultSeverity", default=Severity.ERROR)
    property_chain_separator: str = Field(alias="propertyChainSeparator", default=".")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("property_chain_separator")
    @classmethod
    def validate_separator(cls, v):
        if not v:
            raise ValueError("property_chain_separator must not be empty")
        return v

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


_global_config: RulekitConfig | None = None


def get_global_config() -> RulekitConfig:
    """Return the process-wide configuration, creating defaults on first use."""
    global _global_config
    if _global_config is None:
        _global_config = RulekitConfig()
    return _global_config


def set_global_config(config: RulekitConfig) -> None:
    """Replace the process-wide configuration.

    Must not be called while validations are running on other threads.
    """
    global _global_config
    _global_config = config


def reset_global_config() -> None:
    """Restore the process-wide configuration to defaults."""
    set_global_config(RulekitConfig())


def configure(**overrides) -> RulekitConfig:
    """Update selected fields of the process-wide configuration.

    Keys may use either field names or their camelCase aliases.

    Returns:
        The new global configuration
    """
    data = get_global_config().model_dump()
    aliases = {info.alias: name for name, info in RulekitConfig.model_fields.items() if info.alias}
    for key, value in overrides.items():
        data[aliases.get(key, key)] = value
    config = RulekitConfig(**data)
    set_global_config(config)
    return config


def load_config(config_path: str | Path | None = None) -> RulekitConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .rulekit.json

    Returns:
        RulekitConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return RulekitConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")
    return RulekitConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .rulekit.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None
