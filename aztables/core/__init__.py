"""Core module initialization."""

from .config_manager import ConfigManager, TableServiceConfig, LoggingConfig, LogLevel
from .logging_config import setup_logging, configure_logging

__all__ = [
    "ConfigManager",
    "TableServiceConfig",
    "LoggingConfig",
    "LogLevel",
    "setup_logging",
    "configure_logging",
]
