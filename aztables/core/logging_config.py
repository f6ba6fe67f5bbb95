"""
Logging setup for aztables.

Applications either call ``setup_logging`` themselves or let
``TableServiceClient.from_config_file`` apply the ``logging`` section of the
loaded configuration. Every installed handler redacts SAS signatures and
account keys, including those inside request URLs and structured context.
"""

import json
import logging
import logging.handlers
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .config_manager import LoggingConfig, LogLevel

REDACTED = "***REDACTED***"

_SECRET_PATTERNS = [
    re.compile(r"(Authorization:\s+)(?:SharedKey\s+|Bearer\s+)?\S+", re.IGNORECASE),
    re.compile(r"(AccountKey=)[^;]+", re.IGNORECASE),
    re.compile(r"(SharedAccessSignature=)[^;&]+", re.IGNORECASE),
    re.compile(r"((?:^|[?&\s])sig=)[^;&\s]+", re.IGNORECASE),
]

_SIZE_PATTERN = re.compile(r"^([\d.]+)\s*([KMG]?B)?$")
_SIZE_UNITS = {None: 1, "B": 1, "KB": 1024, "MB": 1024 ** 2, "GB": 1024 ** 3}


def redact(text: str) -> str:
    """Replace SAS signatures, account keys and authorization values."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(rf"\1{REDACTED}", text)
    return text


class SensitiveDataFilter(logging.Filter):
    """Redacts secrets in the message, its arguments and the attached context."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(redact(a) if isinstance(a, str) else a for a in record.args)
        context = getattr(record, "context", None)
        if isinstance(context, Mapping):
            record.context = {
                key: redact(value) if isinstance(value, str) else value
                for key, value in context.items()
            }
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the structured context under ``context``."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines; structured context is appended as ``key=value`` pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items() if value is not None)
        # keep any traceback below the context
        head, sep, tail = line.partition("\n")
        return f"{head} ({pairs}){sep}{tail}"


def _attach(root_logger: logging.Logger, handler: logging.Handler, formatter: logging.Formatter) -> None:
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(handler)


def setup_logging(
    level: str = "INFO",
    format_type: str = "text",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None
) -> None:
    """
    Replace the root logger's handlers with aztables ones.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        log_file: Optional path of a rotating log file
        rotation_size: Size at which the log file rotates (e.g. "10MB")
        rotation_count: Number of rotated files to keep
        module_levels: Per-logger levels, e.g. {"aztables.table.client": "DEBUG"}
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = JSONFormatter() if format_type == "json" else TextFormatter()
    _attach(root_logger, logging.StreamHandler(sys.stdout), formatter)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=_parse_size(rotation_size),
            backupCount=rotation_count,
            encoding="utf-8",
        )
        _attach(root_logger, file_handler, formatter)

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(module_level.upper())

    root_logger.debug(
        f"Logging configured: level={level}, format={format_type}, file={log_file or '-'}"
    )


def configure_logging(config: LoggingConfig) -> None:
    """Apply a loaded ``logging`` configuration section."""
    setup_logging(
        level=LogLevel(config.level).value,
        format_type=config.format,
        log_file=config.file,
        rotation_size=config.rotation_size,
        rotation_count=config.rotation_count,
        module_levels=config.module_levels,
    )


def _parse_size(size_str: str) -> int:
    """
    Parse a size such as "10MB", "1.5 GB" or "4096" into bytes.

    Raises:
        ValueError: If the text is not a size
    """
    match = _SIZE_PATTERN.match(size_str.strip().upper())
    if not match:
        raise ValueError(f"Invalid size: {size_str!r}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit])


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with structured context.

    The context is stored on the record as ``context`` and rendered by both
    aztables formatters.
    """
    extra = {"context": context} if context else {}
    logger.log(level, message, extra=extra)
