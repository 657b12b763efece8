"""
Logging setup for CoughScan.

Console output is text (optionally colored) or JSON lines; log files are
always JSON lines so screening runs can be grepped and diffed. Batch
items carry their context (item number, file) through LoggerAdapter.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

from coughscan.utils.errors import ConfigurationError

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """Text formatter with ANSI-colored level names."""

    # ANSI foreground codes
    LEVEL_COLORS = {
        logging.DEBUG: 36,
        logging.INFO: 32,
        logging.WARNING: 33,
        logging.ERROR: 31,
        logging.CRITICAL: 35,
    }

    def format(self, record: logging.LogRecord) -> str:
        code = self.LEVEL_COLORS.get(record.levelno)
        if code is None:
            return super().format(record)
        # Copy, so file handlers still see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"\033[{code}m{record.levelname}\033[0m"
        return super().format(colored)


def _resolve_level(level: str) -> int:
    name = str(level).upper()
    if name not in LOG_LEVELS:
        raise ConfigurationError(
            f"Unknown log level: {level}. Expected one of {', '.join(LOG_LEVELS)}",
            config_key="logging.level"
        )
    return getattr(logging, name)


def _console_formatter(log_format: str, colored: bool) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    if colored:
        return ColoredFormatter(TEXT_FORMAT, TEXT_DATE_FORMAT)
    return logging.Formatter(TEXT_FORMAT, TEXT_DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    console_enabled: bool = True,
    colored: bool = True,
) -> None:
    """
    Configure the root logger, replacing any handlers already on it.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Console format, "json" or "text"
        log_file: Optional path of a rotating JSON log file
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep
        console_enabled: Whether to log to stdout
        colored: Color level names in text console output

    Raises:
        ConfigurationError: If the level name is unknown
    """
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    root.handlers = []

    if console_enabled:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(_console_formatter(log_format, colored))
        root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Named logger (engine, loader, batch_processor, analyzer.<name>, ...)."""
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """
    Attaches a fixed context dict to every record as record.context.

    Per-call context passed as extra={"context": {...}} is merged in;
    the adapter's own keys win on conflict.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**extra.get("context", {}), **self.extra}
        kwargs["extra"] = extra
        return msg, kwargs


def create_logger_with_context(name: str, context: Dict[str, Any]) -> LoggerAdapter:
    """
    Logger that tags every record with context.

    Example:
        logger = create_logger_with_context("batch_processor", {"item": 2})
        logger.error("Failed to screen a.wav")
        # JSON: {"message": "Failed to screen a.wav", "context": {"item": 2}, ...}
    """
    return LoggerAdapter(get_logger(name), context)
