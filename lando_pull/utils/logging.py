"""
Logging setup for lando-pull.

This module provides Rich console logging for the CLI, optional
structured JSON output, rotating log files, and a stage logger used by
the orchestrator to report start, completion and failure of each stage.
"""

import json
import logging
import logging.handlers
import sys
import time
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "lando_pull"


class LogCategory(str, Enum):
    """Categories for structured logging."""
    SYSTEM = "system"
    BACKUP = "backup"
    TRANSFER = "transfer"
    IMPORT = "import"
    UPDATE = "update"
    FILES = "files"
    CLEANUP = "cleanup"


@dataclass
class LogEntry:
    """Structured log entry with metadata."""
    timestamp: datetime = field(default_factory=datetime.now)
    level: str = "INFO"
    category: LogCategory = LogCategory.SYSTEM
    message: str = ""
    run_id: Optional[str] = None
    stage: Optional[str] = None
    duration: Optional[float] = None
    error_code: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert log entry to dictionary."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        """Convert log entry to JSON string."""
        return json.dumps(self.to_dict(), default=str)


_RESERVED_RECORD_KEYS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "log_entry"}


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = getattr(record, 'log_entry', None)
        if isinstance(log_entry, LogEntry):
            return log_entry.to_json()

        log_entry = LogEntry(
            timestamp=datetime.fromtimestamp(record.created),
            level=record.levelname,
            message=record.getMessage(),
            metadata={
                'logger': record.name,
                'function': record.funcName,
                'line': record.lineno,
            }
        )
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_entry.metadata[key] = value
        if record.exc_info:
            log_entry.metadata['exception'] = self.formatException(record.exc_info)

        return log_entry.to_json()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rich_console: bool = True,
    structured_logging: bool = False,
    max_log_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """
    Set up logging for lando-pull.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        rich_console: Whether to use Rich console handler for CLI
        structured_logging: Whether to use structured JSON logging
        max_log_size: Maximum log file size before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    plain = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if rich_console and not structured_logging:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=False,
            rich_tracebacks=True
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(StructuredFormatter() if structured_logging else plain)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_log_size,
            backupCount=backup_count
        )
        file_handler.setFormatter(StructuredFormatter() if structured_logging else plain)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


class StageLogger:
    """Logs the lifecycle of pull stages for one run."""

    def __init__(self, run_id: str, logger: Optional[logging.Logger] = None):
        self.run_id = run_id
        self.logger = logger or get_logger("pull")
        self._started: Dict[str, float] = {}

    def _entry(self, level: str, message: str, stage: str, **kwargs) -> LogEntry:
        return LogEntry(
            level=level,
            message=message,
            run_id=self.run_id,
            stage=stage,
            **kwargs
        )

    def step_start(self, stage: str, category: LogCategory = LogCategory.SYSTEM) -> None:
        """Log stage start."""
        self._started[stage] = time.monotonic()
        message = f"Starting stage: {stage}"
        self.logger.info(message, extra={'log_entry': self._entry("INFO", message, stage, category=category)})

    def step_complete(self, stage: str, category: LogCategory = LogCategory.SYSTEM) -> float:
        """Log stage completion and return its duration."""
        duration = time.monotonic() - self._started.pop(stage, time.monotonic())
        message = f"Completed stage: {stage} (took {duration:.2f}s)"
        self.logger.info(
            message,
            extra={'log_entry': self._entry("INFO", message, stage, category=category, duration=duration)}
        )
        return duration

    def step_failed(
        self,
        stage: str,
        error: Exception,
        category: LogCategory = LogCategory.SYSTEM
    ) -> None:
        """Log stage failure with the error's code and details."""
        self._started.pop(stage, None)
        details = dict(getattr(error, 'details', {}) or {})
        message = f"Failed stage: {stage} - {error}"
        exit_code = details.get('exit_code')
        if exit_code is not None:
            message += f" (exit code {exit_code})"
        self.logger.error(
            message,
            extra={'log_entry': self._entry(
                "ERROR", message, stage,
                category=category,
                error_code=getattr(error, 'code', type(error).__name__),
                metadata=details
            )}
        )
        output = details.get('output')
        if output:
            self.logger.error(output)
