"""Logging configuration and utilities."""

import logging
import logging.handlers
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER_NAME = "gdrive_backup"


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    log_to_console: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5
) -> logging.Logger:
    """Setup logging configuration.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        log_to_console: Whether to log to console
        max_file_size: Maximum size of log file before rotation
        backup_count: Number of backup files to keep

    Returns:
        Configured logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper()))

    # Clear existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, log_level.upper()))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger

def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

class ContextualLogger:
    """Logger that renders bound context and per-call fields as key=value pairs.

    ``log.info("Backup started", source="/data")`` with context
    ``{"system": "backup"}`` produces ``Backup started | system=backup source=/data``.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        """Initialize contextual logger.

        Args:
            logger: Base logger
            context: Fields added to every record
        """
        self.logger = logger
        self.context = dict(context or {})

    def bind(self, **fields: Any) -> "ContextualLogger":
        """Return a new logger with additional context fields."""
        return ContextualLogger(self.logger, {**self.context, **fields})

    def _format_message(self, message: str, fields: Dict[str, Any]) -> str:
        merged = {**self.context, **fields}
        if not merged:
            return message
        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in merged.items())
        return f"{message} | {pairs}"

    def log(self, level: int, message: str, **fields: Any):
        self.logger.log(level, self._format_message(message, fields))

    def debug(self, message: str, **fields: Any):
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any):
        self.log(logging.ERROR, message, **fields)


def _format_value(value: Any) -> str:
    text = str(value)
    if text == "" or any(c.isspace() for c in text):
        return repr(text)
    return text


class TimedOperation:
    """Context manager for timing operations and logging results."""

    def __init__(self, logger: logging.Logger, operation_name: str, log_level: str = "INFO"):
        """Initialize timed operation.

        Args:
            logger: Logger to use
            operation_name: Name of the operation
            log_level: Log level for timing messages
        """
        self.logger = logger
        self.operation_name = operation_name
        self.log_level = getattr(logging, log_level.upper())
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log(self.log_level, f"Starting {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()
            if exc_type is None:
                self.logger.log(self.log_level, f"Completed {self.operation_name} in {duration:.2f}s")
            else:
                self.logger.error(f"Failed {self.operation_name} after {duration:.2f}s: {exc_val}")
