"""Structured logging for bfmemo.

Every module logs through ``get_logger(__name__)`` so that cache decisions
(hit, miss reason, save, skip) end up under the ``bfmemo`` logger tree.

Usage:
    from bfmemo.core import get_logger

    logger = get_logger(__name__)
    logger.info("Memo hit for %s", source_id)
    logger.warning("Could not write memo %s", path, exc_info=True)
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional, Union

# Default format for console output
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

# Detailed format for file output
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Environment variable for log level
LOG_LEVEL_ENV = "BFMEMO_LOG_LEVEL"

ROOT_LOGGER_NAME = "bfmemo"

# Track if logging has been configured
_configured = False


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log levels for terminal output."""

    COLORS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: str, use_colors: bool = True, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if self.use_colors:
            # Color a copy so other handlers still see the plain level name
            record = logging.makeLogRecord(record.__dict__)
            color = self.COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """Get a configured logger for a module.

    Args:
        name: Logger name, typically __name__
        level: Optional override for log level

    Returns:
        Configured logger instance
    """
    # Auto-configure on first call
    if not _configured:
        configure_logging()

    logger = logging.getLogger(name)

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_logging(
    level: Optional[Union[int, str]] = None,
    format_string: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    use_colors: bool = True,
    quiet: bool = False,
) -> None:
    """Configure logging for bfmemo.

    Called implicitly by get_logger() with defaults; call it explicitly
    (e.g. from the CLI) to change the level or add a log file.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL or int)
        format_string: Custom format string
        log_file: Optional file path to also log to
        use_colors: Whether to use colored output (default: True)
        quiet: If True, only show WARNING and above

    Environment Variables:
        BFMEMO_LOG_LEVEL: Override log level (e.g., "DEBUG", "INFO")
    """
    global _configured

    # Determine log level
    if level is None:
        env_level = os.environ.get(LOG_LEVEL_ENV)
        if env_level:
            level = env_level
        elif quiet:
            level = logging.WARNING
        else:
            level = logging.INFO

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.propagate = False  # Don't propagate to Python root logger

    # Clear existing handlers
    root_logger.handlers.clear()

    # Console handler; stdout is reserved for CLI output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(
        ColoredFormatter(
            format_string or DEFAULT_FORMAT,
            DEFAULT_DATE_FORMAT,
            use_colors=use_colors,
            stream=sys.stderr,
        )
    )
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Log everything to file
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    _configured = True


def log_exception(
    logger: logging.Logger,
    message: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """Log an exception with its type and traceback."""
    logger.log(
        level,
        "%s: %s: %s",
        message,
        type(exception).__name__,
        str(exception),
        exc_info=exception,
    )


class LogContext:
    """Context manager that logs the start, end and duration of an operation.

    Example:
        >>> with LogContext(logger, "Initializing", source="a.fake"):
        ...     reader.set_id("a.fake")
        ...     # Logs: "Initializing completed in 0.42s"
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.DEBUG,
        **context,
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.context = context
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()

        context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        if context_str:
            self.logger.log(self.level, "%s started (%s)", self.operation, context_str)
        else:
            self.logger.log(self.level, "%s started", self.operation)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.start_time

        if exc_type is not None:
            self.logger.error(
                "%s failed after %.2fs: %s",
                self.operation,
                elapsed,
                exc_val,
            )
        else:
            self.logger.log(
                self.level,
                "%s completed in %.2fs",
                self.operation,
                elapsed,
            )

        return False  # Don't suppress exceptions
