"""Logging configuration for the syndesis QE toolkit.

Human-readable console output by default, newline-delimited JSON when
requested (CI log collectors), and an optional JSON log file that keeps the
full polling history of a test session.
"""

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with log data.
        """
        log_record: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        workload = getattr(record, "workload", None)
        if workload is not None:
            log_record["workload"] = workload

        extra = getattr(record, "extra", None)
        if extra:
            log_record["extra"] = extra

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored console formatter for human-readable output."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record, colouring the level name on a terminal."""
        message = super().format(record)
        if sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, "")
            if color:
                message = message.replace(
                    record.levelname, f"{color}{record.levelname}{self.RESET}", 1
                )
        workload = getattr(record, "workload", None)
        if workload is not None:
            message = f"{message} [{workload}]"
        return message


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure logging for the toolkit.

    ``LOG_LEVEL`` and ``LOG_JSON`` in the environment take precedence over
    the arguments so CI jobs can change verbosity without touching the
    command line.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, use JSON format for console output.
        log_file: Optional path to a JSON log file.
    """
    level = os.getenv("LOG_LEVEL", level).upper()
    log_level = getattr(logging, level, logging.INFO)

    if os.getenv("LOG_JSON", "").lower() in ("true", "1", "yes"):
        json_format = True

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    if json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ConsoleFormatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class WorkloadLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags every record with a workload selector.

    Lets the per-workload polling tasks log independently while the
    formatters keep their lines attributable.
    """

    def __init__(self, logger: logging.Logger, workload: str):
        super().__init__(logger, {"workload": workload})

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if self.extra is not None:
            extra["workload"] = self.extra.get("workload")
        kwargs["extra"] = extra
        return msg, kwargs
