"""Logging utilities with structured output and run context propagation.

This module provides the engine's logging setup:
    - Text or JSON output (JSON for log aggregation systems)
    - run_id and query context attached to every record of a run
    - Rotating log files with console-only fallback

Usage:
    >>> from observability.logging import setup_logging, set_run_context
    >>> setup_logging(config)
    >>> set_run_context(run_id="abc123", query="ai investment trends")
    >>> logger.info("Categorization started")  # Includes run_id automatically
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

# Context variables propagated into every log record of a run
run_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("run_id", default="-")
query_var: contextvars.ContextVar[str] = contextvars.ContextVar("query", default="-")

# LogRecord attributes that are not user-supplied extras
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName", "levelname",
    "levelno", "lineno", "module", "msecs", "pathname", "process", "processName",
    "relativeCreated", "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "run_id", "query", "message",
})


def set_run_context(run_id: str, query: str = "") -> None:
    """Set the current run ID and query for log context propagation.

    Args:
        run_id: Unique identifier for the current categorization run
        query: Query being categorized (truncated in records)
    """
    run_id_var.set(run_id)
    query_var.set(query[:60] if query else "-")


def clear_context() -> None:
    """Clear all logging context variables."""
    run_id_var.set("-")
    query_var.set("-")


class ContextFilter(logging.Filter):
    """Filter that injects run context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get()
        record.query = query_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...",
         "run_id": "...", "query": "...", ...extras}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as a single-line JSON object."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": getattr(record, "run_id", "-"),
        }

        query = getattr(record, "query", "-")
        if query != "-":
            log_data["query"] = query

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Text formatter with run context.

    Format: TIMESTAMP [LEVEL] [run_id] logger: message
    """

    def __init__(self, include_date: bool = False):
        """Initialize the text formatter.

        Args:
            include_date: If True, include full date; otherwise just time
        """
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(run_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S",
        )


def _file_handler(config: Any) -> logging.Handler:
    """Rotating file handler (size-based when LOG_MAX_BYTES > 0, else daily)."""
    config.log_dir.mkdir(parents=True, exist_ok=True)
    log_file = config.log_dir / "prism.log"
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        log_file,
        when="midnight",
        interval=1,
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(
    config: Any,
    verbose: bool = False,
    log_to_file: bool = True,
) -> bool:
    """Configure logging with console and file handlers.

    Console output goes to stderr so JSON results printed by the CLI stay
    clean on stdout. If the log directory is not writable, falls back to
    console-only logging.

    Args:
        config: Engine configuration with logging settings
        verbose: If True, override config and use DEBUG level for console
        log_to_file: If False, skip the file handler entirely

    Returns:
        True if file logging is enabled, False if console-only
    """
    if verbose:
        console_level = logging.DEBUG
    else:
        console_level = getattr(logging, config.log_level, logging.INFO)

    context_filter = ContextFilter()
    if config.log_format == "json":
        console_fmt: logging.Formatter = JsonFormatter()
        file_fmt: logging.Formatter = JsonFormatter()
    else:
        console_fmt = TextFormatter(include_date=False)
        file_fmt = TextFormatter(include_date=True)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    file_logging_enabled = False
    if log_to_file:
        try:
            file_handler = _file_handler(config)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(file_fmt)
            file_handler.addFilter(context_filter)
            root.addHandler(file_handler)
            file_logging_enabled = True
        except OSError as e:
            print(
                f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
                "Falling back to console-only logging.",
                file=sys.stderr,
            )

    for lib in ("asyncio", "logfire", "opentelemetry", "urllib3"):
        logging.getLogger(lib).setLevel(logging.WARNING)

    return file_logging_enabled
