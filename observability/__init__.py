"""Observability infrastructure for logging, tracing and monitoring.

This package provides structured logging and optional tracing using Logfire.

setup_logging:
    Console plus rotating file logging with run_id propagation.

setup_tracing:
    Initialize Logfire with pydantic instrumentation.

trace_operation:
    Context manager for custom span creation.

RunTracer:
    Per-run statistics for categorization runs.

Requirements:
    pip install logfire   # tracing only

Enable via configuration:
    ENABLE_LOGFIRE=true
    LOGFIRE_TOKEN=your-token  # Optional

Example:
    >>> from observability import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="prism")
    >>> with trace_operation("categorize"):
    ...     pass
"""

from observability.logging import setup_logging, set_run_context, clear_context
from observability.tracing import RunTracer, TracingContext, setup_tracing, trace_operation

__all__ = [
    "setup_logging",
    "set_run_context",
    "clear_context",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
    "RunTracer",
]
