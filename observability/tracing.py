"""Optional Logfire spans around categorization runs and their stages.

Tracing is off unless ENABLE_LOGFIRE is set. When it is off, or Logfire is
not installed, every helper here still runs and only logs stage durations at
DEBUG level, so scoring code never branches on whether tracing is active.

Span Layout:
    categorize_run              one per Pipeline.categorize() call
      categorizer.score         per-item metrics and affinities
      categorizer.first_pass    strict-threshold candidates
      categorizer.second_pass   relaxed retry and fallback
      categorizer.deduplicate
      categorizer.cap
      categorizer.sort

Requirements:
    pip install logfire   # or: pip install prism-categorizer[tracing]

Usage:
    >>> from observability.tracing import setup_tracing, trace_operation
    >>> setup_tracing(enabled=True, service_name="prism")
    >>> with trace_operation("categorizer.cap") as attrs:
    ...     attrs["dropped"] = 2
"""

import inspect
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Generator

logger = logging.getLogger(__name__)


@dataclass
class TracingContext:
    """Process-wide tracing state."""
    enabled: bool = False
    service_name: str = "prism"
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)

    @property
    def active(self) -> bool:
        """Spans are emitted only once Logfire accepted the configuration."""
        return self.enabled and self._logfire_configured


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = "prism",
    token: str = "",
) -> TracingContext:
    """Configure Logfire for this process.

    Pydantic instrumentation is switched on as well, so validation of
    ingested items and metric bundles shows up in the trace.

    Args:
        enabled: ENABLE_LOGFIRE
        service_name: Service name reported with every span
        token: LOGFIRE_TOKEN (empty keeps spans local)

    Returns:
        The shared TracingContext
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token
    _context._logfire_configured = False

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire
    except ImportError:
        logger.warning("Logfire not installed, tracing disabled | hint=pip install logfire")
        _context.enabled = False
        return _context

    try:
        logfire.configure(service_name=service_name, token=token or None)
        logfire.instrument_pydantic()
    except Exception as e:
        logger.error("Logfire configuration failed | error=%s", e, exc_info=True)
        _context.enabled = False
        return _context

    _context._logfire_configured = True
    logger.info("Logfire tracing enabled | service=%s", service_name)
    return _context


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Wrap a block in a span (or just a timing log when tracing is off).

    Args:
        name: Span name, e.g. "categorizer.first_pass"
        attributes: Attributes known when the block starts

    Yields:
        Mutable dict; entries added inside the block are set on the span
        when it closes
    """
    late_attrs: dict[str, Any] = {}
    start = time.perf_counter()
    try:
        if _context.active:
            import logfire

            with logfire.span(name, **(attributes or {})) as span:
                yield late_attrs
                for key, value in late_attrs.items():
                    span.set_attribute(key, value)
        else:
            yield late_attrs
    finally:
        logger.debug("Stage done | op=%s duration=%.3fs", name, time.perf_counter() - start)


def trace_function(name: str | None = None) -> Callable:
    """Decorate a sync or async function so each call runs in a span.

    Args:
        name: Span name (the function name when omitted)
    """
    def decorator(func: Callable) -> Callable:
        span_name = name or func.__name__

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def traced_async(*args, **kwargs):
                with trace_operation(span_name):
                    return await func(*args, **kwargs)
            return traced_async

        @wraps(func)
        def traced(*args, **kwargs):
            with trace_operation(span_name):
                return func(*args, **kwargs)
        return traced

    return decorator


class RunTracer:
    """Collects the counts of one categorization run.

    The collected stats are attached to the run span and kept by the
    pipeline as its last run summary.
    """

    def __init__(self, context: TracingContext | None = None):
        self.context = context or _context
        self.run_id: str | None = None
        self.stats: dict[str, Any] = {}

    @contextmanager
    def trace_run(self, run_id: str, query: str) -> Generator[None, None, None]:
        """Span covering a whole run.

        Args:
            run_id: 8-character run identifier (also in every log record)
            query: Query being categorized (truncated on the span)
        """
        self.run_id = run_id
        self.stats = {
            "run_id": run_id,
            "started_at": datetime.now(timezone.utc).isoformat(),
        }
        start = time.perf_counter()
        with trace_operation("categorize_run", {"run_id": run_id, "query": query[:100]}) as attrs:
            try:
                yield
            finally:
                self.stats["duration_seconds"] = round(time.perf_counter() - start, 4)
                attrs.update(self.stats)

    def record_ingest(self, received: int, valid: int) -> None:
        """Record how many raw results were usable."""
        self.stats.update(items_received=received, items_valid=valid, items_skipped=received - valid)
        if received != valid:
            logger.debug("Skipped invalid items | skipped=%d received=%d", received - valid, received)

    def record_context(self, labels: tuple[str, ...], business: bool) -> None:
        self.stats.update(context_labels=",".join(labels), business_query=business)

    def record_passes(self, first: int, second: int, fallback: int) -> None:
        """Record assignment counts per pass."""
        self.stats.update(
            first_pass_assigned=first,
            second_pass_assigned=second,
            fallback_assigned=fallback,
        )

    def record_output(self, categories: int, dropped: int, duplicates: int) -> None:
        """Record the shape of the final result."""
        self.stats.update(
            categories=categories,
            categories_dropped=dropped,
            duplicate_claims_removed=duplicates,
        )

    def get_summary(self) -> dict[str, Any]:
        """Copy of everything recorded for the run."""
        return dict(self.stats)
