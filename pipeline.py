"""Categorization pipeline: the engine's entry point.

This module coordinates a full categorization run:

Pipeline Flow:
    1. INGEST: Convert raw results to ContentItems, skipping invalid ones
    2. CONTEXT: Classify the query and select the weight profile
    3. SCORE: Compute metrics and category affinities per item
       (sequential, or fanned out across worker threads in the async path)
    4. CATEGORIZE: FIRST_PASS -> SECOND_PASS -> DEDUPLICATED -> CAPPED -> SORTED

The pipeline never raises for list input: invalid items are skipped,
calculator faults degrade to default metrics, and non-list input yields an
empty result. Only registry misconfiguration fails, and it does so when the
Pipeline is constructed.
"""

import asyncio
import logging
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from categories.categorizer import CategorizationRun, DynamicCategorizer, ScoredItem
from categories.registry import CategoryRegistry, default_registry, load_registry
from categories.sections import DEFAULT_MAX_SECTIONS, sections_to_items, split_sections
from config import Config
from models.category import CategorizedResult
from models.content import ContentItem, parse_date
from models.context import QueryContext
from observability.logging import clear_context, set_run_context
from observability.tracing import RunTracer, trace_function, trace_operation
from scoring.context import build_context

logger = logging.getLogger(__name__)


@dataclass
class CategorizeOptions:
    """Per-call options for categorize().

    Attributes:
        related_items: Other results used to cross-reference figures
        business_context: Force business mode on/off (None = detect)
        now: Reference time (defaults to the current UTC time)
        include_all_results: Populate the "All Results" bucket (None = config)
    """

    related_items: Sequence[Any] = ()
    business_context: bool | None = None
    now: datetime | str | None = None
    include_all_results: bool | None = None

    @classmethod
    def coerce(cls, options: "CategorizeOptions | Mapping[str, Any] | None") -> "CategorizeOptions":
        """Accept options as an instance, a mapping, or None."""
        if isinstance(options, CategorizeOptions):
            return options
        if isinstance(options, Mapping):
            return cls(
                related_items=options.get("related_items") or options.get("relatedItems") or (),
                business_context=options.get("business_context", options.get("isBusinessQuery")),
                now=options.get("now"),
                include_all_results=options.get("include_all_results"),
            )
        return cls()

    def resolve_now(self) -> datetime:
        """Injected time, parsed and made UTC-aware, else the current time."""
        parsed = parse_date(self.now)
        return parsed if parsed is not None else datetime.now(timezone.utc)


@dataclass
class RunStats:
    """Statistics from a single categorization run.

    Attributes:
        received: Raw results handed in
        valid: Results that survived ingestion
        skipped: Structurally invalid results
        first_pass: Items assigned in the first pass
        second_pass: Items assigned in the second pass
        fallback: Items placed in the fallback category
        unassigned: Items left without a category (no fallback configured)
        duplicates_removed: Candidate claims dropped by deduplication
        categories: Buckets returned
        categories_dropped: Buckets removed by the cap
        duration: Run time in seconds
    """

    received: int = 0
    valid: int = 0
    skipped: int = 0
    first_pass: int = 0
    second_pass: int = 0
    fallback: int = 0
    unassigned: int = 0
    duplicates_removed: int = 0
    categories: int = 0
    categories_dropped: int = 0
    duration: float = 0.0
    labels: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["duration"] = round(d["duration"], 4)
        return d


def ingest(items: Any) -> list[ContentItem]:
    """Convert raw results into ContentItems, skipping invalid ones."""
    if not isinstance(items, (list, tuple)):
        return []
    ingested = []
    for raw in items:
        item = ContentItem.from_raw(raw)
        if item is not None:
            ingested.append(item)
    return ingested


def filter_presentable(
    results: Sequence[CategorizedResult],
    threshold: int = 70,
) -> list[CategorizedResult]:
    """Keep only items whose metrics pass the display threshold.

    Aggregate metrics are recomputed over the surviving items and emptied
    buckets are dropped; bucket order is preserved.
    """
    filtered = []
    for result in results:
        kept = [
            item for item in result.content
            if item.metrics is not None and item.metrics.passes_display_threshold(threshold)
        ]
        if kept:
            filtered.append(CategorizedResult.build(result.category, kept))
    return filtered


class Pipeline:
    """Categorization pipeline bound to a configuration and registry.

    The registry is loaded once here and shared read-only by every run, so a
    single Pipeline can serve concurrent queries.

    Example:
        >>> pipeline = Pipeline(Config())
        >>> results = pipeline.categorize(items, "AI investment trends 2025")
        >>> pipeline.last_stats.categories
        2
    """

    def __init__(self, config: Config | None = None, registry: CategoryRegistry | None = None):
        """Initialize the pipeline.

        Args:
            config: Engine configuration (defaults when omitted)
            registry: Category catalog (REGISTRY_PATH or built-in when omitted)

        Raises:
            RegistryError: If the registry is missing or misconfigured
        """
        self.config = config or Config()
        if registry is None:
            registry = (
                load_registry(self.config.registry_path)
                if self.config.registry_path
                else default_registry()
            )
        self.registry = registry
        self.categorizer = DynamicCategorizer(registry, self.config)
        self.last_stats = RunStats()
        self.last_summary: dict[str, Any] = {}

    def _prepare(
        self,
        items: Any,
        query: str,
        options: CategorizeOptions,
        stats: RunStats,
        tracer: RunTracer,
    ) -> tuple[list[ContentItem], QueryContext, datetime, list[ContentItem]]:
        received = len(items) if isinstance(items, (list, tuple)) else 0
        if not isinstance(items, (list, tuple)) and items is not None:
            logger.warning("Ignoring non-list input | type=%s", type(items).__name__)

        valid = ingest(items)
        stats.received, stats.valid, stats.skipped = received, len(valid), received - len(valid)
        tracer.record_ingest(received, len(valid))

        context = build_context(query if isinstance(query, str) else "", options.business_context)
        stats.labels = list(context.labels)
        tracer.record_context(context.labels, context.is_business)

        related = ingest(options.related_items)
        return valid, context, options.resolve_now(), related

    def _finish(
        self,
        run: CategorizationRun,
        stats: RunStats,
        tracer: RunTracer,
        start: float,
    ) -> list[CategorizedResult]:
        results = run.run()
        stats.first_pass = run.first_pass_assigned
        stats.second_pass = run.second_pass_assigned
        stats.fallback = run.fallback_assigned
        stats.unassigned = run.unassigned
        stats.duplicates_removed = run.duplicates_removed
        stats.categories = len(results)
        stats.categories_dropped = run.categories_dropped
        stats.duration = time.perf_counter() - start
        tracer.record_passes(stats.first_pass, stats.second_pass, stats.fallback)
        tracer.record_output(stats.categories, stats.categories_dropped, stats.duplicates_removed)

        logger.info(
            "Categorization complete | items=%d skipped=%d categories=%d "
            "first_pass=%d second_pass=%d fallback=%d duration=%.3fs",
            stats.valid, stats.skipped, stats.categories,
            stats.first_pass, stats.second_pass, stats.fallback, stats.duration,
        )
        return results

    def categorize(
        self,
        items: Any,
        query: str,
        options: CategorizeOptions | Mapping[str, Any] | None = None,
    ) -> list[CategorizedResult]:
        """Score and categorize search results for a query.

        Args:
            items: Raw results (mappings or ContentItems); non-lists yield []
            query: Search query
            options: Related items, business override, injected time,
                catch-all toggle

        Returns:
            Ordered category buckets (at most max_categories)
        """
        opts = CategorizeOptions.coerce(options)
        stats = RunStats()
        tracer = RunTracer()
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id, query if isinstance(query, str) else "")
        start = time.perf_counter()

        try:
            with tracer.trace_run(run_id, query if isinstance(query, str) else ""):
                valid, context, now, related = self._prepare(items, query, opts, stats, tracer)
                if not valid:
                    logger.info("Nothing to categorize | received=%d", stats.received)
                    return []

                with trace_operation("categorizer.score", {"items": len(valid)}):
                    scored = [
                        self.categorizer.score_item(i, item, context, now, related)
                        for i, item in enumerate(valid)
                    ]
                run = self.categorizer.new_run(scored, context, opts.include_all_results)
                return self._finish(run, stats, tracer, start)
        finally:
            self.last_stats = stats
            self.last_summary = tracer.get_summary()
            clear_context()

    async def categorize_async(
        self,
        items: Any,
        query: str,
        options: CategorizeOptions | Mapping[str, Any] | None = None,
        max_concurrent: int | None = None,
    ) -> list[CategorizedResult]:
        """Like categorize(), with per-item scoring fanned out to threads.

        Scores are gathered back by input position before the sequential
        stages run, so the output matches categorize() exactly.

        Args:
            items: Raw results
            query: Search query
            options: Per-call options
            max_concurrent: Concurrent scoring tasks (MAX_WORKERS when None)

        Returns:
            Ordered category buckets (at most max_categories)
        """
        opts = CategorizeOptions.coerce(options)
        stats = RunStats()
        tracer = RunTracer()
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id, query if isinstance(query, str) else "")
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(max_concurrent or self.config.max_workers)

        try:
            with tracer.trace_run(run_id, query if isinstance(query, str) else ""):
                valid, context, now, related = self._prepare(items, query, opts, stats, tracer)
                if not valid:
                    logger.info("Nothing to categorize | received=%d", stats.received)
                    return []

                async def score_one(position: int, item: ContentItem) -> ScoredItem:
                    async with semaphore:
                        return await asyncio.to_thread(
                            self.categorizer.score_item, position, item, context, now, related,
                        )

                logger.debug(
                    "Concurrent scoring started | items=%d max_concurrent=%d",
                    len(valid), max_concurrent or self.config.max_workers,
                )
                with trace_operation("categorizer.score", {"items": len(valid)}):
                    scored = await asyncio.gather(
                        *(score_one(i, item) for i, item in enumerate(valid))
                    )
                run = self.categorizer.new_run(list(scored), context, opts.include_all_results)
                return self._finish(run, stats, tracer, start)
        finally:
            self.last_stats = stats
            self.last_summary = tracer.get_summary()
            clear_context()

    @trace_function("categorize_text")
    def categorize_text(
        self,
        text: str,
        query: str,
        sources: Sequence[Mapping[str, Any]] = (),
        options: CategorizeOptions | Mapping[str, Any] | None = None,
        max_sections: int = DEFAULT_MAX_SECTIONS,
    ) -> list[CategorizedResult]:
        """Categorize a synthesized answer by splitting it into sections.

        Args:
            text: Free text from the synthesis layer
            query: Query the text answers
            sources: Source attributions (mappings with url/title)
            options: Per-call options
            max_sections: Upper bound on sections

        Returns:
            Ordered category buckets of sections
        """
        sections = split_sections(text, max_sections=max_sections)
        items = sections_to_items(sections, sources)
        logger.info("Categorizing synthesized text | sections=%d sources=%d", len(items), len(sources))
        return self.categorize(items, query, options)


def categorize(
    items: Any,
    query: str,
    options: CategorizeOptions | Mapping[str, Any] | None = None,
    config: Config | None = None,
) -> list[CategorizedResult]:
    """Categorize search results with a default pipeline.

    Args:
        items: Raw results (mappings or ContentItems)
        query: Search query
        options: Related items, business override, injected time
        config: Engine configuration (defaults when omitted)

    Returns:
        Ordered category buckets (at most max_categories)

    Example:
        >>> results = categorize(items, "AI investment trends 2025", {"now": "2025-06-01"})
        >>> results[0].name
        'Investment Trends'
    """
    return Pipeline(config).categorize(items, query, options)
