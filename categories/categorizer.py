"""Dynamic categorization state machine.

This module partitions scored items into a bounded, deduplicated, sorted set
of category buckets.

Run Flow:
    INITIALIZED
        Items have been scored: metrics plus affinity for every thematic
        category (this per-item work may run concurrently).
    FIRST_PASS
        Every category an item reaches at the strict threshold (0.70, after
        adaptive relief) is recorded as a candidate assignment. The winner
        per item identity is its highest-affinity candidate; a later or
        equal candidate never replaces an earlier winner.
    SECOND_PASS
        Items without a winner retry at the relaxed threshold (0.65). Items
        still unmatched go to the fallback category with a fixed affinity.
    DEDUPLICATED
        Each identity keeps only its winning category; duplicate items
        sharing an identity collapse to the instance that won. The catch-all
        category, when enabled, receives every unique item.
    CAPPED
        Buckets ordered by (priority, item count desc, catalog order); only
        the first max_categories survive. Items in dropped buckets are not
        reassigned.
    SORTED
        Items within each bucket ordered by relevance, ties in input order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence

from categories.matcher import CategoryMatcher
from categories.registry import CategoryRegistry
from config import Config
from models.category import CategorizedResult, Category, CategoryAssignment
from models.content import ContentItem
from models.context import QueryContext
from models.metrics import MetricBundle, round_half_up
from observability.tracing import trace_operation
from scoring.calculator import MetricsCalculator
from scoring.text import normalize

logger = logging.getLogger(__name__)


class CategorizerState(str, Enum):
    """Stages of a categorization run, in order."""

    INITIALIZED = "initialized"
    FIRST_PASS = "first_pass"
    SECOND_PASS = "second_pass"
    DEDUPLICATED = "deduplicated"
    CAPPED = "capped"
    SORTED = "sorted"


class StateError(RuntimeError):
    """Raised when a run step is invoked out of order."""


@dataclass
class ScoredItem:
    """An ingested item with its metrics and category affinities.

    Attributes:
        position: Index of the item in the valid input sequence
        item: The ingested item
        metrics: Computed or reused metrics
        affinities: (category, affinity) for every thematic category with a
            non-zero affinity, best first
    """

    position: int
    item: ContentItem
    metrics: MetricBundle
    affinities: list[tuple[Category, float]] = field(default_factory=list)

    @property
    def identity(self) -> str:
        return self.item.identity


class CategorizationRun:
    """One pass of the state machine over a set of scored items.

    Steps must be called in order; run() drives them all.

    Example:
        >>> run = CategorizationRun(registry, config, context, scored)
        >>> results = run.run()
        >>> run.state
        <CategorizerState.SORTED: 'sorted'>
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        config: Config,
        context: QueryContext,
        scored: Sequence[ScoredItem],
        matcher: CategoryMatcher | None = None,
        include_all_results: bool | None = None,
    ):
        self.registry = registry
        self.config = config
        self.context = context
        self.scored = list(scored)
        self.matcher = matcher or CategoryMatcher(registry, config)
        self.include_all_results = (
            config.include_all_results if include_all_results is None else include_all_results
        )
        self.state = CategorizerState.INITIALIZED

        self.assignments: list[CategoryAssignment] = []
        self.winners: dict[str, CategoryAssignment] = {}
        self.buckets: dict[str, list[ScoredItem]] = {}
        self.results: list[CategorizedResult] = []

        # Counters for run statistics
        self.first_pass_assigned = 0
        self.second_pass_assigned = 0
        self.fallback_assigned = 0
        self.unassigned = 0
        self.duplicates_removed = 0
        self.categories_dropped = 0

    def _advance(self, expected: CategorizerState, target: CategorizerState) -> None:
        if self.state is not expected:
            raise StateError(f"Cannot enter {target.value} from {self.state.value}")
        self.state = target

    def _record(self, assignment: CategoryAssignment) -> None:
        self.assignments.append(assignment)
        if assignment.beats(self.winners.get(assignment.identity)):
            self.winners[assignment.identity] = assignment

    def _passing(self, entry: ScoredItem, base: float) -> list[tuple[Category, float]]:
        threshold = self.matcher.threshold(entry.item, self.context, base)
        return [(c, s) for c, s in entry.affinities if s >= threshold]

    def first_pass(self) -> None:
        """Record candidates at the strict threshold."""
        self._advance(CategorizerState.INITIALIZED, CategorizerState.FIRST_PASS)
        for entry in self.scored:
            for category, affinity in self._passing(entry, self.config.first_pass_threshold):
                self._record(CategoryAssignment(
                    identity=entry.identity,
                    category_id=category.id,
                    score=affinity,
                    position=entry.position,
                    pass_number=1,
                ))
        self.first_pass_assigned = len(self.winners)
        logger.debug(
            "First pass complete | items=%d assigned=%d candidates=%d",
            len(self.scored), self.first_pass_assigned, len(self.assignments),
        )

    def second_pass(self) -> None:
        """Retry unassigned items at the relaxed threshold, then fall back."""
        self._advance(CategorizerState.FIRST_PASS, CategorizerState.SECOND_PASS)
        assigned_before = set(self.winners)
        pending = [e for e in self.scored if e.identity not in assigned_before]

        for entry in pending:
            for category, affinity in self._passing(entry, self.config.second_pass_threshold):
                self._record(CategoryAssignment(
                    identity=entry.identity,
                    category_id=category.id,
                    score=affinity,
                    position=entry.position,
                    pass_number=2,
                ))
        self.second_pass_assigned = len(self.winners) - len(assigned_before)

        fallback = self.registry.fallback
        for entry in pending:
            if entry.identity in self.winners:
                continue
            if fallback is None:
                self.unassigned += 1
                logger.warning("No category and no fallback | item=%s", entry.item)
                continue
            self._record(CategoryAssignment(
                identity=entry.identity,
                category_id=fallback.id,
                score=self.config.fallback_score,
                position=entry.position,
                pass_number=2,
            ))
            self.fallback_assigned += 1

        logger.debug(
            "Second pass complete | retried=%d assigned=%d fallback=%d",
            len(pending), self.second_pass_assigned, self.fallback_assigned,
        )

    def deduplicate(self) -> None:
        """Keep each item only in its winning category."""
        self._advance(CategorizerState.SECOND_PASS, CategorizerState.DEDUPLICATED)
        by_position = {e.position: e for e in self.scored}

        for winner in sorted(self.winners.values(), key=lambda a: a.position):
            self.buckets.setdefault(winner.category_id, []).append(by_position[winner.position])

        catch_all = self.registry.catch_all
        if self.include_all_results and catch_all is not None:
            seen: set[str] = set()
            everything = []
            for entry in self.scored:
                if entry.identity in seen:
                    continue
                seen.add(entry.identity)
                winner = self.winners.get(entry.identity)
                everything.append(by_position[winner.position] if winner else entry)
            self.buckets[catch_all.id] = everything

        self.duplicates_removed = len(self.assignments) - len(self.winners)
        logger.debug(
            "Deduplication complete | candidates=%d kept=%d buckets=%d",
            len(self.assignments), len(self.winners), len(self.buckets),
        )

    def cap(self) -> None:
        """Retain the highest-precedence buckets."""
        self._advance(CategorizerState.DEDUPLICATED, CategorizerState.CAPPED)
        ordered = sorted(
            self.buckets.items(),
            key=lambda kv: (
                self.registry.get(kv[0]).priority,
                -len(kv[1]),
                self.registry.order(kv[0]),
            ),
        )
        kept = ordered[: self.config.max_categories]
        self.categories_dropped = len(ordered) - len(kept)
        if self.categories_dropped:
            logger.debug(
                "Dropped categories over cap | dropped=%s",
                ",".join(cid for cid, _ in ordered[len(kept):]),
            )
        self.buckets = dict(kept)

    def sort(self) -> list[CategorizedResult]:
        """Order items within buckets and build the results."""
        self._advance(CategorizerState.CAPPED, CategorizerState.SORTED)
        results = []
        for category_id, entries in self.buckets.items():
            category = self.registry.get(category_id)
            ordered = sorted(entries, key=lambda e: (-e.metrics.relevance, e.position))
            content = [self._output_item(e) for e in ordered]
            results.append(CategorizedResult.build(category, content))
        self.results = results
        return results

    def _output_item(self, entry: ScoredItem) -> ContentItem:
        winner = self.winners.get(entry.identity)
        score = round_half_up(winner.score * 100) if winner else None
        return entry.item.model_copy(update={"metrics": entry.metrics, "category_score": score})

    def run(self) -> list[CategorizedResult]:
        """Drive every remaining step and return the results."""
        with trace_operation("categorizer.first_pass", {"items": len(self.scored)}):
            self.first_pass()
        with trace_operation("categorizer.second_pass"):
            self.second_pass()
        with trace_operation("categorizer.deduplicate"):
            self.deduplicate()
        with trace_operation("categorizer.cap"):
            self.cap()
        with trace_operation("categorizer.sort") as attrs:
            results = self.sort()
            attrs["categories"] = len(results)
        return results


class DynamicCategorizer:
    """Score items and partition them into category buckets.

    The categorizer owns the per-item work (metrics and affinities) and hands
    the scored items to a CategorizationRun for the sequential stages.

    Example:
        >>> categorizer = DynamicCategorizer(default_registry(), Config())
        >>> results = categorizer.categorize(items, context, now=now)
        >>> [r.name for r in results]
        ['Investment Trends', 'General Results']
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        config: Config | None = None,
        calculator: MetricsCalculator | None = None,
        matcher: CategoryMatcher | None = None,
    ):
        """Initialize the categorizer.

        Args:
            registry: Category catalog (shared, read-only)
            config: Engine configuration
            calculator: Metrics calculator (built from config when omitted)
            matcher: Category matcher (built from registry when omitted)
        """
        self.registry = registry
        self.config = config or Config()
        self.calculator = calculator or MetricsCalculator(self.config)
        self.matcher = matcher or CategoryMatcher(registry, self.config)

    def score_item(
        self,
        position: int,
        item: ContentItem,
        context: QueryContext,
        now: datetime,
        related: Sequence[ContentItem] = (),
    ) -> ScoredItem:
        """Compute metrics and category affinities for one item.

        A matcher fault is logged and leaves the item without affinities, so
        it ends up in the fallback bucket.
        """
        metrics = self.calculator.compute(item, context, now, related)
        try:
            text = normalize(item.extract_text(), self.config.max_text_length)
            affinities = []
            for category in self.registry.thematic:
                affinity = self.matcher.score(item, category, context, now=now, text=text)
                if affinity > 0.0:
                    affinities.append((category, affinity))
            affinities.sort(key=lambda m: (-m[1], m[0].priority, self.registry.order(m[0].id)))
        except Exception as e:
            logger.error("Category matching failed | item=%s error=%s", item, e, exc_info=True)
            affinities = []
        return ScoredItem(position=position, item=item, metrics=metrics, affinities=affinities)

    def new_run(
        self,
        scored: Sequence[ScoredItem],
        context: QueryContext,
        include_all_results: bool | None = None,
    ) -> CategorizationRun:
        """Create a run over already-scored items."""
        return CategorizationRun(
            self.registry,
            self.config,
            context,
            scored,
            matcher=self.matcher,
            include_all_results=include_all_results,
        )

    def categorize(
        self,
        items: Sequence[ContentItem],
        context: QueryContext,
        now: datetime,
        related: Sequence[ContentItem] = (),
        include_all_results: bool | None = None,
    ) -> list[CategorizedResult]:
        """Score and categorize ingested items sequentially.

        Args:
            items: Valid, ingested items in input order
            context: Classified query
            now: Reference time
            related: Related items for cross-reference accuracy signals
            include_all_results: Populate the catch-all bucket (config default when None)

        Returns:
            Ordered category buckets, at most max_categories long
        """
        if not items:
            return []
        scored = [self.score_item(i, item, context, now, related) for i, item in enumerate(items)]
        return self.new_run(scored, context, include_all_results).run()
