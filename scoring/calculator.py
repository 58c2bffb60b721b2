"""Per-item metric computation with cache-aside reuse and fault isolation.

MetricsCalculator is the boundary around the four calculators. It reuses a
bundle an upstream producer already attached to the item, and it turns any
calculator fault into DEFAULT_METRICS so one bad item never takes down a run.
"""

import logging
from datetime import datetime
from typing import Sequence

from config import Config
from models.content import ContentItem
from models.context import QueryContext
from models.metrics import MetricBundle
from scoring import accuracy, credibility, recency, relevance

logger = logging.getLogger(__name__)


class MetricsCalculator:
    """Compute MetricBundles for items under a query context.

    Example:
        >>> calculator = MetricsCalculator(config)
        >>> bundle = calculator.compute(item, context, now=now)
        >>> bundle.overall
        71
    """

    def __init__(self, config: Config | None = None):
        """Initialize the calculator.

        Args:
            config: Engine configuration (defaults when omitted)
        """
        self.config = config or Config()

    def compute(
        self,
        item: ContentItem,
        context: QueryContext,
        now: datetime,
        related: Sequence[ContentItem] = (),
    ) -> MetricBundle:
        """Score one item.

        Pre-attached metrics are reused, with accuracy held at the configured
        floor. Calculator faults and unusable attached bundles are logged and
        replaced with DEFAULT_METRICS (overall derived from the active
        weights).

        Args:
            item: Item to score
            context: Classified query
            now: Reference time
            related: Related items for cross-reference accuracy signals

        Returns:
            MetricBundle with every field in [0, 100]
        """
        try:
            if item.metrics is not None:
                bundle = item.metrics
            elif item.attached_metrics is not None:
                logger.debug("Reusing attached metrics | item=%s", item.identity[:8])
                bundle = MetricBundle.coerce(item.attached_metrics, context.weights)
            else:
                return self._score(item, context, now, related)
        except Exception as e:
            logger.error(
                "Metric calculation failed, using defaults | item=%s error=%s",
                item.identity[:8], e, exc_info=True,
            )
            return MetricBundle.default(context.weights)
        return bundle.with_accuracy_floor(self.config.accuracy_floor, context.weights)

    def _score(
        self,
        item: ContentItem,
        context: QueryContext,
        now: datetime,
        related: Sequence[ContentItem],
    ) -> MetricBundle:
        max_length = self.config.max_text_length
        return MetricBundle.from_scores(
            relevance=relevance.score(item, context, now, max_length=max_length),
            accuracy=accuracy.score(
                item, now, related, max_length=max_length, floor=self.config.accuracy_floor,
            ),
            credibility=credibility.score(item, max_length=max_length),
            recency=recency.score(item, now),
            weights=context.weights,
        )
