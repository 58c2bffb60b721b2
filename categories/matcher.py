"""Item-to-category affinity scoring.

The matcher estimates how well an item fits each category of the registry.

Affinity (0-1):
    primary density     min(1, hits / min(5, n_primary))   * 0.60
    secondary density   min(1, hits / min(8, n_secondary)) * 0.25
    query overlap       min(1, hits / n_query_terms)       * 0.15

Contextual modifiers, each applied as min(cap, score * factor):
    business query x business category   x1.15
    externally verified item              x1.2
    item younger than a week              x1.05

Because every modifier re-applies the cap, no boosted affinity ever exceeds
0.95 no matter how many boosts stack.

Adaptive threshold:
    verified items        0.1
    business queries      max(0.3, base - 0.05)
    otherwise             base (0.5 unless the caller passes a pass threshold)
"""

import logging
from datetime import datetime

from categories.registry import CategoryRegistry
from config import Config
from models.category import Category
from models.content import ContentItem
from models.context import QueryContext
from scoring.text import contains_term, count_hits, normalize

logger = logging.getLogger(__name__)

PRIMARY_WEIGHT = 0.60
SECONDARY_WEIGHT = 0.25
QUERY_WEIGHT = 0.15
PRIMARY_SATURATION = 5
SECONDARY_SATURATION = 8


def apply_boost(score: float, factor: float, cap: float = 0.95) -> float:
    """Multiply an affinity by a boost factor without exceeding the cap."""
    return min(cap, score * factor)


class CategoryMatcher:
    """Score items against the categories of a registry.

    Example:
        >>> matcher = CategoryMatcher(default_registry(), Config())
        >>> match = matcher.best_match(item, context, now=now)
        >>> match[0].name if match else None
        'Investment Trends'
    """

    def __init__(self, registry: CategoryRegistry, config: Config | None = None):
        """Initialize the matcher.

        Args:
            registry: Category catalog to match against
            config: Engine configuration (boosts, cap, thresholds)
        """
        self.registry = registry
        self.config = config or Config()

    def base_score(self, text: str, query_text: str, category: Category) -> float:
        """Two-tier keyword affinity before contextual modifiers.

        Args:
            text: Normalized item text
            query_text: Normalized query
            category: Category to score against

        Returns:
            Affinity in [0, 1]
        """
        score = 0.0
        if category.primary_keywords:
            hits = count_hits(text, category.primary_keywords)
            denom = min(PRIMARY_SATURATION, len(category.primary_keywords))
            score += min(1.0, hits / denom) * PRIMARY_WEIGHT
        if category.secondary_keywords:
            hits = count_hits(text, category.secondary_keywords)
            denom = min(SECONDARY_SATURATION, len(category.secondary_keywords))
            score += min(1.0, hits / denom) * SECONDARY_WEIGHT
        if category.query_terms and query_text:
            hits = sum(1 for term in category.query_terms if contains_term(query_text, term))
            score += min(1.0, hits / len(category.query_terms)) * QUERY_WEIGHT
        return score

    def score(
        self,
        item: ContentItem,
        category: Category,
        context: QueryContext,
        now: datetime | None = None,
        text: str | None = None,
    ) -> float:
        """Affinity of an item for a category, with contextual modifiers.

        Args:
            item: Item to score
            category: Category to score against
            context: Classified query
            now: Reference time for the recency boost (skipped when None)
            text: Pre-normalized item text, to avoid re-normalizing per category

        Returns:
            Affinity in [0, 1]; boosted values never exceed the cap
        """
        if category.is_special:
            return 0.0
        if text is None:
            text = normalize(item.extract_text(), self.config.max_text_length)
        score = self.base_score(text, normalize(context.query), category)
        if score <= 0.0:
            return 0.0

        cap = self.config.boost_cap
        if context.is_business and category.business:
            score = apply_boost(score, self.config.business_boost, cap)
        if item.verified:
            score = apply_boost(score, self.config.verified_boost, cap)
        if now is not None and item.date is not None:
            age_days = (now - item.date).total_seconds() / 86400
            if 0 <= age_days < self.config.recency_boost_days:
                score = apply_boost(score, self.config.recency_boost, cap)
        return score

    def threshold(self, item: ContentItem, context: QueryContext, base: float | None = None) -> float:
        """Effective match threshold for an item under a query."""
        if base is None:
            base = self.config.match_threshold
        return self.config.adaptive_threshold(base, verified=item.verified, business=context.is_business)

    def find_matches(
        self,
        item: ContentItem,
        context: QueryContext,
        threshold: float | None = None,
        now: datetime | None = None,
    ) -> list[tuple[Category, float]]:
        """Categories the item reaches the (adaptive) threshold for.

        Args:
            item: Item to match
            context: Classified query
            threshold: Base threshold before adaptation (matcher default when None)
            now: Reference time for the recency boost

        Returns:
            (category, affinity) pairs, best first; ties go to the lower
            priority number, then catalog order
        """
        effective = self.threshold(item, context, threshold)
        text = normalize(item.extract_text(), self.config.max_text_length)
        matches = []
        for category in self.registry.thematic:
            affinity = self.score(item, category, context, now=now, text=text)
            if affinity > 0.0 and affinity >= effective:
                matches.append((category, affinity))
        matches.sort(key=lambda m: (-m[1], m[0].priority, self.registry.order(m[0].id)))
        return matches

    def best_match(
        self,
        item: ContentItem,
        context: QueryContext,
        threshold: float | None = None,
        now: datetime | None = None,
    ) -> tuple[Category, float] | None:
        """The single best category for an item, or None below threshold."""
        matches = self.find_matches(item, context, threshold=threshold, now=now)
        return matches[0] if matches else None
