"""Category models for the categorization pipeline.

This module defines the read-only Category catalog entries, the transient
CategoryAssignment records produced while matching, and the
CategorizedResult buckets returned to display code.

Category Design:
    Each category carries a two-tier vocabulary:

    PRIMARY keywords (up to 60% of the affinity score):
        Terms that on their own identify the theme.

    SECONDARY keywords (up to 25%):
        Supporting vocabulary that strengthens a match.

    QUERY terms (up to 15%):
        Words that, when present in the query, point at the category.

    Two special categories exist: the fallback bucket ("General Results")
    absorbs items nothing else claims, and the catch-all ("All Results")
    may hold every item and is exempt from deduplication.
"""

from typing import Any

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.content import ContentItem
from models.metrics import METRIC_FIELDS, MetricBundle, clamp_score


class Category(BaseModel):
    """A thematic bucket from the category registry.

    Attributes:
        id: Stable identifier
        name: Display name
        description: One-line description for display
        priority: Precedence (lower = shown first)
        primary_keywords: Terms that identify the theme
        secondary_keywords: Supporting vocabulary
        query_terms: Query words pointing at the category
        business: Category benefits from the business-query boost
        fallback: Receives items no other category claims
        catch_all: Holds every item, exempt from deduplication
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Stable identifier")
    name: str = Field(min_length=1, description="Display name")
    description: str = Field(default="", description="Short description")
    priority: int = Field(default=5, ge=0, description="Precedence, lower first")
    primary_keywords: tuple[str, ...] = Field(default=(), description="Theme-defining terms")
    secondary_keywords: tuple[str, ...] = Field(default=(), description="Supporting terms")
    query_terms: tuple[str, ...] = Field(default=(), description="Query words for this theme")
    business: bool = Field(default=False, description="Eligible for business boost")
    fallback: bool = Field(default=False, description="Absorbs unmatched items")
    catch_all: bool = Field(default=False, description="Holds every item")

    @field_validator("primary_keywords", "secondary_keywords", "query_terms", mode="before")
    @classmethod
    def _normalize_terms(cls, v: Any) -> tuple[str, ...]:
        """Lowercase and de-duplicate vocabulary, keeping order."""
        if isinstance(v, str):
            v = [v]
        terms = (str(t).strip().lower() for t in v or ())
        return tuple(dict.fromkeys(t for t in terms if t))

    @property
    def is_special(self) -> bool:
        """Fallback and catch-all categories never compete in matching."""
        return self.fallback or self.catch_all

    def __str__(self) -> str:
        return f"Category({self.id}, p={self.priority})"


class CategoryAssignment(BaseModel):
    """A candidate (item, category) pairing recorded during matching.

    Attributes:
        identity: Identity key of the item
        category_id: Matched category
        score: Affinity in [0, 1]
        position: Input position of the item
        pass_number: 1 or 2 (fallback assignments are recorded as pass 2)
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    category_id: str
    score: float = Field(ge=0.0, le=1.0)
    position: int = Field(ge=0)
    pass_number: int = Field(default=1, ge=1, le=2)

    def beats(self, other: "CategoryAssignment | None") -> bool:
        """Whether this assignment should replace another for the same item.

        Only a strictly higher affinity wins, so equal scores keep the
        earlier assignment.
        """
        return other is None or self.score > other.score


class CategorizedResult(BaseModel):
    """A category with its ordered items and aggregate metrics.

    Attributes:
        category: The registry entry this bucket belongs to
        content: Items ordered by relevance (ties in input order)
        metrics: Field-wise rounded mean of the items' metrics
    """

    category: Category
    content: list[ContentItem] = Field(default_factory=list)
    metrics: MetricBundle

    @classmethod
    def build(cls, category: Category, content: list[ContentItem]) -> "CategorizedResult":
        """Create a bucket, aggregating metrics over its items."""
        return cls(category=category, content=content, metrics=aggregate_metrics(content))

    @property
    def id(self) -> str:
        return self.category.id

    @property
    def name(self) -> str:
        return self.category.name

    @property
    def priority(self) -> int:
        return self.category.priority

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shape display code consumes."""
        return {
            "id": self.category.id,
            "name": self.category.name,
            "description": self.category.description,
            "priority": self.category.priority,
            "metrics": self.metrics.display_dict(),
            "content": [item.to_dict() for item in self.content],
        }

    def __str__(self) -> str:
        return f"CategorizedResult({self.category.id}, items={len(self.content)}, {self.metrics})"


def aggregate_metrics(items: list[ContentItem]) -> MetricBundle:
    """Field-wise mean of item metrics, rounded half-up.

    Items without metrics are ignored; a bucket with no scored items gets
    zeros.
    """
    fields = METRIC_FIELDS + ("overall",)
    rows = [[getattr(item.metrics, f) for f in fields] for item in items if item.metrics]
    if not rows:
        return MetricBundle(**{f: 0 for f in fields})
    means = np.asarray(rows, dtype=float).mean(axis=0)
    return MetricBundle(**{f: clamp_score(float(m)) for f, m in zip(fields, means)})
