"""Pydantic models for the Prism categorization engine.

This package contains all data models used throughout the engine:

ContentItem:
    A search result with title, body, optional URL/date/author/citations.
    Includes identity property for deduplication.

MetricBundle:
    Relevance, accuracy, credibility, recency and overall scores (0-100).

WeightProfile:
    Per-context weights combining the quality metrics into overall.

QueryContext:
    Classified query with ordered context labels and its weight profile.

Category:
    Read-only registry entry with a two-tier keyword vocabulary.

CategoryAssignment:
    Transient (item, category, affinity) pairing used during matching.

CategorizedResult:
    A category with its ordered items and aggregate metrics.

Example:
    >>> from models import ContentItem, MetricBundle
    >>> item = ContentItem.from_raw({"title": "...", "snippet": "...", "url": "..."})
    >>> item.identity
"""

from models.metrics import DEFAULT_METRICS, MetricBundle, WeightProfile
from models.content import AuthorDetails, ContentItem, Reference
from models.context import QueryContext
from models.category import CategorizedResult, Category, CategoryAssignment

__all__ = [
    "DEFAULT_METRICS",
    "MetricBundle",
    "WeightProfile",
    "AuthorDetails",
    "ContentItem",
    "Reference",
    "QueryContext",
    "Category",
    "CategoryAssignment",
    "CategorizedResult",
]
