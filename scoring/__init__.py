"""Scoring engine for search results.

This package turns a query and a content item into metric scores:

build_context / classify:
    Label a query with topical contexts and pick its weight profile.

relevance, accuracy, credibility, recency:
    The four metric calculators, each returning an integer in [0, 100].

MetricsCalculator:
    Runs the calculators for one item, reusing pre-attached metrics and
    substituting DEFAULT_METRICS when a calculator fails.

Example:
    >>> from scoring import MetricsCalculator, build_context
    >>> context = build_context("AI investment trends 2025")
    >>> MetricsCalculator().compute(item, context, now=now)
"""

from scoring.context import build_context, classify, is_business_query
from scoring.calculator import MetricsCalculator

__all__ = [
    "build_context",
    "classify",
    "is_business_query",
    "MetricsCalculator",
]
