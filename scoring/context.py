"""Query context classification.

This module labels a query with the topical contexts it touches and picks the
weight profile used to combine relevance, accuracy and credibility.

Classification:
    Six static keyword lists (financial, business, medical, news, technical,
    academic) are checked against the lowercased query. Each list scores one
    hit per keyword found; labels with at least one hit are returned ordered
    by descending hit count, ties keeping the declaration order below. A query
    that hits nothing is "general".

    The first label selects the weight profile from config.CONTEXT_WEIGHTS.

Business Detection:
    Business intent drives the matcher's boosts and threshold relief. It is
    detected from the business vocabulary plus phrasing patterns such as
    "<x> market 2025", currency amounts or company suffixes, and can be
    overridden by the caller.
"""

import logging
import re

from config import weights_for
from models.context import GENERAL, QueryContext
from scoring.text import contains_term, normalize

logger = logging.getLogger(__name__)

CONTEXT_KEYWORDS: dict[str, tuple[str, ...]] = {
    "financial": (
        "stock", "market", "invest", "trading", "finance", "financial", "dividend",
        "portfolio", "bond", "equity", "fund", "etf", "interest rate", "inflation",
        "recession", "gdp", "earnings", "revenue", "profit", "valuation", "ipo",
        "merger", "acquisition", "crypto", "bitcoin", "forex", "hedge", "asset",
        "capital", "venture", "wealth",
    ),
    "business": (
        "business", "company", "companies", "startup", "industry", "strategy",
        "enterprise", "corporate", "management", "growth", "trend", "trends",
        "competitor", "competition", "customer", "b2b", "saas", "entrepreneur",
        "funding", "market share", "ceo", "roi", "kpi", "forecast", "outlook",
        "investment", "ai investment", "2024", "2025", "2026",
    ),
    "medical": (
        "health", "medical", "medicine", "disease", "treatment", "symptom", "doctor",
        "patient", "clinical", "drug", "vaccine", "therapy", "diagnosis", "hospital",
        "cancer", "diabetes", "covid", "virus", "pharmaceutical", "fda",
    ),
    "news": (
        "news", "report", "latest", "update", "breaking", "headline", "press",
        "announcement", "today", "yesterday", "this week", "current events", "election",
    ),
    "technical": (
        "software", "programming", "code", "developer", "api", "algorithm", "database",
        "framework", "python", "javascript", "cloud", "devops", "machine learning",
        "ai", "artificial intelligence", "neural", "kubernetes", "architecture",
        "security", "protocol", "open source",
    ),
    "academic": (
        "research", "study", "paper", "journal", "peer review", "peer-reviewed",
        "hypothesis", "methodology", "citation", "university", "professor", "thesis",
        "dissertation", "experiment", "meta-analysis", "literature review", "scholar",
    ),
}

# Phrasing that marks a business question even without listed keywords.
_BUSINESS_PATTERNS = tuple(re.compile(p) for p in (
    r"investment\s+trends?",
    r"\bai\s+investment",
    r"\w+\s+market\s+(?:19|20)\d{2}",
    r"market\s+(?:size|share|analysis|outlook|forecast)",
    r"[$€£¥]\s?\d",
    r"\d+(?:\.\d+)?\s?(?:%|percent\b)",
    r"\b\d+(?:\.\d+)?\s?(?:million|billion|trillion|mn|bn)\b",
    r"\b(?:inc|corp|llc|ltd|plc|gmbh)\b\.?",
    r"\b(?:ceo|cfo|coo|cto|roi|ebitda|arr|mrr|cac|ltv|m&a|ipo|vc|pe)\b",
    r"\b(?:q[1-4]|fy)\s?(?:19|20)?\d{2}\b",
))

_BUSINESS_CONTEXTS = frozenset({"business", "financial"})


def classify(query: str) -> list[str]:
    """Label a query with its topical contexts, most matched first.

    Args:
        query: Search query

    Returns:
        Ordered context labels; ["general"] when nothing matches.

    Example:
        >>> classify("latest stock market news")
        ['financial', 'news']
    """
    return list(_classify(query)[0])


def _classify(query: str) -> tuple[tuple[str, ...], dict[str, int]]:
    text = normalize(query)
    if not text:
        return (GENERAL,), {}

    counts = {
        label: sum(1 for kw in keywords if contains_term(text, kw))
        for label, keywords in CONTEXT_KEYWORDS.items()
    }
    matched = [label for label, count in counts.items() if count > 0]
    # sorted() is stable, so ties keep the declaration order
    matched = sorted(matched, key=lambda label: -counts[label])
    if not matched:
        return (GENERAL,), {}
    return tuple(matched), {label: counts[label] for label in matched}


def is_business_query(query: str) -> bool:
    """Detect business intent from vocabulary and phrasing patterns."""
    text = normalize(query)
    if not text:
        return False
    if any(contains_term(text, kw) for kw in CONTEXT_KEYWORDS["business"]):
        return True
    return any(p.search(text) for p in _BUSINESS_PATTERNS)


def build_context(query: str, business_override: bool | None = None) -> QueryContext:
    """Classify a query and select its weight profile.

    Args:
        query: Search query
        business_override: Force business mode on or off (None = detect)

    Returns:
        QueryContext with labels, counts, weights and business flag
    """
    query = query if isinstance(query, str) else ""
    labels, counts = _classify(query)

    if business_override is not None:
        business = business_override
    else:
        business = bool(_BUSINESS_CONTEXTS.intersection(labels)) or is_business_query(query)

    context = QueryContext(
        query=query,
        labels=labels,
        counts=counts,
        weights=weights_for(labels[0]),
        is_business=business,
    )
    logger.debug(
        "Query classified | labels=%s business=%s",
        ",".join(labels), business,
    )
    return context
