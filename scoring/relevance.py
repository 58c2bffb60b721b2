"""Relevance scoring.

Relevance measures how directly an item answers the query. It is a weighted
sum of match signals plus an age-decay term:

    body term coverage    0.35  share of query terms found in title + body,
                                saturating once 60% of the terms are found
    title term coverage   0.10  share of query terms found in the title
    topic overlap         0.15  query topics whose vocabulary appears in the item
    source alignment      0.10  source specializes in the query's topics
    key-phrase overlap    0.10  query terms found in upstream key phrases
    age decay             0.20  1.0 up to a week old, down to 0.2 past 3 years

Two bonuses are added on top: +0.10 when the whole query appears verbatim,
and +0.08 for very short or generic queries that matched at all (their
coverage ratios are naturally low). The result is scaled to 0-100 and
capped at 100.
"""

import logging
from datetime import datetime

import numpy as np

from models.content import ContentItem
from models.context import QueryContext
from scoring import sources
from scoring.text import DEFAULT_MAX_LENGTH, contains_term, normalize, query_terms, term_in_text

logger = logging.getLogger(__name__)

WEIGHTS = {
    "body": 0.35,
    "title": 0.10,
    "topic": 0.15,
    "source": 0.10,
    "phrases": 0.10,
    "age": 0.20,
}
EXACT_PHRASE_BONUS = 0.10
GENERIC_QUERY_BONUS = 0.08
COVERAGE_SATURATION = 0.6

# Neutral values used when the signal cannot be computed
NEUTRAL_AGE = 0.6
NEUTRAL_SIGNAL = 0.5

# Age decay: days -> factor, linear between points; beyond 3 years -> 0.2
_DECAY_DAYS = [0, 7, 30, 90, 180, 365, 730, 1095]
_DECAY_FACTORS = [1.0, 1.0, 0.9, 0.8, 0.7, 0.6, 0.4, 0.3]
_DECAY_FLOOR = 0.2

GENERIC_TERMS = frozenset({
    "news", "latest", "best", "top", "new", "info", "information", "guide", "overview",
    "update", "updates", "today", "trends", "review", "reviews", "list", "tips",
})


def age_decay(published: datetime | None, now: datetime) -> float:
    """Freshness factor in [0.2, 1.0] for the relevance blend.

    Items up to a week old get 1.0; future dates count as fresh; a missing
    date is neutral.
    """
    if published is None:
        return NEUTRAL_AGE
    days = (now - published).total_seconds() / 86400
    if days <= _DECAY_DAYS[1]:
        return 1.0
    if days > _DECAY_DAYS[-1]:
        return _DECAY_FLOOR
    return float(np.interp(days, _DECAY_DAYS, _DECAY_FACTORS))


def _coverage(text: str, terms: list[str]) -> float:
    if not terms:
        return 0.0
    return sum(1 for t in terms if term_in_text(text, t)) / len(terms)


def _topics(text: str) -> list[str]:
    return [
        topic for topic, keywords in sources.TOPIC_KEYWORDS.items()
        if any(contains_term(text, kw) for kw in keywords)
    ]


def topic_overlap(query_text: str, item_text: str) -> float:
    """Share of the query's topics that the item also covers."""
    query_topics = _topics(query_text)
    if not query_topics:
        return NEUTRAL_SIGNAL
    covered = sum(
        1 for topic in query_topics
        if any(contains_term(item_text, kw) for kw in sources.TOPIC_KEYWORDS[topic])
    )
    return covered / len(query_topics)


def source_alignment(item: ContentItem, query_text: str) -> float:
    """How well the item's source specializes in the query's topics."""
    query_topics = _topics(query_text)
    host = item.domain
    if not query_topics or not (host or item.source):
        return NEUTRAL_SIGNAL

    aligned = any(
        sources.host_matches(host, sources.TOPIC_SOURCES.get(topic, ()))
        for topic in query_topics
    )
    score = 0.85 if aligned else 0.4
    if item.source_type in sources.INSTITUTIONAL_SOURCE_TYPES:
        score += 0.1
    if sources.reliability_tier(host) == "high":
        score += 0.05
    return min(score, 1.0)


def phrase_overlap(item: ContentItem, terms: list[str]) -> float:
    """Share of query terms echoed by the item's upstream key phrases."""
    if not item.key_phrases or not terms:
        return NEUTRAL_SIGNAL
    phrases = normalize(" | ".join(item.key_phrases))
    return _coverage(phrases, terms)


def is_generic_query(terms: list[str]) -> bool:
    """Very short queries, or ones made only of generic words."""
    return len(terms) <= 2 or all(t in GENERIC_TERMS for t in terms)


def score(
    item: ContentItem,
    context: QueryContext,
    now: datetime,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> int:
    """Score how relevant an item is to the query.

    Args:
        item: Item to score
        context: Classified query
        now: Reference time for age decay
        max_length: Per-item text cap

    Returns:
        Relevance in [0, 100]
    """
    terms = query_terms(context.query)
    text = normalize(item.extract_text(), max_length)
    title = normalize(item.title, max_length)
    query_text = normalize(context.query)

    body_cov = min(1.0, _coverage(text, terms) / COVERAGE_SATURATION)
    title_cov = min(1.0, _coverage(title, terms) / COVERAGE_SATURATION)

    signals = {
        "body": body_cov,
        "title": title_cov,
        "topic": topic_overlap(query_text, text),
        "source": source_alignment(item, query_text),
        "phrases": phrase_overlap(item, terms),
        "age": age_decay(item.date, now),
    }
    total = sum(WEIGHTS[name] * value for name, value in signals.items())

    if query_text and len(query_text) > 3 and query_text in text:
        total += EXACT_PHRASE_BONUS
    if body_cov > 0 and is_generic_query(terms):
        total += GENERIC_QUERY_BONUS

    result = int(min(100.0, total * 100 + 0.5))
    logger.debug("Relevance | item=%s score=%d signals=%s", item.identity[:8], result, signals)
    return result
