"""Accuracy scoring.

Accuracy estimates how verifiable an item's claims are. Four signal groups
are blended:

    data verification     0.30  figures, dates, precise decimals, citations,
                                primary data sources, corroboration, freshness
    source reliability    0.30  three-tier static lookup of the source domain
    factual consistency   0.25  contradiction and nuance markers, citation
                                quality, fact-check verdicts
    external validation   0.15  fact-checker sources, citation validation,
                                cross-reference consistency with related items,
                                statistical language

The reported value never drops below the accuracy floor (70 by default):
absence of verification signals is not treated as evidence of inaccuracy.
"""

import logging
import re
from datetime import datetime
from typing import Sequence

from models.content import ContentItem
from scoring import sources
from scoring.text import (
    DEFAULT_MAX_LENGTH,
    any_pattern,
    count_hits,
    has_dates,
    has_decimals,
    has_numbers,
    normalize,
    numeric_tokens,
)

logger = logging.getLogger(__name__)

WEIGHTS = {
    "data": 0.30,
    "source": 0.30,
    "consistency": 0.25,
    "external": 0.15,
}
ACCURACY_FLOOR = 70

_SPECIFIC_DETAIL = ("according to", "as of", "reported", "survey", "quarter", "fiscal year", "per cent", "percent")
_PRIMARY_DATA = (
    "official", "government", "census", "bureau", "annual report", "10-k", "10-q",
    "filing", "sec.gov", "statistics", "dataset", "survey data",
)
_CONTRADICTION = (
    "however, this contradicts", "contrary to", "was incorrect", "has been debunked",
    "retracted", "correction:", "misleading", "false claim",
)
_NUANCE = (
    "however", "although", "on the other hand", "in contrast", "may", "might", "suggests",
    "estimated", "approximately", "according to",
)
_FACT_CHECK_TERMS = ("fact check", "fact-check", "verified", "debunked", "rated true", "rated false")
_STATISTICAL_TERMS = (
    "statistically significant", "p-value", "p <", "confidence interval", "standard deviation",
    "regression", "correlation", "margin of error", "sample", "median",
)
_SAMPLE_SIZE = ("sample size", "respondents", "participants", "n =", "n=")
_METHODOLOGY = ("methodology", "method", "randomized", "controlled", "longitudinal", "survey of")
_SENTENCE_RE = re.compile(r"(?<=[.!?])\s+")
_CLAIM_INDICATORS = ("according to", "reported", "found that", "shows that", "estimated", "announced")

_FACT_CHECK_ADJUST = {
    "verified": 0.15,
    "true": 0.15,
    "mostly_true": 0.10,
    "mixed": 0.0,
    "mostly_false": -0.10,
    "disputed": -0.15,
    "false": -0.25,
}


def _months_old(item: ContentItem, now: datetime) -> float | None:
    if item.date is None:
        return None
    return max(0.0, (now - item.date).total_seconds() / (86400 * 30))


def data_verification(item: ContentItem, text: str, related: Sequence[ContentItem], now: datetime) -> float:
    """Figures, dates, citations and corroboration present in the item."""
    score = 0.5
    if has_numbers(text) or has_dates(text):
        score += 0.1

    months = _months_old(item, now)
    if months is not None:
        if months < 1:
            score += 0.15
        elif months < 3:
            score += 0.10
        elif months < 6:
            score += 0.05
        elif months < 12:
            score += 0.02

    figures = numeric_tokens(text)
    if figures:
        corroborating = sum(
            1 for other in related
            if other.identity != item.identity
            and figures & numeric_tokens(normalize(other.extract_text()))
        )
        score += min(corroborating * 0.05, 0.15)

    if any_pattern(text, _SPECIFIC_DETAIL):
        score += 0.05
    if has_decimals(text):
        score += 0.05
    if item.data_source or any_pattern(text, _PRIMARY_DATA):
        score += 0.1
    return min(score, 1.0)


def source_reliability(item: ContentItem) -> float:
    """Static three-tier reliability of the item's source."""
    host = item.domain
    kind = sources.tld_kind(host)
    if item.verified:
        return 0.95

    tier = sources.reliability_tier(host)
    if tier == "high":
        return 0.95 if kind in ("edu", "gov") else 0.9
    if tier == "moderate":
        return 0.75
    if tier == "low":
        verified_author = item.author_details is not None and item.author_details.verified
        return 0.7 if verified_author else 0.4
    if kind in ("edu", "gov"):
        return 0.85
    if kind == "org":
        return 0.7
    return 0.5


def citation_quality(item: ContentItem) -> float:
    """Share-weighted quality of an item's citations in [0, 1]."""
    if not item.references:
        return 0.0
    total = 0.0
    for ref in item.references:
        tier = sources.reliability_tier(ref.domain)
        if tier == "high" or sources.tld_kind(ref.domain) in ("edu", "gov"):
            total += 1.0
        elif tier == "moderate" or ref.peer_reviewed:
            total += 0.7
        elif tier == "low":
            total += 0.2
        else:
            total += 0.5
    return total / len(item.references)


def factual_consistency(item: ContentItem, text: str) -> float:
    """Internal consistency heuristics and fact-check verdicts."""
    score = 0.5
    if not any_pattern(text, _CONTRADICTION):
        score += 0.1
    score += 0.2 * citation_quality(item)
    score += _FACT_CHECK_ADJUST.get(item.fact_check_status.replace(" ", "_").replace("-", "_"), 0.0)
    if any_pattern(text, _NUANCE):
        score += 0.05
    return max(0.0, min(score, 1.0))


def _fact_check_signal(item: ContentItem, text: str) -> float:
    score = 0.5
    location = f"{item.domain}{_path(item.url)}"
    if sources.host_matches(item.domain, sources.FACT_CHECKERS) or any(
        fc in location for fc in sources.FACT_CHECKERS if "/" in fc
    ):
        score = 0.9
    if any(fc.split("/")[0] in text for fc in sources.FACT_CHECKERS):
        score += 0.2
    if any_pattern(text, _FACT_CHECK_TERMS):
        score += 0.1
    return min(score, 1.0)


def _citation_validation(item: ContentItem) -> float:
    if not item.references:
        return 0.3
    total = 0.0
    for ref in item.references:
        ref_score = 0.5
        if sources.tld_kind(ref.domain):
            ref_score += 0.2
        tier = sources.reliability_tier(ref.domain)
        if tier == "high":
            ref_score += 0.2
        elif tier == "moderate":
            ref_score += 0.1
        ref_score += 0.1 * sum(bool(v) for v in (ref.date, ref.author, ref.title, ref.url or ref.doi))
        total += min(ref_score, 1.0)
    return total / len(item.references)


def _claims(text: str) -> set[str]:
    """Figures stated next to claim language."""
    sentences = [s for s in _SENTENCE_RE.split(text) if any_pattern(s, _CLAIM_INDICATORS) or has_numbers(s)]
    claims: set[str] = set()
    for sentence in sentences:
        claims |= numeric_tokens(sentence)
    return claims


def cross_reference(item: ContentItem, text: str, related: Sequence[ContentItem]) -> float:
    """Consistency of the item's figures with a related-items set."""
    score = 0.5
    claims = _claims(text)
    others = [r for r in related if r.identity != item.identity]
    if claims and others:
        supported = sum(
            1 for other in others
            if claims & numeric_tokens(normalize(other.extract_text()))
        )
        score = 0.5 + 0.4 * (supported / len(others))
    if len(item.references) > 2:
        score += 0.1
    if count_hits(text, ("on the other hand", "critics", "however", "proponents", "alternatively")) >= 2:
        score += 0.1
    return min(score, 1.0)


def _statistical_signal(text: str) -> float:
    score = 0.5
    if any_pattern(text, _STATISTICAL_TERMS):
        score += 0.2
    if has_decimals(text):
        score += 0.1
    if any_pattern(text, _SAMPLE_SIZE):
        score += 0.1
    if any_pattern(text, _METHODOLOGY):
        score += 0.1
    return min(score, 1.0)


def external_validation(item: ContentItem, text: str, related: Sequence[ContentItem]) -> float:
    """Signals that outside parties can confirm the item's claims."""
    return (
        _fact_check_signal(item, text) * 0.35
        + _citation_validation(item) * 0.25
        + cross_reference(item, text, related) * 0.25
        + _statistical_signal(text) * 0.15
    )


def score(
    item: ContentItem,
    now: datetime,
    related: Sequence[ContentItem] = (),
    max_length: int = DEFAULT_MAX_LENGTH,
    floor: int = ACCURACY_FLOOR,
) -> int:
    """Score how verifiable an item's claims are.

    Args:
        item: Item to score
        now: Reference time for freshness of reported data
        related: Other results used for cross-referencing figures
        max_length: Per-item text cap
        floor: Lowest value ever reported

    Returns:
        Accuracy in [floor, 100]
    """
    text = normalize(item.extract_text(), max_length)
    signals = {
        "data": data_verification(item, text, related, now),
        "source": source_reliability(item),
        "consistency": factual_consistency(item, text),
        "external": external_validation(item, text, related),
    }
    computed = sum(WEIGHTS[name] * value for name, value in signals.items())
    result = max(floor, min(100, int(computed * 100 + 0.5)))
    logger.debug("Accuracy | item=%s score=%d signals=%s", item.identity[:8], result, signals)
    return result


def _path(url: str) -> str:
    if "//" not in url:
        return ""
    rest = url.split("//", 1)[1]
    return rest[rest.find("/"):] if "/" in rest else ""
