"""Credibility scoring.

Credibility estimates how trustworthy the source and author are:

    source reputation     0.40  institutional domains, established news,
                                journals, curated low-quality lists
    author expertise      0.25  credentials, affiliation, verification,
                                publication record
    citation quality      0.20  count, quality and diversity of citations,
                                peer review
    verification factors  0.15  peer review, author verification,
                                institutional affiliation, transparency
"""

import logging

from models.content import AuthorDetails, ContentItem
from scoring import sources
from scoring.text import DEFAULT_MAX_LENGTH, any_pattern, count_hits, normalize

logger = logging.getLogger(__name__)

WEIGHTS = {
    "reputation": 0.40,
    "author": 0.25,
    "citations": 0.20,
    "verification": 0.15,
}

NO_SOURCE_REPUTATION = 0.4
NO_AUTHOR_EXPERTISE = 0.3

_PEER_REVIEW_TERMS = ("peer-reviewed", "peer reviewed", "refereed", "published in", "journal of")
_PREPRINT_TERMS = ("preprint", "not yet peer reviewed", "not peer reviewed", "working paper")
_TRANSPARENCY = {
    "methodology": ("methodology", "our method", "we measured", "data were collected"),
    "limitations": ("limitation", "caveat", "we could not", "further research"),
    "funding": ("funded by", "funding", "disclosure", "conflict of interest", "sponsored by"),
    "data": ("data available", "dataset", "supplementary", "open data", "replication"),
    "contact": ("contact", "corresponding author", "email", "reach us"),
}


def source_reputation(item: ContentItem) -> float:
    """Reputation of the item's domain."""
    host = item.domain
    if not host:
        return NO_SOURCE_REPUTATION

    score = 0.5
    kind = sources.tld_kind(host)
    if kind == "edu":
        score += 0.3
    elif kind == "gov":
        score += 0.25
    if sources.host_matches(host, sources.ESTABLISHED_NEWS):
        score += 0.2
    if sources.host_matches(host, sources.SCIENTIFIC_JOURNALS):
        score += 0.3
    tier = sources.reliability_tier(host)
    if tier == "high" and score < 0.8:
        score += 0.15
    elif tier == "low":
        score -= 0.2
    if any(marker in host for marker in sources.LOW_QUALITY_MARKERS):
        score -= 0.1
    return max(0.0, min(score, 1.0))


def _author_text(details: AuthorDetails | None, author: str) -> str:
    parts = [author]
    if details is not None:
        parts += [details.name, details.affiliation, " ".join(details.credentials)]
    return normalize(" ".join(p for p in parts if p))


def author_expertise(item: ContentItem) -> float:
    """Expertise signals from the author's credentials and affiliation."""
    details = item.author_details
    if not item.author and details is None:
        return NO_AUTHOR_EXPERTISE

    text = _author_text(details, item.author)
    score = 0.5
    if any_pattern(text, sources.PROFESSIONAL_CREDENTIALS):
        score += 0.15
    if any_pattern(text, sources.PRESTIGIOUS_INSTITUTIONS):
        score += 0.2
    elif any_pattern(text, sources.RESEARCH_ORGANIZATIONS):
        score += 0.15
    if details is not None:
        if details.verified:
            score += 0.15
        if details.publication_count > 10:
            score += 0.1
    return min(score, 1.0)


def citation_quality(item: ContentItem, text: str) -> float:
    """Count, quality and diversity of the item's citations."""
    refs = item.references
    score = 0.5
    count = len(refs)
    if count >= 10:
        score += 0.2
    elif count >= 5:
        score += 0.15
    elif count >= 1:
        score += 0.1

    tiers = [sources.reliability_tier(r.domain) for r in refs]
    if "high" in tiers or any(sources.tld_kind(r.domain) in ("edu", "gov") for r in refs):
        score += 0.2
    elif "moderate" in tiers:
        score += 0.1

    unique = len({r.domain for r in refs if r.domain})
    if unique >= 5:
        score += 0.1
    elif unique >= 3:
        score += 0.05

    if any(r.peer_reviewed for r in refs) or any_pattern(text, _PEER_REVIEW_TERMS):
        score += 0.25
    elif any(r.fact_checked for r in refs):
        score += 0.15
    if any(r.direct_source for r in refs):
        score += 0.15
    return min(score, 1.0)


def _peer_review(item: ContentItem, text: str) -> float:
    if any_pattern(text, _PREPRINT_TERMS):
        return 0.6
    score = 0.5
    if sources.host_matches(item.domain, sources.SCIENTIFIC_JOURNALS):
        score += 0.2
    if any_pattern(text, _PEER_REVIEW_TERMS):
        score += 0.2
    if "doi.org" in text or "doi:" in text or any(r.doi for r in item.references):
        score += 0.1
    return min(score, 1.0)


def _author_verification(item: ContentItem) -> float:
    details = item.author_details
    if details is None:
        return NO_AUTHOR_EXPERTISE if item.author else 0.0
    score = 0.4
    email_host = details.email.rsplit("@", 1)[-1].lower() if "@" in details.email else ""
    if sources.tld_kind(email_host) in ("edu", "gov"):
        score += 0.2
    if details.verified:
        score += 0.2
    affiliation = normalize(details.affiliation)
    if affiliation and item.source and normalize(item.source) in affiliation:
        score += 0.1
    score += min(0.05 * len(details.social_profiles), 0.15)
    return min(score, 1.0)


def _institutional(item: ContentItem, text: str) -> float:
    score = 0.5
    if any_pattern(text, sources.PRESTIGIOUS_INSTITUTIONS):
        score += 0.2
    if any_pattern(text, sources.RESEARCH_ORGANIZATIONS):
        score += 0.15
    if item.source_type == "government" or sources.tld_kind(item.domain) == "gov":
        score += 0.15
    if any_pattern(text, sources.CORPORATE_RESEARCH):
        score += 0.1
    if sources.tld_kind(item.domain):
        score += 0.1
    return min(score, 1.0)


def _transparency(text: str) -> float:
    return min(0.5 + 0.1 * transparency_disclosures(text), 1.0)


def transparency_disclosures(text: str) -> int:
    """Number of transparency disclosures (methodology, funding...) present."""
    return sum(1 for terms in _TRANSPARENCY.values() if count_hits(text, terms) > 0)


def verification_factors(item: ContentItem, text: str) -> float:
    """Peer review, author verification, affiliation and transparency."""
    author_text = _author_text(item.author_details, item.author)
    return (
        _peer_review(item, text) * 0.30
        + _author_verification(item) * 0.30
        + _institutional(item, f"{text} {author_text}") * 0.20
        + _transparency(text) * 0.20
    )


def score(item: ContentItem, max_length: int = DEFAULT_MAX_LENGTH) -> int:
    """Score how trustworthy an item's source and author are.

    Args:
        item: Item to score
        max_length: Per-item text cap

    Returns:
        Credibility in [0, 100]
    """
    text = normalize(item.extract_text(), max_length)
    signals = {
        "reputation": source_reputation(item),
        "author": author_expertise(item),
        "citations": citation_quality(item, text),
        "verification": verification_factors(item, text),
    }
    total = sum(WEIGHTS[name] * value for name, value in signals.items())
    result = max(0, min(100, int(total * 100 + 0.5)))
    logger.debug("Credibility | item=%s score=%d signals=%s", item.identity[:8], result, signals)
    return result
