"""Text normalization and keyword matching shared by every calculator.

All scoring reads item text through normalize(), so case folding, Unicode
normalization and the per-item length cap are applied the same way
everywhere. Keyword checks go through contains_term(), which treats short
keywords (three characters or fewer) as whole words so that "ai" does not
match inside "said".
"""

import re
import unicodedata
from functools import lru_cache
from typing import Iterable

DEFAULT_MAX_LENGTH = 10_000

# Words ignored when splitting a query into terms
STOPWORDS = frozenset({
    "a", "about", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does",
    "for", "from", "how", "in", "into", "is", "it", "its", "of", "on", "or", "that",
    "the", "their", "this", "to", "vs", "was", "what", "when", "where", "which",
    "who", "why", "will", "with",
})

_WORD_RE = re.compile(r"[\w$%][\w.$%&/-]*")
_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)*%?")
_DECIMAL_RE = re.compile(r"\b\d+\.\d+\b")
_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")
_DATE_RE = re.compile(
    r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"
    r"|\b\d{4}-\d{2}-\d{2}\b"
    r"|\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.? \d{1,2}(?:st|nd|rd|th)?,? \d{4}\b"
)


def normalize(text: str | None, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Lowercase, NFKC-normalize and collapse whitespace, capped in length.

    Args:
        text: Raw text (None is treated as empty)
        max_length: Characters kept before normalization

    Returns:
        Normalized text
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text[:max_length]).lower()
    return re.sub(r"\s+", " ", text).strip()


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w]){re.escape(term)}(?![\w])")


def contains_term(text: str, term: str) -> bool:
    """Check for a keyword in normalized text.

    Keywords longer than three characters match as substrings; shorter ones
    must stand alone as words.
    """
    term = term.lower()
    if not term:
        return False
    if len(term) <= 3:
        return _term_pattern(term).search(text) is not None
    return term in text


def count_hits(text: str, terms: Iterable[str]) -> int:
    """Number of distinct terms present in the text."""
    return sum(1 for term in dict.fromkeys(terms) if contains_term(text, term))


def matched_terms(text: str, terms: Iterable[str]) -> list[str]:
    """Terms present in the text, in vocabulary order."""
    return [term for term in dict.fromkeys(terms) if contains_term(text, term)]


def query_terms(query: str) -> list[str]:
    """Split a query into significant terms.

    Stopwords and single characters are dropped; when nothing survives, the
    raw tokens are returned instead.
    """
    tokens = [t.strip(".-/") for t in _WORD_RE.findall(normalize(query))]
    tokens = [t for t in tokens if t]
    terms = [t for t in tokens if t not in STOPWORDS and len(t) > 1]
    return list(dict.fromkeys(terms or tokens))


def term_in_text(text: str, term: str) -> bool:
    """Query-term match with a light plural fallback ("trends" finds "trend")."""
    if contains_term(text, term):
        return True
    if len(term) > 4 and term.endswith("s"):
        return contains_term(text, term[:-1])
    return False


def has_numbers(text: str) -> bool:
    return _NUMBER_RE.search(text) is not None


def has_dates(text: str) -> bool:
    return _DATE_RE.search(text) is not None or _YEAR_RE.search(text) is not None


def has_decimals(text: str) -> bool:
    return _DECIMAL_RE.search(text) is not None


def numeric_tokens(text: str) -> set[str]:
    """Distinct figures mentioned in the text (years excluded)."""
    return {
        n for n in _NUMBER_RE.findall(text)
        if not _YEAR_RE.fullmatch(n) and len(n.strip("%")) > 1
    }


def any_pattern(text: str, patterns: Iterable[str]) -> bool:
    """True when any of the phrases occurs in the text."""
    return any(contains_term(text, p) for p in patterns)
