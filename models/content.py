"""Content item model for search results entering the engine.

This module defines ContentItem, the single explicit shape every search
result is converted into before scoring. Retrieval layers hand over loosely
shaped mappings (title/content/snippet/description, url/link, several date
spellings); ContentItem.from_raw() resolves those once at ingestion so the
calculators never have to guess which field holds the text.

Identity Strategy:
    Items are deduplicated using a hash computed from, in order of preference:
    - The normalized URL (lowercase scheme/host, no trailing slash; query and
      fragment kept so section anchors stay distinct)
    - An explicit id supplied by the retrieval layer
    - The normalized title and body text

    Two results pointing at the same URL are the same item even when their
    titles or snippets differ.
"""

import logging
import re
import unicodedata
from datetime import date, datetime, timezone
from hashlib import sha256
from typing import Any, Mapping
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.metrics import MetricBundle

logger = logging.getLogger(__name__)

# Raw field spellings accepted at ingestion, in order of preference.
_BODY_FIELDS = ("content", "snippet", "description", "text", "body", "summary")
_URL_FIELDS = ("url", "link", "href")
_DATE_FIELDS = ("date", "publishedDate", "published_date", "pub_date", "timestamp")

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d %B %Y", "%B %d, %Y", "%b %d, %Y", "%Y-%m")


def normalize_for_hash(text: str) -> str:
    """Lowercase, NFKC-normalize, strip punctuation and collapse whitespace."""
    normalized = unicodedata.normalize("NFKC", text.lower())
    normalized = re.sub(r"[^\w\s]", "", normalized)
    return re.sub(r"\s+", " ", normalized).strip()


def normalize_url(url: str) -> str:
    """Canonical form of a URL used for identity comparison."""
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError:
        parts = None
    if parts is None or not parts.scheme or not parts.netloc:
        return url.lower().rstrip("/")
    path = parts.path.rstrip("/")
    query = f"?{parts.query}" if parts.query else ""
    # Fragments address distinct sections of one page
    fragment = f"#{parts.fragment}" if parts.fragment else ""
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}{path}{query}{fragment}"


def parse_date(value: Any) -> datetime | None:
    """Parse a date in any of the shapes retrieval layers produce.

    Accepts datetimes, dates, ISO-8601 strings, a few common textual formats,
    bare years and epoch numbers (milliseconds when larger than 1e11).
    Naive values are assumed to be UTC.

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if re.fullmatch(r"\d{4}", text):
            try:
                parsed = datetime(int(text), 1, 1)
            except ValueError:
                return None
        else:
            parsed = None
            try:
                parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            except ValueError:
                for fmt in _DATE_FORMATS:
                    try:
                        parsed = datetime.strptime(text, fmt)
                        break
                    except ValueError:
                        continue
            if parsed is None:
                return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def domain_of(url: str) -> str:
    """Extract the host of a URL without a leading 'www.'."""
    if not url:
        return ""
    try:
        host = urlsplit(url if "//" in url else f"//{url}").netloc.lower()
    except ValueError:
        return ""
    host = host.split("@")[-1].split(":")[0]
    return host[4:] if host.startswith("www.") else host


class AuthorDetails(BaseModel):
    """Structured information about an item's author.

    Attributes:
        name: Author name
        credentials: Degrees and titles (PhD, CFA, professor...)
        affiliation: Institution or employer
        email: Contact address (institutional domains count as verification)
        verified: Author identity verified by the source platform
        publication_count: Number of known publications
        social_profiles: Profile URLs or handles
    """

    name: str = Field(default="", description="Author name")
    credentials: list[str] = Field(default_factory=list, description="Degrees and titles")
    affiliation: str = Field(default="", description="Institution or employer")
    email: str = Field(default="", description="Contact email")
    verified: bool = Field(default=False, description="Identity verified by the platform")
    publication_count: int = Field(default=0, ge=0, description="Known publications")
    social_profiles: list[str] = Field(default_factory=list, description="Profile URLs or handles")


class Reference(BaseModel):
    """A citation attached to an item.

    Attributes:
        url: Cited URL (may be empty)
        title: Cited work title
        author: Cited work author
        date: Publication date of the cited work, as given
        doi: DOI of the cited work
        peer_reviewed: Cited work is peer reviewed
        fact_checked: Cited work is fact checked
        direct_source: Citation points at primary data rather than coverage
    """

    url: str = ""
    title: str = ""
    author: str = ""
    date: str = ""
    doi: str = ""
    peer_reviewed: bool = False
    fact_checked: bool = False
    direct_source: bool = False

    @property
    def domain(self) -> str:
        """Host of the cited URL."""
        return domain_of(self.url)


class ContentItem(BaseModel):
    """A search result ready for scoring and categorization.

    This is the primary data model flowing through the engine. Items are
    built from raw retrieval output by from_raw(), scored by the metric
    calculators, and returned inside CategorizedResult buckets carrying their
    metrics and category affinity.

    Attributes:
        title: Result headline
        content: Body text (content, snippet or description of the raw result)
        url: Link to the result
        domain: Host of the result (derived from url when missing)
        id: Explicit identifier from the retrieval layer
        date: Publication timestamp (UTC)
        author: Author name
        author_details: Structured author information
        source: Publication or platform name
        source_type: Kind of source (government, research, industry, social...)
        references: Citations attached to the result
        key_phrases: Key phrases extracted upstream
        fact_check_status: Verdict from a fact-checking service
        data_source: Origin of any data the result reports
        verified: Result externally flagged as verified
        metrics: Pre-attached or computed MetricBundle (wire name "_metrics")
        category_score: Category affinity x100 (wire name "_categoryScore")
        attached_metrics: Raw "_metrics" mapping from an upstream producer,
            normalized by the metrics calculator

    Example:
        >>> item = ContentItem.from_raw({"title": "Fed holds rates", "link": "https://..."})
        >>> item.identity  # 16-char dedup key
        '3f1c0a9be27d4410'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = Field(default="", description="Result headline")
    content: str = Field(default="", description="Body text")
    url: str = Field(default="", description="Link to the result")
    domain: str = Field(default="", description="Host of the result")
    id: str = Field(default="", description="Explicit identifier")
    date: datetime | None = Field(default=None, description="Publication timestamp (UTC)")
    author: str = Field(default="", description="Author name")
    author_details: AuthorDetails | None = Field(default=None, description="Author information")
    source: str = Field(default="", description="Publication or platform name")
    source_type: str = Field(default="", description="Kind of source")
    references: list[Reference] = Field(default_factory=list, description="Citations")
    key_phrases: list[str] = Field(default_factory=list, description="Upstream key phrases")
    fact_check_status: str = Field(default="", description="Fact-check verdict")
    data_source: str = Field(default="", description="Origin of reported data")
    verified: bool = Field(default=False, description="Externally flagged verified")
    metrics: MetricBundle | None = Field(default=None, alias="_metrics")
    category_score: int | None = Field(default=None, alias="_categoryScore")
    attached_metrics: dict[str, Any] | None = Field(default=None, exclude=True)

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> datetime | None:
        """Accept any supported date shape; unparseable values become None."""
        return parse_date(v)

    @field_validator("source_type", "fact_check_status", mode="before")
    @classmethod
    def _lower(cls, v: Any) -> str:
        return str(v).strip().lower() if v else ""

    @classmethod
    def from_raw(cls, raw: Any) -> "ContentItem | None":
        """Build an item from a loosely shaped retrieval result.

        The single canonical text extraction happens here. Non-mapping
        values and results without any title or body text are rejected.

        Args:
            raw: Mapping produced by a retrieval layer, or an existing item

        Returns:
            ContentItem, or None when the result is structurally invalid.
        """
        if isinstance(raw, ContentItem):
            return raw if raw.extract_text() else None
        if not isinstance(raw, Mapping):
            return None

        title = _first_text(raw, ("title", "name", "headline"))
        body = _first_text(raw, _BODY_FIELDS)
        if not title and not body:
            return None

        url = _first_text(raw, _URL_FIELDS)
        date_value = next((raw[k] for k in _DATE_FIELDS if raw.get(k) not in (None, "")), None)

        author_details = raw.get("author_details") or raw.get("authorDetails")
        author = raw.get("author")
        if isinstance(author, Mapping):
            author_details = author_details or author
            author = author.get("name", "")

        fields: dict[str, Any] = {
            "title": title,
            "content": body,
            "url": url,
            "domain": str(raw.get("domain") or "") or domain_of(url),
            "id": str(raw.get("id") or ""),
            "date": date_value,
            "author": str(author or ""),
            "author_details": author_details if isinstance(author_details, Mapping) else None,
            "source": _first_text(raw, ("source", "sourceName", "publisher")),
            "source_type": raw.get("source_type") or raw.get("sourceType"),
            "references": _references(raw.get("references") or raw.get("citations")),
            "key_phrases": _strings(raw.get("key_phrases") or raw.get("keyPhrases")),
            "fact_check_status": raw.get("fact_check_status") or raw.get("factCheckStatus"),
            "data_source": str(raw.get("data_source") or raw.get("dataSource") or ""),
            "verified": bool(raw.get("verified") or raw.get("isVerified")),
        }
        metrics = raw.get("_metrics")
        if isinstance(metrics, MetricBundle):
            fields["_metrics"] = metrics
        elif isinstance(metrics, Mapping):
            fields["attached_metrics"] = dict(metrics)

        try:
            return cls.model_validate(fields)
        except ValidationError as e:
            # Malformed optional fields fall back to defaults; text is enough to score
            logger.debug("Dropping malformed optional fields | title=%s error=%s", title[:50], e)
            core = {k: fields[k] for k in ("title", "content", "url", "domain", "id", "date")}
            try:
                return cls.model_validate(core)
            except ValidationError:
                core.pop("date")
                return cls.model_validate(core)

    def extract_text(self) -> str:
        """Title and body joined for scoring."""
        return "\n".join(part for part in (self.title, self.content) if part)

    @property
    def identity(self) -> str:
        """Generate a 16-character deduplication key.

        The payload is the normalized URL when present, else the explicit id,
        else the normalized title and body.

        Returns:
            16-character hex string (first 16 chars of SHA-256)
        """
        if self.url:
            payload = f"url|{normalize_url(self.url)}"
        elif self.id:
            payload = f"id|{self.id}"
        else:
            payload = f"text|{normalize_for_hash(self.title)}|{normalize_for_hash(self.content)}"
        return sha256(payload.encode()).hexdigest()[:16]

    def to_dict(self) -> dict[str, Any]:
        """Serialize for display code, using the wire names of attached scores."""
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return f"ContentItem({self.identity[:8]}..., '{self.title[:50]}')"


def _first_text(raw: Mapping[str, Any], keys: tuple[str, ...]) -> str:
    for key in keys:
        value = raw.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _strings(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v) for v in value if v]


def _references(value: Any) -> list[dict[str, Any]]:
    """Normalize citations given as strings or mappings."""
    if not isinstance(value, (list, tuple)):
        return []
    refs: list[dict[str, Any]] = []
    for entry in value:
        if isinstance(entry, str) and entry.strip():
            text = entry.strip()
            refs.append({"url": text} if text.startswith(("http://", "https://")) else {"title": text})
        elif isinstance(entry, Mapping):
            refs.append({
                "url": str(entry.get("url") or entry.get("link") or ""),
                "title": str(entry.get("title") or ""),
                "author": str(entry.get("author") or ""),
                "date": str(entry.get("date") or ""),
                "doi": str(entry.get("doi") or ""),
                "peer_reviewed": bool(entry.get("peer_reviewed") or entry.get("isPeerReviewed")),
                "fact_checked": bool(entry.get("fact_checked") or entry.get("isFactChecked")),
                "direct_source": bool(entry.get("direct_source") or entry.get("isDirectSource")),
            })
    return refs
