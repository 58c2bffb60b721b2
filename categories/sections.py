"""Split synthesized answer text into categorizable sections.

A synthesis layer returns free text plus the sources it drew on. To show that
answer in the same category buckets as search results, the text is split
into titled sections and each section becomes a ContentItem.

Splitting Strategy (first that yields sections wins):
    1. Markdown headings ("# Title", "## Title", "**Title**" on its own line)
    2. Title-like short lines followed by body paragraphs
    3. Fixed-size chunks (~500 characters) broken at sentence ends

At most max_sections sections are produced.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from models.content import ContentItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_SECTIONS = 5
CHUNK_SIZE = 500
MAX_TITLE_LENGTH = 80

_HEADING_RE = re.compile(r"^\s{0,3}(?:#{1,6}\s+(.+?)\s*#*|\*\*(.+?)\*\*:?)\s*$")
_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


@dataclass(frozen=True)
class Section:
    """A titled slice of synthesized text."""

    title: str
    body: str


def _by_headings(text: str) -> list[Section]:
    sections: list[Section] = []
    title: str | None = None
    body: list[str] = []
    for line in text.splitlines():
        match = _HEADING_RE.match(line)
        if match:
            if title is not None and "\n".join(body).strip():
                sections.append(Section(title, "\n".join(body).strip()))
            title = (match.group(1) or match.group(2)).strip()
            body = []
        elif title is not None:
            body.append(line)
    if title is not None and "\n".join(body).strip():
        sections.append(Section(title, "\n".join(body).strip()))
    return sections


def _is_title_like(paragraph: str) -> bool:
    line = paragraph.strip()
    return (
        0 < len(line) <= MAX_TITLE_LENGTH
        and "\n" not in line
        and not line.endswith((".", "!", "?", ","))
        and line[0].isupper()
    )


def _by_paragraph_titles(text: str) -> list[Section]:
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", text) if p.strip()]
    sections: list[Section] = []
    title: str | None = None
    body: list[str] = []
    for paragraph in paragraphs:
        if _is_title_like(paragraph):
            if title is not None and body:
                sections.append(Section(title, "\n\n".join(body)))
            title, body = paragraph.rstrip(":"), []
        elif title is not None:
            body.append(paragraph)
    if title is not None and body:
        sections.append(Section(title, "\n\n".join(body)))
    return sections


def _by_chunks(text: str) -> list[Section]:
    sentences = [s for s in _SENTENCE_END_RE.split(" ".join(text.split())) if s]
    chunks: list[str] = []
    current = ""
    for sentence in sentences:
        if current and len(current) + len(sentence) + 1 > CHUNK_SIZE:
            chunks.append(current)
            current = sentence
        else:
            current = f"{current} {sentence}".strip()
    if current:
        chunks.append(current)

    sections = []
    for i, chunk in enumerate(chunks, start=1):
        first = _SENTENCE_END_RE.split(chunk, maxsplit=1)[0]
        title = first if len(first) <= MAX_TITLE_LENGTH else f"Part {i}"
        sections.append(Section(title, chunk))
    return sections


def split_sections(text: str, max_sections: int = DEFAULT_MAX_SECTIONS) -> list[Section]:
    """Split synthesized text into at most max_sections titled sections.

    Args:
        text: Free text from the synthesis layer
        max_sections: Upper bound on returned sections

    Returns:
        Sections in text order (empty for blank text)
    """
    if not text or not text.strip():
        return []
    for strategy in (_by_headings, _by_paragraph_titles, _by_chunks):
        sections = strategy(text)
        if sections:
            logger.debug("Split text | strategy=%s sections=%d", strategy.__name__, len(sections))
            return sections[:max_sections]
    return []


def sections_to_items(
    sections: Sequence[Section],
    sources: Sequence[Mapping[str, Any]] = (),
) -> list[ContentItem]:
    """Turn sections into ContentItems attributed to the given sources.

    Each item cites every source; its URL is the first source's URL with a
    section fragment so sections keep distinct identities.

    Args:
        sections: Sections from split_sections()
        sources: Source attributions (mappings with url/title/author/date)

    Returns:
        One ContentItem per section
    """
    references = [
        {"url": str(s.get("url") or s.get("link") or ""), "title": str(s.get("title") or "")}
        for s in sources if isinstance(s, Mapping)
    ]
    base_url = next((r["url"] for r in references if r["url"]), "")

    items = []
    for i, section in enumerate(sections, start=1):
        raw = {
            "title": section.title,
            "content": section.body,
            "id": f"section-{i}",
            "references": references,
        }
        if base_url:
            raw["url"] = f"{base_url}#section-{i}"
        item = ContentItem.from_raw(raw)
        if item is not None:
            items.append(item)
    return items
