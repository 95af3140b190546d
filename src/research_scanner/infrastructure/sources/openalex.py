"""
OpenAlex Integration

One client serves every OpenAlex-backed source (SSRN, BIS, Federal Reserve,
BLS, NBER, Elsevier, named journals, the general journal bucket and the
open-access bucket). Each SourceQuery carries its own venue filter, so a
scan issues one request per venue.

API Documentation: https://docs.openalex.org/

Features:
- Completely free and open (no API key required)
- Abstracts delivered as inverted indices, reconstructed here
- Administrative journal-issue artifacts filtered out
"""

from __future__ import annotations

import logging
import urllib.parse
import uuid
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any, TypedDict

from research_scanner.application.search.keywords import ALLOWED_WORK_TYPES, JUNK_TITLE_TERMS
from research_scanner.application.search.query_builder import SourceQuery
from research_scanner.application.search.scorer import calculate_relevance
from research_scanner.application.search.tagger import generate_tags
from research_scanner.domain.entities import MAX_DISPLAY_AUTHORS, UNKNOWN_AUTHOR, ResearchPaper
from research_scanner.infrastructure.http.client import get_config
from research_scanner.shared.exceptions import ParseError

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

# OpenAlex API endpoints
OA_API_BASE = "https://api.openalex.org"
OA_WORKS_URL = f"{OA_API_BASE}/works"

FALLBACK_TAG = "Research"
FALLBACK_SOURCE = "OpenAlex"
MISSING_ABSTRACT = "Abstract preview not available via API. Open the source link to read the full abstract."

# Caller label -> (substring the venue must contain, canonical label)
INSTITUTION_LABELS: dict[str, tuple[str, str]] = {
    "BIS": ("bis", "BIS Working Papers"),
    "Federal Reserve": ("federal reserve", "Federal Reserve"),
    "BLS": ("labor statistics", "BLS"),
    "NBER": ("nber", "NBER"),
}


# =============================================================================
# Wire shapes (every field optional; read defensively)
# =============================================================================


class OpenAlexAuthor(TypedDict, total=False):
    display_name: str | None


class OpenAlexAuthorship(TypedDict, total=False):
    author: OpenAlexAuthor | None


class OpenAlexSource(TypedDict, total=False):
    display_name: str | None


class OpenAlexLocation(TypedDict, total=False):
    source: OpenAlexSource | None
    landing_page_url: str | None


class OpenAlexWork(TypedDict, total=False):
    id: str | None
    type: str | None
    title: str | None
    publication_date: str | None
    cited_by_count: int | None
    authorships: list[OpenAlexAuthorship] | None
    abstract_inverted_index: dict[str, list[int]] | None
    primary_location: OpenAlexLocation | None
    doi: str | None


class OpenAlexResponse(TypedDict, total=False):
    results: list[OpenAlexWork] | None


def _as_dict(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


# =============================================================================
# Normalization helpers
# =============================================================================


def reconstruct_abstract(inverted_index: Mapping[str, Sequence[int]] | None) -> str:
    """
    Rebuild abstract text from OpenAlex's inverted index.

    Format: {"word": [positions], ...}. Each word is placed at every one of
    its positions in a sequence sized to the highest position; uncovered
    positions are dropped.

    Example:
        >>> reconstruct_abstract({"the": [0, 4], "fox": [1], "jumps": [2], "quick": [3]})
        'the fox jumps quick the'
    """
    if not inverted_index:
        return ""

    placements: list[tuple[int, str]] = []
    for word, positions in inverted_index.items():
        if not isinstance(positions, Sequence) or isinstance(positions, str):
            continue
        for position in positions:
            if isinstance(position, int) and not isinstance(position, bool) and position >= 0:
                placements.append((position, word))

    if not placements:
        return ""

    words: list[str | None] = [None] * (max(position for position, _ in placements) + 1)
    for position, word in placements:
        words[position] = word
    return " ".join(word for word in words if word is not None)


def is_valid_work(work: Mapping[str, Any]) -> bool:
    """Keep real papers; drop other work types and journal-issue artifacts."""
    if work.get("type") not in ALLOWED_WORK_TYPES:
        return False

    title = _as_str(work.get("title"))
    if not title:
        return False

    title_lower = title.lower()
    return not any(term in title_lower for term in JUNK_TITLE_TERMS)


def normalize_venue(venue: str, default_label: str) -> str:
    """
    Resolve the display label for a work's venue.

    SSRN-flavoured names collapse to "SSRN". When the caller's label names a
    known institution and the venue does not mention it, the canonical
    institution label wins (institution papers are often filed under generic
    "Working Paper" venues).
    """
    source_name = venue or default_label

    if source_name and "ssrn" in source_name.lower():
        source_name = "SSRN"

    institution = INSTITUTION_LABELS.get(default_label)
    if institution is not None:
        marker, canonical = institution
        if marker not in source_name.lower():
            source_name = canonical

    return source_name or FALLBACK_SOURCE


def extract_authors(authorships: Any) -> tuple[str, ...]:
    """Up to three author display names, or the unknown-author sentinel."""
    names: list[str] = []
    if isinstance(authorships, list):
        for authorship in authorships:
            name = _as_str(_as_dict(_as_dict(authorship).get("author")).get("display_name"))
            if name:
                names.append(name)
            if len(names) >= MAX_DISPLAY_AUTHORS:
                break
    return tuple(names) or (UNKNOWN_AUTHOR,)


def _citation_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(0, value)
    return 0


def normalize_work(work: Mapping[str, Any], default_label: str, today: date | None = None) -> ResearchPaper:
    """Convert one validated OpenAlex work into a ResearchPaper."""
    title = _as_str(work.get("title"))
    primary_location = _as_dict(work.get("primary_location"))
    venue = _as_str(_as_dict(primary_location.get("source")).get("display_name"))

    abstract = reconstruct_abstract(work.get("abstract_inverted_index")) or MISSING_ABSTRACT
    published = _as_str(work.get("publication_date"))
    citations = _citation_count(work.get("cited_by_count"))

    tags = generate_tags(title, abstract, fallback=FALLBACK_TAG)

    return ResearchPaper(
        id=_as_str(work.get("id")) or f"openalex-{uuid.uuid4().hex[:12]}",
        title=title,
        authors=extract_authors(work.get("authorships")),
        abstract=abstract,
        date=published,
        source=normalize_venue(venue, default_label),
        url=_as_str(work.get("doi")) or _as_str(primary_location.get("landing_page_url")),
        tags=tags,
        relevance_score=calculate_relevance(title, abstract, published, tags, citations, today=today),
        citation_count=citations,
    )


def parse_works(payload: Any, default_label: str, today: date | None = None) -> list[ResearchPaper]:
    """
    Normalize an OpenAlex works listing.

    Raises:
        ParseError: If the payload is not a works listing object
    """
    if not isinstance(payload, Mapping):
        raise ParseError(f"expected a JSON object, got {type(payload).__name__}", source="OpenAlex")

    results = payload.get("results")
    if not isinstance(results, list):
        return []

    papers = []
    for work in results:
        if not isinstance(work, Mapping) or not is_valid_work(work):
            continue
        papers.append(normalize_work(work, default_label, today))
    return papers


class OpenAlexClient(BaseAPIClient):
    """
    OpenAlex API client.

    Usage:
        client = OpenAlexClient(email="your@email.com")
        papers = await client.fetch(query)
    """

    _service_name = "OpenAlex"

    def __init__(self, email: str | None = None, timeout: float | None = None, page_size: int | None = None):
        """
        Initialize client.

        Args:
            email: Email for polite pool (higher rate limits)
            timeout: Request timeout in seconds
            page_size: Works per request (default from configuration)
        """
        self._email = email or get_config()["contact_email"]
        super().__init__(timeout=timeout)
        self._page_size = page_size

    def build_url(self, query: SourceQuery) -> str:
        page_size = self._page_size or get_config()["page_size"]
        params = urllib.parse.urlencode(
            {
                "sort": "publication_date:desc",
                "per_page": str(page_size),
                "mailto": self._email,
            }
        )
        # The filter value is pre-encoded; commas and pipes are operators
        return f"{OA_WORKS_URL}?filter={query.expression}&{params}"

    async def fetch(self, query: SourceQuery, today: date | None = None) -> list[ResearchPaper]:
        """
        Fetch and normalize one OpenAlex venue query.

        Never raises: network and parse failures are logged and yield [].
        """
        url = self.build_url(query)
        logger.info(f"OpenAlex ({query.label}) search: {query.expression}")

        try:
            data = await self._make_request(url)
            if data is None:
                return []
            return parse_works(data, query.label, today)
        except ParseError as e:
            logger.error(f"OpenAlex ({query.label}) response unreadable: {e}")
            return []
        except Exception as e:
            logger.exception(f"OpenAlex ({query.label}) search failed: {e}")
            return []
