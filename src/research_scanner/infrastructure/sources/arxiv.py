"""
arXiv Source - Quantitative Finance Preprints

Fetches the arXiv Atom feed (newest submissions first) and normalizes each
``<entry>`` into a ResearchPaper. Requests can be routed through the
configured CORS relay.

API Documentation: https://info.arxiv.org/help/api/user-manual.html
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET  # Security: prevent XML attacks

from research_scanner.application.search.query_builder import SourceQuery
from research_scanner.application.search.scorer import calculate_relevance
from research_scanner.application.search.tagger import generate_tags
from research_scanner.domain.entities import MAX_DISPLAY_AUTHORS, UNKNOWN_AUTHOR, ResearchPaper
from research_scanner.infrastructure.http.client import get_config
from research_scanner.shared.exceptions import ParseError

from .base_client import BaseAPIClient

logger = logging.getLogger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"

ATOM_NS = {"atom": "http://www.w3.org/2005/Atom"}

SOURCE_LABEL = "arXiv (q-fin)"
FALLBACK_TAG = "Pre-print"
MISSING_TITLE = "No Title"
MISSING_ABSTRACT = "Abstract not available."


def _clean_text(element: Element | None) -> str:
    """Collapse newlines and surrounding whitespace of an element's text."""
    if element is None or not element.text:
        return ""
    return " ".join(element.text.replace("\n", " ").split())


def parse_feed(xml_text: str, today: date | None = None) -> list[ResearchPaper]:
    """
    Parse an arXiv Atom response.

    Args:
        xml_text: Raw Atom XML
        today: Reference date for scoring

    Returns:
        One ResearchPaper per well-formed entry; malformed entries are skipped

    Raises:
        ParseError: If the document itself is not valid XML
    """
    try:
        root = ET.fromstring(xml_text)
    except (ET.ParseError, ValueError) as e:
        # ValueError covers defusedxml rejections (entities, DTDs)
        raise ParseError(str(e), source="arXiv") from e

    papers = []
    for entry in root.findall("atom:entry", ATOM_NS):
        try:
            papers.append(_parse_entry(entry, today))
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Error parsing arXiv entry: {e}")
            continue
    return papers


def _parse_entry(entry: Element, today: date | None) -> ResearchPaper:
    entry_id = _clean_text(entry.find("atom:id", ATOM_NS))
    title = _clean_text(entry.find("atom:title", ATOM_NS)) or MISSING_TITLE
    abstract = _clean_text(entry.find("atom:summary", ATOM_NS)) or MISSING_ABSTRACT

    published = _clean_text(entry.find("atom:published", ATOM_NS)).split("T")[0]

    authors = []
    for author in entry.findall("atom:author", ATOM_NS):
        name = _clean_text(author.find("atom:name", ATOM_NS))
        if name:
            authors.append(name)

    tags = generate_tags(title, abstract, fallback=FALLBACK_TAG)

    return ResearchPaper(
        id=entry_id or f"arxiv-{uuid.uuid4().hex[:12]}",
        title=title,
        authors=tuple(authors[:MAX_DISPLAY_AUTHORS]) or (UNKNOWN_AUTHOR,),
        abstract=abstract,
        date=published,
        source=SOURCE_LABEL,
        url=entry_id,
        tags=tags,
        relevance_score=calculate_relevance(title, abstract, published, tags, today=today),
    )


class ArXivClient(BaseAPIClient):
    """
    arXiv API client.

    Usage:
        async with ArXivClient() as client:
            papers = await client.fetch(query)
    """

    _service_name = "arXiv"
    _accept = "application/atom+xml"

    def __init__(self, timeout: float | None = None, use_proxy: bool = True, page_size: int | None = None):
        """
        Initialize client.

        Args:
            timeout: Request timeout in seconds
            use_proxy: Route through the CORS relay when one is configured
            page_size: Entries per request (default from configuration)
        """
        super().__init__(timeout=timeout, use_proxy=use_proxy)
        self._page_size = page_size

    def build_url(self, query: SourceQuery) -> str:
        page_size = self._page_size or get_config()["page_size"]
        return (
            f"{ARXIV_API_URL}?search_query={query.expression}"
            f"&sortBy=submittedDate&sortOrder=descending&max_results={page_size}"
        )

    async def fetch(self, query: SourceQuery, today: date | None = None) -> list[ResearchPaper]:
        """
        Fetch and normalize one arXiv query.

        Never raises: network and parse failures are logged and yield [].
        """
        url = self.build_url(query)
        logger.info(f"arXiv search: {query.expression}")

        try:
            xml_text = await self._make_request(url, expect_json=False)
            if not isinstance(xml_text, str) or not xml_text:
                return []
            return parse_feed(xml_text, today)
        except ParseError as e:
            logger.error(f"arXiv feed unreadable: {e}")
            return []
        except Exception as e:
            logger.exception(f"arXiv search failed: {e}")
            return []
