"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import date

import pytest

from research_scanner.application.search.query_builder import SourceQuery
from research_scanner.domain.entities import ResearchPaper, SourceId
from research_scanner.infrastructure.http.client import reset_config

TODAY = date(2024, 1, 10)


# ============================================================
# Environment Fixtures
# ============================================================


@pytest.fixture(autouse=True)
def clean_config():
    """Every test starts from built-in defaults."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def today():
    """Fixed reference date so recency and date windows are reproducible."""
    return TODAY


# ============================================================
# Entity Factories
# ============================================================


@pytest.fixture
def make_paper():
    """Build a ResearchPaper with sensible defaults."""

    def _create(
        title: str = "Test Paper",
        date: str = "2024-01-05",
        source: str = "arXiv (q-fin)",
        relevance_score: int = 75,
        paper_id: str | None = None,
        citation_count: int | None = None,
    ) -> ResearchPaper:
        return ResearchPaper(
            id=paper_id or f"id-{title}",
            title=title,
            authors=("A. Author",),
            abstract="An abstract.",
            date=date,
            source=source,
            url="https://example.com/paper",
            tags=("Finance",),
            relevance_score=relevance_score,
            citation_count=citation_count,
        )

    return _create


@pytest.fixture
def arxiv_query():
    return SourceQuery(
        source=SourceId.ARXIV,
        label="arXiv (q-fin)",
        expression="cat:q-fin.*",
        from_date=date(2023, 12, 11),
    )


@pytest.fixture
def openalex_query():
    return SourceQuery(
        source=SourceId.SSRN,
        label="SSRN",
        expression="primary_location.source.issn:1556-5068,from_publication_date:2023-12-11",
        from_date=date(2023, 12, 11),
    )


# ============================================================
# Mock Upstream Responses
# ============================================================


@pytest.fixture
def arxiv_feed():
    """Atom feed with one complete entry and one sparse entry."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2401.00001v1</id>
    <published>2024-01-05T18:00:00Z</published>
    <title>Bitcoin Momentum
      Effects</title>
    <summary>  We study cryptocurrency
 momentum.  </summary>
    <author><name>Alice Smith</name></author>
    <author><name>Bob Jones</name></author>
    <author><name>Carol White</name></author>
    <author><name>Dan Brown</name></author>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2401.00002v1</id>
    <published>2024-01-03T09:30:00Z</published>
  </entry>
</feed>
"""


@pytest.fixture
def openalex_payload():
    """OpenAlex works listing with one good work and assorted rejects."""
    return {
        "meta": {"count": 4},
        "results": [
            {
                "id": "https://openalex.org/W100",
                "type": "article",
                "title": "Liquidity Provision in Corporate Bond Markets",
                "publication_date": "2024-01-02",
                "cited_by_count": 4,
                "doi": "https://doi.org/10.2139/ssrn.100",
                "authorships": [
                    {"author": {"display_name": "Jane Roe"}},
                    {"author": {"display_name": "John Doe"}},
                ],
                "abstract_inverted_index": {"We": [0], "study": [1], "bonds.": [2]},
                "primary_location": {
                    "source": {"display_name": "SSRN Electronic Journal"},
                    "landing_page_url": "https://papers.ssrn.com/100",
                },
            },
            {"id": "https://openalex.org/W101", "type": "erratum", "title": "Correction"},
            {"id": "https://openalex.org/W102", "type": "article", "title": "Issue Information"},
            {"id": "https://openalex.org/W103", "type": "article", "title": None},
        ],
    }
