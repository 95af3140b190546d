"""
Paper Entities - Canonical Research Paper Model

Every source adapter normalizes its wire format (Atom XML, OpenAlex JSON)
into ResearchPaper. Records are built fresh for each scan and never mutated
afterwards.

Architecture:
    Uses frozen dataclasses so results can be shared across concurrent
    consumers without defensive copies.

Example:
    >>> paper = ResearchPaper(
    ...     id="http://arxiv.org/abs/2401.00001v1",
    ...     title="Bitcoin Momentum Effects",
    ...     authors=("A. Author",),
    ...     abstract="We study cryptocurrency momentum.",
    ...     date="2024-01-05",
    ...     source="arXiv (q-fin)",
    ...     url="http://arxiv.org/abs/2401.00001v1",
    ...     tags=("Crypto", "Momentum"),
    ...     relevance_score=88,
    ... )
    >>> paper.parsed_date
    datetime.date(2024, 1, 5)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

UNKNOWN_AUTHOR = "Unknown Author"
MAX_DISPLAY_AUTHORS = 3

MIN_RELEVANCE = 60
MAX_RELEVANCE = 99


def parse_iso_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` prefix, returning None when unparsable."""
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


class DatePreset(Enum):
    """Date window presets offered by the feed filter."""

    WEEK = "Week"
    MONTH = "Month"
    QUARTER = "Quarter"
    YEAR = "Year"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: DatePreset | str | None) -> DatePreset | None:
        """Case-insensitive lookup; unknown values return None."""
        if isinstance(value, DatePreset):
            return value
        if not value:
            return None
        wanted = value.strip().lower()
        for preset in cls:
            if preset.value.lower() == wanted:
                return preset
        return None


class SortOption(Enum):
    """Feed ordering options."""

    RELEVANCE = "relevance"
    NEWEST = "newest"
    OLDEST = "oldest"


class SourceId(Enum):
    """
    Upstream sources a scan can fan out to.

    ARXIV is fetched from the arXiv Atom API; every other member is an
    OpenAlex works query bound to a venue, institution or bucket.
    """

    ARXIV = "arXiv"
    SSRN = "SSRN"
    BIS = "BIS"
    FED = "FED"
    BLS = "BLS"
    NBER = "NBER"
    ELSEVIER = "Elsevier"
    JF = "JF"
    JFE = "JFE"
    RFS = "RFS"
    CFA = "CFA"
    OPENALEX = "OpenAlex"
    RESEARCHGATE = "ResearchGate"

    @classmethod
    def parse(cls, value: SourceId | str) -> SourceId | None:
        """Case-insensitive lookup with a few display-name aliases."""
        if isinstance(value, SourceId):
            return value
        wanted = value.strip().lower()
        wanted = _SOURCE_ALIASES.get(wanted, wanted)
        for source in cls:
            if source.value.lower() == wanted:
                return source
        return None


_SOURCE_ALIASES = {
    "federal reserve": "fed",
    "fed reserve": "fed",
    "arxiv (q-fin)": "arxiv",
    "journals": "openalex",
}


@dataclass(frozen=True, slots=True)
class DateRange:
    """Explicit ``YYYY-MM-DD`` bounds used with DatePreset.CUSTOM."""

    start: str
    end: str = ""

    @property
    def start_date(self) -> date | None:
        return parse_iso_date(self.start)

    @property
    def end_date(self) -> date | None:
        return parse_iso_date(self.end)


@dataclass(frozen=True, slots=True)
class ResearchPaper:
    """
    Normalized research paper record.

    Attributes:
        id: Source identifier or a generated fallback
        title: Paper title, also the deduplication key source
        authors: Up to three display names, ``("Unknown Author",)`` when absent
        abstract: Abstract text or a placeholder sentence
        date: ``YYYY-MM-DD`` publication date, possibly empty or unparsable
        source: Normalized venue label
        url: DOI or landing page, possibly empty
        tags: Topical labels, never empty
        relevance_score: Heuristic score within [60, 99]
        citation_count: Citation count when the source reports one
    """

    id: str
    title: str
    authors: tuple[str, ...]
    abstract: str
    date: str
    source: str
    url: str
    tags: tuple[str, ...]
    relevance_score: int
    citation_count: int | None = None

    @property
    def parsed_date(self) -> date | None:
        return parse_iso_date(self.date)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape consumed by the feed UI."""
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "abstract": self.abstract,
            "date": self.date,
            "source": self.source,
            "url": self.url,
            "tags": list(self.tags),
            "relevanceScore": self.relevance_score,
        }
        if self.citation_count is not None:
            result["citationCount"] = self.citation_count
        return result


@dataclass(frozen=True)
class ScanRequest:
    """
    Normalized filter state for one scan.

    ``sources=None`` means every known source is enabled; an empty tuple
    (every named source was unknown) enables none.
    """

    topics: tuple[str, ...] = ("All",)
    sources: tuple[SourceId, ...] | None = None
    date_preset: DatePreset | None = DatePreset.MONTH
    custom_range: DateRange | None = None
    search_term: str = ""

    @property
    def enabled_sources(self) -> tuple[SourceId, ...]:
        if self.sources is None:
            return tuple(SourceId)
        return self.sources


@dataclass
class AggregationStats:
    """Statistics from one aggregation pass."""

    total_input: int = 0
    duplicates_removed: int = 0
    future_dated_removed: int = 0
    out_of_window_removed: int = 0
    unparsable_dates: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    @property
    def total_output(self) -> int:
        return (
            self.total_input
            - self.duplicates_removed
            - self.future_dated_removed
            - self.out_of_window_removed
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_input": self.total_input,
            "total_output": self.total_output,
            "duplicates_removed": self.duplicates_removed,
            "future_dated_removed": self.future_dated_removed,
            "out_of_window_removed": self.out_of_window_removed,
            "unparsable_dates": self.unparsable_dates,
            "by_source": self.by_source,
        }


@dataclass
class ScanResult:
    """Merged, filtered and sorted output of one scan."""

    papers: list[ResearchPaper] = field(default_factory=list)
    stats: AggregationStats = field(default_factory=AggregationStats)

    def to_dict(self) -> dict[str, Any]:
        return {
            "papers": [paper.to_dict() for paper in self.papers],
            "stats": self.stats.to_dict(),
        }
