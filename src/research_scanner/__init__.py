"""
Research Scanner - Quantitative Finance Paper Aggregation

Queries arXiv (q-fin) and OpenAlex-backed venues (SSRN, BIS, Federal
Reserve, BLS, NBER, Elsevier, top finance journals) in parallel, tags and
scores every paper, and returns one deduplicated feed, newest first.

Usage:
    from research_scanner import PaperScanner

    async with PaperScanner() as scanner:
        result = await scanner.scan(["Crypto", "ML"], ["arXiv", "SSRN"], "Month")

    for paper in result.papers:
        print(f"{paper.date} [{paper.source}] {paper.title}")
"""

from .application.search import (
    PaperScanner,
    QueryBuilder,
    ResultAggregator,
    UnparsableDatePolicy,
    calculate_relevance,
    generate_tags,
    scan_for_papers,
    sort_papers,
)
from .domain.entities import (
    AggregationStats,
    DatePreset,
    DateRange,
    ResearchPaper,
    ScanRequest,
    ScanResult,
    SortOption,
    SourceId,
)
from .infrastructure.http import configure_client, configure_proxy, get_proxy_status
from .shared.exceptions import ResearchScannerError

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "PaperScanner",
    "scan_for_papers",
    "sort_papers",
    # Entities
    "ResearchPaper",
    "ScanRequest",
    "ScanResult",
    "AggregationStats",
    "DatePreset",
    "DateRange",
    "SortOption",
    "SourceId",
    # Building blocks
    "QueryBuilder",
    "ResultAggregator",
    "UnparsableDatePolicy",
    "calculate_relevance",
    "generate_tags",
    # Configuration
    "configure_client",
    "configure_proxy",
    "get_proxy_status",
    "ResearchScannerError",
]
