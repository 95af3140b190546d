"""
Domain Entities

Core value objects for research paper aggregation.
"""

from __future__ import annotations

from .paper import (
    MAX_DISPLAY_AUTHORS,
    MAX_RELEVANCE,
    MIN_RELEVANCE,
    UNKNOWN_AUTHOR,
    AggregationStats,
    DatePreset,
    DateRange,
    ResearchPaper,
    ScanRequest,
    ScanResult,
    SortOption,
    SourceId,
    parse_iso_date,
)

__all__ = [
    "ResearchPaper",
    "ScanRequest",
    "ScanResult",
    "AggregationStats",
    "DatePreset",
    "DateRange",
    "SortOption",
    "SourceId",
    "parse_iso_date",
    "UNKNOWN_AUTHOR",
    "MAX_DISPLAY_AUTHORS",
    "MIN_RELEVANCE",
    "MAX_RELEVANCE",
]
