"""
Paper Scan Pipeline

Key Components:
- QueryBuilder: Turns filter state into one upstream query per source
- Tagger / Scorer: Pure heuristics applied by every source adapter
- ResultAggregator: Dedup, date clamp, window filter and sort
- PaperScanner: Parallel fan-out over sources, fan-in through the aggregator

Architecture:
    Filter state (topics, sources, date preset, search term)
        │
        ▼
    ┌──────────────────┐
    │   QueryBuilder   │  ← Topic phrases OR-ed, search term AND-ed
    └────────┬─────────┘
             │
    ┌────────┴────────┐
    ▼        ▼        ▼
  arXiv    SSRN   OpenAlex ...  ← Parallel queries
    │        │        │
    └────────┴────────┘
             │
             ▼
    ┌──────────────────┐
    │ ResultAggregator │  ← Dedup + date window + newest first
    └────────┬─────────┘
             │
             ▼
    ScanResult (papers + stats)
"""

from __future__ import annotations

from .keywords import ALL_TOPICS, TAG_RULES, TOPIC_KEYWORDS, TagRule
from .paper_scanner import PaperScanner, scan_for_papers
from .query_builder import (
    SOURCE_BINDINGS,
    QueryBuilder,
    SourceBinding,
    SourceQuery,
    build_arxiv_query,
    build_openalex_filter,
    build_openalex_search_filter,
    build_scan_request,
    collect_topic_phrases,
    resolve_from_date,
)
from .result_aggregator import (
    ResultAggregator,
    UnparsableDatePolicy,
    dedup_key,
    sort_by_date_desc,
    sort_papers,
)
from .scorer import calculate_relevance
from .tagger import generate_tags

__all__ = [
    # Lookup tables
    "ALL_TOPICS",
    "TAG_RULES",
    "TOPIC_KEYWORDS",
    "TagRule",
    # Query building
    "QueryBuilder",
    "SourceBinding",
    "SourceQuery",
    "SOURCE_BINDINGS",
    "build_arxiv_query",
    "build_openalex_filter",
    "build_openalex_search_filter",
    "build_scan_request",
    "collect_topic_phrases",
    "resolve_from_date",
    # Heuristics
    "calculate_relevance",
    "generate_tags",
    # Aggregation
    "ResultAggregator",
    "UnparsableDatePolicy",
    "dedup_key",
    "sort_by_date_desc",
    "sort_papers",
    # Entry point
    "PaperScanner",
    "scan_for_papers",
]
