"""
Application Layer - Scan Use Cases

Contains:
- search: query building, tagging, scoring, aggregation and the scan entry point
"""

from .search import PaperScanner, QueryBuilder, ResultAggregator, scan_for_papers

__all__ = [
    "PaperScanner",
    "QueryBuilder",
    "ResultAggregator",
    "scan_for_papers",
]
