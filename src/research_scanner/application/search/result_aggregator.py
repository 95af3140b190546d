"""
ResultAggregator - Cross-Source Merging and Date Filtering

Turns the per-source paper lists of one scan into the final feed:
1. Deduplication by normalized title prefix (first occurrence wins)
2. Future-dated records dropped
3. Date window applied (lower bound, plus upper bound for custom ranges)
4. Newest first, unknown dates last

Architecture Decision:
    ResultAggregator operates on ResearchPaper objects only.
    It does NOT make API calls - purely processes existing results.

Example:
    >>> aggregator = ResultAggregator()
    >>> papers, stats = aggregator.aggregate(
    ...     [arxiv_papers, ssrn_papers],
    ...     from_date=date(2024, 1, 1),
    ... )
    >>> stats.duplicates_removed
    2
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import date
from enum import Enum

from research_scanner.domain.entities import AggregationStats, ResearchPaper, SortOption

logger = logging.getLogger(__name__)

DEDUP_KEY_LENGTH = 30

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class UnparsableDatePolicy(Enum):
    """
    What the lower-bound filter does with dates it cannot parse.

    DROP: Exclude them (an unknown date cannot be shown to be in the window)
    KEEP: Retain them; they sort after every dated record
    """

    DROP = "drop"
    KEEP = "keep"


def dedup_key(title: str) -> str:
    """
    Normalized title prefix used for duplicate detection.

    Example:
        >>> dedup_key("Deep Hedging: A New Approach!")
        'deephedginganewapproach'
    """
    return _NON_ALNUM.sub("", title.lower())[:DEDUP_KEY_LENGTH]


def _date_desc_key(paper: ResearchPaper) -> tuple[int, int]:
    parsed = paper.parsed_date
    if parsed is None:
        return (1, 0)
    return (0, -parsed.toordinal())


def _date_asc_key(paper: ResearchPaper) -> tuple[int, int]:
    parsed = paper.parsed_date
    if parsed is None:
        return (1, 0)
    return (0, parsed.toordinal())


def sort_by_date_desc(papers: Iterable[ResearchPaper]) -> list[ResearchPaper]:
    """Newest first; unparsable dates last, in their original order."""
    return sorted(papers, key=_date_desc_key)


def sort_papers(papers: Iterable[ResearchPaper], option: SortOption | str = SortOption.NEWEST) -> list[ResearchPaper]:
    """
    Re-order a feed for display.

    Args:
        papers: Papers to sort (not modified)
        option: newest, oldest or relevance (score, then newest)

    Raises:
        ValueError: If option is not a known sort option
    """
    option = SortOption(option)
    if option is SortOption.OLDEST:
        return sorted(papers, key=_date_asc_key)
    if option is SortOption.RELEVANCE:
        return sorted(papers, key=lambda p: (-p.relevance_score, *_date_desc_key(p)))
    return sort_by_date_desc(papers)


class ResultAggregator:
    """
    Merges the per-source results of one scan.

    Usage:
        aggregator = ResultAggregator(UnparsableDatePolicy.KEEP)
        papers, stats = aggregator.aggregate(paper_lists, from_date)
    """

    def __init__(self, unparsable_date_policy: UnparsableDatePolicy = UnparsableDatePolicy.DROP):
        self._policy = unparsable_date_policy

    @property
    def unparsable_date_policy(self) -> UnparsableDatePolicy:
        return self._policy

    def aggregate(
        self,
        paper_lists: Sequence[Sequence[ResearchPaper]],
        from_date: date,
        today: date | None = None,
        end_date: date | None = None,
    ) -> tuple[list[ResearchPaper], AggregationStats]:
        """
        Deduplicate, filter and sort papers from multiple sources.

        Args:
            paper_lists: One list per source, in dispatch order
            from_date: Inclusive lower bound of the date window
            today: Reference date for the future-date clamp
            end_date: Inclusive upper bound (custom ranges only)

        Returns:
            Tuple of (sorted papers, aggregation statistics)
        """
        today_str = (today or date.today()).isoformat()
        stats = AggregationStats()

        all_papers: list[ResearchPaper] = []
        for papers in paper_lists:
            all_papers.extend(papers)
            for paper in papers:
                stats.by_source[paper.source] = stats.by_source.get(paper.source, 0) + 1
        stats.total_input = len(all_papers)

        kept: list[ResearchPaper] = []
        seen: set[str] = set()
        for paper in all_papers:
            key = dedup_key(paper.title)
            if key in seen:
                stats.duplicates_removed += 1
                continue
            seen.add(key)

            # Lexical comparison against the local calendar date
            if paper.date > today_str:
                stats.future_dated_removed += 1
                continue

            if not self._in_window(paper, from_date, end_date, stats):
                stats.out_of_window_removed += 1
                continue

            kept.append(paper)

        logger.info(
            f"Aggregated {stats.total_input} papers -> {len(kept)} "
            f"({stats.duplicates_removed} duplicates, {stats.future_dated_removed} future-dated, "
            f"{stats.out_of_window_removed} out of window)"
        )
        return sort_by_date_desc(kept), stats

    def _in_window(
        self,
        paper: ResearchPaper,
        from_date: date,
        end_date: date | None,
        stats: AggregationStats,
    ) -> bool:
        parsed = paper.parsed_date
        if parsed is None:
            stats.unparsable_dates += 1
            return self._policy is UnparsableDatePolicy.KEEP
        if parsed < from_date:
            return False
        return end_date is None or parsed <= end_date
