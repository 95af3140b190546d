"""
Tests for ResultAggregator - Cross-Source Merging and Date Filtering

Covers:
1. Dedup key normalization
2. First-occurrence-wins deduplication
3. Future-date clamp
4. Lower / upper date bounds under both unparsable-date policies
5. Sorting helpers
"""

from datetime import date

import pytest

from research_scanner.application.search.result_aggregator import (
    ResultAggregator,
    UnparsableDatePolicy,
    dedup_key,
    sort_by_date_desc,
    sort_papers,
)
from research_scanner.domain.entities import SortOption

FROM_DATE = date(2023, 12, 11)
TODAY = date(2024, 1, 10)


class TestDedupKey:
    def test_normalization(self):
        assert dedup_key("Deep Hedging: A New Approach!") == "deephedginganewapproach"

    def test_truncated_to_thirty(self):
        assert len(dedup_key("x" * 100)) == 30

    def test_punctuation_and_case_collapse(self):
        assert dedup_key("Bitcoin, Momentum & Effects") == dedup_key("bitcoin momentum effects")

    def test_shared_prefix_collapses(self):
        a = "A very long title that shares its prefix, part one"
        b = "A very long title that shares its prefix, part two"
        assert dedup_key(a) == dedup_key(b)


class TestAggregate:
    def test_dedup_first_wins(self, make_paper):
        first = make_paper("Bitcoin Momentum", paper_id="arxiv")
        second = make_paper("bitcoin-momentum!", paper_id="ssrn", source="SSRN")
        papers, stats = ResultAggregator().aggregate([[first], [second]], FROM_DATE, TODAY)
        assert [p.id for p in papers] == ["arxiv"]
        assert stats.duplicates_removed == 1
        assert stats.by_source == {"arXiv (q-fin)": 1, "SSRN": 1}

    def test_future_dates_dropped(self, make_paper):
        papers, stats = ResultAggregator().aggregate(
            [[make_paper("Tomorrow", "2024-01-11"), make_paper("Today", "2024-01-10")]],
            FROM_DATE,
            TODAY,
        )
        assert [p.title for p in papers] == ["Today"]
        assert stats.future_dated_removed == 1

    def test_lower_bound(self, make_paper):
        papers, stats = ResultAggregator().aggregate(
            [[make_paper("Old", "2023-12-10"), make_paper("Edge", "2023-12-11")]],
            FROM_DATE,
            TODAY,
        )
        assert [p.title for p in papers] == ["Edge"]
        assert stats.out_of_window_removed == 1

    def test_upper_bound(self, make_paper):
        papers, _ = ResultAggregator().aggregate(
            [[make_paper("In", "2023-12-20"), make_paper("After", "2023-12-21")]],
            FROM_DATE,
            TODAY,
            end_date=date(2023, 12, 20),
        )
        assert [p.title for p in papers] == ["In"]

    def test_unparsable_dropped_by_default(self, make_paper):
        papers, stats = ResultAggregator().aggregate([[make_paper("Undated", "")]], FROM_DATE, TODAY)
        assert papers == []
        assert stats.unparsable_dates == 1
        assert stats.out_of_window_removed == 1

    def test_unparsable_kept_and_sorted_last(self, make_paper):
        aggregator = ResultAggregator(UnparsableDatePolicy.KEEP)
        papers, stats = aggregator.aggregate(
            [[make_paper("Undated", ""), make_paper("Dated", "2023-12-20")]],
            FROM_DATE,
            TODAY,
        )
        assert [p.title for p in papers] == ["Dated", "Undated"]
        assert stats.unparsable_dates == 1
        assert stats.total_output == 2

    def test_sorted_newest_first(self, make_paper):
        papers, _ = ResultAggregator().aggregate(
            [[make_paper("B", "2023-12-15")], [make_paper("A", "2024-01-09"), make_paper("C", "2023-12-31")]],
            FROM_DATE,
            TODAY,
        )
        assert [p.date for p in papers] == ["2024-01-09", "2023-12-31", "2023-12-15"]

    def test_empty_input(self):
        papers, stats = ResultAggregator().aggregate([], FROM_DATE, TODAY)
        assert papers == []
        assert stats.total_input == 0

    def test_stats_total_output(self, make_paper):
        _, stats = ResultAggregator().aggregate(
            [[make_paper("A", "2024-01-09"), make_paper("A", "2024-01-08"), make_paper("B", "2020-01-01")]],
            FROM_DATE,
            TODAY,
        )
        assert stats.total_input == 3
        assert stats.total_output == 1
        assert stats.to_dict()["total_output"] == 1

    def test_idempotent(self, make_paper):
        lists = [[make_paper("A", "2024-01-09"), make_paper("B", "2023-12-15")], [make_paper("a", "2024-01-01")]]
        aggregator = ResultAggregator()
        first, _ = aggregator.aggregate(lists, FROM_DATE, TODAY)
        again, _ = aggregator.aggregate([first], FROM_DATE, TODAY)
        assert again == first


class TestSorting:
    def test_sort_by_date_desc_unknown_last(self, make_paper):
        papers = [make_paper("X", "bad"), make_paper("Y", "2023-01-01"), make_paper("Z", "2024-01-01")]
        assert [p.title for p in sort_by_date_desc(papers)] == ["Z", "Y", "X"]

    def test_oldest(self, make_paper):
        papers = [make_paper("X", ""), make_paper("Y", "2024-01-01"), make_paper("Z", "2023-01-01")]
        assert [p.title for p in sort_papers(papers, SortOption.OLDEST)] == ["Z", "Y", "X"]

    def test_relevance_then_newest(self, make_paper):
        papers = [
            make_paper("Low", "2024-01-05", relevance_score=70),
            make_paper("HighOld", "2023-06-01", relevance_score=90),
            make_paper("HighNew", "2024-01-01", relevance_score=90),
        ]
        assert [p.title for p in sort_papers(papers, "relevance")] == ["HighNew", "HighOld", "Low"]

    def test_newest_default(self, make_paper):
        papers = [make_paper("Y", "2023-01-01"), make_paper("Z", "2024-01-01")]
        assert [p.title for p in sort_papers(papers)] == ["Z", "Y"]

    def test_unknown_option(self, make_paper):
        with pytest.raises(ValueError):
            sort_papers([make_paper()], "random")
