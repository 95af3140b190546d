"""Tests for scorer.py: each signal in isolation, then the bounded total."""

from datetime import date

import pytest

from research_scanner.application.search.scorer import (
    abstract_bonus,
    calculate_relevance,
    citation_bonus,
    keyword_bonus,
    recency_bonus,
)

TODAY = date(2024, 1, 10)

MEDIUM_ABSTRACT = "x" * 100


class TestRecencyBonus:
    @pytest.mark.parametrize(
        ("published", "expected"),
        [
            ("2024-01-10", 15),
            ("2024-01-04", 15),
            ("2024-01-03", 10),
            ("2023-12-12", 10),
            ("2023-12-11", 5),
            ("2023-10-13", 5),
            ("2023-10-12", 0),
            ("2023-01-10", 0),
            ("2023-01-09", -5),
        ],
    )
    def test_buckets(self, published, expected):
        assert recency_bonus(published, TODAY) == expected

    @pytest.mark.parametrize("published", ["", "unknown", "2024-13-45"])
    def test_unparsable_is_neutral(self, published):
        assert recency_bonus(published, TODAY) == 0


class TestKeywordBonus:
    def test_high_value_in_title(self):
        assert keyword_bonus("Momentum crashes", "") == 5

    def test_high_value_in_abstract_only(self):
        assert keyword_bonus("A study", "We measure momentum.") == 2

    def test_viral_in_title(self):
        assert keyword_bonus("ChatGPT and stock returns", "") == 10

    def test_viral_in_abstract_only(self):
        assert keyword_bonus("A study", "Using ChatGPT.") == 5

    def test_title_hit_not_double_counted(self):
        assert keyword_bonus("Momentum", "momentum again") == 5

    def test_no_hits(self):
        assert keyword_bonus("A study", "Nothing here.") == 0


class TestCitationBonus:
    @pytest.mark.parametrize(
        ("count", "expected"),
        [(None, 0), (0, 0), (-3, 0), (1, 2), (7, 14), (8, 15), (1000, 15)],
    )
    def test_capped(self, count, expected):
        assert citation_bonus(count) == expected


class TestAbstractBonus:
    def test_long(self):
        assert abstract_bonus("x" * 501) == 3

    def test_short(self):
        assert abstract_bonus("x" * 49) == -10

    def test_medium(self):
        assert abstract_bonus(MEDIUM_ABSTRACT) == 0
        assert abstract_bonus("x" * 500) == 0
        assert abstract_bonus("x" * 50) == 0


class TestCalculateRelevance:
    def test_reference_example(self):
        score = calculate_relevance(
            "Bitcoin Momentum Effects",
            "We study cryptocurrency momentum.",
            "2024-01-05",
            ("Crypto", "Momentum"),
            today=TODAY,
        )
        # 65 + 2*4 + 15 + 5 - 10
        assert score == 83

    def test_citations_counted(self):
        base = calculate_relevance("A study", MEDIUM_ABSTRACT, "2023-06-01", ("Finance",), today=TODAY)
        cited = calculate_relevance("A study", MEDIUM_ABSTRACT, "2023-06-01", ("Finance",), 3, today=TODAY)
        assert cited == base + 6

    def test_clamped_high(self):
        score = calculate_relevance(
            "Deep learning LLM momentum alpha arbitrage",
            "x" * 600,
            "2024-01-09",
            ("A", "B", "C", "D", "E"),
            citation_count=100,
            today=TODAY,
        )
        assert score == 99

    def test_clamped_low(self):
        score = calculate_relevance("Old note", "short", "2010-01-01", ("Finance",), today=TODAY)
        assert score == 60

    def test_unparsable_date(self):
        score = calculate_relevance("A study", MEDIUM_ABSTRACT, "", ("Finance",), today=TODAY)
        assert score == 69

    @pytest.mark.parametrize("published", ["2024-01-09", "2020-01-01", "", "garbage"])
    def test_always_in_bounds(self, published):
        score = calculate_relevance("Title", "Abstract", published, ("Finance",), today=TODAY)
        assert 60 <= score <= 99
        assert isinstance(score, int)
