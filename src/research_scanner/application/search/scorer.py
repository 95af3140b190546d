"""
Scorer - Bounded Heuristic Relevance

Combines five signals into an integer in [60, 99]:

1. Tag density: +4 per detected tag
2. Recency: <7d +15, <30d +10, <90d +5, >365d -5 (unparsable dates: 0)
3. Keyword salience: high-value terms +5 title / +2 abstract,
   viral terms +10 title / +5 abstract
4. Citation impact: +min(15, 2 * citations)
5. Abstract substance: >500 chars +3, <50 chars -10

Pure and deterministic: the reference date is injectable so fixtures stay
reproducible.

Example:
    >>> calculate_relevance(
    ...     "Bitcoin Momentum Effects",
    ...     "We study cryptocurrency momentum.",
    ...     "2024-01-05",
    ...     ("Crypto", "Momentum"),
    ...     today=date(2024, 1, 10),
    ... )
    83
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date

from research_scanner.domain.entities import MAX_RELEVANCE, MIN_RELEVANCE, parse_iso_date

from .keywords import HIGH_VALUE_KEYWORDS, VIRAL_KEYWORDS

BASE_SCORE = 65
TAG_BONUS = 4

# (max age in days exclusive, bonus) checked in order
RECENCY_BONUSES: tuple[tuple[int, int], ...] = ((7, 15), (30, 10), (90, 5))
STALE_AFTER_DAYS = 365
STALE_PENALTY = -5

HIGH_VALUE_TITLE_BONUS = 5
HIGH_VALUE_ABSTRACT_BONUS = 2
VIRAL_TITLE_BONUS = 10
VIRAL_ABSTRACT_BONUS = 5

CITATION_MULTIPLIER = 2
MAX_CITATION_BONUS = 15

LONG_ABSTRACT_CHARS = 500
LONG_ABSTRACT_BONUS = 3
SHORT_ABSTRACT_CHARS = 50
SHORT_ABSTRACT_PENALTY = -10


def recency_bonus(published: str, today: date | None = None) -> int:
    """Bonus for how recently a paper was published; 0 when the date is unknown."""
    pub_date = parse_iso_date(published)
    if pub_date is None:
        return 0

    days_old = ((today or date.today()) - pub_date).days
    for max_age, bonus in RECENCY_BONUSES:
        if days_old < max_age:
            return bonus
    if days_old > STALE_AFTER_DAYS:
        return STALE_PENALTY
    return 0


def keyword_bonus(title: str, abstract: str) -> int:
    """Title matches weigh more than abstract-only matches."""
    title_text = title.lower()
    text = f"{title} {abstract}".lower()

    bonus = 0
    for keywords, title_bonus, abstract_bonus in (
        (HIGH_VALUE_KEYWORDS, HIGH_VALUE_TITLE_BONUS, HIGH_VALUE_ABSTRACT_BONUS),
        (VIRAL_KEYWORDS, VIRAL_TITLE_BONUS, VIRAL_ABSTRACT_BONUS),
    ):
        for keyword in keywords:
            if keyword in title_text:
                bonus += title_bonus
            elif keyword in text:
                bonus += abstract_bonus
    return bonus


def citation_bonus(citation_count: int | None) -> int:
    if not citation_count or citation_count < 0:
        return 0
    return min(MAX_CITATION_BONUS, citation_count * CITATION_MULTIPLIER)


def abstract_bonus(abstract: str) -> int:
    length = len(abstract)
    if length > LONG_ABSTRACT_CHARS:
        return LONG_ABSTRACT_BONUS
    if length < SHORT_ABSTRACT_CHARS:
        return SHORT_ABSTRACT_PENALTY
    return 0


def calculate_relevance(
    title: str,
    abstract: str,
    published: str,
    tags: Sequence[str],
    citation_count: int | None = None,
    today: date | None = None,
) -> int:
    """
    Compute the bounded relevance score for one paper.

    Args:
        title: Paper title
        abstract: Abstract text (placeholder sentences count by length)
        published: ``YYYY-MM-DD`` date, may be empty or unparsable
        tags: Labels from the tagger
        citation_count: Citation count if the source reports one
        today: Reference date for recency (defaults to local today)

    Returns:
        Integer score clamped to [60, 99]
    """
    score = BASE_SCORE
    score += len(tags) * TAG_BONUS
    score += recency_bonus(published, today)
    score += keyword_bonus(title, abstract)
    score += citation_bonus(citation_count)
    score += abstract_bonus(abstract)

    return min(MAX_RELEVANCE, max(MIN_RELEVANCE, math.floor(score)))
