"""
Tagger - Keyword-Based Topical Labels

Scans the lowercased title + abstract for each rule in TAG_RULES. Every
rule is evaluated on the text alone, never on labels produced by other
rules, so the resulting label set does not depend on evaluation order.
Output order follows TAG_RULES for stable display and fixtures.
"""

from __future__ import annotations

from .keywords import (
    DEFAULT_FALLBACK_TAG,
    QUANT_FALLBACK_TAG,
    QUANT_FALLBACK_TRIGGER,
    TAG_RULES,
    TagRule,
)


def generate_tags(
    title: str,
    abstract: str,
    fallback: str = DEFAULT_FALLBACK_TAG,
    rules: tuple[TagRule, ...] = TAG_RULES,
) -> tuple[str, ...]:
    """
    Derive topical labels for a paper.

    Args:
        title: Paper title
        abstract: Abstract text (placeholders are fine)
        fallback: Label used when no rule fires and the text does not
            mention "quant" (e.g. "Pre-print" for arXiv, "Research" for OpenAlex)
        rules: Rule table, overridable for tests

    Returns:
        Non-empty tuple of unique labels
    """
    text = f"{title} {abstract}".lower()

    tags: list[str] = []
    for rule in rules:
        if rule.label not in tags and rule.matches(text):
            tags.append(rule.label)

    if not tags:
        tags.append(QUANT_FALLBACK_TAG if QUANT_FALLBACK_TRIGGER in text else fallback or DEFAULT_FALLBACK_TAG)

    return tuple(tags)
