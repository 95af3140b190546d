"""
Query Builder - Filter State to Per-Source Query Expressions

Translates the feed's (topics, search term, date window, sources) selection
into one upstream expression per enabled source:

    Topic phrases ──OR──┐
                        ├──AND── search term
    arXiv:    (all:"p1"+OR+all:"p2")+AND+all:term+AND+cat:q-fin.*
    OpenAlex: default.search:"p1"|"p2",default.search:term,<venue>,from_publication_date:D

arXiv has no server-side date filter in this query shape, so its window is
enforced later by the aggregator; OpenAlex gets the lower bound inline.
"""

from __future__ import annotations

import logging
import urllib.parse
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from types import MappingProxyType

from research_scanner.domain.entities import DatePreset, DateRange, ScanRequest, SourceId

from .keywords import ALL_TOPICS, DEFAULT_TOPIC_PHRASES, GENERAL_BUCKET_SEARCH, TOPIC_KEYWORDS

logger = logging.getLogger(__name__)

ARXIV_CATEGORY = "cat:q-fin.*"

PRESET_OFFSETS_DAYS: MappingProxyType[DatePreset, int] = MappingProxyType(
    {
        DatePreset.WEEK: 7,
        DatePreset.MONTH: 30,
        DatePreset.QUARTER: 90,
    }
)


@dataclass(frozen=True, slots=True)
class SourceBinding:
    """
    How one source maps onto an upstream query.

    Attributes:
        source: Source identifier
        label: Default venue label handed to the adapter
        venue_filter: OpenAlex filter clause pinning the venue/institution
            (empty for arXiv and for the general bucket)
        needs_default_search: Substitute a domain search when the query is empty
    """

    source: SourceId
    label: str
    venue_filter: str = ""
    needs_default_search: bool = False


def _affiliation(name: str) -> str:
    return f"raw_affiliation_strings.search:{urllib.parse.quote(name, safe='')}"


def _issn(issn: str) -> str:
    return f"primary_location.source.issn:{issn}"


SOURCE_BINDINGS: MappingProxyType[SourceId, SourceBinding] = MappingProxyType(
    {
        SourceId.ARXIV: SourceBinding(SourceId.ARXIV, "arXiv (q-fin)"),
        # SSRN Electronic Journal
        SourceId.SSRN: SourceBinding(SourceId.SSRN, "SSRN", _issn("1556-5068")),
        SourceId.BIS: SourceBinding(SourceId.BIS, "BIS", _affiliation("Bank for International Settlements")),
        SourceId.FED: SourceBinding(SourceId.FED, "Federal Reserve", _affiliation("Federal Reserve")),
        SourceId.BLS: SourceBinding(SourceId.BLS, "BLS", _affiliation("Bureau of Labor Statistics")),
        SourceId.NBER: SourceBinding(SourceId.NBER, "NBER", _affiliation("National Bureau of Economic Research")),
        SourceId.ELSEVIER: SourceBinding(
            SourceId.ELSEVIER, "Elsevier", "primary_location.source.publisher_lineage:P4310320990"
        ),
        SourceId.JF: SourceBinding(SourceId.JF, "Journal of Finance", _issn("0022-1082")),
        SourceId.JFE: SourceBinding(SourceId.JFE, "Journal of Financial Economics", _issn("0304-405X")),
        SourceId.RFS: SourceBinding(SourceId.RFS, "Review of Financial Studies", _issn("0893-9454")),
        SourceId.CFA: SourceBinding(SourceId.CFA, "Financial Analysts Journal", _issn("0015-198X")),
        SourceId.OPENALEX: SourceBinding(SourceId.OPENALEX, "OpenAlex Journals", needs_default_search=True),
        # Open-access works stand in for ResearchGate, which has no public API
        SourceId.RESEARCHGATE: SourceBinding(SourceId.RESEARCHGATE, "ResearchGate", "is_oa:true"),
    }
)


@dataclass(frozen=True, slots=True)
class SourceQuery:
    """One dispatchable upstream query."""

    source: SourceId
    label: str
    expression: str
    from_date: date


# =============================================================================
# Request normalization
# =============================================================================


def normalize_sources(sources: Iterable[SourceId | str] | None) -> tuple[SourceId, ...] | None:
    """
    Resolve source ids.

    Returns None when no sources were named (meaning "all sources"). Unknown
    ids are dropped with a warning, so naming only unknown sources yields an
    empty tuple and nothing is dispatched.
    """
    if not sources:
        return None

    resolved: list[SourceId] = []
    for value in sources:
        source = SourceId.parse(value)
        if source is None:
            logger.warning(f"Ignoring unknown source: {value!r}")
            continue
        if source not in resolved:
            resolved.append(source)
    return tuple(resolved)


def normalize_custom_range(custom_range: DateRange | Mapping[str, str] | None) -> DateRange | None:
    if custom_range is None or isinstance(custom_range, DateRange):
        return custom_range
    return DateRange(start=custom_range.get("start", "") or "", end=custom_range.get("end", "") or "")


def build_scan_request(
    topics: Iterable[str] | str | None,
    sources: Iterable[SourceId | str] | None,
    date_preset: DatePreset | str | None,
    custom_range: DateRange | Mapping[str, str] | None = None,
    search_term: str | None = None,
) -> ScanRequest:
    """Normalize raw filter values coming from the UI layer."""
    if isinstance(topics, str):
        topics = (topics,)
    return ScanRequest(
        topics=tuple(topics or ()),
        sources=normalize_sources(sources),
        date_preset=DatePreset.parse(date_preset),
        custom_range=normalize_custom_range(custom_range),
        search_term=(search_term or "").strip(),
    )


# =============================================================================
# Building blocks
# =============================================================================


def collect_topic_phrases(topics: Iterable[str], search_term: str = "") -> tuple[str, ...]:
    """
    Union the keyword phrases of every selected topic.

    "All" anywhere in the selection disables topical narrowing. When no known
    topic is selected (none at all, or only unknown names) and there is no
    search term, a generic finance phrase keeps the query on-domain.
    """
    topics = tuple(topics)
    if ALL_TOPICS in topics:
        return ()

    phrases: list[str] = []
    for topic in topics:
        keywords = TOPIC_KEYWORDS.get(topic)
        if keywords is None:
            logger.warning(f"Ignoring unknown topic: {topic!r}")
            continue
        for phrase in keywords:
            if phrase not in phrases:
                phrases.append(phrase)

    if not phrases and not search_term:
        return DEFAULT_TOPIC_PHRASES
    return tuple(phrases)


def _one_year_before(today: date) -> date:
    try:
        return today.replace(year=today.year - 1)
    except ValueError:
        # Feb 29 -> Feb 28
        return today.replace(year=today.year - 1, day=28)


def resolve_from_date(
    preset: DatePreset | None,
    custom_range: DateRange | None = None,
    today: date | None = None,
) -> date:
    """
    Lower date bound for a preset.

    Week/Month/Quarter step back 7/30/90 days, Year one calendar year.
    Custom uses the range start; a missing or unparsable start, like an
    unknown preset, falls back to one year.
    """
    today = today or date.today()

    if preset in PRESET_OFFSETS_DAYS:
        return today - timedelta(days=PRESET_OFFSETS_DAYS[preset])
    if preset is DatePreset.CUSTOM and custom_range is not None:
        start = custom_range.start_date
        if start is not None:
            return start
        logger.warning(f"Unparsable custom range start {custom_range.start!r}, defaulting to one year")
    return _one_year_before(today)


def build_arxiv_query(phrases: Iterable[str], search_term: str = "") -> str:
    """
    arXiv ``search_query`` value, already URL-encoded.

    Phrases are quoted and OR-ed, the search term is AND-ed, and the result
    is always constrained to the q-fin category.
    """
    main_part = ""
    phrases = tuple(phrases)
    if phrases:
        joined = "+OR+".join(f'all:"{urllib.parse.quote(phrase, safe="")}"' for phrase in phrases)
        main_part = f"({joined})"

    search_term = search_term.strip()
    if search_term:
        search_part = f"all:{urllib.parse.quote(search_term, safe='')}"
        main_part = f"{main_part}+AND+{search_part}" if main_part else search_part

    if main_part:
        return f"{main_part}+AND+{ARXIV_CATEGORY}"
    return ARXIV_CATEGORY


def build_openalex_search_filter(phrases: Iterable[str], search_term: str = "") -> str:
    """
    OpenAlex ``default.search`` clauses.

    Inside a clause ``|`` means OR; separate clauses joined by ``,`` are AND-ed.
    Returns an empty string when nothing narrows the query.
    """
    clauses: list[str] = []
    phrases = tuple(phrases)
    if phrases:
        joined = "|".join(f'"{phrase}"' for phrase in phrases)
        clauses.append(f"default.search:{urllib.parse.quote(joined, safe='')}")

    search_term = search_term.strip()
    if search_term:
        clauses.append(f"default.search:{urllib.parse.quote(search_term, safe='')}")

    return ",".join(clauses)


def build_openalex_filter(
    binding: SourceBinding,
    search_filter: str,
    from_date: date,
) -> str:
    """Full OpenAlex ``filter`` value for one venue binding."""
    if not search_filter and binding.needs_default_search:
        search_filter = build_openalex_search_filter((), GENERAL_BUCKET_SEARCH)

    clauses = [clause for clause in (search_filter, binding.venue_filter) if clause]
    clauses.append(f"from_publication_date:{from_date.isoformat()}")
    return ",".join(clauses)


# =============================================================================
# QueryBuilder
# =============================================================================


class QueryBuilder:
    """
    Builds one SourceQuery per enabled source.

    Stateless; safe to share between concurrent scans.

    Usage:
        builder = QueryBuilder()
        queries = builder.build(build_scan_request(["Crypto"], ["arXiv"], "Month"))
    """

    def __init__(self, bindings: Mapping[SourceId, SourceBinding] = SOURCE_BINDINGS) -> None:
        self._bindings = bindings

    def build(self, request: ScanRequest, today: date | None = None) -> list[SourceQuery]:
        from_date = resolve_from_date(request.date_preset, request.custom_range, today)
        phrases = collect_topic_phrases(request.topics, request.search_term)

        arxiv_expression = build_arxiv_query(phrases, request.search_term)
        search_filter = build_openalex_search_filter(phrases, request.search_term)

        queries: list[SourceQuery] = []
        for source in request.enabled_sources:
            binding = self._bindings.get(source)
            if binding is None:
                logger.warning(f"No query binding for source {source.value}, skipping")
                continue

            if source is SourceId.ARXIV:
                expression = arxiv_expression
            else:
                expression = build_openalex_filter(binding, search_filter, from_date)

            queries.append(SourceQuery(source=source, label=binding.label, expression=expression, from_date=from_date))

        return queries
