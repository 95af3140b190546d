"""
PaperScanner - Fan-Out / Fan-In Scan Entry Point

One scan:
    filter state ─► QueryBuilder ─► one SourceQuery per enabled source
                                        │
                     ┌──────────────────┼──────────────────┐
                     ▼                  ▼                  ▼
                  arXiv             OpenAlex (SSRN)    OpenAlex (...)
                     │                  │                  │
                     └──────── gather (order kept) ────────┘
                                        │
                                ResultAggregator ─► ScanResult

A source that errors or misses its deadline contributes nothing; the scan
itself never fails for runtime conditions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import TYPE_CHECKING

from typing_extensions import Self

from research_scanner.domain.entities import (
    DatePreset,
    DateRange,
    ResearchPaper,
    ScanResult,
    SourceId,
)
from research_scanner.infrastructure.http.client import get_config
from research_scanner.infrastructure.sources import adapter_name, create_arxiv_client, create_openalex_client
from research_scanner.shared.async_utils import gather_with_errors, timeout_with_fallback

from .query_builder import QueryBuilder, SourceQuery, build_scan_request
from .result_aggregator import ResultAggregator, UnparsableDatePolicy

if TYPE_CHECKING:
    from research_scanner.infrastructure.sources.arxiv import ArXivClient
    from research_scanner.infrastructure.sources.openalex import OpenAlexClient

logger = logging.getLogger(__name__)


class PaperScanner:
    """
    Orchestrates one scan across every enabled source.

    Clients passed in are reused for every scan and closed with the scanner.
    Without them, each scan creates the clients it needs and closes them
    before returning, so nothing (connection pools, breaker state) carries
    over from one scan to the next.

    Usage:
        async with PaperScanner() as scanner:
            result = await scanner.scan(["Crypto"], ["arXiv"], "Month")
    """

    def __init__(
        self,
        arxiv_client: ArXivClient | None = None,
        openalex_client: OpenAlexClient | None = None,
        builder: QueryBuilder | None = None,
        aggregator: ResultAggregator | None = None,
        unparsable_date_policy: UnparsableDatePolicy = UnparsableDatePolicy.DROP,
    ) -> None:
        self._arxiv_client = arxiv_client
        self._openalex_client = openalex_client
        self._builder = builder or QueryBuilder()
        self._aggregator = aggregator or ResultAggregator(unparsable_date_policy)

    async def scan(
        self,
        topics: Iterable[str] | str | None,
        sources: Iterable[SourceId | str] | None,
        date_preset: DatePreset | str | None,
        custom_range: DateRange | Mapping[str, str] | None = None,
        search_term: str | None = None,
        today: date | None = None,
    ) -> ScanResult:
        """
        Run one scan.

        Args:
            topics: Selected topic names ("All" disables topical narrowing)
            sources: Source ids; None or empty means every source
            date_preset: Week, Month, Quarter, Year or Custom
            custom_range: {"start", "end"} bounds used with Custom
            search_term: Free-text term AND-ed into every query
            today: Reference date (defaults to the local date)

        Returns:
            ScanResult with deduplicated, in-window papers, newest first
        """
        today = today or date.today()
        request = build_scan_request(topics, sources, date_preset, custom_range, search_term)
        queries = self._builder.build(request, today=today)

        if not queries:
            logger.info("No sources enabled, nothing to scan")
            return ScanResult()

        clients, created = self._clients_for(queries)
        deadline = get_config()["source_deadline"]
        try:
            outcomes = await gather_with_errors(
                *(
                    timeout_with_fallback(
                        clients[adapter_name(query.source)].fetch(query, today=today),
                        deadline,
                        fallback=list,
                    )
                    for query in queries
                ),
                return_exceptions=True,
            )
        finally:
            for client in created:
                await client.close()

        paper_lists: list[list[ResearchPaper]] = []
        for query, outcome in zip(queries, outcomes, strict=True):
            if isinstance(outcome, Exception):
                logger.error(f"Source {query.label} failed: {outcome}")
                paper_lists.append([])
                continue
            logger.info(f"Source {query.label}: {len(outcome)} papers")
            paper_lists.append(outcome)

        end_date = None
        if request.date_preset is DatePreset.CUSTOM and request.custom_range is not None:
            end_date = request.custom_range.end_date

        papers, stats = self._aggregator.aggregate(
            paper_lists,
            from_date=queries[0].from_date,
            today=today,
            end_date=end_date,
        )
        return ScanResult(papers=papers, stats=stats)

    def _clients_for(
        self, queries: list[SourceQuery]
    ) -> tuple[dict[str, ArXivClient | OpenAlexClient], list[ArXivClient | OpenAlexClient]]:
        """Pick the client per adapter; returns (clients, the ones created for this scan)."""
        clients: dict[str, ArXivClient | OpenAlexClient] = {}
        created: list[ArXivClient | OpenAlexClient] = []
        for name in dict.fromkeys(adapter_name(query.source) for query in queries):
            client = self._arxiv_client if name == "arxiv" else self._openalex_client
            if client is None:
                client = create_arxiv_client() if name == "arxiv" else create_openalex_client()
                created.append(client)
            clients[name] = client
        return clients, created

    async def close(self) -> None:
        """Close the clients this scanner was constructed with."""
        for client in (self._arxiv_client, self._openalex_client):
            if client is not None:
                await client.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


async def scan_for_papers(
    topics: Iterable[str] | str | None,
    sources: Iterable[SourceId | str] | None,
    date_preset: DatePreset | str | None,
    custom_range: DateRange | Mapping[str, str] | None = None,
    search_term: str | None = None,
    today: date | None = None,
) -> ScanResult:
    """
    Scan every enabled source and return the merged feed.

    Every call runs on clients of its own, so it is safe to call from
    successive event loops (e.g. repeated ``asyncio.run``).

    Example:
        >>> result = await scan_for_papers(["Crypto"], ["arXiv"], "Month")
        >>> result.papers[0].source
        'arXiv (q-fin)'
    """
    async with PaperScanner() as scanner:
        return await scanner.scan(topics, sources, date_preset, custom_range, search_term, today=today)
