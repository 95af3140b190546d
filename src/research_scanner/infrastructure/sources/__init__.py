"""
Upstream Paper Sources

Two adapters back every SourceId:

    ┌─────────────────────────────────────────────────────────┐
    │                     PaperScanner                        │
    │  ┌──────────────┬──────────────────────────────────────┐│
    │  │    arXiv     │               OpenAlex               ││
    │  │  (q-fin Atom)│ SSRN | BIS | FED | BLS | NBER | ...  ││
    │  └──────────────┴──────────────────────────────────────┘│
    └─────────────────────────────────────────────────────────┘

Each scan builds its own clients through the factories below and closes them
when it finishes, so no connection pool or breaker state outlives a scan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from research_scanner.domain.entities import SourceId

if TYPE_CHECKING:
    from .arxiv import ArXivClient
    from .openalex import OpenAlexClient


def adapter_name(source: SourceId) -> str:
    """Which adapter serves a source."""
    return "arxiv" if source is SourceId.ARXIV else "openalex"


def create_arxiv_client() -> ArXivClient:
    """Create a fresh arXiv client; the caller owns and closes it."""
    # Adapters import the application layer, so defer until first use
    from .arxiv import ArXivClient

    return ArXivClient()


def create_openalex_client(email: str | None = None) -> OpenAlexClient:
    """Create a fresh OpenAlex client; the caller owns and closes it."""
    from .openalex import OpenAlexClient

    return OpenAlexClient(email=email)


__all__ = [
    "adapter_name",
    "create_arxiv_client",
    "create_openalex_client",
]
