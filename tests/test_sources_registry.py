"""Tests for the source client factories."""

import pytest

from research_scanner.domain.entities import SourceId
from research_scanner.infrastructure import sources
from research_scanner.infrastructure.sources.arxiv import ArXivClient
from research_scanner.infrastructure.sources.openalex import OpenAlexClient


class TestFactories:
    async def test_arxiv_client_is_new_each_time(self):
        first = sources.create_arxiv_client()
        second = sources.create_arxiv_client()
        try:
            assert isinstance(first, ArXivClient)
            assert first is not second
        finally:
            await first.close()
            await second.close()

    async def test_openalex_client_email(self):
        async with sources.create_openalex_client(email="ops@example.org") as client:
            assert isinstance(client, OpenAlexClient)
            assert client._email == "ops@example.org"

    @pytest.mark.parametrize(
        ("source", "adapter"),
        [(SourceId.ARXIV, "arxiv"), (SourceId.SSRN, "openalex"), (SourceId.RESEARCHGATE, "openalex")],
    )
    async def test_adapter_name(self, source, adapter):
        assert sources.adapter_name(source) == adapter
