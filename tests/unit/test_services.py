"""Unit tests for collaborator adapters and in-memory stores."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from workflow_runtime.models import ConnectedAccount, DataSource, DataSourceDoc, ProjectConfig
from workflow_runtime.services import (
    Embedder,
    InMemoryDataSourceStore,
    InMemoryDocumentStore,
    InMemoryProjectStore,
    OpenAIEmbedder,
    ProjectStore,
    QdrantVectorSearch,
    VectorSearch,
)


@pytest.mark.asyncio
class TestOpenAIEmbedder:
    """Tests for OpenAIEmbedder."""

    async def test_embed(self):
        client = MagicMock()
        client.embeddings.create = AsyncMock(
            return_value=MagicMock(data=[MagicMock(embedding=[0.1, 0.2])], usage=MagicMock(prompt_tokens=3))
        )
        embedder = OpenAIEmbedder(client, model="embed-small", dimensions=2)

        assert await embedder.embed("hello") == [0.1, 0.2]
        client.embeddings.create.assert_awaited_once_with(model="embed-small", input="hello", dimensions=2)
        assert isinstance(embedder, Embedder)


@pytest.mark.asyncio
class TestQdrantVectorSearch:
    """Tests for QdrantVectorSearch."""

    async def test_search_filters_and_maps_payload(self):
        point = MagicMock(
            payload={"title": "FAQ", "name": "faq.md", "content": "Refunds take 5 days", "docId": "d1", "sourceId": "s1"}
        )
        client = MagicMock()
        client.query_points = AsyncMock(return_value=MagicMock(points=[point, MagicMock(payload=None)]))
        search = QdrantVectorSearch(client)

        results = await search.search("embeddings", [0.1, 0.2], "proj-1", ["s1", "s2"], 3)

        assert results[0].content == "Refunds take 5 days"
        assert results[0].doc_id == "d1"
        assert results[1].doc_id == ""

        kwargs = client.query_points.await_args.kwargs
        assert kwargs["collection_name"] == "embeddings"
        assert kwargs["limit"] == 3
        project_cond, source_cond = kwargs["query_filter"].must
        assert (project_cond.key, project_cond.match.value) == ("projectId", "proj-1")
        assert (source_cond.key, source_cond.match.any) == ("sourceId", ["s1", "s2"])
        assert isinstance(search, VectorSearch)


@pytest.mark.asyncio
class TestInMemoryStores:
    """Tests for the in-memory stores."""

    async def test_active_sources_for_project(self):
        store = InMemoryDataSourceStore(
            [
                DataSource(id="s1", project_id="proj-1"),
                DataSource(id="s2", project_id="proj-1", active=False),
                DataSource(id="s3", project_id="proj-2"),
            ]
        )

        assert [s.id for s in await store.find_active_sources("proj-1")] == ["s1"]

    async def test_docs_by_ids_skips_missing(self):
        store = InMemoryDocumentStore([DataSourceDoc(id="d1", content="a")])

        assert [d.id for d in await store.find_docs_by_ids(["d1", "d9"])] == ["d1"]

    async def test_project_reads_are_copies(self):
        store = InMemoryProjectStore([ProjectConfig(id="proj-1")])

        project = await store.get_project("proj-1")
        project.composio_connected_accounts["github"] = ConnectedAccount(id="ca-1")

        assert (await store.get_project("proj-1")).composio_connected_accounts == {}
        assert await store.get_project("missing") is None
        assert isinstance(store, ProjectStore)

    async def test_set_connected_account_is_idempotent(self):
        store = InMemoryProjectStore()
        account = ConnectedAccount(id="ca-1", status="ACTIVE")

        await store.set_connected_account("proj-1", "github", account)
        await store.set_connected_account("proj-1", "github", account)

        project = await store.get_project("proj-1")
        assert project.composio_connected_accounts == {"github": account}
