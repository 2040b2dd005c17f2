"""Retrieval tool over a project's embedded data sources."""

import json
from typing import Any, Literal

from ..models import EmbeddingRecord
from ..services.base import ToolServices
from ..utils import PrefixLogger
from .base import QUERY_PARAMETERS_SCHEMA, FunctionTool

RAG_TOOL_NAME = "rag_search"


async def invoke_rag_tool(
    logger: PrefixLogger,
    services: ToolServices,
    project_id: str,
    query: str,
    source_ids: list[str],
    return_type: Literal["chunks", "content"] = "chunks",
    k: int = 3,
) -> list[EmbeddingRecord]:
    """Search a project's active data sources.

    Args:
        logger: Parent logger
        services: Collaborators (embedder, vector search, data source and document stores)
        project_id: Project whose data is searched
        query: Search text
        source_ids: Configured data source ids
        return_type: "chunks" for matching chunks, "content" for full parent documents
        k: Maximum number of results

    Returns:
        Ranked records; empty when none of the configured sources is active
    """
    logger = logger.child("invoke_rag_tool")
    logger.debug(f"project_id: {project_id}, query: {query}, source_ids: {source_ids}, k: {k}")

    embedding = await services.require("embedder").embed(query)

    sources = await services.require("data_sources").find_active_sources(project_id)
    valid_source_ids = [s.id for s in sources if s.id in source_ids and s.active]
    logger.debug(f"valid source ids: {valid_source_ids}")

    if not valid_source_ids:
        logger.debug("no valid source ids found, returning empty response")
        return []

    results = await services.require("vector_search").search(
        services.embeddings_collection,
        embedding,
        project_id,
        valid_source_ids,
        k,
    )
    logger.debug(f"found {len(results)} results")

    if return_type == "chunks":
        return results

    docs = await services.require("documents").find_docs_by_ids([r.doc_id for r in results])
    logger.debug(f"fetched docs: {len(docs)}")
    contents = {doc.id: doc.content for doc in docs}

    return [r.model_copy(update={"content": contents.get(r.doc_id, "")}) for r in results]


def create_rag_tool(
    logger: PrefixLogger,
    services: ToolServices,
    project_id: str,
    name: str,
    description: str,
    source_ids: list[str],
    return_type: Literal["chunks", "content"] = "chunks",
    k: int = 3,
) -> FunctionTool:
    """Create a retrieval tool bound to a project and a set of data sources.

    The tool takes a single required ``query`` string and returns
    ``{"results": [...]}``.
    """

    async def handler(arguments: dict[str, Any]) -> str:
        results = await invoke_rag_tool(
            logger,
            services,
            project_id,
            str(arguments.get("query", "")),
            source_ids,
            return_type,
            k,
        )
        return json.dumps({"results": [r.to_dict() for r in results]})

    return FunctionTool(
        name=name,
        description=description,
        parameters=QUERY_PARAMETERS_SCHEMA,
        handler=handler,
        strict=True,
    )
