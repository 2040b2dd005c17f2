"""Qdrant-backed similarity search over embedded document chunks.

Points carry a payload of ``{projectId, sourceId, docId, title, name, content}``.
"""

from typing import Any, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import FieldCondition, Filter, MatchAny, MatchValue

from ..models import EmbeddingRecord
from ..utils import get_logger

logger = get_logger(__name__)


class QdrantVectorSearch:
    """Vector search restricted to one project and a set of data sources."""

    def __init__(self, client: AsyncQdrantClient) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, api_key: Optional[str] = None) -> "QdrantVectorSearch":
        return cls(AsyncQdrantClient(url=url, api_key=api_key or None))

    async def search(
        self,
        collection: str,
        vector: list[float],
        project_id: str,
        source_ids: list[str],
        limit: int,
    ) -> list[EmbeddingRecord]:
        """Find the chunks closest to a vector.

        Args:
            collection: Collection name
            vector: Query embedding
            project_id: Only chunks of this project match
            source_ids: Only chunks of these data sources match
            limit: Maximum number of results

        Returns:
            Ranked records
        """
        response = await self._client.query_points(
            collection_name=collection,
            query=vector,
            query_filter=Filter(
                must=[
                    FieldCondition(key="projectId", match=MatchValue(value=project_id)),
                    FieldCondition(key="sourceId", match=MatchAny(any=source_ids)),
                ]
            ),
            limit=limit,
            with_payload=True,
        )

        results = [self._to_record(point.payload or {}) for point in response.points]
        logger.debug(f"Qdrant returned {len(results)} points from {collection}")
        return results

    @staticmethod
    def _to_record(payload: dict[str, Any]) -> EmbeddingRecord:
        return EmbeddingRecord(
            title=payload.get("title", ""),
            name=payload.get("name", ""),
            content=payload.get("content", ""),
            doc_id=str(payload.get("docId", "")),
            source_id=str(payload.get("sourceId", "")),
        )

    async def close(self) -> None:
        await self._client.close()
