"""Query embedding through the OpenAI embeddings API."""

from typing import Optional

from openai import AsyncOpenAI

from ..utils import get_logger

logger = get_logger(__name__)


class OpenAIEmbedder:
    """Embeds queries with an OpenAI-compatible embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI, model: str = "text-embedding-3-small", dimensions: Optional[int] = None) -> None:
        """Initialize the embedder.

        Args:
            client: OpenAI client (shared with the completion provider)
            model: Embedding model
            dimensions: Optional output dimensions
        """
        self.client = client
        self.model = model
        self.dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Text to embed

        Returns:
            Embedding vector
        """
        create_kwargs: dict = {"model": self.model, "input": text}
        if self.dimensions:
            create_kwargs["dimensions"] = self.dimensions

        response = await self.client.embeddings.create(**create_kwargs)
        logger.debug(
            f"Embedded query with {self.model} "
            f"({response.usage.prompt_tokens if response.usage else 0} prompt tokens)"
        )
        return list(response.data[0].embedding)
