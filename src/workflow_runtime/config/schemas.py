"""Configuration schemas for the workflow runtime.

This module defines Pydantic models for validating runtime configuration.
Workflow definitions themselves live in ``workflow_runtime.models.workflow``.
"""

import os
from typing import Any, Optional

from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    """Configuration for the completion provider endpoint."""

    endpoint: Optional[str] = Field(None, description="API base URL (None for the provider default)")
    model: str = Field(default="gpt-4o", description="Default model identifier")
    api_key_env: str = Field(default="PROVIDER_API_KEY", description="Environment variable containing the API key")
    fallback_api_key_env: str = Field(default="OPENAI_API_KEY", description="Checked when api_key_env is unset")
    temperature: float = Field(default=0.0, ge=0, le=2, description="Sampling temperature for one-shot text generation")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Maximum tokens to generate")

    def resolve_api_key(self) -> str:
        """Read the API key from the environment.

        Returns:
            API key or an empty string
        """
        return os.environ.get(self.api_key_env) or os.environ.get(self.fallback_api_key_env, "")


class RuntimeConfig(BaseModel):
    """Configuration for one workflow runtime deployment."""

    llm: LLMConfig = Field(default_factory=LLMConfig, description="Completion provider")
    embedding_model: str = Field(default="text-embedding-3-small", description="Embedding model for RAG queries")
    embeddings_collection: str = Field(default="embeddings", description="Vector collection holding chunks")
    qdrant_url: Optional[str] = Field(None, description="Qdrant URL (RAG disabled when unset)")
    qdrant_api_key_env: str = Field(default="QDRANT_API_KEY", description="Environment variable with the Qdrant key")
    composio_base_url: str = Field(default="https://backend.composio.dev/api/v3", description="Composio REST base URL")
    composio_api_key_env: str = Field(default="COMPOSIO_API_KEY", description="Environment variable with the Composio key")
    default_greeting: str = Field(default="How can I help you today?", description="Greeting when the workflow has none")
    max_loop_iterations: int = Field(default=25, ge=1, description="Provider invocations allowed per turn")
    max_transfers: int = Field(default=50, ge=1, description="Agent transfers allowed per turn")
    runner_max_turns: int = Field(default=10, ge=1, description="Model calls allowed per provider run")
    tool_timeout_seconds: int = Field(default=300, ge=1, description="Timeout for external tool calls")


def validate_runtime_config(data: dict[str, Any]) -> RuntimeConfig:
    """Validate runtime configuration data.

    Args:
        data: Raw configuration dictionary

    Returns:
        Validated RuntimeConfig object

    Raises:
        ValidationError: If the configuration is invalid
    """
    return RuntimeConfig(**data)
