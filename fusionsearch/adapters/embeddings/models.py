"""
Embedding API Models - Request/Response types for the embeddings endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class EmbeddingAPIConfig(BaseModel):
    """Configuration for the embeddings client."""

    api_key: str = ""
    base_url: str = Field(default="https://api.openai.com/v1")
    model: str = Field(default="text-embedding-3-small")
    dimension: int = Field(default=1536, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_input_tokens: int = Field(default=8191, ge=1)

    model_config = {"frozen": True}


class EmbeddingAPIResponse(BaseModel):
    """Parsed embeddings response."""

    vector: list[float]
    model: str
    prompt_tokens: int = 0
    total_tokens: int = 0
