"""
Adapters - External service integrations.

All external API calls are wrapped here to isolate domains from third-party changes.
"""

from .embeddings import EmbeddingAPIClient, EmbeddingAPIConfig, EmbeddingAPIResponse
from .sqlite import SQLiteRepository

__all__ = [
    # Embedding provider
    "EmbeddingAPIClient",
    "EmbeddingAPIConfig",
    "EmbeddingAPIResponse",
    # Document store
    "SQLiteRepository",
]
