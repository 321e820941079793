"""
Embeddings Adapter - Remote embedding provider client.

This is the ONLY place that calls the embedding provider API.
"""

from .client import EmbeddingAPIClient
from .models import EmbeddingAPIConfig, EmbeddingAPIResponse

__all__ = [
    "EmbeddingAPIClient",
    "EmbeddingAPIConfig",
    "EmbeddingAPIResponse",
]
