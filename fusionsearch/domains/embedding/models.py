"""
Embedding Models - Data types for embedding domain.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from pydantic import BaseModel, Field


@dataclass
class CacheEntry:
    """Cached embedding with its insertion time (for TTL)."""

    key: str
    vector: np.ndarray
    inserted_at: float


@dataclass(frozen=True)
class EmbeddingResult:
    """Embedding plus the strategy that produced it."""

    vector: np.ndarray
    source: str  # "cache", "remote", "deterministic"


class CacheStats(BaseModel):
    """Embedding cache statistics."""

    size: int
    max_size: int
    ttl_seconds: float
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0


class RateLimitStats(BaseModel):
    """Sliding-window rate limiter statistics."""

    max_per_window: int
    window_seconds: float
    in_window: int
    admitted: int = 0
    waits: int = 0
    waited_seconds: float = 0.0


class EmbeddingStats(BaseModel):
    """Operational view of the embedding generator."""

    dimension: int
    provider_configured: bool
    cache: CacheStats
    rate_limit: RateLimitStats | None = None
    provider_calls: int = 0
    provider_failures: dict[str, int] = Field(default_factory=dict)
    fallback_embeddings: int = 0
