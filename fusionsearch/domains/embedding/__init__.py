"""
Embedding Domain - Text to vector with caching and graceful degradation.

This domain handles:
- Sliding-window rate limiting of provider calls
- TTL + LRU embedding cache
- Remote provider embeddings with retries
- Deterministic local fallback embeddings
"""

from .cache import EmbeddingCache
from .contracts import Embedder, EmbeddingStrategy
from .fallback import DeterministicEmbeddingStrategy, deterministic_embedding
from .generator import EmbeddingGenerator
from .models import CacheEntry, CacheStats, EmbeddingResult, EmbeddingStats, RateLimitStats
from .rate_limiter import SlidingWindowRateLimiter
from .strategies import RemoteEmbeddingStrategy, truncate_to_token_budget

__all__ = [
    "Embedder",
    "EmbeddingStrategy",
    "EmbeddingCache",
    "SlidingWindowRateLimiter",
    "EmbeddingGenerator",
    "RemoteEmbeddingStrategy",
    "DeterministicEmbeddingStrategy",
    "deterministic_embedding",
    "truncate_to_token_budget",
    "CacheEntry",
    "CacheStats",
    "RateLimitStats",
    "EmbeddingResult",
    "EmbeddingStats",
]
