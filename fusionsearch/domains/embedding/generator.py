"""
Embedding Generator - Cache, then an ordered chain of embedding strategies.

Chain (top-down):
- Embedding cache (hit returns immediately)
- Remote provider (only when an API key is configured)
- Deterministic local embedding (never fails for non-empty text)
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from fusionsearch.adapters.embeddings import EmbeddingAPIClient, EmbeddingAPIConfig
from fusionsearch.config import EmptyInputError, ProviderError

from .cache import EmbeddingCache
from .contracts import EmbeddingStrategy
from .fallback import DeterministicEmbeddingStrategy
from .models import EmbeddingResult, EmbeddingStats
from .rate_limiter import SlidingWindowRateLimiter
from .strategies import RemoteEmbeddingStrategy

if TYPE_CHECKING:
    from fusionsearch.config import Settings

logger = logging.getLogger(__name__)

__all__ = ["EmbeddingGenerator"]


class EmbeddingGenerator:
    """
    Produce fixed-dimension vectors for any non-empty text.

    Whichever strategy answers, its vector is cached, so repeated calls
    within the TTL return the same vector even after a provider failure.

    Example:
        >>> generator = EmbeddingGenerator.from_settings(get_settings())
        >>> vector = await generator.embed("hello world")
        >>> vector.shape
        (1536,)
    """

    def __init__(
        self,
        dimension: int = 1536,
        cache: EmbeddingCache | None = None,
        strategies: Sequence[EmbeddingStrategy] | None = None,
    ) -> None:
        """
        Initialize embedding generator.

        Args:
            dimension: Output vector dimension
            cache: Embedding cache (a fresh one if None)
            strategies: Ordered strategies; a deterministic strategy is
                appended when none is present
        """
        self.dimension = dimension
        self.cache = cache or EmbeddingCache()

        chain = list(strategies or [])
        if not any(isinstance(s, DeterministicEmbeddingStrategy) for s in chain):
            chain.append(DeterministicEmbeddingStrategy(dimension))
        self._strategies = chain

        self._failures: Counter[str] = Counter()
        self._fallbacks = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> EmbeddingGenerator:
        """Build the generator, its cache and (if keyed) the remote strategy."""
        cache = EmbeddingCache(
            max_size=settings.embedding_cache_size,
            ttl_seconds=settings.embedding_cache_ttl_seconds,
        )

        strategies: list[EmbeddingStrategy] = []
        if settings.provider_configured:
            client = EmbeddingAPIClient(
                EmbeddingAPIConfig(
                    api_key=settings.openai_api_key,
                    base_url=settings.openai_base_url,
                    model=settings.embedding_model,
                    dimension=settings.embedding_dimension,
                    timeout_seconds=settings.embedding_timeout_seconds,
                    max_input_tokens=settings.embedding_max_input_tokens,
                )
            )
            strategies.append(
                RemoteEmbeddingStrategy(
                    client=client,
                    rate_limiter=SlidingWindowRateLimiter(settings.embedding_rate_limit_rpm),
                    dimension=settings.embedding_dimension,
                    max_attempts=settings.embedding_max_attempts,
                    backoff_seconds=settings.embedding_retry_backoff_seconds,
                )
            )
        else:
            logger.info("No embedding provider key configured, using deterministic embeddings")

        strategies.append(DeterministicEmbeddingStrategy(settings.embedding_dimension))
        return cls(settings.embedding_dimension, cache, strategies)

    @property
    def strategies(self) -> list[EmbeddingStrategy]:
        """The strategy chain, in evaluation order."""
        return list(self._strategies)

    @property
    def remote(self) -> RemoteEmbeddingStrategy | None:
        """The remote strategy, if configured."""
        for strategy in self._strategies:
            if isinstance(strategy, RemoteEmbeddingStrategy):
                return strategy
        return None

    @property
    def provider_configured(self) -> bool:
        """Whether a remote provider is part of the chain."""
        return self.remote is not None

    async def embed(self, text: str, timeout: float | None = None) -> np.ndarray:
        """
        Embed text.

        Args:
            text: Input text
            timeout: Optional deadline for the provider call, in seconds

        Returns:
            Read-only float32 vector of shape (dimension,)

        Raises:
            EmptyInputError: Text is empty after trimming
        """
        result = await self.embed_with_source(text, timeout)
        return result.vector

    async def embed_with_source(self, text: str, timeout: float | None = None) -> EmbeddingResult:
        """Embed text and report which step produced the vector."""
        if not text or not text.strip():
            raise EmptyInputError("Cannot embed empty text")

        cached = self.cache.get(text)
        if cached is not None:
            return EmbeddingResult(vector=cached, source="cache")

        for strategy in self._strategies:
            try:
                vector = await strategy.embed(text, timeout=timeout)
            except ProviderError as e:
                self._failures[e.code.value] += 1
                if e.transient:
                    logger.info("Embedding via '%s' failed transiently, falling back: %s", strategy.name, e)
                else:
                    logger.warning("Embedding via '%s' degraded, falling back: %s", strategy.name, e)
                continue

            if isinstance(strategy, DeterministicEmbeddingStrategy):
                self._fallbacks += 1

            vector = self.cache.put(text, vector)
            return EmbeddingResult(vector=vector, source=strategy.name)

        raise ProviderError("Every embedding strategy failed", {"failures": dict(self._failures)})

    def stats(self) -> EmbeddingStats:
        """Get cache, rate limiter and provider statistics."""
        remote = self.remote
        return EmbeddingStats(
            dimension=self.dimension,
            provider_configured=remote is not None,
            cache=self.cache.stats(),
            rate_limit=remote.rate_limiter.stats() if remote else None,
            provider_calls=remote.calls if remote else 0,
            provider_failures=dict(self._failures),
            fallback_embeddings=self._fallbacks,
        )

    async def close(self) -> None:
        """Release strategy resources (HTTP clients)."""
        remote = self.remote
        if remote is not None:
            await remote.close()
