"""
Remote Embedding Strategy - Provider call behind rate limiting and retries.
"""

from __future__ import annotations

import asyncio
import logging

import numpy as np
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fusionsearch.adapters.embeddings import EmbeddingAPIClient, EmbeddingAPIResponse
from fusionsearch.config import InvalidResponseShapeError, ProviderError, ProviderTimeout

from .rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)

__all__ = ["RemoteEmbeddingStrategy", "truncate_to_token_budget"]

CHARS_PER_TOKEN = 4


def truncate_to_token_budget(text: str, max_tokens: int, chars_per_token: int = CHARS_PER_TOKEN) -> str:
    """Cut text to roughly `max_tokens` tokens (character approximation)."""
    limit = max_tokens * chars_per_token
    if len(text) <= limit:
        return text
    logger.debug("Truncating embedding input from %d to %d chars", len(text), limit)
    return text[:limit]


def _is_transient(error: BaseException) -> bool:
    return isinstance(error, ProviderError) and error.transient


class RemoteEmbeddingStrategy:
    """
    Embed through the remote provider.

    Each attempt passes the rate limiter; transient failures are retried
    with exponential backoff; the final failure propagates as a ProviderError
    so the generator can fall back.
    """

    name = "remote"

    def __init__(
        self,
        client: EmbeddingAPIClient,
        rate_limiter: SlidingWindowRateLimiter,
        dimension: int = 1536,
        max_attempts: int = 2,
        backoff_seconds: float = 1.0,
    ) -> None:
        """
        Initialize remote strategy.

        Args:
            client: Embeddings API client
            rate_limiter: Shared admission control for provider calls
            dimension: Required vector length
            max_attempts: Total attempts for transient failures
            backoff_seconds: Exponential backoff multiplier
        """
        self.client = client
        self.rate_limiter = rate_limiter
        self.dimension = dimension
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.calls = 0

    async def embed(self, text: str, timeout: float | None = None) -> np.ndarray:
        """
        Embed text remotely.

        Raises:
            ProviderError: Provider failed after retries or returned a bad shape
        """
        truncated = truncate_to_token_budget(text, self.client.config.max_input_tokens)

        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=30),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._request(truncated, timeout)

        vector = np.asarray(response.vector, dtype=np.float32)
        if vector.shape != (self.dimension,):
            raise InvalidResponseShapeError(
                "Provider returned wrong embedding dimension",
                {"expected": self.dimension, "actual": len(response.vector)},
            )
        return vector

    async def _request(self, text: str, timeout: float | None) -> EmbeddingAPIResponse:
        """Single rate-limited provider call."""
        await self.rate_limiter.admit()
        self.calls += 1

        if timeout is None:
            return await self.client.create_embedding(text)

        try:
            return await asyncio.wait_for(self.client.create_embedding(text), timeout)
        except asyncio.TimeoutError as e:
            raise ProviderTimeout("Embedding call exceeded caller timeout", {"timeout": timeout}) from e

    async def close(self) -> None:
        """Close the underlying client."""
        await self.client.close()
