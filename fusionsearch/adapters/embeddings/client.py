"""
Embedding API Client - OpenAI-compatible embeddings endpoint.

This is the ONLY place that calls the remote embedding provider.

Failure classification:
- 401/403          -> ProviderAuthError
- 429              -> ProviderRateLimited
- 5xx, transport   -> ProviderServerError
- timeout          -> ProviderTimeout
- malformed body   -> InvalidResponseShapeError
- anything else    -> ProviderError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from fusionsearch.config import (
    InvalidResponseShapeError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimited,
    ProviderServerError,
    ProviderTimeout,
)

from .models import EmbeddingAPIConfig, EmbeddingAPIResponse

logger = logging.getLogger(__name__)

__all__ = ["EmbeddingAPIClient"]


class EmbeddingAPIClient:
    """
    Async client for POST /embeddings.

    Example:
        >>> client = EmbeddingAPIClient(EmbeddingAPIConfig(api_key="sk-..."))
        >>> response = await client.create_embedding("copy-on-write forks")
        >>> len(response.vector)
        1536
    """

    def __init__(
        self,
        config: EmbeddingAPIConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize embeddings client.

        Args:
            config: Client configuration. Uses defaults if None.
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config or EmbeddingAPIConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        """Whether an API key is available."""
        return bool(self.config.api_key.strip())

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url.rstrip("/"),
                timeout=self.config.timeout_seconds,
                transport=self._transport,
                headers={
                    "Authorization": f"Bearer {self.config.api_key}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def create_embedding(self, text: str) -> EmbeddingAPIResponse:
        """
        Embed a single text.

        Args:
            text: Input text, already truncated to the token budget

        Returns:
            EmbeddingAPIResponse with the raw vector and usage

        Raises:
            ProviderError: Classified provider failure
        """
        client = await self._get_client()

        payload: dict[str, Any] = {
            "model": self.config.model,
            "input": text,
            "dimensions": self.config.dimension,
        }

        try:
            response = await client.post("/embeddings", json=payload)
        except httpx.TimeoutException as e:
            raise ProviderTimeout(
                f"Embedding request timed out: {e}",
                {"timeout": self.config.timeout_seconds},
            ) from e
        except httpx.TransportError as e:
            raise ProviderServerError(f"Embedding transport failed: {e}") from e

        self._raise_for_status(response)
        return self._parse_response(response)

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        """Map non-200 statuses onto the provider error taxonomy."""
        status = response.status_code
        if status == 200:
            return

        details = {"status": status, "body": response.text[:200]}
        if status in (401, 403):
            raise ProviderAuthError("Embedding provider rejected credentials", details)
        if status == 429:
            raise ProviderRateLimited("Embedding provider quota exceeded", details)
        if status >= 500:
            raise ProviderServerError(f"Embedding provider error: {status}", details)
        raise ProviderError(f"Unexpected embedding provider status: {status}", details)

    def _parse_response(self, response: httpx.Response) -> EmbeddingAPIResponse:
        """Extract the first embedding from the response body."""
        try:
            data = response.json()
            vector = data["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise InvalidResponseShapeError(f"Malformed embedding response: {e}") from e

        if not isinstance(vector, list) or not all(
            isinstance(value, (int, float)) and not isinstance(value, bool) for value in vector
        ):
            raise InvalidResponseShapeError("Embedding is not a list of numbers")

        usage = data.get("usage") or {}
        return EmbeddingAPIResponse(
            vector=[float(value) for value in vector],
            model=data.get("model", self.config.model),
            prompt_tokens=usage.get("prompt_tokens", 0),
            total_tokens=usage.get("total_tokens", 0),
        )

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
