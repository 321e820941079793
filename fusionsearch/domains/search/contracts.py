"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

import numpy as np

from .models import SearchQuery, SearchResult


@runtime_checkable
class SearchEngine(Protocol):
    """Contract for search implementations."""

    async def search(
        self,
        query: SearchQuery,
    ) -> list[SearchResult]:
        """Execute search and return results. Never raises."""
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """Contract for the document store behind the engine."""

    async def has_vector_support(self) -> bool:
        """Capability check for vector similarity."""
        ...

    async def search_fts(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """Keyword-ranked rows with a non-negative `score`."""
        ...

    async def search_vector(
        self,
        embedding: np.ndarray | Sequence[float],
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """Similarity-ranked rows with a `score`."""
        ...

    async def insert_document(
        self,
        title: str,
        content: str,
        embedding: np.ndarray | Sequence[float] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """Persist a document and return its ID."""
        ...


@runtime_checkable
class FallbackCorpus(Protocol):
    """Policy for what to return when keyword search yields nothing."""

    def results(self, query: str, limit: int) -> list[SearchResult]:
        """Substitute results (possibly empty)."""
        ...
