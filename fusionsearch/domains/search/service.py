"""
Search Service - Single entry point wiring store, embeddings and search.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from fusionsearch.adapters.sqlite import SQLiteRepository
from fusionsearch.config import Settings, get_settings
from fusionsearch.domains.embedding import EmbeddingGenerator

from .fallback_corpus import StaticFallbackCorpus
from .hybrid_search import HybridSearchEngine
from .indexer import DocumentIndexer
from .models import (
    MAX_SEARCH_LIMIT,
    BatchIndexReport,
    DocumentInput,
    SearchMethod,
    SearchQuery,
    SearchResult,
    ServiceStats,
)

logger = logging.getLogger(__name__)

__all__ = ["SearchService"]


class SearchService:
    """
    Facade over the hybrid search engine.

    Example:
        >>> async with await SearchService.create() as service:
        ...     await service.index_document("Forks", "Copy-on-write branching")
        ...     results = await service.search("copy-on-write")
    """

    def __init__(
        self,
        store: SQLiteRepository,
        embedder: EmbeddingGenerator,
        engine: HybridSearchEngine,
        indexer: DocumentIndexer,
        default_limit: int = 10,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.engine = engine
        self.indexer = indexer
        self.default_limit = default_limit

    @classmethod
    async def create(cls, settings: Settings | None = None) -> SearchService:
        """Build and initialize a service from settings."""
        settings = settings or get_settings()

        store = SQLiteRepository(
            settings.db_path,
            dimension=settings.embedding_dimension,
            enable_vectors=settings.enable_vector_search,
        )
        await store.initialize()

        embedder = EmbeddingGenerator.from_settings(settings)
        engine = HybridSearchEngine(
            store,
            embedder,
            rrf_k=settings.rrf_k,
            candidate_limit=settings.search_candidate_limit,
            fallback_corpus=StaticFallbackCorpus() if settings.search_sample_fallback else None,
        )
        indexer = DocumentIndexer(
            store,
            embedder,
            batch_size=settings.index_batch_size,
            batch_delay_seconds=settings.index_batch_delay_seconds,
        )

        logger.info(
            "Search service ready (db=%s, provider=%s)",
            settings.db_path,
            "configured" if embedder.provider_configured else "none",
        )
        return cls(store, embedder, engine, indexer, settings.search_default_limit)

    async def search(
        self,
        query: str,
        method: SearchMethod | str = SearchMethod.HYBRID,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Search with bm25, vector or hybrid ranking.

        Never raises: blank queries return [], limit is clamped to
        1..MAX_SEARCH_LIMIT and an unknown method falls back to hybrid.
        """
        if not query.strip():
            return []

        try:
            search_method = SearchMethod(method)
        except ValueError:
            logger.warning("Unknown search method %r, using hybrid", method)
            search_method = SearchMethod.HYBRID

        requested = self.default_limit if limit is None else limit
        request = SearchQuery(
            query=query,
            method=search_method,
            limit=min(max(requested, 1), MAX_SEARCH_LIMIT),
        )
        return await self.engine.search(request)

    async def index_document(
        self,
        title: str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        return await self.indexer.index_document(title, content, metadata)

    async def batch_index(
        self,
        documents: Sequence[DocumentInput | Mapping[str, Any]],
    ) -> BatchIndexReport:
        return await self.indexer.batch_index(documents)

    async def embed(self, text: str) -> np.ndarray:
        return await self.embedder.embed(text)

    async def stats(self) -> ServiceStats:
        """Document count, vector capability and embedding introspection."""
        return ServiceStats(
            documents=await self.store.get_document_count(),
            vector_support=await self.store.has_vector_support(),
            embedding=self.embedder.stats(),
        )

    async def close(self) -> None:
        await self.embedder.close()
        await self.store.close()

    async def __aenter__(self) -> SearchService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
