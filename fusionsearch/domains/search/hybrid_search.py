"""
Hybrid Search Engine - Combines vector and keyword search with RRF.

Features:
- SQLite FTS5 keyword search (BM25)
- Cosine similarity vector search
- Reciprocal Rank Fusion (RRF)
- Ordered fallback chains that degrade to keyword search
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from fusionsearch.config import CapabilityUnavailable
from fusionsearch.domains.embedding.contracts import Embedder

from .contracts import DocumentStore, FallbackCorpus
from .fallback_corpus import NoFallbackCorpus
from .fusion import DEFAULT_RRF_K, reciprocal_rank_fusion
from .models import SearchMethod, SearchQuery, SearchResult

logger = logging.getLogger(__name__)

__all__ = ["HybridSearchEngine", "SearchStrategy"]


@dataclass(frozen=True)
class SearchStrategy:
    """One named step of a fallback chain."""

    name: str
    run: Callable[[str, int], Awaitable[list[SearchResult]]]


class HybridSearchEngine:
    """
    Hybrid search combining vector and keyword approaches.

    Searches never raise: every failure is logged and the request degrades
    down its chain until keyword search answers.

    Example:
        >>> engine = HybridSearchEngine(sqlite_repo, embedding_generator)
        >>> results = await engine.search(SearchQuery(query="zero-copy forks"))
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: Embedder,
        rrf_k: int = DEFAULT_RRF_K,
        candidate_limit: int = 100,
        fallback_corpus: FallbackCorpus | None = None,
    ) -> None:
        """
        Initialize hybrid search engine.

        Args:
            store: Document store with FTS and optional vectors
            embedder: Produces query embeddings
            rrf_k: RRF constant (default 60)
            candidate_limit: Max candidates per ranked list before fusion
            fallback_corpus: Policy for empty keyword results
        """
        self._store = store
        self._embedder = embedder
        self._rrf_k = rrf_k
        self._candidate_limit = candidate_limit
        self._fallback_corpus = fallback_corpus or NoFallbackCorpus()

        self.vector_chain: tuple[SearchStrategy, ...] = (
            SearchStrategy("vector", self._vector_ranked),
            SearchStrategy("bm25", self.bm25_search),
        )
        self.hybrid_chain: tuple[SearchStrategy, ...] = (
            SearchStrategy("hybrid", self._hybrid_ranked),
            SearchStrategy("bm25", self.bm25_search),
        )

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        """
        Execute a search with the requested method.

        Args:
            query: Search query parameters

        Returns:
            List of search results sorted by relevance
        """
        if query.method == SearchMethod.BM25:
            return await self.bm25_search(query.query, query.limit)
        if query.method == SearchMethod.VECTOR:
            return await self.vector_search(query.query, query.limit)
        return await self.hybrid_search(query.query, query.limit)

    async def bm25_search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Keyword search ranked by FTS5 BM25 (larger is better)."""
        if not query.strip():
            return []

        try:
            rows = await self._store.search_fts(query, limit)
        except Exception as e:
            logger.warning("BM25 search failed for '%s': %s", query[:50], e)
            rows = []

        results = [self._keyword_result(row) for row in rows]
        if not results:
            return self._fallback_results(query, limit)

        logger.info("BM25 search: query='%s' -> %d results", query[:50], len(results))
        return results

    async def vector_search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """Similarity search, degrading to keyword search."""
        if not query.strip():
            return []
        return await self._run_chain(self.vector_chain, query, limit)

    async def hybrid_search(self, query: str, limit: int = 10) -> list[SearchResult]:
        """RRF over keyword and vector candidates, degrading to keyword search."""
        if not query.strip():
            return []
        return await self._run_chain(self.hybrid_chain, query, limit)

    async def _run_chain(
        self,
        chain: Sequence[SearchStrategy],
        query: str,
        limit: int,
    ) -> list[SearchResult]:
        """Evaluate strategies top-down; the first that completes answers."""
        for strategy in chain:
            try:
                results = await strategy.run(query, limit)
            except CapabilityUnavailable as e:
                logger.info("%s search unavailable (%s), degrading", strategy.name, e.message)
            except Exception as e:
                logger.warning("%s search failed, degrading: %s", strategy.name, e)
            else:
                if not results:
                    return self._fallback_results(query, limit)
                return results
        return []

    async def _vector_ranked(self, query: str, limit: int) -> list[SearchResult]:
        await self._require_vectors()
        results = await self._vector_candidates(query, limit)

        logger.info("Vector search: query='%s' -> %d results", query[:50], len(results))
        return results

    async def _hybrid_ranked(self, query: str, limit: int) -> list[SearchResult]:
        await self._require_vectors()

        keyword_rows, vector_results = await asyncio.gather(
            self._store.search_fts(query, self._candidate_limit),
            self._vector_candidates(query, self._candidate_limit),
        )
        keyword_results = [self._keyword_result(row) for row in keyword_rows]

        results = reciprocal_rank_fusion(
            keyword_results,
            vector_results,
            k=self._rrf_k,
            limit=limit,
        )

        logger.info(
            "Hybrid search: query='%s' -> %d results (vector=%d, keyword=%d)",
            query[:50],
            len(results),
            len(vector_results),
            len(keyword_results),
        )
        return results

    async def _require_vectors(self) -> None:
        if not await self._store.has_vector_support():
            raise CapabilityUnavailable("Store has no vector support")

    async def _vector_candidates(self, query: str, limit: int) -> list[SearchResult]:
        embedding = await self._embedder.embed(query)
        rows = await self._store.search_vector(embedding, limit)
        return [self._vector_result(row) for row in rows]

    def _fallback_results(self, query: str, limit: int) -> list[SearchResult]:
        results = self._fallback_corpus.results(query, limit)
        if results:
            logger.info("No matches for '%s', serving %d fallback results", query[:50], len(results))
        return results

    @staticmethod
    def _keyword_result(row: dict[str, Any]) -> SearchResult:
        score = max(0.0, float(row.get("score") or 0.0))
        return SearchResult(
            doc_id=row["id"],
            title=row.get("title") or "",
            content=row.get("content") or "",
            bm25_score=score,
            vector_score=0.0,
            hybrid_score=score,
            metadata=row.get("metadata") or {},
            source="bm25",
        )

    @staticmethod
    def _vector_result(row: dict[str, Any]) -> SearchResult:
        # Negative cosine similarities clamp to 0
        score = max(0.0, float(row.get("score") or 0.0))
        return SearchResult(
            doc_id=row["id"],
            title=row.get("title") or "",
            content=row.get("content") or "",
            bm25_score=0.0,
            vector_score=score,
            hybrid_score=score,
            metadata=row.get("metadata") or {},
            source="vector",
        )
