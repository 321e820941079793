"""
Fallback corpora - What keyword search returns when it finds nothing.

The default policy returns nothing. StaticFallbackCorpus serves a curated
set of sample documents, ranked by query term overlap, for demos against
an empty store.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import DocumentInput, SearchResult

__all__ = ["SAMPLE_DOCUMENTS", "NoFallbackCorpus", "StaticFallbackCorpus"]

_TERM_RE = re.compile(r"\w+")

SAMPLE_DOCUMENTS: tuple[DocumentInput, ...] = (
    DocumentInput(
        title="Introduction to Zero-Copy Database Forks",
        content=(
            "Zero-copy forks create an instant copy of a database without duplicating data. "
            "Copy-on-write (COW) storage keeps only the changed pages separately, so a fork "
            "can be used to experiment safely without affecting production. Typical uses are "
            "testing schema migrations, running analytics queries and staging environments."
        ),
        metadata={"category": "tiger-cloud", "topic": "forks"},
    ),
    DocumentInput(
        title="Hybrid Search with BM25 and Vectors",
        content=(
            "Hybrid search combines BM25 keyword matching with vector similarity for semantic "
            "understanding. BM25 is a probabilistic ranking function that excels at exact "
            "keyword matches. Vector search uses embeddings to find related content even when "
            "different words are used. Reciprocal Rank Fusion (RRF) merges both result lists."
        ),
        metadata={"category": "search", "topic": "hybrid-search"},
    ),
    DocumentInput(
        title="Database Index Optimization Strategies",
        content=(
            "Indexes are crucial for query performance. B-tree indexes suit range queries and "
            "sorting, hash indexes suit equality comparisons, and GIN indexes suit full-text "
            "search. Vector indexes such as IVFFlat and HNSW enable approximate nearest "
            "neighbor search. Analyze query patterns first: indexes cost storage and slow writes."
        ),
        metadata={"category": "database", "topic": "optimization"},
    ),
    DocumentInput(
        title="PostgreSQL Full-Text Search Configuration",
        content=(
            "PostgreSQL provides full-text search through the tsvector and tsquery types. "
            "ts_rank scores relevance from term frequency and position. Custom text search "
            "configurations handle other languages and domain vocabularies, and GIN indexes "
            "on tsvector columns speed up full-text search on large datasets."
        ),
        metadata={"category": "postgresql", "topic": "full-text-search"},
    ),
    DocumentInput(
        title="Multi-Agent Systems for Database Operations",
        content=(
            "Multi-agent systems split database work between specialized agents. An ETL agent "
            "loads data, a search agent retrieves context, an analyst agent produces "
            "recommendations and a DBA agent applies optimizations. A merge agent brings "
            "validated changes back to production."
        ),
        metadata={"category": "ai", "topic": "multi-agent"},
    ),
)


def _terms(text: str) -> set[str]:
    return {t.lower() for t in _TERM_RE.findall(text)}


class NoFallbackCorpus:
    """Empty keyword results stay empty."""

    def results(self, query: str, limit: int) -> list[SearchResult]:
        return []


class StaticFallbackCorpus:
    """
    Serve fixed documents when the store has no keyword match.

    Documents are ranked by the number of distinct query terms they share
    with the query, ties in corpus order. Synthetic IDs are negative so
    they never collide with stored documents.
    """

    def __init__(self, documents: Sequence[DocumentInput] = SAMPLE_DOCUMENTS) -> None:
        self._documents = list(documents)
        self._terms = [_terms(f"{d.title} {d.content}") for d in self._documents]

    def results(self, query: str, limit: int) -> list[SearchResult]:
        query_terms = _terms(query)
        scored = [
            (len(query_terms & terms), position)
            for position, terms in enumerate(self._terms)
        ]
        scored.sort(key=lambda item: (-item[0], item[1]))

        results = []
        for overlap, position in scored[:limit]:
            document = self._documents[position]
            results.append(
                SearchResult(
                    doc_id=-(position + 1),
                    title=document.title,
                    content=document.content,
                    bm25_score=float(overlap),
                    hybrid_score=float(overlap),
                    metadata=dict(document.metadata),
                    source="fallback",
                )
            )
        return results
