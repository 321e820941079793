"""
Search Domain - Hybrid keyword and vector retrieval.

This domain handles:
- BM25 keyword search over SQLite FTS5
- Cosine similarity vector search
- Reciprocal Rank Fusion of both
- Document indexing
"""

from .contracts import DocumentStore, FallbackCorpus, SearchEngine
from .fallback_corpus import SAMPLE_DOCUMENTS, NoFallbackCorpus, StaticFallbackCorpus
from .fusion import DEFAULT_RRF_K, reciprocal_rank_fusion
from .hybrid_search import HybridSearchEngine, SearchStrategy
from .indexer import DocumentIndexer
from .models import (
    BatchIndexReport,
    DocumentInput,
    IndexOutcome,
    SearchMethod,
    SearchQuery,
    SearchResult,
    ServiceStats,
)
from .service import SearchService

__all__ = [
    # Contracts
    "SearchEngine",
    "DocumentStore",
    "FallbackCorpus",
    # Implementations
    "HybridSearchEngine",
    "SearchStrategy",
    "DocumentIndexer",
    "SearchService",
    "NoFallbackCorpus",
    "StaticFallbackCorpus",
    "SAMPLE_DOCUMENTS",
    "reciprocal_rank_fusion",
    "DEFAULT_RRF_K",
    # Models
    "SearchMethod",
    "SearchQuery",
    "SearchResult",
    "DocumentInput",
    "IndexOutcome",
    "BatchIndexReport",
    "ServiceStats",
]
