"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from fusionsearch.domains.embedding.models import EmbeddingStats


class SearchMethod(str, Enum):
    """Ranking method requested by the caller."""

    BM25 = "bm25"
    VECTOR = "vector"
    HYBRID = "hybrid"


MAX_SEARCH_LIMIT = 100


class SearchQuery(BaseModel):
    """Search request."""

    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=MAX_SEARCH_LIMIT)
    method: SearchMethod = SearchMethod.HYBRID

    model_config = {"frozen": True}


class SearchResult(BaseModel):
    """Single search result."""

    doc_id: int
    title: str
    content: str
    bm25_score: float = Field(default=0.0, ge=0.0)
    vector_score: float = Field(default=0.0, ge=0.0)
    hybrid_score: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)
    source: str = "unknown"  # "bm25", "vector", "hybrid", "fallback"


class DocumentInput(BaseModel):
    """Document to index."""

    title: str = ""
    content: str = Field(..., min_length=1)
    metadata: dict[str, Any] = Field(default_factory=dict)


class IndexOutcome(BaseModel):
    """Result of indexing one document in a batch."""

    position: int
    title: str = ""
    doc_id: int | None = None
    error_code: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.doc_id is not None


class BatchIndexReport(BaseModel):
    """Per-item results of a batch index run, in input order."""

    outcomes: list[IndexOutcome] = Field(default_factory=list)

    @property
    def document_ids(self) -> list[int]:
        """IDs of successfully indexed documents, in input order."""
        return [o.doc_id for o in self.outcomes if o.doc_id is not None]

    @property
    def failures(self) -> list[IndexOutcome]:
        return [o for o in self.outcomes if not o.ok]


class ServiceStats(BaseModel):
    """Operational snapshot of the search service."""

    documents: int
    vector_support: bool
    embedding: EmbeddingStats
