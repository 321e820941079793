"""
Reciprocal Rank Fusion - Merge independently ranked result lists.

score(d) = sum over lists of 1 / (k + rank(d)), rank 1-based. A list
that does not contain d contributes nothing. k dampens the advantage of
the very top ranks.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import SearchResult

__all__ = ["DEFAULT_RRF_K", "reciprocal_rank_fusion"]

DEFAULT_RRF_K = 60


def reciprocal_rank_fusion(
    *ranked_lists: Sequence[SearchResult],
    k: int = DEFAULT_RRF_K,
    limit: int | None = None,
) -> list[SearchResult]:
    """
    Fuse ranked lists.

    Args:
        ranked_lists: Result lists, each best-first
        k: RRF smoothing constant
        limit: Maximum results to return (all if None)

    Returns:
        Union of the inputs sorted by fused score descending, ties by
        ascending doc_id. Each result keeps the best bm25/vector score
        seen for it and carries the fused score as hybrid_score.
    """
    if k < 0:
        raise ValueError("k must be non-negative")

    merged: dict[int, SearchResult] = {}
    scores: dict[int, float] = {}

    for results in ranked_lists:
        seen: set[int] = set()
        for rank, result in enumerate(results, 1):
            # Only the first occurrence in a list counts
            if result.doc_id in seen:
                continue
            seen.add(result.doc_id)

            scores[result.doc_id] = scores.get(result.doc_id, 0.0) + 1.0 / (k + rank)

            existing = merged.get(result.doc_id)
            if existing is None:
                merged[result.doc_id] = result
            else:
                merged[result.doc_id] = existing.model_copy(
                    update={
                        "bm25_score": max(existing.bm25_score, result.bm25_score),
                        "vector_score": max(existing.vector_score, result.vector_score),
                    }
                )

    ordered = sorted(scores, key=lambda doc_id: (-scores[doc_id], doc_id))
    if limit is not None:
        ordered = ordered[:limit]

    return [
        merged[doc_id].model_copy(update={"hybrid_score": scores[doc_id], "source": "hybrid"})
        for doc_id in ordered
    ]
