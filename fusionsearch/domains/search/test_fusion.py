"""
Tests for reciprocal rank fusion.
"""

from __future__ import annotations

import pytest

from .fusion import reciprocal_rank_fusion
from .models import SearchResult


def _bm25(doc_id: int, score: float = 1.0) -> SearchResult:
    return SearchResult(doc_id=doc_id, title=f"doc {doc_id}", content="", bm25_score=score, source="bm25")


def _vec(doc_id: int, score: float = 0.5) -> SearchResult:
    return SearchResult(doc_id=doc_id, title=f"doc {doc_id}", content="", vector_score=score, source="vector")


def test_first_in_both_beats_first_in_one() -> None:
    """Test A ranked 1st in both lists outranks B ranked 1st in only one."""
    fused = reciprocal_rank_fusion([_bm25(1), _bm25(2)], [_vec(1), _vec(3)], k=60)

    assert fused[0].doc_id == 1
    assert fused[0].hybrid_score == pytest.approx(2 / 61)
    assert fused[1].hybrid_score == pytest.approx(1 / 62)


def test_scores_are_summed_reciprocal_ranks() -> None:
    """Test a document at rank 1 and rank 3 scores 1/61 + 1/63."""
    fused = reciprocal_rank_fusion(
        [_bm25(7), _bm25(8), _bm25(9)],
        [_vec(9), _vec(8), _vec(7)],
    )
    by_id = {r.doc_id: r.hybrid_score for r in fused}

    assert by_id[7] == pytest.approx(1 / 61 + 1 / 63)
    assert by_id[8] == pytest.approx(2 / 62)


def test_only_candidates_from_inputs_appear() -> None:
    """Test the output is exactly the union of the inputs."""
    fused = reciprocal_rank_fusion([_bm25(1)], [_vec(2)], [])
    assert {r.doc_id for r in fused} == {1, 2}


def test_ties_break_by_ascending_doc_id() -> None:
    """Test equal fused scores order by doc_id."""
    fused = reciprocal_rank_fusion([_bm25(5)], [_vec(3)])
    assert [r.doc_id for r in fused] == [3, 5]


def test_limit_truncates() -> None:
    fused = reciprocal_rank_fusion([_bm25(i) for i in range(1, 11)], limit=3)
    assert [r.doc_id for r in fused] == [1, 2, 3]


def test_component_scores_are_carried() -> None:
    """Test fused results keep both component scores and are marked hybrid."""
    fused = reciprocal_rank_fusion([_bm25(1, score=4.2)], [_vec(1, score=0.9)])

    assert fused[0].bm25_score == pytest.approx(4.2)
    assert fused[0].vector_score == pytest.approx(0.9)
    assert fused[0].source == "hybrid"


def test_duplicate_in_one_list_counts_once() -> None:
    fused = reciprocal_rank_fusion([_bm25(1), _bm25(1)])
    assert fused[0].hybrid_score == pytest.approx(1 / 61)


def test_empty_inputs() -> None:
    assert reciprocal_rank_fusion([], []) == []


def test_negative_k_rejected() -> None:
    with pytest.raises(ValueError):
        reciprocal_rank_fusion([_bm25(1)], k=-1)
