"""
Tests for deterministic fallback embeddings.
"""

from __future__ import annotations

import numpy as np
import pytest

from fusionsearch.config import EmptyInputError

from .fallback import DeterministicEmbeddingStrategy, deterministic_embedding


def test_shape_dtype_and_unit_norm() -> None:
    """Test output has the requested dimension and unit length."""
    vector = deterministic_embedding("hello world", 1536)

    assert vector.shape == (1536,)
    assert vector.dtype == np.float32
    assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-5)


def test_same_text_same_vector() -> None:
    """Test determinism, including normalization of case and whitespace."""
    first = deterministic_embedding("hello world")
    second = deterministic_embedding("hello world")
    third = deterministic_embedding("  HELLO WORLD ")

    np.testing.assert_array_equal(first, second)
    np.testing.assert_array_equal(first, third)


def test_different_text_different_vector() -> None:
    """Test distinct texts do not collide."""
    assert not np.array_equal(
        deterministic_embedding("zero-copy forks"),
        deterministic_embedding("database indexes"),
    )


def test_long_text_is_bounded() -> None:
    """Test very long text still produces a unit vector."""
    vector = deterministic_embedding("fork " * 5000, 64)
    assert vector.shape == (64,)
    assert np.linalg.norm(vector) == pytest.approx(1.0, abs=1e-5)


def test_keyword_bias_changes_vector() -> None:
    """Test domain keywords nudge the vector."""
    with_bias = deterministic_embedding("fork", 32)
    without_bias = deterministic_embedding("fork", 32, keywords=())
    assert not np.array_equal(with_bias, without_bias)


def test_empty_text_rejected() -> None:
    """Test whitespace-only input is refused."""
    with pytest.raises(EmptyInputError):
        deterministic_embedding("   ")


async def test_strategy_matches_function() -> None:
    """Test the strategy wraps the pure function."""
    strategy = DeterministicEmbeddingStrategy(dimension=16)
    vector = await strategy.embed("hybrid search")

    assert strategy.name == "deterministic"
    np.testing.assert_array_equal(vector, deterministic_embedding("hybrid search", 16))
