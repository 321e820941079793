"""
Deterministic Embeddings - Local, reproducible vectors with no external calls.

Used when no provider credential is configured or the provider fails.
The vectors carry little semantics; what matters is that the same text
always maps to the same unit-length vector.
"""

from __future__ import annotations

import asyncio
import zlib

import numpy as np

from fusionsearch.config import EmptyInputError

__all__ = ["DOMAIN_KEYWORDS", "DeterministicEmbeddingStrategy", "deterministic_embedding"]

# Substrings that nudge a few dimensions so on-topic texts land closer together
DOMAIN_KEYWORDS: tuple[str, ...] = (
    "database",
    "search",
    "vector",
    "fork",
    "index",
    "query",
    "postgres",
    "embedding",
)

MAX_CHARS = 4096
_CHUNK = 512
_PHASE_STEP = 0.01
_SCALE = 0.01
_GOLDEN = 1.618033988749895
_KEYWORD_BIAS = 25.0
_KEYWORD_SPAN = 8


def deterministic_embedding(
    text: str,
    dimension: int = 1536,
    keywords: tuple[str, ...] = DOMAIN_KEYWORDS,
) -> np.ndarray:
    """
    Compute a reproducible unit vector for text.

    Each dimension accumulates the character codes of the normalized text,
    weighted by a periodic function of (position x dimension). The totals
    are folded into [-1, 1] with two out-of-phase periodic functions and
    the vector is L2-normalized.

    Args:
        text: Input text (normalized by trimming and lower-casing)
        dimension: Output dimension
        keywords: Domain substrings that add a small bias

    Returns:
        float32 vector of shape (dimension,) with unit norm
    """
    normalized = text.strip().lower()[:MAX_CHARS]
    if not normalized:
        raise EmptyInputError("Cannot embed empty text")

    codes = np.fromiter((ord(c) for c in normalized), dtype=np.float64, count=len(normalized))
    dims = np.arange(1, dimension + 1, dtype=np.float64)
    accumulated = np.zeros(dimension, dtype=np.float64)

    for start in range(0, len(codes), _CHUNK):
        chunk = codes[start : start + _CHUNK]
        positions = np.arange(start + 1, start + 1 + len(chunk), dtype=np.float64)
        accumulated += np.cos(np.outer(dims, positions) * _PHASE_STEP) @ chunk

    for keyword in keywords:
        if keyword in normalized:
            offset = zlib.crc32(keyword.encode()) % dimension
            accumulated[(offset + np.arange(_KEYWORD_SPAN)) % dimension] += _KEYWORD_BIAS

    scaled = accumulated * _SCALE
    vector = (np.sin(scaled) + np.cos(scaled * _GOLDEN)) / 2

    norm = np.linalg.norm(vector)
    if norm == 0:
        vector = np.zeros(dimension, dtype=np.float64)
        vector[0] = 1.0
    else:
        vector = vector / norm

    return vector.astype(np.float32)


class DeterministicEmbeddingStrategy:
    """Last step of the embedding chain. Never fails for non-empty text."""

    name = "deterministic"

    def __init__(
        self,
        dimension: int = 1536,
        keywords: tuple[str, ...] = DOMAIN_KEYWORDS,
    ) -> None:
        self.dimension = dimension
        self.keywords = keywords

    async def embed(self, text: str, timeout: float | None = None) -> np.ndarray:
        """Compute the deterministic embedding off the event loop (timeout is unused)."""
        return await asyncio.to_thread(deterministic_embedding, text, self.dimension, self.keywords)
