"""
Embedding Contracts - Interfaces for embedding domain.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Embedder(Protocol):
    """Contract for anything that turns text into a fixed-size vector."""

    dimension: int

    async def embed(self, text: str, timeout: float | None = None) -> np.ndarray:
        """Embed text. Never fails for non-empty input."""
        ...


@runtime_checkable
class EmbeddingStrategy(Protocol):
    """One step in the embedding fallback chain."""

    name: str

    async def embed(self, text: str, timeout: float | None = None) -> np.ndarray:
        """
        Embed text or raise a ProviderError so the next strategy runs.

        Args:
            text: Non-empty input text
            timeout: Optional deadline for remote calls, in seconds
        """
        ...
