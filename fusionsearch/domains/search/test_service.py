"""
Tests for the search service facade.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from fusionsearch.config import Settings

from .fallback_corpus import SAMPLE_DOCUMENTS
from .models import SearchMethod
from .service import SearchService

DIM = 64


def _settings(tmp_path: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "db_path": tmp_path / "service.db",
        "openai_api_key": "",
        "embedding_dimension": DIM,
        "index_batch_delay_seconds": 0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
async def service(tmp_path: Path) -> AsyncGenerator[SearchService, None]:
    service = await SearchService.create(_settings(tmp_path))
    yield service
    await service.close()


async def test_seed_and_search_all_methods(service: SearchService) -> None:
    """Test the sample corpus is searchable with every method."""
    report = await service.batch_index(SAMPLE_DOCUMENTS)
    assert len(report.document_ids) == len(SAMPLE_DOCUMENTS)

    for method in SearchMethod:
        results = await service.search("zero-copy forks", method=method, limit=3)
        assert results, method
        assert len(results) <= 3

    keyword = await service.search("copy-on-write", method="bm25")
    assert keyword[0].title == "Introduction to Zero-Copy Database Forks"


async def test_blank_query_returns_empty(service: SearchService) -> None:
    assert await service.search("  ") == []


@pytest.mark.parametrize("limit", [200, 0, -1])
async def test_out_of_range_limit_is_clamped(service: SearchService, limit: int) -> None:
    """Test searches return a list instead of raising on bad limits."""
    await service.index_document("Zero-Copy Forks", "copy-on-write branching")

    results = await service.search("copy-on-write", method="bm25", limit=limit)

    assert isinstance(results, list)
    assert len(results) == 1


async def test_unknown_method_uses_hybrid(service: SearchService) -> None:
    await service.index_document("Zero-Copy Forks", "copy-on-write branching")

    results = await service.search("copy-on-write", method="fuzzy")

    assert [r.source for r in results] == ["hybrid"]


async def test_index_document_and_stats(service: SearchService) -> None:
    doc_id = await service.index_document("Zero-Copy Forks", "copy-on-write branching", {"a": 1})
    await service.embed("copy-on-write")

    stats = await service.stats()

    assert doc_id > 0
    assert stats.documents == 1
    assert stats.vector_support is True
    assert stats.embedding.dimension == DIM
    assert stats.embedding.provider_configured is False
    assert stats.embedding.rate_limit is None


async def test_embed_uses_configured_dimension(service: SearchService) -> None:
    vector = await service.embed("hello world")
    assert vector.shape == (DIM,)


async def test_sample_fallback_on_empty_store(tmp_path: Path) -> None:
    """Test the opt-in fallback corpus answers when nothing matches."""
    async with await SearchService.create(_settings(tmp_path, search_sample_fallback=True)) as service:
        results = await service.search("hybrid search", method="bm25", limit=2)

    assert [r.source for r in results] == ["fallback", "fallback"]


async def test_no_fallback_by_default(service: SearchService) -> None:
    assert await service.search("hybrid search", method="hybrid") == []


async def test_vector_search_disabled_store(tmp_path: Path) -> None:
    """Test a store built without vectors still answers vector queries."""
    settings = _settings(tmp_path, enable_vector_search=False)
    async with await SearchService.create(settings) as service:
        await service.index_document("Zero-Copy Forks", "copy-on-write branching")
        results = await service.search("copy-on-write", method="vector")
        stats = await service.stats()

    assert [r.source for r in results] == ["bm25"]
    assert stats.vector_support is False
