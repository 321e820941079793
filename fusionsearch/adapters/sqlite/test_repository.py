"""Tests for SQLite Repository."""

from pathlib import Path

import numpy as np
import pytest

from fusionsearch.config import CapabilityUnavailable, StoreWriteError

from .repository import SQLiteRepository, build_match_expression

DIM = 8


def _unit(*values: float) -> np.ndarray:
    vector = np.zeros(DIM, dtype=np.float32)
    vector[: len(values)] = values
    return vector / np.linalg.norm(vector)


@pytest.fixture
async def repo(tmp_path: Path):
    """Create a test repository with temporary database."""
    repo = SQLiteRepository(tmp_path / "test.db", dimension=DIM)
    await repo.initialize()
    yield repo
    await repo.close()


@pytest.fixture
async def plain_repo(tmp_path: Path):
    """Repository created without vector capability."""
    repo = SQLiteRepository(tmp_path / "plain.db", dimension=DIM, enable_vectors=False)
    await repo.initialize()
    yield repo
    await repo.close()


def test_build_match_expression_quotes_terms() -> None:
    """Test hyphenated terms become quoted phrases and duplicates collapse."""
    assert build_match_expression("copy-on-write") == '"copy-on-write"'
    assert build_match_expression("fork fork index") == '"fork" OR "index"'


def test_build_match_expression_without_terms() -> None:
    """Test punctuation-only queries produce no expression."""
    assert build_match_expression("  ?!- ") is None


async def test_initialize_creates_tables(repo: SQLiteRepository):
    """Test that initialize creates all required tables."""
    conn = await repo._get_connection()
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    tables = {row[0] for row in await cursor.fetchall()}

    assert "documents" in tables
    assert "documents_fts" in tables


async def test_vector_capability_check(repo: SQLiteRepository, plain_repo: SQLiteRepository):
    """Test the check reflects whether the embedding column exists."""
    assert await repo.has_vector_support() is True
    assert await plain_repo.has_vector_support() is False


async def test_insert_and_get_document(repo: SQLiteRepository):
    """Test inserting and retrieving a document."""
    doc_id = await repo.insert_document(
        title="Zero-Copy Forks",
        content="Forks allow copy-on-write database branching",
        embedding=_unit(1.0),
        metadata={"topic": "forks"},
    )

    assert doc_id > 0

    doc = await repo.get_document(doc_id)
    assert doc is not None
    assert doc["title"] == "Zero-Copy Forks"
    assert doc["metadata"] == {"topic": "forks"}
    assert doc["created_at"] is not None
    assert "embedding" not in doc


async def test_insert_rejects_wrong_dimension(repo: SQLiteRepository):
    """Test a mis-sized embedding is a write error."""
    with pytest.raises(StoreWriteError):
        await repo.insert_document("Bad", "vector", embedding=np.ones(DIM + 1))


async def test_insert_without_vector_support_drops_embedding(plain_repo: SQLiteRepository):
    """Test the embedding is ignored when the store has no vector column."""
    doc_id = await plain_repo.insert_document("Plain", "text only", embedding=_unit(1.0))
    assert await plain_repo.get_document(doc_id) is not None


async def test_search_fts(repo: SQLiteRepository):
    """Test full-text search."""
    await repo.insert_document(
        title="Zero-Copy Forks",
        content="Forks allow copy-on-write database branching",
    )
    await repo.insert_document(
        title="Indexes",
        content="B-tree indexes work well for range queries.",
    )
    await repo.insert_document(title="Vectors", content="Embeddings capture meaning.")

    results = await repo.search_fts("copy-on-write", limit=5)
    assert len(results) == 1
    assert results[0]["title"] == "Zero-Copy Forks"
    assert results[0]["score"] > 0


async def test_search_fts_ranks_more_matches_higher(repo: SQLiteRepository):
    """Test documents matching more query terms rank first."""
    await repo.insert_document("Only forks", "forks are cheap")
    await repo.insert_document("Forks and indexes", "forks need indexes")
    await repo.insert_document("Vectors", "embeddings capture meaning")
    await repo.insert_document("Search", "ranking by relevance")

    results = await repo.search_fts("forks indexes")
    assert [r["title"] for r in results][0] == "Forks and indexes"
    scores = [r["score"] for r in results]
    assert scores == sorted(scores, reverse=True)


async def test_search_empty_query(repo: SQLiteRepository):
    """Test search with empty results."""
    assert await repo.search_fts("nonexistent_term_xyz") == []
    assert await repo.search_fts("---") == []


async def test_search_vector_orders_by_similarity(repo: SQLiteRepository):
    """Test cosine ranking, best first."""
    near = await repo.insert_document("Near", "a", embedding=_unit(1.0, 0.1))
    far = await repo.insert_document("Far", "b", embedding=_unit(0.0, 1.0))
    await repo.insert_document("No vector", "c")

    results = await repo.search_vector(_unit(1.0), limit=10)

    assert [r["id"] for r in results] == [near, far]
    assert results[0]["score"] == pytest.approx(float(_unit(1.0, 0.1)[0]), rel=1e-5)
    assert results[1]["score"] == pytest.approx(0.0, abs=1e-6)


async def test_search_vector_ties_break_by_id(repo: SQLiteRepository):
    """Test equal similarities keep ascending id order."""
    first = await repo.insert_document("One", "a", embedding=_unit(1.0))
    second = await repo.insert_document("Two", "b", embedding=_unit(1.0))

    results = await repo.search_vector(_unit(1.0), limit=2)
    assert [r["id"] for r in results] == [first, second]


async def test_search_vector_without_capability(plain_repo: SQLiteRepository):
    """Test vector search raises when the store lacks the embedding column."""
    with pytest.raises(CapabilityUnavailable):
        await plain_repo.search_vector(_unit(1.0))


async def test_get_document_count_and_clear(repo: SQLiteRepository):
    """Test document count and clearing."""
    assert await repo.get_document_count() == 0

    await repo.insert_document(title="doc1", content="Content 1")
    await repo.insert_document(title="doc2", content="Content 2")
    assert await repo.get_document_count() == 2

    assert await repo.clear_documents() == 2
    assert await repo.get_document_count() == 0
    assert await repo.search_fts("Content") == []
