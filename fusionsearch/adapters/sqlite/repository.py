"""
SQLite Repository - Document storage with FTS5 and vector search.

Features:
- Async operations via aiosqlite
- Full-text search with FTS5 (BM25 ranking)
- Cosine similarity over float32 embeddings stored as BLOBs
- Vector capability check via schema introspection
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiosqlite
import numpy as np

from fusionsearch.config import CapabilityUnavailable, StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

__all__ = ["SQLiteRepository", "build_match_expression"]

_TERM_PATTERN = re.compile(r"\w+(?:[-']\w+)*")

_DOCUMENTS_TABLE = """
    CREATE TABLE IF NOT EXISTS documents (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        {embedding_column}
        metadata TEXT NOT NULL DEFAULT '{{}}',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
"""

_SEARCH_SCHEMA = """
    -- FTS5 virtual table for full-text search
    CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
        title,
        content,
        content='documents',
        content_rowid='id',
        tokenize='porter unicode61'
    );

    -- Triggers to keep FTS in sync
    CREATE TRIGGER IF NOT EXISTS documents_ai AFTER INSERT ON documents BEGIN
        INSERT INTO documents_fts(rowid, title, content)
        VALUES (new.id, new.title, new.content);
    END;

    CREATE TRIGGER IF NOT EXISTS documents_ad AFTER DELETE ON documents BEGIN
        INSERT INTO documents_fts(documents_fts, rowid, title, content)
        VALUES ('delete', old.id, old.title, old.content);
    END;

    CREATE TRIGGER IF NOT EXISTS documents_au AFTER UPDATE OF title, content ON documents BEGIN
        INSERT INTO documents_fts(documents_fts, rowid, title, content)
        VALUES ('delete', old.id, old.title, old.content);
        INSERT INTO documents_fts(rowid, title, content)
        VALUES (new.id, new.title, new.content);
    END;

    -- Store-side timestamp maintenance
    CREATE TRIGGER IF NOT EXISTS documents_touch AFTER UPDATE ON documents
    WHEN new.updated_at = old.updated_at BEGIN
        UPDATE documents SET updated_at = CURRENT_TIMESTAMP WHERE id = new.id;
    END;

    CREATE INDEX IF NOT EXISTS idx_documents_created ON documents(created_at);
"""


def build_match_expression(query: str) -> str | None:
    """
    Turn free text into an FTS5 MATCH expression.

    Every term is quoted so punctuation never reaches the FTS5 parser;
    hyphenated words become phrases ("copy-on-write" -> copy on write).
    Terms are OR-ed and BM25 rewards documents matching more of them.

    Returns:
        MATCH expression, or None when the query has no searchable terms
    """
    terms = _TERM_PATTERN.findall(query)
    if not terms:
        return None
    quoted = ['"' + term.replace('"', '""') + '"' for term in dict.fromkeys(terms)]
    return " OR ".join(quoted)


class SQLiteRepository:
    """
    SQLite repository for document storage.

    Example:
        >>> repo = SQLiteRepository("data/fusionsearch.db")
        >>> await repo.initialize()
        >>> doc_id = await repo.insert_document("Forks", "Copy-on-write...", embedding)
        >>> results = await repo.search_fts("copy-on-write")
    """

    def __init__(
        self,
        db_path: str | Path,
        dimension: int = 1536,
        enable_vectors: bool = True,
    ) -> None:
        """
        Initialize repository.

        Args:
            db_path: Path to SQLite database file (or ":memory:")
            dimension: Embedding dimension stored in the embedding column
            enable_vectors: Create the embedding column when bootstrapping schema
        """
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.dimension = dimension
        self.enable_vectors = enable_vectors
        self._connection: aiosqlite.Connection | None = None
        self._connect_lock = asyncio.Lock()

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get or create database connection."""
        async with self._connect_lock:
            if self._connection is None:
                self._connection = await aiosqlite.connect(str(self.db_path))
                self._connection.row_factory = aiosqlite.Row
        return self._connection

    async def initialize(self) -> None:
        """Initialize database schema."""
        conn = await self._get_connection()

        embedding_column = "embedding BLOB," if self.enable_vectors else ""
        await conn.executescript(
            _DOCUMENTS_TABLE.format(embedding_column=embedding_column) + _SEARCH_SCHEMA
        )
        await conn.commit()

        logger.info(
            "Database initialized: %s (vector support: %s)",
            self.db_path,
            await self.has_vector_support(),
        )

    async def has_vector_support(self) -> bool:
        """Inspect the schema for an embedding column."""
        conn = await self._get_connection()
        try:
            cursor = await conn.execute("PRAGMA table_info(documents)")
            columns = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.warning("Vector capability check failed: %s", e)
            return False
        return any(column["name"] == "embedding" for column in columns)

    async def insert_document(
        self,
        title: str,
        content: str,
        embedding: np.ndarray | Sequence[float] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Insert a document.

        The embedding is dropped when the store has no vector support.

        Returns:
            Document ID

        Raises:
            StoreWriteError: Insert failed or embedding has the wrong dimension
        """
        blob: bytes | None = None
        vector_column = await self.has_vector_support()

        if embedding is not None and vector_column:
            vector = np.asarray(embedding, dtype=np.float32)
            if vector.shape != (self.dimension,):
                raise StoreWriteError(
                    "Embedding dimension mismatch",
                    {"expected": self.dimension, "actual": list(vector.shape)},
                )
            blob = vector.tobytes()
        elif embedding is not None:
            logger.debug("Store has no embedding column, storing '%s' without vector", title[:50])

        try:
            conn = await self._get_connection()
            if vector_column:
                cursor = await conn.execute(
                    """
                    INSERT INTO documents (title, content, embedding, metadata)
                    VALUES (?, ?, ?, ?)
                    """,
                    (title, content, blob, json.dumps(metadata or {})),
                )
            else:
                cursor = await conn.execute(
                    "INSERT INTO documents (title, content, metadata) VALUES (?, ?, ?)",
                    (title, content, json.dumps(metadata or {})),
                )
            await conn.commit()
        except (aiosqlite.Error, TypeError, ValueError) as e:
            raise StoreWriteError(f"Failed to insert document: {e}", {"title": title}) from e

        return cursor.lastrowid

    async def get_document(self, doc_id: int) -> dict[str, Any] | None:
        """Get document by ID."""
        conn = await self._get_connection()

        cursor = await conn.execute(
            "SELECT id, title, content, metadata, created_at, updated_at FROM documents WHERE id = ?",
            (doc_id,),
        )
        row = await cursor.fetchone()

        if row:
            return self._row_to_dict(row)
        return None

    async def search_fts(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """
        Full-text search using FTS5.

        Args:
            query: Free-text search query
            limit: Maximum results

        Returns:
            Matching documents with non-negative BM25 scores, best first

        Raises:
            StoreReadError: The query failed
        """
        expression = build_match_expression(query)
        if expression is None:
            return []

        try:
            conn = await self._get_connection()
            cursor = await conn.execute(
                """
                SELECT d.id, d.title, d.content, d.metadata, -bm25(documents_fts) AS score
                FROM documents_fts
                JOIN documents d ON documents_fts.rowid = d.id
                WHERE documents_fts MATCH ?
                ORDER BY score DESC, d.id ASC
                LIMIT ?
                """,
                (expression, limit),
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreReadError(f"Full-text search failed: {e}", {"query": query}) from e

        results = []
        for row in rows:
            item = self._row_to_dict(row)
            item["score"] = max(0.0, float(row["score"] or 0.0))
            results.append(item)
        return results

    async def search_vector(
        self,
        embedding: np.ndarray | Sequence[float],
        limit: int = 10,
    ) -> list[dict[str, Any]]:
        """
        Rank stored documents by cosine similarity to an embedding.

        Returns:
            Documents with similarity scores, best first (ties by ascending id)

        Raises:
            CapabilityUnavailable: Store has no embedding column
            StoreReadError: The query failed
        """
        if not await self.has_vector_support():
            raise CapabilityUnavailable("Document store has no embedding column")

        query_vector = np.asarray(embedding, dtype=np.float32)
        if query_vector.shape != (self.dimension,):
            raise StoreReadError(
                "Query embedding dimension mismatch",
                {"expected": self.dimension, "actual": list(query_vector.shape)},
            )

        try:
            conn = await self._get_connection()
            cursor = await conn.execute(
                """
                SELECT id, title, content, metadata, embedding
                FROM documents
                WHERE embedding IS NOT NULL
                ORDER BY id ASC
                """
            )
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreReadError(f"Vector search failed: {e}") from e

        if not rows:
            return []

        return await asyncio.to_thread(self._rank_by_cosine, rows, query_vector, limit)

    def _rank_by_cosine(
        self,
        rows: Sequence[aiosqlite.Row],
        query_vector: np.ndarray,
        limit: int,
    ) -> list[dict[str, Any]]:
        """Score rows against the query (sync helper for to_thread)."""
        vectors = []
        candidates = []
        expected_bytes = self.dimension * 4
        for row in rows:
            blob = row["embedding"]
            if len(blob) != expected_bytes:
                logger.warning("Skipping document %s: stored embedding has wrong size", row["id"])
                continue
            vectors.append(np.frombuffer(blob, dtype=np.float32))
            candidates.append(row)

        if not vectors:
            return []

        matrix = np.vstack(vectors)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vector)
        dots = matrix @ query_vector
        similarities = np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)

        # Stable sort keeps ascending id order among equal similarities
        order = np.argsort(-similarities, kind="stable")[:limit]

        results = []
        for idx in order:
            item = self._row_to_dict(candidates[idx])
            item["score"] = float(similarities[idx])
            results.append(item)
        return results

    async def get_document_count(self) -> int:
        """Get total document count."""
        conn = await self._get_connection()
        cursor = await conn.execute("SELECT COUNT(*) FROM documents")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def clear_documents(self) -> int:
        """Delete every document. Returns the number removed."""
        conn = await self._get_connection()
        try:
            cursor = await conn.execute("DELETE FROM documents")
            await conn.commit()
        except aiosqlite.Error as e:
            raise StoreWriteError(f"Failed to clear documents: {e}") from e
        logger.info("Cleared %d documents", cursor.rowcount)
        return cursor.rowcount

    @staticmethod
    def _row_to_dict(row: aiosqlite.Row) -> dict[str, Any]:
        """Convert a row to a dict with decoded metadata."""
        item = {key: row[key] for key in row.keys() if key != "embedding"}
        raw = item.get("metadata")
        try:
            item["metadata"] = json.loads(raw) if raw else {}
        except json.JSONDecodeError:
            logger.warning("Document %s has malformed metadata", item.get("id"))
            item["metadata"] = {}
        return item

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
