"""
SQLite Adapter - Document store with FTS5 and vector similarity.
"""

from .repository import SQLiteRepository, build_match_expression

__all__ = ["SQLiteRepository", "build_match_expression"]
