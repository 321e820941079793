"""
CLI Interface - Command-line tools for FusionSearch.

Provides commands for:
- Store initialization and seeding
- Document indexing
- Search queries
- Embedding inspection
"""

from .main import app, main

__all__ = ["app", "main"]
