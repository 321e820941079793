"""
FusionSearch - Hybrid BM25 + vector document search with graceful degradation.

Example:
    >>> from fusionsearch.domains.search import SearchService
    >>> service = await SearchService.create()
    >>> results = await service.search("zero-copy forks")
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
