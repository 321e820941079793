"""
Document Indexer - Embed and persist documents.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from fusionsearch.config import ErrorCode, FusionSearchError
from fusionsearch.domains.embedding.contracts import Embedder

from .contracts import DocumentStore
from .models import BatchIndexReport, DocumentInput, IndexOutcome

logger = logging.getLogger(__name__)

__all__ = ["DocumentIndexer"]


class DocumentIndexer:
    """
    Index documents into the store.

    Batches run concurrently within a batch and sequentially across
    batches, with a pause in between to stay gentle on the provider.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: Embedder,
        batch_size: int = 10,
        batch_delay_seconds: float = 0.1,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._store = store
        self._embedder = embedder
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self._sleep = sleep

    async def index_document(
        self,
        title: str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        """
        Index a single document.

        Returns:
            The new document ID

        Raises:
            ValidationError: Empty content
            StoreWriteError: The store rejected the row
        """
        document = DocumentInput(title=title, content=content, metadata=metadata or {})
        return await self._index(document)

    async def batch_index(
        self,
        documents: Sequence[DocumentInput | Mapping[str, Any]],
    ) -> BatchIndexReport:
        """
        Index many documents; per-item failures are recorded, not raised.

        Returns:
            Report with one outcome per input, in input order
        """
        items = list(documents)
        outcomes: list[IndexOutcome] = []

        for start in range(0, len(items), self.batch_size):
            if start:
                await self._sleep(self.batch_delay_seconds)
            batch = items[start : start + self.batch_size]
            outcomes.extend(
                await asyncio.gather(
                    *(self._index_item(start + offset, item) for offset, item in enumerate(batch))
                )
            )

        report = BatchIndexReport(outcomes=outcomes)
        logger.info(
            "Batch index complete: %d indexed, %d failed",
            len(report.document_ids),
            len(report.failures),
        )
        return report

    async def _index(self, document: DocumentInput) -> int:
        embedding = await self._embedder.embed(f"{document.title}\n\n{document.content}")
        if not await self._store.has_vector_support():
            embedding = None

        doc_id = await self._store.insert_document(
            document.title,
            document.content,
            embedding,
            document.metadata,
        )
        logger.info("Document indexed with ID: %d", doc_id)
        return doc_id

    async def _index_item(
        self,
        position: int,
        item: DocumentInput | Mapping[str, Any],
    ) -> IndexOutcome:
        title = ""
        try:
            if isinstance(item, DocumentInput):
                title = item.title
            elif isinstance(item, Mapping):
                title = str(item.get("title") or "")
            document = item if isinstance(item, DocumentInput) else DocumentInput.model_validate(item)
            doc_id = await self._index(document)
        except ValidationError as e:
            logger.warning("Skipping document %d: invalid input", position)
            return IndexOutcome(
                position=position, title=title, error_code="VALIDATION_ERROR", error=str(e)
            )
        except FusionSearchError as e:
            logger.warning("Failed to index document %d (%s): %s", position, title[:50], e.message)
            return IndexOutcome(
                position=position, title=title, error_code=e.code.value, error=e.message
            )
        except Exception as e:
            logger.exception("Unexpected error indexing document %d (%s)", position, title[:50])
            return IndexOutcome(
                position=position,
                title=title,
                error_code=ErrorCode.INTERNAL_ERROR.value,
                error=str(e) or type(e).__name__,
            )
        return IndexOutcome(position=position, title=title, doc_id=doc_id)
