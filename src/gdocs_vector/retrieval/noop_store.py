"""Degraded-mode store used when no backend is configured or reachable."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult

logger = logging.getLogger(__name__)


class NoopVectorStore(VectorStoreBase):
    """Accepts writes as logged no-ops and answers every query with nothing.

    Dimension validation still applies, so callers see the same errors
    they would against a live store.
    """

    def upsert_document(self, document: VectorStoreDocument) -> None:
        logger.warning("Vector store not configured; skipping document %s", document.document_id)

    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        self.validate_chunks(chunks)
        logger.warning("Vector store not configured; skipping %d chunks", len(chunks))

    def delete_document_chunks(self, document_id: str) -> None:
        logger.warning("Vector store not configured; cannot delete chunks for document %s", document_id)

    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        self.validate_query(vector)
        logger.warning("Vector store not configured; returning no results.")
        return []

    def health_check(self) -> bool:
        return False
