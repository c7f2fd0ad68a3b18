"""Ingestion orchestration — fetch → chunk → embed → replace.

Every :meth:`IngestionPipeline.enqueue` call rebuilds a document's chunk
set from scratch:

    1. fetch the document
    2. chunk its segments
    3. no chunks → delete stored chunks and stop (document record untouched)
    4. upsert the document record
    5. embed all chunks in one batch; count must match
    6. build chunk records with fresh ids
    7. delete old chunks, then upsert the new ones

Steps 3–7 hold a per-document lock, so concurrent ingestions of the same
document run one after the other.  Between the delete and the upsert in
step 7 the document briefly has no searchable chunks.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from gdocs_vector.errors import EmbeddingCountMismatchError, IngestionRequestError
from gdocs_vector.ingestion.chunker import DocumentChunk, chunk_segments
from gdocs_vector.ingestion.embedder import EmbeddingProvider
from gdocs_vector.ingestion.google_docs import DocumentFetcher
from gdocs_vector.ingestion.models import DocumentContent, IngestionRequest, IngestionResult
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument

logger = logging.getLogger(__name__)

SOURCE_GOOGLE_DOCS = "google-docs"


def build_google_doc_url(document_id: str) -> str:
    return f"https://docs.google.com/document/d/{document_id}/edit"


class KeyedLock:
    """One mutex per key; entries are dropped once no thread holds or waits on them."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, tuple[threading.Lock, int]] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock, users = self._locks.get(key, (threading.Lock(), 0))
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._guard:
                lock, users = self._locks[key]
                if users <= 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class IngestionPipeline:
    """Keeps the vector store in sync with one Google Doc per call.

    Parameters
    ----------
    fetcher:
        Source of document content.
    embeddings:
        Embedding provider used for all chunks of a document.
    store:
        Destination vector store.
    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        embeddings: EmbeddingProvider,
        store: VectorStoreBase,
    ) -> None:
        self._fetcher = fetcher
        self._embeddings = embeddings
        self._store = store
        self._locks = KeyedLock()

    def enqueue(self, request: IngestionRequest) -> IngestionResult:
        """Run one full ingestion cycle for ``request.file_id``.

        Raises
        ------
        IngestionRequestError
            When the request carries no file id.
        EmbeddingCountMismatchError
            When the provider returns a different number of vectors than
            chunks; nothing is deleted or written in that case.
        """
        if not request.file_id:
            raise IngestionRequestError("Ingestion request missing fileId")

        logger.info("Ingesting document %s (state=%s)", request.file_id, request.resource_state)
        document = self._fetcher.fetch_document(request.file_id)
        chunks = chunk_segments(document.segments)

        with self._locks.hold(document.document_id):
            if not chunks:
                logger.warning("No ingestible text found for document %s", document.document_id)
                self._store.delete_document_chunks(document.document_id)
                return IngestionResult(document_id=document.document_id, chunk_count=0)

            source_uri = build_google_doc_url(document.document_id)
            base_metadata = {
                "revisionId": document.revision_id,
                "version": document.version,
                "modifiedTime": document.modified_time,
                "sourceUri": source_uri,
            }

            self._store.upsert_document(
                VectorStoreDocument(
                    document_id=document.document_id,
                    title=document.title,
                    source=SOURCE_GOOGLE_DOCS,
                    metadata=base_metadata,
                )
            )

            vectors = self._embeddings.embed_text([chunk.content for chunk in chunks])
            if len(vectors) != len(chunks):
                raise EmbeddingCountMismatchError(
                    len(chunks), len(vectors), context=f"document {document.document_id}"
                )

            records = [
                self._build_record(document, chunk, vector, base_metadata)
                for chunk, vector in zip(chunks, vectors)
            ]

            self._store.delete_document_chunks(document.document_id)
            self._store.upsert_chunks(records)

        logger.info("Ingested document %s: %d chunks", document.document_id, len(records))
        return IngestionResult(document_id=document.document_id, chunk_count=len(records))

    @staticmethod
    def _build_record(
        document: DocumentContent,
        chunk: DocumentChunk,
        vector: list[float],
        base_metadata: dict[str, Any],
    ) -> VectorStoreChunk:
        heading = chunk.heading
        heading_uri = (
            f"{base_metadata['sourceUri']}#heading={heading.id}" if heading is not None and heading.id else None
        )
        return VectorStoreChunk(
            document_id=document.document_id,
            chunk_id=str(uuid.uuid4()),
            content=chunk.content,
            source=SOURCE_GOOGLE_DOCS,
            ordering=chunk.ordering,
            embedding=vector,
            metadata={
                **base_metadata,
                "heading": heading.model_dump() if heading is not None else None,
                "headingUri": heading_uri,
            },
        )
