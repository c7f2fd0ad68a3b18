"""In-memory fakes for the store, embedding, and fetcher interfaces."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from gdocs_vector.ingestion.embedder import EmbeddingProvider
from gdocs_vector.ingestion.google_docs import DocumentFetcher
from gdocs_vector.ingestion.models import DocumentContent, DocumentHeading, DocumentSegment
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult


class RecordingVectorStore(VectorStoreBase):
    """Keeps records in dicts and logs every call in order."""

    def __init__(self, embedding_dimensions: int = 3, hits: list[VectorStoreQueryResult] | None = None) -> None:
        super().__init__(embedding_dimensions)
        self.calls: list[tuple[str, Any]] = []
        self.documents: dict[str, VectorStoreDocument] = {}
        self.chunks: dict[str, VectorStoreChunk] = {}
        self._hits = hits or []

    def upsert_document(self, document: VectorStoreDocument) -> None:
        self.calls.append(("upsert_document", document))
        self.documents[document.document_id] = document

    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        self.validate_chunks(chunks)
        self.calls.append(("upsert_chunks", list(chunks)))
        for chunk in chunks:
            self.chunks[chunk.chunk_id] = chunk

    def delete_document_chunks(self, document_id: str) -> None:
        self.calls.append(("delete_document_chunks", document_id))
        self.chunks = {k: c for k, c in self.chunks.items() if c.document_id != document_id}

    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        self.validate_query(vector)
        self.calls.append(("query_by_vector", (list(vector), limit)))
        return self._hits[:limit]

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def chunks_for(self, document_id: str) -> list[VectorStoreChunk]:
        return sorted(
            (c for c in self.chunks.values() if c.document_id == document_id), key=lambda c: c.ordering
        )


class FixedEmbeddingProvider(EmbeddingProvider):
    """Returns canned vectors, or a constant vector per input."""

    def __init__(self, dimension: int = 3, vectors: list[list[float]] | None = None) -> None:
        super().__init__(dimension)
        self.vectors = vectors
        self.calls: list[list[str]] = []

    def embed_text(self, inputs: Sequence[str]) -> list[list[float]]:
        self.calls.append(list(inputs))
        if self.vectors is not None:
            return self.vectors
        return [[0.5] * self.dimension for _ in inputs]


class StaticFetcher(DocumentFetcher):
    """Serves pre-built documents by id."""

    def __init__(self, documents: dict[str, DocumentContent]) -> None:
        self.documents = documents
        self.requested: list[str] = []

    def fetch_document(self, file_id: str) -> DocumentContent:
        self.requested.append(file_id)
        return self.documents[file_id]


def make_document(document_id: str = "doc-1", segments: list[DocumentSegment] | None = None) -> DocumentContent:
    segments = segments if segments is not None else [
        DocumentSegment(text="Intro text"),
        DocumentSegment(text="Setup", heading=DocumentHeading(level=1, text="Setup", id="h.abc")),
        DocumentSegment(text="Install the package and run it."),
    ]
    return DocumentContent(
        document_id=document_id,
        title="Runbook",
        revision_id="rev-7",
        version="42",
        modified_time="2026-10-01T12:00:00Z",
        text="\n\n".join(s.text for s in segments),
        segments=segments,
    )
