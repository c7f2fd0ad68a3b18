"""
Ingestion — Google Docs fetching, chunking, embedding, and replacement of
a document's chunk set in the vector store.

Public surface
--------------
- :func:`chunk_segments` — split document segments into overlapping chunks.
- :class:`EmbeddingProvider` — ordered text → vector contract.
- :class:`IngestionPipeline` — fetch → chunk → embed → replace orchestration.
"""

from gdocs_vector.ingestion.chunker import DocumentChunk, chunk_segments
from gdocs_vector.ingestion.embedder import EmbeddingProvider, create_embedding_provider
from gdocs_vector.ingestion.models import (
    DocumentContent,
    DocumentHeading,
    DocumentSegment,
    IngestionRequest,
    IngestionResult,
)
from gdocs_vector.ingestion.pipeline import IngestionPipeline

__all__ = [
    "DocumentChunk",
    "DocumentContent",
    "DocumentHeading",
    "DocumentSegment",
    "EmbeddingProvider",
    "IngestionPipeline",
    "IngestionRequest",
    "IngestionResult",
    "chunk_segments",
    "create_embedding_provider",
]
