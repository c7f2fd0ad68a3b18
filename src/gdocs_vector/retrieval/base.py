"""Abstract base class for vector-store backends.

Adding a backend only requires subclassing :class:`VectorStoreBase` and
implementing the four write/query methods.  Dimension validation is
shared here so every backend rejects bad vectors before touching I/O.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from gdocs_vector.errors import ConfigurationError, EmbeddingDimensionError
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    embedding_dimensions:
        Length every stored and query vector must have.
    """

    def __init__(self, embedding_dimensions: int) -> None:
        if embedding_dimensions <= 0:
            raise ConfigurationError(
                f"Embedding dimension must be positive, got {embedding_dimensions}"
            )
        self.embedding_dimensions = embedding_dimensions

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def upsert_document(self, document: VectorStoreDocument) -> None:
        """Insert or update the document record keyed by ``document_id``."""
        ...

    @abstractmethod
    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        """Insert or update chunk records keyed by ``chunk_id``.

        Implementations must call :meth:`validate_chunks` before writing.
        """
        ...

    @abstractmethod
    def delete_document_chunks(self, document_id: str) -> None:
        """Remove every chunk of *document_id*; a no-op when there are none."""
        ...

    @abstractmethod
    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        """Return up to *limit* chunks ranked by cosine similarity, best first.

        Implementations must call :meth:`validate_query` before querying.
        """
        ...

    # -- optional overrides ---------------------------------------------------

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        return True

    # -- shared validation ----------------------------------------------------

    def validate_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        for chunk in chunks:
            if len(chunk.embedding) != self.embedding_dimensions:
                raise EmbeddingDimensionError(
                    f"Chunk {chunk.chunk_id}", len(chunk.embedding), self.embedding_dimensions
                )

    def validate_query(self, vector: Sequence[float]) -> None:
        if len(vector) != self.embedding_dimensions:
            raise EmbeddingDimensionError("Query", len(vector), self.embedding_dimensions)
