"""Exception hierarchy shared by ingestion, embedding, and storage."""

from __future__ import annotations


class GDocsVectorError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(GDocsVectorError):
    """Missing credentials or invalid settings for a component."""


class DocumentFetchError(GDocsVectorError):
    """The source document could not be fetched."""


class IngestionRequestError(GDocsVectorError, ValueError):
    """An ingestion request was rejected before any work started."""


class EmbeddingError(GDocsVectorError):
    """The embedding backend failed or returned unusable output."""


class EmbeddingCountMismatchError(EmbeddingError):
    """Number of embeddings returned differs from the number of inputs."""

    def __init__(self, expected: int, received: int, context: str = "") -> None:
        self.expected = expected
        self.received = received
        where = f" for {context}" if context else ""
        super().__init__(f"Embedding count mismatch{where}: expected {expected}, received {received}")


class EmbeddingDimensionError(GDocsVectorError, ValueError):
    """A vector's length differs from the configured dimension."""

    def __init__(self, label: str, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"{label} embedding length {actual} does not match configured dimension {expected}"
        )


class VectorStoreError(GDocsVectorError):
    """A call against the backing vector store failed."""
