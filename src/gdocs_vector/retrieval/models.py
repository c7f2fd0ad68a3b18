"""Record types persisted in and returned from the vector store."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VectorStoreDocument(BaseModel):
    """Document-level record; one per source document, upserted by id."""

    document_id: str
    title: str
    source: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorStoreChunk(BaseModel):
    """A chunk with its embedding, keyed by a per-ingestion ``chunk_id``."""

    document_id: str
    chunk_id: str
    content: str
    source: str
    ordering: int
    embedding: list[float]
    metadata: dict[str, Any] = Field(default_factory=dict)


class VectorStoreQueryResult(BaseModel):
    """A ranked nearest-neighbour hit.

    Serialises with camelCase keys (``chunkId``, ``documentId``) for the
    HTTP layer.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    chunk_id: str
    document_id: str
    content: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
