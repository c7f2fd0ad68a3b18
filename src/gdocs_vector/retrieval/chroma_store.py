"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

import chromadb

from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult

logger = logging.getLogger(__name__)

_HEADING_KEYS = {"level": "heading_level", "text": "heading_text", "id": "heading_id"}


def _flatten_metadata(metadata: dict[str, Any]) -> dict[str, Any]:
    """Chroma metadata values must be flat str/int/float/bool; drop ``None``."""
    flat: dict[str, Any] = {}
    for key, value in metadata.items():
        if value is None:
            continue
        if key == "heading" and isinstance(value, dict):
            for field, flat_key in _HEADING_KEYS.items():
                if value.get(field) is not None:
                    flat[flat_key] = value[field]
        elif isinstance(value, (str, int, float, bool)):
            flat[key] = value
        else:
            flat[key] = json.dumps(value)
    return flat


def _restore_metadata(flat: dict[str, Any] | None) -> dict[str, Any]:
    metadata = dict(flat or {})
    heading = {field: metadata.pop(flat_key) for field, flat_key in _HEADING_KEYS.items() if flat_key in metadata}
    if heading:
        metadata["heading"] = heading
    return metadata


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Chunks live in *collection_name* (cosine space); document records live
    in a companion ``<collection_name>_documents`` collection with a
    placeholder embedding.

    Parameters
    ----------
    embedding_dimensions:
        Configured vector dimension.
    collection_name:
        Name of the Chroma chunk collection.
    host / port:
        Chroma server location.
    client:
        Pre-built Chroma client (tests inject one).
    """

    def __init__(
        self,
        embedding_dimensions: int,
        *,
        collection_name: str = "document_chunks",
        host: str = "localhost",
        port: int = 8000,
        client: Any | None = None,
    ) -> None:
        super().__init__(embedding_dimensions)
        self._client = client or chromadb.HttpClient(host=host, port=port)
        self._collection = self._client.get_or_create_collection(
            collection_name, metadata={"hnsw:space": "cosine"}
        )
        self._documents = self._client.get_or_create_collection(f"{collection_name}_documents")
        self.collection_name = collection_name

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert_document(self, document: VectorStoreDocument) -> None:
        self._documents.upsert(
            ids=[document.document_id],
            embeddings=[[0.0] * self.embedding_dimensions],
            documents=[document.title],
            metadatas=[_flatten_metadata({**document.metadata, "source": document.source})],
        )

    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        if not chunks:
            return
        self.validate_chunks(chunks)

        self._collection.upsert(
            ids=[c.chunk_id for c in chunks],
            embeddings=[list(c.embedding) for c in chunks],
            documents=[c.content for c in chunks],
            metadatas=[
                _flatten_metadata(
                    {**c.metadata, "document_id": c.document_id, "source": c.source, "ordering": c.ordering}
                )
                for c in chunks
            ],
        )

    def delete_document_chunks(self, document_id: str) -> None:
        self._collection.delete(where={"document_id": document_id})

    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        self.validate_query(vector)

        results = self._collection.query(
            query_embeddings=[list(vector)],
            n_results=limit,
            include=["documents", "metadatas", "distances"],
        )

        ids = results.get("ids", [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[VectorStoreQueryResult] = []
        for chunk_id, content, meta, dist in zip(ids, docs, metas, distances):
            metadata = _restore_metadata(meta)
            document_id = str(metadata.pop("document_id", ""))
            # Stored flat for filtering; the other backends keep these as columns.
            metadata.pop("source", None)
            metadata.pop("ordering", None)
            hits.append(
                VectorStoreQueryResult(
                    chunk_id=chunk_id,
                    document_id=document_id,
                    content=content or "",
                    # Cosine space: distance = 1 - cosine similarity.
                    score=1.0 - dist,
                    metadata=metadata,
                )
            )
        return hits

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
