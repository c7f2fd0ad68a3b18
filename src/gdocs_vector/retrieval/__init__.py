"""
Retrieval — vector storage and semantic search.

This module wraps the vector store behind one interface so that ingestion
and search never need to know which database backs them.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend.
- :class:`NoopVectorStore` — degraded-mode backend.
- :class:`SemanticSearch` — query embedding + nearest-neighbour lookup.
- :func:`create_vector_store` — settings-driven backend factory.
- :class:`VectorStoreDocument`, :class:`VectorStoreChunk`,
  :class:`VectorStoreQueryResult` — record models.

Concrete backends (``PostgresVectorStore``, ``SupabaseVectorStore``,
``ChromaVectorStore``) are imported lazily to avoid pulling in their
clients at import time.
"""

from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.factory import create_vector_store
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult
from gdocs_vector.retrieval.noop_store import NoopVectorStore
from gdocs_vector.retrieval.search import SemanticSearch

__all__ = [
    "ChromaVectorStore",
    "NoopVectorStore",
    "PostgresVectorStore",
    "SemanticSearch",
    "SupabaseVectorStore",
    "VectorStoreBase",
    "VectorStoreChunk",
    "VectorStoreDocument",
    "VectorStoreQueryResult",
    "create_vector_store",
]

_LAZY = {
    "ChromaVectorStore": "gdocs_vector.retrieval.chroma_store",
    "PostgresVectorStore": "gdocs_vector.retrieval.postgres_store",
    "SupabaseVectorStore": "gdocs_vector.retrieval.supabase_store",
}


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import concrete backends."""
    if name in _LAZY:
        import importlib

        return getattr(importlib.import_module(_LAZY[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
