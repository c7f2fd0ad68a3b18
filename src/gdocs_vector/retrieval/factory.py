"""Backend selection — picks a vector store from settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.noop_store import NoopVectorStore

if TYPE_CHECKING:
    from gdocs_vector.config import Settings

logger = logging.getLogger(__name__)


def _resolve_backend(settings: Settings) -> str:
    backend = settings.vector_store_backend
    if backend != "auto":
        return backend
    if settings.supabase_url and settings.supabase_service_role_key:
        return "supabase"
    if settings.supabase_direct_url:
        return "postgres"
    return "noop"


def _build(backend: str, settings: Settings) -> VectorStoreBase:
    dims = settings.supabase_embedding_dimensions

    if backend == "supabase":
        from gdocs_vector.retrieval.supabase_store import SupabaseVectorStore

        return SupabaseVectorStore(
            settings.supabase_url,
            settings.supabase_service_role_key,
            dims,
            schema=settings.supabase_schema,
            document_table=settings.supabase_document_table,
            chunk_table=settings.supabase_chunk_table,
            match_function=settings.supabase_match_function,
        )

    if backend == "postgres":
        from gdocs_vector.retrieval.postgres_store import PostgresVectorStore

        return PostgresVectorStore(
            settings.supabase_direct_url,
            dims,
            schema=settings.supabase_schema,
            document_table=settings.supabase_document_table,
            chunk_table=settings.supabase_chunk_table,
        )

    if backend == "chroma":
        from gdocs_vector.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore(
            dims,
            collection_name=settings.chroma_collection,
            host=settings.chroma_host,
            port=settings.chroma_port,
        )

    raise ValueError(f"Unsupported vector_store_backend={backend!r}")


def create_vector_store(settings: Settings) -> VectorStoreBase:
    """Return the configured store, or a :class:`NoopVectorStore` on failure.

    A backend that cannot be constructed (missing credentials, bad
    identifiers, unreachable server) is logged and replaced by the no-op
    store so the service keeps serving empty search results.
    """
    backend = _resolve_backend(settings)
    if backend == "noop":
        logger.warning("No vector store configured; using no-op vector store.")
        return NoopVectorStore(max(1, settings.supabase_embedding_dimensions))

    try:
        store = _build(backend, settings)
    except Exception:
        logger.exception("Failed to initialise %s vector store; using no-op vector store.", backend)
        return NoopVectorStore(max(1, settings.supabase_embedding_dimensions))

    logger.info("Using %s vector store (dim=%d)", backend, store.embedding_dimensions)
    return store
