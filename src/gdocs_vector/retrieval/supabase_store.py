"""Supabase implementation of the vector-store abstraction.

Talks to the PostgREST API with the service-role key.  Assumes pgvector is
enabled and a ``match_document_chunks(query_embedding, match_count)``
function exists in the configured schema.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from gdocs_vector.errors import ConfigurationError, VectorStoreError
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseVectorStore(VectorStoreBase):
    """Supabase-backed vector store.

    Parameters
    ----------
    url / service_role_key:
        Project URL and service-role key; both are required.
    embedding_dimensions:
        Configured vector dimension.
    schema / document_table / chunk_table / match_function:
        Database objects used for storage and matching.
    client:
        Pre-built Supabase client (tests inject one).
    """

    def __init__(
        self,
        url: str,
        service_role_key: str,
        embedding_dimensions: int,
        *,
        schema: str = "public",
        document_table: str = "documents",
        chunk_table: str = "document_chunks",
        match_function: str = "match_document_chunks",
        client: Client | None = None,
    ) -> None:
        super().__init__(embedding_dimensions)
        if client is None and (not url or not service_role_key):
            raise ConfigurationError("Supabase credentials are not configured")

        self._client = client or create_client(
            url,
            service_role_key,
            options=ClientOptions(auto_refresh_token=False, persist_session=False),
        )
        self._schema = schema
        self._document_table = document_table
        self._chunk_table = chunk_table
        self._match_function = match_function

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert_document(self, document: VectorStoreDocument) -> None:
        payload = {
            "id": document.document_id,
            "title": document.title,
            "source": document.source,
            "metadata": document.metadata,
            "updated_at": _now(),
        }
        try:
            self._table(self._document_table).upsert(payload, on_conflict="id").execute()
        except APIError as exc:
            raise VectorStoreError(f"Supabase document upsert failed: {exc.message}") from exc

    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        if not chunks:
            return
        self.validate_chunks(chunks)

        timestamp = _now()
        rows = [
            {
                "id": chunk.chunk_id,
                "document_id": chunk.document_id,
                "content": chunk.content,
                "source": chunk.source,
                "ordering": chunk.ordering,
                "embedding": chunk.embedding,
                "metadata": chunk.metadata,
                "updated_at": timestamp,
            }
            for chunk in chunks
        ]
        try:
            self._table(self._chunk_table).upsert(rows, on_conflict="id").execute()
        except APIError as exc:
            raise VectorStoreError(f"Supabase chunk upsert failed: {exc.message}") from exc

    def delete_document_chunks(self, document_id: str) -> None:
        try:
            self._table(self._chunk_table).delete().eq("document_id", document_id).execute()
        except APIError as exc:
            raise VectorStoreError(f"Supabase chunk deletion failed: {exc.message}") from exc

    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        self.validate_query(vector)

        try:
            response = (
                self._client.schema(self._schema)
                .rpc(self._match_function, {"query_embedding": list(vector), "match_count": limit})
                .execute()
            )
        except APIError as exc:
            raise VectorStoreError(f"Supabase vector match failed: {exc.message}") from exc

        rows: list[dict[str, Any]] = response.data or []
        return [
            VectorStoreQueryResult(
                chunk_id=str(row["id"]),
                document_id=row["document_id"],
                content=row["content"],
                score=float(row["score"]),
                metadata=row.get("metadata") or {},
            )
            for row in rows
        ]

    def health_check(self) -> bool:
        try:
            self._table(self._document_table).select("id").limit(1).execute()
            return True
        except APIError:
            logger.warning("Supabase health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _table(self, name: str) -> Any:
        return self._client.schema(self._schema).table(name)
