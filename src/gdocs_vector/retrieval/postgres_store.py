"""pgvector-backed store speaking SQL directly to Postgres (e.g. Supabase's database)."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from gdocs_vector.errors import ConfigurationError, VectorStoreError
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreChunk, VectorStoreDocument, VectorStoreQueryResult

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")


def _validate_identifier(value: str, label: str) -> str:
    if not _IDENTIFIER.match(value):
        raise ConfigurationError(f"Invalid {label} name: {value}")
    return value


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _vector_literal(values: Sequence[float]) -> str:
    return "[" + ",".join(str(float(v)) for v in values) + "]"


def _normalise_url(url: str) -> str:
    """Point bare ``postgres://`` URLs at the psycopg 3 driver."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


class PostgresVectorStore(VectorStoreBase):
    """Postgres + pgvector store.

    Parameters
    ----------
    connection_url:
        Postgres connection string.
    embedding_dimensions:
        Configured vector dimension.
    schema / document_table / chunk_table:
        Table locations; each must match ``[A-Za-z0-9_]+``.
    engine:
        Pre-built SQLAlchemy engine (tests inject one).
    """

    def __init__(
        self,
        connection_url: str,
        embedding_dimensions: int,
        *,
        schema: str = "public",
        document_table: str = "documents",
        chunk_table: str = "document_chunks",
        engine: Engine | None = None,
    ) -> None:
        super().__init__(embedding_dimensions)
        if not connection_url and engine is None:
            raise ConfigurationError("Postgres connection string is missing")

        self._schema = _validate_identifier(schema, "schema")
        self._document_table = self._qualify(_validate_identifier(document_table, "document table"))
        self._chunk_table = self._qualify(_validate_identifier(chunk_table, "chunk table"))
        self._engine = engine or create_engine(_normalise_url(connection_url), pool_pre_ping=True)

    def _qualify(self, identifier: str) -> str:
        return f"{_quote(self._schema)}.{_quote(identifier)}"

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert_document(self, document: VectorStoreDocument) -> None:
        sql = text(
            f"""
            INSERT INTO {self._document_table} (id, title, source, metadata, updated_at)
            VALUES (:id, :title, :source, CAST(:metadata AS jsonb), NOW())
            ON CONFLICT (id) DO UPDATE SET
              title = EXCLUDED.title,
              source = EXCLUDED.source,
              metadata = EXCLUDED.metadata,
              updated_at = NOW()
            """
        )
        params = {
            "id": document.document_id,
            "title": document.title,
            "source": document.source,
            "metadata": json.dumps(document.metadata),
        }
        self._execute(sql, params, "document upsert")

    def upsert_chunks(self, chunks: Sequence[VectorStoreChunk]) -> None:
        if not chunks:
            return
        self.validate_chunks(chunks)

        sql = text(
            f"""
            INSERT INTO {self._chunk_table}
              (id, document_id, content, source, ordering, embedding, metadata, updated_at)
            VALUES
              (:id, :document_id, :content, :source, :ordering,
               CAST(:embedding AS vector), CAST(:metadata AS jsonb), NOW())
            ON CONFLICT (id) DO UPDATE SET
              document_id = EXCLUDED.document_id,
              content = EXCLUDED.content,
              source = EXCLUDED.source,
              ordering = EXCLUDED.ordering,
              embedding = EXCLUDED.embedding,
              metadata = EXCLUDED.metadata,
              updated_at = NOW()
            """
        )
        rows = [
            {
                "id": chunk.chunk_id,
                "document_id": chunk.document_id,
                "content": chunk.content,
                "source": chunk.source,
                "ordering": chunk.ordering,
                "embedding": _vector_literal(chunk.embedding),
                "metadata": json.dumps(chunk.metadata),
            }
            for chunk in chunks
        ]
        self._execute(sql, rows, "chunk upsert")

    def delete_document_chunks(self, document_id: str) -> None:
        sql = text(f"DELETE FROM {self._chunk_table} WHERE document_id = :document_id")
        self._execute(sql, {"document_id": document_id}, "chunk deletion")

    def query_by_vector(self, vector: Sequence[float], *, limit: int) -> list[VectorStoreQueryResult]:
        self.validate_query(vector)

        sql = text(
            f"""
            SELECT id, document_id, content, metadata,
                   1 - (embedding <=> CAST(:embedding AS vector)) AS score
            FROM {self._chunk_table}
            ORDER BY embedding <=> CAST(:embedding AS vector)
            LIMIT :limit
            """
        )
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(sql, {"embedding": _vector_literal(vector), "limit": limit}).mappings().all()
        except SQLAlchemyError as exc:
            raise VectorStoreError(f"Postgres vector match failed: {exc}") from exc

        return [
            VectorStoreQueryResult(
                chunk_id=str(row["id"]),
                document_id=row["document_id"],
                content=row["content"],
                score=float(row["score"]),
                metadata=_as_dict(row["metadata"]),
            )
            for row in rows
        ]

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("Postgres health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _execute(self, sql: Any, params: Any, action: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(sql, params)
        except SQLAlchemyError as exc:
            raise VectorStoreError(f"Postgres {action} failed: {exc}") from exc


def _as_dict(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)
