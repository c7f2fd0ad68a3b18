"""Semantic search over the vector store.

Usage::

    from gdocs_vector.retrieval.search import SemanticSearch

    search  = SemanticSearch(embeddings, store)
    results = search.search("How do I rotate the signing key?", limit=5)
    for r in results:
        print(r.score, r.metadata.get("headingUri"), r.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gdocs_vector.errors import EmbeddingError
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.models import VectorStoreQueryResult

if TYPE_CHECKING:
    from gdocs_vector.ingestion.embedder import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


class SemanticSearch:
    """Embeds a query and returns the nearest stored chunks.

    Parameters
    ----------
    embeddings:
        Provider used to embed the query as a single-element batch.
    store:
        Backend queried with the resulting vector.
    default_limit:
        Result count used when the caller does not pass one.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: VectorStoreBase,
        *,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._embeddings = embeddings
        self._store = store
        self.default_limit = default_limit

    def search(self, query: str, *, limit: int | None = None) -> list[VectorStoreQueryResult]:
        """Run a semantic search.

        Raises
        ------
        ValueError
            When *query* is empty or whitespace.
        EmbeddingError
            When the provider returns no vector for the query.
        """
        if not query or not query.strip():
            raise ValueError("Search query must not be empty")

        limit = max(1, limit if limit is not None else self.default_limit)
        vectors = self._embeddings.embed_text([query])
        if not vectors:
            raise EmbeddingError("Embedding provider returned no vector for the query")

        results = self._store.query_by_vector(vectors[0], limit=limit)
        logger.info("search returned %d results (limit=%d)", len(results), limit)
        return results

    # -- LangChain compat -----------------------------------------------------

    def as_langchain_retriever(self, limit: int = DEFAULT_LIMIT) -> Any:
        """Return a thin LangChain-compatible retriever wrapper.

        LangChain is imported only here so that the rest of the retrieval
        package does not depend on it.
        """
        from langchain_core.documents import Document
        from langchain_core.retrievers import BaseRetriever

        outer = self

        class _LCRetriever(BaseRetriever):
            """Adapter that satisfies LangChain's retriever protocol."""

            def _get_relevant_documents(self_inner, query: str, **kwargs: Any) -> list[Document]:  # type: ignore[override]  # noqa: N805
                return [
                    Document(
                        page_content=r.content,
                        metadata={
                            **r.metadata,
                            "chunk_id": r.chunk_id,
                            "document_id": r.document_id,
                            "score": r.score,
                        },
                    )
                    for r in outer.search(query, limit=limit)
                ]

        return _LCRetriever()
