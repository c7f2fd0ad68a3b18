"""Service container — wires settings into fetcher, embeddings, store, and pipelines."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from gdocs_vector.config import Settings
from gdocs_vector.errors import ConfigurationError, EmbeddingError
from gdocs_vector.ingestion.embedder import EmbeddingProvider, create_embedding_provider
from gdocs_vector.ingestion.google_docs import (
    DocumentFetcher,
    GoogleDocsFetcher,
    UnavailableFetcher,
    create_service_account_credentials,
)
from gdocs_vector.ingestion.pipeline import IngestionPipeline
from gdocs_vector.retrieval.base import VectorStoreBase
from gdocs_vector.retrieval.factory import create_vector_store
from gdocs_vector.retrieval.search import SemanticSearch

logger = logging.getLogger(__name__)


class UnavailableEmbeddingProvider(EmbeddingProvider):
    """Stand-in for a provider whose configuration was rejected."""

    def __init__(self, reason: str) -> None:
        self.dimension = 0
        self.reason = reason

    def embed_text(self, inputs: Sequence[str]) -> list[list[float]]:
        raise EmbeddingError(f"Embedding provider unavailable: {self.reason}")


@dataclass
class AppServices:
    """Everything the HTTP layer needs, built once per process."""

    embeddings: EmbeddingProvider
    vector_store: VectorStoreBase
    fetcher: DocumentFetcher
    ingestion: IngestionPipeline
    search: SemanticSearch


def create_docs_fetcher(settings: Settings) -> DocumentFetcher:
    try:
        credentials = create_service_account_credentials(
            settings.google_service_account_email, settings.google_service_account_key
        )
        return GoogleDocsFetcher(credentials, settings.google_drive_watch_folder_id)
    except ConfigurationError as exc:
        logger.warning("Google service account unavailable; ingestion will fail until configured: %s", exc)
        return UnavailableFetcher()


def create_embeddings(settings: Settings) -> EmbeddingProvider:
    try:
        return create_embedding_provider(settings)
    except ConfigurationError as exc:
        logger.error("Embedding provider misconfigured: %s", exc)
        return UnavailableEmbeddingProvider(str(exc))


def create_app_services(settings: Settings) -> AppServices:
    """Build the service graph; misconfigured parts degrade instead of raising."""
    embeddings = create_embeddings(settings)
    vector_store = create_vector_store(settings)
    fetcher = create_docs_fetcher(settings)
    return AppServices(
        embeddings=embeddings,
        vector_store=vector_store,
        fetcher=fetcher,
        ingestion=IngestionPipeline(fetcher, embeddings, vector_store),
        search=SemanticSearch(embeddings, vector_store),
    )
