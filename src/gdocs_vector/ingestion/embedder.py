"""Embedding providers — ordered text → fixed-dimension vectors."""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

from gdocs_vector.errors import ConfigurationError, EmbeddingCountMismatchError, EmbeddingDimensionError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from gdocs_vector.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 64


class EmbeddingProvider(ABC):
    """Backend-agnostic embedding interface.

    ``embed_text(inputs)[i]`` is always the vector for ``inputs[i]`` and the
    output has exactly ``len(inputs)`` entries.
    """

    def __init__(self, dimension: int) -> None:
        if dimension <= 0:
            raise ConfigurationError(f"Embedding dimension must be positive, got {dimension}")
        self.dimension = dimension

    @abstractmethod
    def embed_text(self, inputs: Sequence[str]) -> list[list[float]]:
        """Embed every string in *inputs*, preserving order."""
        ...


class HashEmbeddingProvider(EmbeddingProvider):
    """Non-semantic stand-in that derives vectors from SHA-256 digests.

    Identical text always yields the identical vector, which keeps tests
    and local runs reproducible without an embedding backend.  Never use
    it for real retrieval.
    """

    def embed_text(self, inputs: Sequence[str]) -> list[list[float]]:
        return [self._vector_for(text) for text in inputs]

    def _vector_for(self, text: str) -> list[float]:
        vector: list[float] = []
        seed = text
        while len(vector) < self.dimension:
            digest = hashlib.sha256(seed.encode("utf-8")).digest()
            for byte in digest:
                vector.append(byte / 255)
                if len(vector) == self.dimension:
                    break
            seed = f"{seed}:{len(vector)}"
        return vector


class LangChainEmbeddingProvider(EmbeddingProvider):
    """Wraps any LangChain ``Embeddings`` model with batching and checks.

    Parameters
    ----------
    embeddings:
        The LangChain embedding model.
    dimension:
        Configured vector dimension; every returned vector must match it.
    batch_size:
        Number of texts sent per ``embed_documents`` call.
    """

    def __init__(self, embeddings: Embeddings, dimension: int, *, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        super().__init__(dimension)
        self._embeddings = embeddings
        self.batch_size = max(1, batch_size)

    def embed_text(self, inputs: Sequence[str]) -> list[list[float]]:
        texts = list(inputs)
        vectors: list[list[float]] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start : start + self.batch_size]
            vectors.extend(self._embeddings.embed_documents(batch))
            logger.debug("embedded %d / %d", len(vectors), len(texts))

        if len(vectors) != len(texts):
            raise EmbeddingCountMismatchError(len(texts), len(vectors))

        for index, vector in enumerate(vectors):
            if len(vector) != self.dimension:
                raise EmbeddingDimensionError(f"Input {index}", len(vector), self.dimension)
        return vectors


class OpenAIEmbeddingProvider(LangChainEmbeddingProvider):
    """OpenAI embeddings (``text-embedding-3-*``) requested at the configured dimension."""

    def __init__(
        self,
        dimension: int,
        *,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str = "",
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        from langchain_openai import OpenAIEmbeddings

        kwargs: dict = {"model": model, "api_key": api_key, "dimensions": dimension}
        if base_url:
            kwargs["base_url"] = base_url
        super().__init__(OpenAIEmbeddings(**kwargs), dimension, batch_size=batch_size)
        self.model = model


class HuggingFaceEmbeddingProvider(LangChainEmbeddingProvider):
    """Local sentence-transformer embeddings."""

    def __init__(
        self,
        dimension: int,
        *,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        from langchain_huggingface import HuggingFaceEmbeddings

        embeddings = HuggingFaceEmbeddings(
            model_name=model_name,
            encode_kwargs={"normalize_embeddings": True},
        )
        super().__init__(embeddings, dimension, batch_size=batch_size)
        self.model = model_name


def create_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Return the embedding provider selected by *settings*.

    A missing OpenAI key or an unknown provider name falls back to
    :class:`HashEmbeddingProvider` so the service still starts.
    """
    dimension = settings.supabase_embedding_dimensions
    provider = settings.embedding_provider.lower()

    if provider == "openai":
        if not settings.openai_api_key:
            logger.warning("OPENAI_API_KEY not set; using deterministic placeholder embeddings.")
            return HashEmbeddingProvider(dimension)
        return OpenAIEmbeddingProvider(
            dimension,
            api_key=settings.openai_api_key,
            model=settings.openai_embedding_model,
            base_url=settings.openai_base_url,
            batch_size=settings.embedding_batch_size,
        )

    if provider == "huggingface":
        return HuggingFaceEmbeddingProvider(
            dimension,
            model_name=settings.huggingface_embedding_model,
            batch_size=settings.embedding_batch_size,
        )

    if provider != "hash":
        logger.warning("Unknown embedding provider %r; using deterministic placeholder embeddings.", provider)
    return HashEmbeddingProvider(dimension)
