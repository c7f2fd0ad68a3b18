"""Unit tests for embedding providers and provider selection."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from gdocs_vector.config import Settings
from gdocs_vector.errors import ConfigurationError, EmbeddingCountMismatchError, EmbeddingDimensionError
from gdocs_vector.ingestion.embedder import (
    HashEmbeddingProvider,
    LangChainEmbeddingProvider,
    OpenAIEmbeddingProvider,
    create_embedding_provider,
)


class TestHashEmbeddingProvider:
    def test_empty_input_returns_empty(self) -> None:
        assert HashEmbeddingProvider(8).embed_text([]) == []

    def test_output_matches_input_length_and_dimension(self) -> None:
        vectors = HashEmbeddingProvider(70).embed_text(["a", "b", "c"])
        assert len(vectors) == 3
        assert all(len(v) == 70 for v in vectors)

    def test_deterministic_per_text(self) -> None:
        provider = HashEmbeddingProvider(16)
        first = provider.embed_text(["hello"])
        second = provider.embed_text(["hello"])
        assert first == second
        assert provider.embed_text(["world"]) != first

    def test_values_are_scaled_bytes(self) -> None:
        vector = HashEmbeddingProvider(100).embed_text(["x"])[0]
        assert all(0.0 <= v <= 1.0 for v in vector)

    def test_non_positive_dimension_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            HashEmbeddingProvider(0)


class TestLangChainEmbeddingProvider:
    def test_batches_preserve_order(self) -> None:
        model = MagicMock()
        model.embed_documents.side_effect = lambda batch: [[float(len(t)), 0.0] for t in batch]
        provider = LangChainEmbeddingProvider(model, 2, batch_size=2)

        vectors = provider.embed_text(["a", "bb", "ccc", "dddd", "eeeee"])

        assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]
        assert model.embed_documents.call_count == 3

    def test_count_mismatch_raises(self) -> None:
        model = MagicMock()
        model.embed_documents.return_value = [[0.1, 0.2]]
        provider = LangChainEmbeddingProvider(model, 2)

        with pytest.raises(EmbeddingCountMismatchError):
            provider.embed_text(["one", "two"])

    def test_dimension_mismatch_raises(self) -> None:
        model = MagicMock()
        model.embed_documents.return_value = [[0.1, 0.2, 0.3]]
        provider = LangChainEmbeddingProvider(model, 2)

        with pytest.raises(EmbeddingDimensionError):
            provider.embed_text(["one"])

    def test_empty_input_skips_backend(self) -> None:
        model = MagicMock()
        assert LangChainEmbeddingProvider(model, 2).embed_text([]) == []
        model.embed_documents.assert_not_called()


class TestCreateEmbeddingProvider:
    def test_openai_without_key_falls_back_to_hash(self) -> None:
        provider = create_embedding_provider(Settings(embedding_provider="openai", openai_api_key=""))
        assert isinstance(provider, HashEmbeddingProvider)
        assert provider.dimension == 1536

    def test_unknown_provider_falls_back_to_hash(self) -> None:
        provider = create_embedding_provider(
            Settings(embedding_provider="custom", supabase_embedding_dimensions=12)
        )
        assert isinstance(provider, HashEmbeddingProvider)
        assert provider.dimension == 12

    def test_openai_with_key_requests_configured_dimension(self) -> None:
        with patch("langchain_openai.OpenAIEmbeddings") as mock_cls:
            provider = create_embedding_provider(
                Settings(
                    embedding_provider="openai",
                    openai_api_key="sk-test",
                    supabase_embedding_dimensions=256,
                    embedding_batch_size=16,
                )
            )

        assert isinstance(provider, OpenAIEmbeddingProvider)
        assert provider.batch_size == 16
        kwargs = mock_cls.call_args.kwargs
        assert kwargs["dimensions"] == 256
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["api_key"] == "sk-test"
