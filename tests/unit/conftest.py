"""Fixtures shared by the unit tests."""

from __future__ import annotations

import pytest
from fakes import FixedEmbeddingProvider, RecordingVectorStore


@pytest.fixture()
def store() -> RecordingVectorStore:
    return RecordingVectorStore()


@pytest.fixture()
def embeddings() -> FixedEmbeddingProvider:
    return FixedEmbeddingProvider()
