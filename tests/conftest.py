"""Shared pytest configuration and fixtures."""

import pytest

from gdocs_vector.config import Settings


@pytest.fixture(autouse=True)
def _isolated_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's shell (API keys, store URLs) out of Settings built in tests."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)
