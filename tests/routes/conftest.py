"""App client with Cosmos replaced by the in-memory stores."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from querino.app import create_app


def _settings() -> SimpleNamespace:
    """Create minimal settings for the app lifespan."""
    return SimpleNamespace(
        app=SimpleNamespace(env="test", log_level="INFO"),
        versions=SimpleNamespace(max_conflict_retries=3),
    )


@pytest.fixture
def client(document_store, version_store):
    cosmos = MagicMock()
    cosmos.close = AsyncMock()
    with (
        patch("querino.app.load_settings", return_value=_settings()),
        patch("querino.app.configure_logging"),
        patch("querino.app.init_database", new_callable=AsyncMock, return_value=cosmos),
        patch("querino.routes.documents.DocumentRepository", return_value=document_store),
        patch("querino.routes.versions.DocumentRepository", return_value=document_store),
        patch("querino.routes.versions.VersionRepository", return_value=version_store),
        TestClient(create_app()) as test_client,
    ):
        yield test_client
