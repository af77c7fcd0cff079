"""Shared test fixtures."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def _mock_settings(monkeypatch):
    """Provide default settings for all tests."""
    monkeypatch.setenv("CSPKIT_ENVIRONMENT", "development")
    monkeypatch.setenv("CSPKIT_LOG_JSON", "false")
    monkeypatch.setenv("CSPKIT_LOG_LEVEL", "debug")
    monkeypatch.delenv("CSPKIT_HEADER_SERVICES", raising=False)
    monkeypatch.delenv("CSPKIT_REPORT_URI", raising=False)

    # Reset cached settings and catalogue
    import cspkit.config.loader as loader
    from cspkit.catalog.registry import reset_catalog_cache

    loader._settings = None
    reset_catalog_cache()
    yield
    loader._settings = None
    reset_catalog_cache()


@pytest.fixture
def client():
    """Create a FastAPI test client."""
    from cspkit.main import app

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
