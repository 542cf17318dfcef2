"""
Pytest fixtures for Crypto Monetizer tests. Uses a temporary SQLite DB for settings.
"""

from __future__ import annotations

import random

import pytest


@pytest.fixture
def settings_db(tmp_path, monkeypatch):
    """
    Point the settings store at a temporary SQLite DB and init tables.
    Resets settings and engine caches so each test gets a fresh DB. Unset DATABASE_URL so we use SQLite.
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("MONETIZER_STORAGE_PROFILE", "local")
    monkeypatch.setenv("MONETIZER_DB_PATH", str(tmp_path / "monetizer.db"))

    from crypto_monetizer.config import reload_settings
    import crypto_monetizer.database.settings_store as store

    reload_settings()
    store.reset_engine_for_test()
    store.init_db()
    yield store
    store.reset_engine_for_test()
    reload_settings()


@pytest.fixture
def unconfigured_store(monkeypatch):
    """Hosted profile without DATABASE_URL: the store has no backend."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("MONETIZER_STORAGE_PROFILE", "hosted")

    from crypto_monetizer.config import reload_settings
    import crypto_monetizer.database.settings_store as store

    reload_settings()
    store.reset_engine_for_test()
    yield store
    store.reset_engine_for_test()
    monkeypatch.delenv("MONETIZER_STORAGE_PROFILE", raising=False)
    reload_settings()


@pytest.fixture
def steady_source():
    """Quote source with failure injection off and a fixed seed."""
    from crypto_monetizer.exchange import FailureInjectionPolicy, SyntheticQuoteSource

    return SyntheticQuoteSource(policy=FailureInjectionPolicy(enabled=False), rng=random.Random(7))


@pytest.fixture
def app(settings_db, steady_source):
    """App built after settings_db so the temp DB is configured before it runs."""
    from crypto_monetizer.api_server.server import create_app

    return create_app(quote_source=steady_source)


@pytest.fixture
def client(app):
    """FastAPI TestClient over the steady app."""
    from fastapi.testclient import TestClient

    return TestClient(app)
