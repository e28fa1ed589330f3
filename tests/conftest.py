"""Pytest configuration and fixtures."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from core.config import Settings, get_settings
from core.variants import Capabilities

# Strong enough for the secret length check
TEST_JWT_SECRET = "test-secret-key-that-is-long-enough-1234"
TEST_ISSUER = "recipe-app-tests"
TEST_AUDIENCE = "recipe-app-clients"

# Every variable Settings reads; cleared so the host environment cannot leak in
SETTINGS_ENV_VARS = (
    "DATABASE_URL",
    "CONNECTIONSTRINGS__DEFAULTCONNECTION",
    "DB_POOL_SIZE",
    "DB_MAX_OVERFLOW",
    "DB_POOL_TIMEOUT",
    "JWT_SECRET_KEY",
    "JWT__SECRETKEY",
    "JWT_ISSUER",
    "JWT__ISSUER",
    "JWT_AUDIENCE",
    "JWT__AUDIENCE",
    "JWT_EXPIRY_MINUTES",
    "JWT__EXPIRYMINUTES",
    "FRONTEND_ORIGINS",
    "CORS_PRODUCTION_POLICY",
    "ENFORCE_HTTPS",
    "SEED_ADMIN_EMAIL",
    "SEED_ADMIN_PASSWORD",
    "ENVIRONMENT",
    "ASPNETCORE_ENVIRONMENT",
    "SERVICE_VARIANT",
    "LOG_LEVEL",
    "LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate every test from the host environment and the settings cache."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """
    Build settings without reading any .env file.

    Defaults describe a valid in-memory configuration for either variant.
    """

    def _make(**overrides) -> Settings:
        values = {
            "database_url": "sqlite:///:memory:",
            "jwt_secret_key": TEST_JWT_SECRET,
            "jwt_issuer": TEST_ISSUER,
            "jwt_audience": TEST_AUDIENCE,
            "environment": "production",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def unreachable_database_url(tmp_path) -> str:
    """SQLite URL whose parent directory does not exist, so connecting fails."""
    return f"sqlite:///{(tmp_path / 'missing' / 'app.db').as_posix()}"


@pytest.fixture
def build_client():
    """Create an app for a variant and wrap it in an HTTPS test client."""
    from api.app import create_app

    clients = []

    def _build(capabilities: Capabilities, settings: Settings) -> TestClient:
        app: FastAPI = create_app(capabilities, settings)
        client = TestClient(app, base_url="https://testserver")
        client.__enter__()
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.__exit__(None, None, None)
