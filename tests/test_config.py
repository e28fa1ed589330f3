"""Test configuration loading."""
from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError as PydanticValidationError

from core.bootstrap import bootstrap
from core.config import PROJECT_ROOT, Settings, get_settings, load_settings, reload_settings
from core.exceptions import ConfigurationError
from core.variants import RECIPE


def test_environment_wins_over_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "DATABASE_URL=sqlite:////tmp/from-env-file.db\n"
        "JWT_ISSUER=file-issuer\n"
    )
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")

    settings = load_settings(env_file=env_file)

    assert settings.database_url == "sqlite:///:memory:"
    assert settings.jwt_issuer == "file-issuer"


def test_namespaced_keys(monkeypatch):
    monkeypatch.setenv("ConnectionStrings__DefaultConnection", "mysql+pymysql://u:p@db/recipes")
    monkeypatch.setenv("Jwt__SecretKey", "x" * 40)
    monkeypatch.setenv("Jwt__Issuer", "issuer")
    monkeypatch.setenv("Jwt__Audience", "audience")
    monkeypatch.setenv("ASPNETCORE_ENVIRONMENT", "Development")

    settings = Settings(_env_file=None)

    assert settings.database_url == "mysql+pymysql://u:p@db/recipes"
    assert settings.jwt_secret_key == "x" * 40
    assert settings.jwt_issuer == "issuer"
    assert settings.jwt_audience == "audience"
    assert settings.is_development()
    assert settings.has_jwt_settings()


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.database_url == ""
    assert settings.environment == "production"
    assert settings.cors_production_policy == "AllowAll"
    assert settings.frontend_origins == ["*"]
    assert settings.enforce_https is False
    assert not settings.has_jwt_settings()


def test_settings_are_immutable(make_settings):
    settings = make_settings()
    with pytest.raises(PydanticValidationError):
        settings.database_url = "sqlite:///other.db"


def test_frontend_origins_comma_separated(monkeypatch):
    monkeypatch.setenv("FRONTEND_ORIGINS", "https://app.example.com, https://admin.example.com")

    settings = Settings(_env_file=None)

    assert settings.frontend_origins == ["https://app.example.com", "https://admin.example.com"]


def test_cors_production_policy_is_case_insensitive(make_settings):
    assert make_settings(cors_production_policy="allowfrontend").cors_production_policy == "AllowFrontend"
    with pytest.raises(PydanticValidationError):
        make_settings(cors_production_policy="Everything")


def test_invalid_log_level_rejected(make_settings):
    with pytest.raises(PydanticValidationError):
        make_settings(log_level="LOUD")


def test_malformed_environment_is_a_configuration_error(monkeypatch, caplog):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("CORS_PRODUCTION_POLICY", "Strict")
    monkeypatch.setenv("JWT_EXPIRY_MINUTES", "0")

    with pytest.raises(ConfigurationError) as exc_info:
        bootstrap(RECIPE)

    assert len(exc_info.value.errors) == 2
    critical = [r.getMessage() for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 2
    assert any("CORS_PRODUCTION_POLICY" in message for message in critical)


def test_load_settings_reports_malformed_values(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    with pytest.raises(ConfigurationError, match="LOG_LEVEL"):
        load_settings()


def test_relative_sqlite_path_resolved(make_settings):
    settings = make_settings(database_url="sqlite:///./recipes.db")
    assert settings.database_url == f"sqlite:///{(PROJECT_ROOT / 'recipes.db').as_posix()}"


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    first = get_settings()
    assert get_settings() is first

    monkeypatch.setenv("LOG_LEVEL", "debug")
    reloaded = reload_settings()
    assert reloaded is not first
    assert reloaded.log_level == "DEBUG"
