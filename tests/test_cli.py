"""Tests for the command line entry points."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from typer.testing import CliRunner

import bootstrap as bootstrap_script
import cli
from conftest import TEST_AUDIENCE, TEST_ISSUER, TEST_JWT_SECRET

runner = CliRunner()


@pytest.fixture
def valid_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///:memory:")
    monkeypatch.setenv("JWT_SECRET_KEY", TEST_JWT_SECRET)
    monkeypatch.setenv("JWT_ISSUER", TEST_ISSUER)
    monkeypatch.setenv("JWT_AUDIENCE", TEST_AUDIENCE)


class TestCheck:
    def test_ready(self, valid_env):
        result = runner.invoke(cli.app, ["check", "--variant", "recipe"])
        assert result.exit_code == 0
        assert "recipe: READY" in result.output

    def test_user_ready_reports_seeding(self, valid_env, monkeypatch):
        monkeypatch.setenv("SEED_ADMIN_EMAIL", "admin@example.com")
        monkeypatch.setenv("SEED_ADMIN_PASSWORD", "admin-pass-123")

        result = runner.invoke(cli.app, ["check", "--variant", "user"])
        assert result.exit_code == 0
        assert "user: READY" in result.output
        assert "Admin created: True" in result.output

    def test_degraded(self, valid_env, monkeypatch, unreachable_database_url):
        monkeypatch.setenv("DATABASE_URL", unreachable_database_url)

        result = runner.invoke(cli.app, ["check", "--variant", "recipe"])
        assert result.exit_code == 0
        assert "DEGRADED" in result.output

    def test_fatal(self):
        result = runner.invoke(cli.app, ["check", "--variant", "recipe"])
        assert result.exit_code == 1
        assert "FATAL" in result.output

    def test_unknown_variant(self, valid_env):
        result = runner.invoke(cli.app, ["check", "--variant", "billing"])
        assert result.exit_code == 2

    def test_malformed_setting(self, valid_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        result = runner.invoke(cli.app, ["check", "--variant", "recipe"])
        assert result.exit_code == 1
        assert "Configuration invalid" in result.output
        assert "LOG_LEVEL" in result.output


class TestServe:
    def test_invalid_configuration_never_serves(self, monkeypatch):
        calls = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda *args, **kwargs: calls.append(args))

        result = runner.invoke(cli.app, ["serve", "--variant", "user"])
        assert result.exit_code == 1
        assert calls == []

    def test_valid_configuration_serves(self, valid_env, monkeypatch):
        calls = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs))

        result = runner.invoke(cli.app, ["serve", "--variant", "recipe", "--port", "9000"])
        assert result.exit_code == 0
        assert calls == [{"host": "0.0.0.0", "port": 9000}]

    def test_default_settings_serve_plain_http(self, valid_env, monkeypatch):
        served = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: served.append(app))

        result = runner.invoke(cli.app, ["serve", "--variant", "recipe"])
        assert result.exit_code == 0

        application = served[0]
        assert "https_redirect" not in application.state.pipeline
        resp = TestClient(application).get("http://127.0.0.1:8000/health", follow_redirects=False)
        assert resp.status_code == 200

    def test_https_redirect_when_enforced(self, valid_env, monkeypatch):
        monkeypatch.setenv("ENFORCE_HTTPS", "true")
        served = []
        monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: served.append(app))

        result = runner.invoke(cli.app, ["serve", "--variant", "recipe"])
        assert result.exit_code == 0
        assert "https_redirect" in served[0].state.pipeline


def test_seed_is_idempotent(valid_env, monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{(tmp_path / 'users.db').as_posix()}")

    first = runner.invoke(cli.app, ["seed"])
    assert first.exit_code == 0
    assert "Seed data inserted" in first.output

    second = runner.invoke(cli.app, ["seed"])
    assert second.exit_code == 0
    assert "already present" in second.output


def test_info_hides_secrets(valid_env):
    result = runner.invoke(cli.app, ["info"])
    assert result.exit_code == 0
    assert "JWT Configured: True" in result.output
    assert TEST_JWT_SECRET not in result.output


class TestBootstrapScript:
    def test_completes(self, valid_env):
        bootstrap_script.main(["recipe"])

    def test_unknown_variant_exits(self, valid_env):
        with pytest.raises(SystemExit) as exc_info:
            bootstrap_script.main(["billing"])
        assert exc_info.value.code == 1

    def test_fatal_configuration_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            bootstrap_script.main(["user"])
        assert exc_info.value.code == 1

    def test_malformed_setting_exits(self, valid_env, monkeypatch):
        monkeypatch.setenv("CORS_PRODUCTION_POLICY", "Strict")

        with pytest.raises(SystemExit) as exc_info:
            bootstrap_script.main(["recipe"])
        assert exc_info.value.code == 1
