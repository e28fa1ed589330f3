"""Tests for request pipeline activation."""
from __future__ import annotations

from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware

from api.app import create_app
from api.middleware import AuthenticationMiddleware, AuthorizationMiddleware
from core.variants import RECIPE, USER


def _middleware_classes(app):
    """Middleware classes, outermost first."""
    return [middleware.cls for middleware in app.user_middleware]


class TestStageOrder:
    def test_user_variant_in_development(self, make_settings):
        app = create_app(USER, make_settings(environment="development", enforce_https=True))

        assert app.state.pipeline == [
            "swagger",
            "cors:AllowAll",
            "https_redirect",
            "authentication",
            "authorization",
            "routing",
        ]
        assert _middleware_classes(app) == [
            CORSMiddleware,
            HTTPSRedirectMiddleware,
            AuthenticationMiddleware,
            AuthorizationMiddleware,
        ]

    def test_recipe_variant_in_production(self, make_settings):
        app = create_app(RECIPE, make_settings(enforce_https=True))

        assert app.state.pipeline == ["cors:AllowAll", "https_redirect", "routing"]
        assert _middleware_classes(app) == [CORSMiddleware, HTTPSRedirectMiddleware]

    def test_https_redirect_off_by_default(self, make_settings):
        app = create_app(RECIPE, make_settings())
        assert app.state.pipeline == ["cors:AllowAll", "routing"]

    def test_restricted_production_policy(self, make_settings):
        app = create_app(RECIPE, make_settings(cors_production_policy="AllowFrontend"))
        assert app.state.pipeline[0] == "cors:AllowFrontend"

    def test_user_variant_without_jwt_skips_authentication(self, make_settings, monkeypatch):
        # Validation normally rejects this; bypass it to exercise the soft dependency
        from core import bootstrap as bootstrap_module
        from core.validation import ValidatedConfig

        monkeypatch.setattr(
            bootstrap_module,
            "validate_configuration",
            lambda settings, capabilities: ValidatedConfig(settings=settings, variant=capabilities.name),
        )

        app = create_app(USER, make_settings(jwt_secret_key=None))
        assert "authentication" not in app.state.pipeline
        assert "authorization" not in app.state.pipeline


class TestDocs:
    def test_swagger_in_development(self, make_settings, build_client):
        client = build_client(RECIPE, make_settings(environment="development"))

        assert client.get("/swagger").status_code == 200
        schema = client.get("/openapi.json").json()
        assert "/recipes" in schema["paths"]

    def test_no_swagger_in_production(self, make_settings, build_client):
        client = build_client(RECIPE, make_settings())

        assert client.get("/swagger").status_code == 404
        assert client.get("/openapi.json").status_code == 404
        assert client.get("/docs").status_code == 404


class TestCors:
    def test_any_origin_allowed_in_production(self, make_settings, build_client):
        client = build_client(RECIPE, make_settings())

        resp = client.get("/health", headers={"Origin": "https://somewhere.example"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_any_origin_allowed_in_development(self, make_settings, build_client):
        client = build_client(USER, make_settings(environment="development"))

        resp = client.get("/health", headers={"Origin": "https://somewhere.example"})
        assert resp.headers["access-control-allow-origin"] == "*"

    def test_restricted_policy_omits_foreign_origin(self, make_settings, build_client):
        settings = make_settings(
            cors_production_policy="AllowFrontend",
            frontend_origins="https://app.example.com",
        )
        client = build_client(RECIPE, settings)

        allowed = client.get("/health", headers={"Origin": "https://app.example.com"})
        assert allowed.headers["access-control-allow-origin"] == "https://app.example.com"

        foreign = client.get("/health", headers={"Origin": "https://somewhere.example"})
        assert "access-control-allow-origin" not in foreign.headers

    def test_preflight_to_protected_route_is_not_rejected(self, make_settings, build_client):
        client = build_client(USER, make_settings())

        resp = client.options(
            "/users/me",
            headers={
                "Origin": "https://somewhere.example",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Authorization",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"


class TestHttpsRedirect:
    def test_plain_http_is_redirected(self, make_settings, build_client):
        client = build_client(RECIPE, make_settings(enforce_https=True))

        resp = client.get("http://testserver/health", follow_redirects=False)
        assert resp.status_code == 307
        assert resp.headers["location"].startswith("https://")

    def test_plain_http_served_by_default(self, make_settings, build_client):
        client = build_client(RECIPE, make_settings())

        resp = client.get("http://testserver/health", follow_redirects=False)
        assert resp.status_code == 200
