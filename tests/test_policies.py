"""Tests for CORS and token policy selection."""
from __future__ import annotations

from datetime import timedelta

from core.policies import select_policies
from core.validation import ValidatedConfig
from core.variants import RECIPE, USER


def _config(settings, variant) -> ValidatedConfig:
    return ValidatedConfig(settings=settings, variant=variant.name)


def test_both_cors_policies_always_defined(make_settings):
    for environment in ("development", "production"):
        policies = select_policies(_config(make_settings(environment=environment), RECIPE), RECIPE)
        assert set(policies.cors_policies) == {"AllowAll", "AllowFrontend"}


def test_development_uses_allow_all(make_settings):
    settings = make_settings(
        environment="development",
        cors_production_policy="AllowFrontend",
        frontend_origins="https://app.example.com",
    )
    policies = select_policies(_config(settings, RECIPE), RECIPE)

    active = policies.active_cors("development")
    assert active.name == "AllowAll"
    assert active.allows_any_origin


def test_production_defaults_to_permissive(make_settings):
    policies = select_policies(_config(make_settings(), RECIPE), RECIPE)
    assert policies.active_cors("production").name == "AllowAll"


def test_production_can_be_restricted(make_settings):
    settings = make_settings(
        cors_production_policy="AllowFrontend",
        frontend_origins="https://app.example.com",
    )
    policies = select_policies(_config(settings, RECIPE), RECIPE)

    active = policies.active_cors("production")
    assert active.name == "AllowFrontend"
    assert active.allow_origins == ("https://app.example.com",)
    assert not active.allows_any_origin


def test_user_variant_gets_token_parameters(make_settings):
    settings = make_settings()
    policies = select_policies(_config(settings, USER), USER)

    params = policies.token_parameters
    assert params is not None
    assert params.signing_key == settings.jwt_secret_key
    assert params.issuer == settings.jwt_issuer
    assert params.audience == settings.jwt_audience
    assert params.validate_lifetime is True
    assert params.clock_skew == timedelta(0)


def test_missing_jwt_settings_skip_authentication(make_settings):
    settings = make_settings(jwt_secret_key=None)
    policies = select_policies(_config(settings, USER), USER)
    assert policies.token_parameters is None


def test_recipe_variant_has_no_token_parameters(make_settings):
    policies = select_policies(_config(make_settings(), RECIPE), RECIPE)
    assert policies.token_parameters is None
