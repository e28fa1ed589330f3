"""CORS and token-validation policy selection."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Optional, Tuple

from .config import CORS_ALLOW_ALL, CORS_ALLOW_FRONTEND, DEVELOPMENT
from .validation import ValidatedConfig
from .variants import Capabilities


@dataclass(slots=True, frozen=True)
class CorsPolicy:
    """A named cross-origin policy, in the shape CORSMiddleware expects."""

    name: str
    allow_origins: Tuple[str, ...] = ("*",)
    allow_methods: Tuple[str, ...] = ("*",)
    allow_headers: Tuple[str, ...] = ("*",)

    @property
    def allows_any_origin(self) -> bool:
        return "*" in self.allow_origins

    def middleware_options(self) -> Dict[str, list]:
        return {
            "allow_origins": list(self.allow_origins),
            "allow_methods": list(self.allow_methods),
            "allow_headers": list(self.allow_headers),
        }


@dataclass(slots=True, frozen=True)
class TokenValidationParameters:
    """How bearer tokens are checked by the authentication middleware."""

    signing_key: str
    issuer: str
    audience: str
    algorithm: str = "HS256"
    validate_lifetime: bool = True
    clock_skew: timedelta = field(default_factory=timedelta)


@dataclass(slots=True, frozen=True)
class PolicySet:
    """Every policy computed at startup; one CORS policy goes live per environment."""

    cors_policies: Dict[str, CorsPolicy]
    production_policy: str = CORS_ALLOW_ALL
    token_parameters: Optional[TokenValidationParameters] = None

    def active_cors(self, environment: str) -> CorsPolicy:
        """Pick the CORS policy to install for the given environment mode."""
        if environment == DEVELOPMENT:
            return self.cors_policies[CORS_ALLOW_ALL]
        return self.cors_policies[self.production_policy]


def build_token_parameters(config: ValidatedConfig) -> Optional[TokenValidationParameters]:
    """Build token parameters, or None when JWT settings are not configured."""
    settings = config.settings
    if not settings.has_jwt_settings():
        return None
    return TokenValidationParameters(
        signing_key=settings.jwt_secret_key,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )


def select_policies(config: ValidatedConfig, capabilities: Capabilities) -> PolicySet:
    """
    Derive the policy set from validated configuration.

    Both CORS policies are always defined; which one is applied is decided
    later by ``PolicySet.active_cors``. Token parameters are only built for
    variants that authenticate requests.
    """
    settings = config.settings
    cors_policies = {
        CORS_ALLOW_FRONTEND: CorsPolicy(
            name=CORS_ALLOW_FRONTEND,
            allow_origins=tuple(settings.frontend_origins),
        ),
        CORS_ALLOW_ALL: CorsPolicy(name=CORS_ALLOW_ALL),
    }

    token_parameters = None
    if capabilities.requires_authentication:
        token_parameters = build_token_parameters(config)

    return PolicySet(
        cors_policies=cors_policies,
        production_policy=settings.cors_production_policy,
        token_parameters=token_parameters,
    )


__all__ = [
    "CorsPolicy",
    "TokenValidationParameters",
    "PolicySet",
    "build_token_parameters",
    "select_policies",
]
