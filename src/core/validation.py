"""Startup configuration validation.

Runs before any engine, session or network client exists so that a
misconfigured deployment fails fast with a clear message instead of
half-starting.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .config import Settings
from .exceptions import ConfigurationError
from .logging_config import get_context_logger
from .variants import Capabilities

# HS256 keys shorter than 256 bits are rejected by most token validators
MIN_JWT_SECRET_LENGTH = 32


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error and mark validation as failed."""
        self.errors.append(message)
        self.is_valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (does not fail validation)."""
        self.warnings.append(message)


@dataclass(slots=True, frozen=True)
class ValidatedConfig:
    """Settings that passed validation for a specific variant."""

    settings: Settings
    variant: str

    @property
    def environment(self) -> str:
        return self.settings.environment

    def is_development(self) -> bool:
        return self.settings.is_development()


def check_configuration(settings: Settings, capabilities: Capabilities) -> ValidationResult:
    """
    Check every setting the variant depends on.

    Args:
        settings: Merged configuration view.
        capabilities: Variant being started.

    Returns:
        ValidationResult with errors and warnings.
    """
    result = ValidationResult()

    # -------------------------------------------------------------------------
    # Required: Database
    # -------------------------------------------------------------------------
    if not settings.database_url:
        result.add_error("DATABASE_URL (ConnectionStrings:DefaultConnection) is not set.")
    else:
        try:
            make_url(settings.database_url)
        except ArgumentError:
            result.add_error("DATABASE_URL is not a valid SQLAlchemy connection string.")

    # -------------------------------------------------------------------------
    # Required for authenticated variants: JWT
    # -------------------------------------------------------------------------
    if capabilities.requires_authentication:
        if not settings.jwt_secret_key:
            result.add_error("Jwt:SecretKey (JWT_SECRET_KEY) is missing.")
        elif len(settings.jwt_secret_key) < MIN_JWT_SECRET_LENGTH:
            result.add_error(
                f"Jwt:SecretKey must be at least {MIN_JWT_SECRET_LENGTH} characters long."
            )
        if not settings.jwt_issuer:
            result.add_error("Jwt:Issuer (JWT_ISSUER) is missing.")
        if not settings.jwt_audience:
            result.add_error("Jwt:Audience (JWT_AUDIENCE) is missing.")

    # -------------------------------------------------------------------------
    # Optional
    # -------------------------------------------------------------------------
    if capabilities.requires_seeding and not settings.has_seed_admin():
        result.add_warning("SEED_ADMIN_EMAIL/SEED_ADMIN_PASSWORD not set. No admin account will be seeded.")

    if not settings.is_development() and "*" in settings.frontend_origins:
        result.add_warning("FRONTEND_ORIGINS allows any origin outside development.")

    return result


def validate_configuration(settings: Settings, capabilities: Capabilities) -> ValidatedConfig:
    """
    Validate configuration and refuse to continue on any error.

    Raises:
        ConfigurationError: When a required setting is missing or malformed.
    """
    logger = get_context_logger(__name__, variant=capabilities.name)
    validation = check_configuration(settings, capabilities)

    for warning in validation.warnings:
        logger.warning("Config Warning: %s", warning)

    if not validation.is_valid:
        for error in validation.errors:
            logger.critical("Config Error: %s", error)
        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(validation.errors),
            errors=validation.errors,
        )

    return ValidatedConfig(settings=settings, variant=capabilities.name)


__all__ = [
    "MIN_JWT_SECRET_LENGTH",
    "ValidationResult",
    "ValidatedConfig",
    "check_configuration",
    "validate_configuration",
]
