"""Service bootstrap sequence.

Runs, in order and exactly once per process:

1. Validate configuration for the variant (fatal on error)
2. Select CORS and token policies
3. Register collaborators
4. Ensure the database schema (degrade on connectivity failure)
5. Seed baseline data when the variant requires it

Connectivity failures in steps 4 and 5 are caught here, logged once, and
turned into a DEGRADED outcome. Everything else propagates.
"""
from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Optional

from .config import Settings, get_settings
from .exceptions import DatabaseConnectionError
from .logging_config import get_context_logger
from .policies import select_policies
from .registry import ServiceRegistry, register_services
from .seed import SeedReport
from .validation import validate_configuration
from .variants import Capabilities


class InitializationStatus(str, enum.Enum):
    """Startup result of one service process."""
    READY = "ready"
    DEGRADED = "degraded"
    FATAL = "fatal"


@dataclass
class InitializationOutcome:
    """Outcome of the database and seeding stages."""

    variant: str
    status: InitializationStatus
    reason: Optional[str] = None
    seed_report: Optional[SeedReport] = None

    @property
    def is_degraded(self) -> bool:
        return self.status is InitializationStatus.DEGRADED


@dataclass
class BootstrapResult:
    """Everything the pipeline activator needs."""

    registry: ServiceRegistry
    outcome: InitializationOutcome


def initialize_database(registry: ServiceRegistry) -> InitializationOutcome:
    """
    Ensure the schema exists, degrading instead of aborting when unreachable.

    The failure is not remembered: each later request opens its own session
    and tries the connection again.
    """
    variant = registry.capabilities.name
    logger = get_context_logger(__name__, variant=variant)

    try:
        registry.database.ensure_schema()
    except DatabaseConnectionError as exc:
        logger.error(
            "Database connection failed during startup - serving in degraded mode",
            extra={"extra_data": {"error": str(exc)}},
        )
        return InitializationOutcome(variant, InitializationStatus.DEGRADED, reason=str(exc))

    logger.info("Database schema verified")
    return InitializationOutcome(variant, InitializationStatus.READY)


def run_seeding(registry: ServiceRegistry, outcome: InitializationOutcome) -> InitializationOutcome:
    """Seed baseline data after a successful database initialization."""
    if registry.seeder is None or outcome.status is not InitializationStatus.READY:
        return outcome

    logger = get_context_logger(__name__, variant=outcome.variant)
    try:
        outcome.seed_report = registry.seeder.seed_if_empty()
    except DatabaseConnectionError as exc:
        logger.error(
            "Database connection failed during seeding - serving in degraded mode",
            extra={"extra_data": {"error": str(exc)}},
        )
        outcome.status = InitializationStatus.DEGRADED
        outcome.reason = str(exc)
    return outcome


def bootstrap(capabilities: Capabilities, settings: Optional[Settings] = None) -> BootstrapResult:
    """
    Run the bootstrap sequence for one variant.

    Args:
        capabilities: Variant descriptor.
        settings: Configuration view; the cached process settings when omitted.

    Returns:
        BootstrapResult with a READY or DEGRADED outcome.

    Raises:
        ConfigurationError: Required configuration is missing or malformed.
        Exception: Any unclassified initialization failure.
    """
    settings = settings if settings is not None else get_settings()
    logger = get_context_logger(__name__, variant=capabilities.name)
    logger.info(
        "Bootstrapping service",
        extra={"extra_data": {"environment": settings.environment}},
    )

    config = validate_configuration(settings, capabilities)
    policies = select_policies(config, capabilities)
    if capabilities.requires_authentication and policies.token_parameters is None:
        logger.warning("JWT settings missing - authentication disabled")

    registry = register_services(config, capabilities, policies)
    outcome = initialize_database(registry)
    outcome = run_seeding(registry, outcome)

    logger.info(
        "Bootstrap finished",
        extra={"extra_data": {"status": outcome.status.value}},
    )
    return BootstrapResult(registry=registry, outcome=outcome)


def bootstrap_or_exit(capabilities: Capabilities, settings: Optional[Settings] = None) -> BootstrapResult:
    """
    Run the bootstrap and exit the process on any fatal error.

    Used by entry points that must not bind a listener after a failed start.
    """
    logger = get_context_logger(__name__, variant=capabilities.name)
    try:
        return bootstrap(capabilities, settings)
    except Exception as exc:
        logger.critical("Bootstrap failed: %s", exc, exc_info=True)
        sys.exit(1)


__all__ = [
    "InitializationStatus",
    "InitializationOutcome",
    "BootstrapResult",
    "initialize_database",
    "run_seeding",
    "bootstrap",
    "bootstrap_or_exit",
]
