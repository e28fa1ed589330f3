"""Dependency registration for one service process.

The registry is built once per process and handed to every later stage;
there is no module-level container.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .auth import TokenService
from .commands import CommandBus
from .config import Settings
from .db import Database, build_engine
from .policies import PolicySet
from .seed import SeedDataService
from .validation import ValidatedConfig
from .variants import Capabilities


@dataclass
class ServiceRegistry:
    """Collaborators wired for one variant."""

    config: ValidatedConfig
    capabilities: Capabilities
    policies: PolicySet
    database: Database
    commands: CommandBus
    tokens: Optional[TokenService] = None
    seeder: Optional[SeedDataService] = None

    @property
    def settings(self) -> Settings:
        return self.config.settings


def register_services(
    config: ValidatedConfig,
    capabilities: Capabilities,
    policies: PolicySet,
) -> ServiceRegistry:
    """Compose persistence, command dispatch, authentication and seeding."""
    settings = config.settings
    database = Database(build_engine(settings))

    commands = CommandBus()
    commands.register_module(capabilities.handler_scope)

    tokens = None
    if policies.token_parameters is not None:
        tokens = TokenService(policies.token_parameters, expiry_minutes=settings.jwt_expiry_minutes)

    seeder = None
    if capabilities.requires_seeding:
        seeder = SeedDataService(
            database,
            admin_email=settings.seed_admin_email,
            admin_password=settings.seed_admin_password,
        )

    return ServiceRegistry(
        config=config,
        capabilities=capabilities,
        policies=policies,
        database=database,
        commands=commands,
        tokens=tokens,
        seeder=seeder,
    )


__all__ = ["ServiceRegistry", "register_services"]
