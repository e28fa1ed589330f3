"""Core module exports."""
from __future__ import annotations

from core.config import Settings, get_settings, load_settings, reload_settings
from core.db import Base, Database, build_engine
from core.exceptions import (
    # Base
    RecipeAppError,
    # Configuration
    ConfigurationError,
    # Database
    DatabaseError,
    DatabaseConnectionError,
    SchemaError,
    SeedError,
    # Auth
    AuthenticationError,
    # Commands
    CommandError,
    HandlerNotFoundError,
    # Requests
    NotFoundError,
    ConflictError,
    ValidationError,
)
from core.logging_config import (
    setup_logging,
    get_logger,
    get_context_logger,
    JSONFormatter,
    ContextLogger,
)
from core.models import Recipe, Role, RoleName, User
from core.variants import Capabilities, RECIPE, USER, get_variant

__all__ = [
    # Config
    "Settings",
    "get_settings",
    "load_settings",
    "reload_settings",
    # Database
    "Base",
    "Database",
    "build_engine",
    # Models
    "Recipe",
    "Role",
    "RoleName",
    "User",
    # Variants
    "Capabilities",
    "RECIPE",
    "USER",
    "get_variant",
    # Exceptions
    "RecipeAppError",
    "ConfigurationError",
    "DatabaseError",
    "DatabaseConnectionError",
    "SchemaError",
    "SeedError",
    "AuthenticationError",
    "CommandError",
    "HandlerNotFoundError",
    "NotFoundError",
    "ConflictError",
    "ValidationError",
    # Logging
    "setup_logging",
    "get_logger",
    "get_context_logger",
    "JSONFormatter",
    "ContextLogger",
]
