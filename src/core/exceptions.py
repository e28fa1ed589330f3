"""Custom exceptions for the recipe app services."""
from __future__ import annotations


class RecipeAppError(Exception):
    """Base exception for all application errors."""

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(RecipeAppError):
    """Raised when required configuration is missing or invalid."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


# =============================================================================
# Database Errors
# =============================================================================


class DatabaseError(RecipeAppError):
    """Base exception for database-related errors."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when the database cannot be reached at all."""

    pass


class SchemaError(DatabaseError):
    """Raised when schema creation fails on a live connection."""

    pass


class SeedError(DatabaseError):
    """Raised when baseline data cannot be written."""

    pass


# =============================================================================
# Authentication Errors
# =============================================================================


class AuthenticationError(RecipeAppError):
    """Raised when credentials or bearer tokens are rejected."""

    pass


# =============================================================================
# Command Dispatch Errors
# =============================================================================


class CommandError(RecipeAppError):
    """Base exception for command dispatch errors."""

    pass


class HandlerNotFoundError(CommandError):
    """Raised when no handler is registered for a command type."""

    pass


# =============================================================================
# Request Errors
# =============================================================================


class NotFoundError(RecipeAppError):
    """Raised when a requested record does not exist."""

    pass


class ConflictError(RecipeAppError):
    """Raised when a write would duplicate an existing record."""

    pass


class ValidationError(RecipeAppError):
    """Raised when request data fails domain validation."""

    pass


__all__ = [
    # Base
    "RecipeAppError",
    # Configuration
    "ConfigurationError",
    # Database
    "DatabaseError",
    "DatabaseConnectionError",
    "SchemaError",
    "SeedError",
    # Auth
    "AuthenticationError",
    # Commands
    "CommandError",
    "HandlerNotFoundError",
    # Requests
    "NotFoundError",
    "ConflictError",
    "ValidationError",
]
