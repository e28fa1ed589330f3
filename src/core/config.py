"""Configuration management for the recipe app services.

All configuration is loaded from environment variables and/or a local .env file.
Keys accept both the flat form (``JWT_SECRET_KEY``) and the namespaced form used
by the deployment templates (``Jwt__SecretKey``).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

from pydantic import AliasChoices, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError
from .logging_config import get_logger

LOGGER = get_logger(__name__)

# Project root detection
PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = PROJECT_ROOT / ".env"

DEVELOPMENT = "development"
PRODUCTION = "production"

CORS_ALLOW_ALL = "AllowAll"
CORS_ALLOW_FRONTEND = "AllowFrontend"


def _resolve_database_url(url: str) -> str:
    """
    Convert relative SQLite paths to absolute paths based on PROJECT_ROOT.

    This prevents issues when the app is started from different working directories.
    """
    if not url.startswith("sqlite:///"):
        return url  # Not SQLite, return as-is

    path_part = url.replace("sqlite:///", "")
    if path_part == ":memory:" or path_part == "":
        return url

    # Relative path - resolve against PROJECT_ROOT
    if path_part.startswith("./") or (not path_part.startswith("/") and ":" not in path_part):
        if path_part.startswith("./"):
            path_part = path_part[2:]
        absolute_path = PROJECT_ROOT / path_part
        return f"sqlite:///{absolute_path.as_posix()}"

    return url  # Already absolute


class Settings(BaseSettings):
    """
    Runtime configuration powered by environment variables and .env overrides.

    Precedence (highest first):
    1. Environment variables
    2. .env file in project root (local development only)
    3. Default values

    The instance is frozen; build a new one with ``load_settings`` to pick up changes.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
    )

    # -------------------------------------------------------------------------
    # Database
    # -------------------------------------------------------------------------
    database_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "DATABASE_URL",
            "CONNECTIONSTRINGS__DEFAULTCONNECTION",
        ),
        description="SQLAlchemy connection string.",
    )
    db_pool_size: int = Field(default=5, alias="DB_POOL_SIZE", ge=1)
    db_max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW", ge=0)
    db_pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT", ge=1)

    # -------------------------------------------------------------------------
    # JWT (User service)
    # -------------------------------------------------------------------------
    jwt_secret_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("JWT_SECRET_KEY", "JWT__SECRETKEY"),
    )
    jwt_issuer: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("JWT_ISSUER", "JWT__ISSUER"),
    )
    jwt_audience: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("JWT_AUDIENCE", "JWT__AUDIENCE"),
    )
    jwt_expiry_minutes: int = Field(
        default=60,
        validation_alias=AliasChoices("JWT_EXPIRY_MINUTES", "JWT__EXPIRYMINUTES"),
        ge=1,
    )

    # -------------------------------------------------------------------------
    # CORS / HTTP pipeline
    # -------------------------------------------------------------------------
    frontend_origins: Union[List[str], str] = Field(
        default=["*"],
        alias="FRONTEND_ORIGINS",
        description="Comma-separated origins allowed by the AllowFrontend policy.",
    )
    cors_production_policy: str = Field(
        default=CORS_ALLOW_ALL,
        alias="CORS_PRODUCTION_POLICY",
        description="CORS policy applied outside development (AllowAll or AllowFrontend).",
    )
    enforce_https: bool = Field(default=False, alias="ENFORCE_HTTPS")

    # -------------------------------------------------------------------------
    # Seeding (User service)
    # -------------------------------------------------------------------------
    seed_admin_email: Optional[str] = Field(default=None, alias="SEED_ADMIN_EMAIL")
    seed_admin_password: Optional[str] = Field(default=None, alias="SEED_ADMIN_PASSWORD")

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    environment: str = Field(
        default=PRODUCTION,
        validation_alias=AliasChoices("ENVIRONMENT", "ASPNETCORE_ENVIRONMENT"),
    )
    service_variant: str = Field(default="recipe", alias="SERVICE_VARIANT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="text", alias="LOG_FORMAT")  # "text" or "json"

    @field_validator("database_url")
    @classmethod
    def resolve_database_url(cls, v: str) -> str:
        """Strip whitespace and convert relative SQLite paths to absolute paths."""
        return _resolve_database_url(v.strip())

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Ensure log format is valid."""
        lower = v.lower()
        if lower not in {"text", "json"}:
            raise ValueError("log_format must be 'text' or 'json'")
        return lower

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        return v.strip().lower() or PRODUCTION

    @field_validator("service_variant")
    @classmethod
    def normalize_service_variant(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("cors_production_policy")
    @classmethod
    def validate_cors_production_policy(cls, v: str) -> str:
        """Accept the policy name case-insensitively and return its canonical form."""
        for name in (CORS_ALLOW_ALL, CORS_ALLOW_FRONTEND):
            if v.strip().lower() == name.lower():
                return name
        raise ValueError(f"cors_production_policy must be {CORS_ALLOW_ALL} or {CORS_ALLOW_FRONTEND}")

    @field_validator("frontend_origins", mode="before")
    @classmethod
    def split_frontend_origins(cls, v: Union[List[str], str]) -> List[str]:
        if isinstance(v, str):
            origins = [origin.strip() for origin in v.split(",") if origin.strip()]
            return origins or ["*"]
        return list(v)

    # -------------------------------------------------------------------------
    # Helper Methods
    # -------------------------------------------------------------------------

    def is_development(self) -> bool:
        """True when running with ENVIRONMENT=development."""
        return self.environment == DEVELOPMENT

    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def has_jwt_settings(self) -> bool:
        """Check if every JWT setting needed to validate tokens is present."""
        return bool(self.jwt_secret_key and self.jwt_issuer and self.jwt_audience)

    def has_seed_admin(self) -> bool:
        return bool(self.seed_admin_email and self.seed_admin_password)


def _build_settings(**kwargs) -> Settings:
    """
    Construct Settings, reporting malformed values as a configuration error.

    Raises:
        ConfigurationError: One or more values failed to parse or validate.
    """
    try:
        return Settings(**kwargs)
    except PydanticValidationError as exc:
        errors = []
        for error in exc.errors():
            key = ".".join(str(part) for part in error["loc"]).upper() or "SETTINGS"
            errors.append(f"{key}: {error['msg']}")
        for message in errors:
            LOGGER.critical("Config Error: %s", message)
        raise ConfigurationError(
            "Configuration validation failed: " + "; ".join(errors),
            errors=errors,
        ) from exc


def load_settings(env_file: Optional[Union[str, Path]] = None, **overrides) -> Settings:
    """
    Build a fresh settings view.

    Args:
        env_file: Optional .env file to layer under the process environment.
            Defaults to the project-root .env when it exists.
        **overrides: Explicit values that win over every other source.

    Returns:
        Frozen Settings object.
    """
    if env_file is not None:
        return _build_settings(_env_file=env_file, **overrides)
    return _build_settings(**overrides)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process and cached. To reload settings,
    call `get_settings.cache_clear()` first.
    """
    return _build_settings()


def reload_settings() -> Settings:
    """
    Clear settings cache and reload from environment.

    Useful for testing or after modifying .env file.
    """
    get_settings.cache_clear()
    return get_settings()
