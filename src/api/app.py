"""FastAPI application factory with global error handling."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.bootstrap import bootstrap
from core.config import Settings, get_settings
from core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    RecipeAppError,
    ValidationError,
)
from core.logging_config import get_logger, setup_logging
from core.variants import Capabilities

from api.pipeline import RouterSpec, activate_pipeline
from api.routes import auth, health, recipes, users

LOGGER = get_logger(__name__)

VARIANT_ROUTERS: Dict[str, List[RouterSpec]] = {
    "recipe": [
        (health.router, "", ["Health"]),
        (recipes.router, "/recipes", ["Recipes"]),
    ],
    "user": [
        (health.router, "", ["Health"]),
        (auth.router, "/auth", ["Auth"]),
        (users.router, "/users", ["Users"]),
    ],
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log serving start/stop and release database connections on shutdown."""
    outcome = app.state.outcome
    if outcome.is_degraded:
        LOGGER.warning(
            "API application serving in degraded mode - database operations will fail until it is reachable",
            extra={"extra_data": {"variant": outcome.variant, "reason": outcome.reason}},
        )
    else:
        LOGGER.info("API application serving", extra={"extra_data": {"variant": outcome.variant}})
    yield
    app.state.registry.database.dispose()
    LOGGER.info("API application shutting down")


def register_exception_handlers(application: FastAPI) -> None:
    """Map application errors to JSON responses."""

    @application.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content={"error": "not_found", "message": str(exc)},
        )

    @application.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(
            status_code=409,
            content={"error": "conflict", "message": str(exc)},
        )

    @application.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Handle validation errors."""
        LOGGER.warning(f"Validation error: {exc}", extra={"extra_data": {"path": request.url.path}})
        return JSONResponse(
            status_code=400,
            content={"error": "validation_error", "message": str(exc)},
        )

    @application.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=401,
            content={"error": "unauthorized", "message": str(exc)},
            headers={"WWW-Authenticate": "Bearer"},
        )

    @application.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
        """Handle configuration errors."""
        LOGGER.error(f"Configuration error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "configuration_error",
                "message": "Service misconfiguration",
                "detail": "Please contact the administrator.",
            },
        )

    @application.exception_handler(DatabaseError)
    @application.exception_handler(SQLAlchemyError)
    async def database_handler(request: Request, exc: Exception) -> JSONResponse:
        """Persistence failures, including an unreachable database."""
        LOGGER.error(f"Database error: {exc}", extra={"extra_data": {"path": request.url.path}})
        return JSONResponse(
            status_code=500,
            content={
                "error": "database_error",
                "message": "A database error occurred while processing the request.",
            },
        )

    @application.exception_handler(RecipeAppError)
    async def app_error_handler(request: Request, exc: RecipeAppError) -> JSONResponse:
        """Handle all other application errors."""
        LOGGER.error(f"Application error: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "application_error", "message": str(exc)},
        )


def create_app(capabilities: Capabilities, settings: Optional[Settings] = None) -> FastAPI:
    """
    Bootstrap a service variant and build its FastAPI application.

    Configuration errors and unclassified startup failures propagate, so no
    application object exists for a process that must not serve.

    Returns:
        Configured FastAPI application with:
        - the bootstrap registry and outcome on ``app.state``
        - global exception handlers
        - the activated request pipeline
    """
    settings = settings if settings is not None else get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_format == "json")

    result = bootstrap(capabilities, settings)

    application = FastAPI(
        title=f"Recipe App {capabilities.name.title()} Service",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.state.registry = result.registry
    application.state.outcome = result.outcome

    register_exception_handlers(application)
    activate_pipeline(application, result.registry, VARIANT_ROUTERS[capabilities.name])

    LOGGER.info("API application initialized", extra={"extra_data": {"variant": capabilities.name}})
    return application


__all__ = ["VARIANT_ROUTERS", "create_app", "register_exception_handlers"]
