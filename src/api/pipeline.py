"""Request pipeline activation.

Stages are installed in a fixed order:

1. Swagger UI (development only)
2. One CORS policy, chosen by environment
3. HTTPS redirection
4. Authentication, then authorization (authenticated variants only)
5. Routing

Starlette runs the most recently added middleware first, so middleware is
added in reverse of the order it must run in.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from fastapi.openapi.docs import get_swagger_ui_html

from core.logging_config import get_context_logger
from core.registry import ServiceRegistry

from .middleware import AuthenticationMiddleware, AuthorizationMiddleware

DOCS_URL = "/swagger"
OPENAPI_URL = "/openapi.json"

# (router, prefix, tags)
RouterSpec = Tuple[APIRouter, str, List[str]]


def install_docs(app: FastAPI) -> None:
    """Expose the OpenAPI schema and Swagger UI."""

    @app.get(OPENAPI_URL, include_in_schema=False)
    async def openapi_schema():
        return app.openapi()

    @app.get(DOCS_URL, include_in_schema=False)
    async def swagger_ui():
        return get_swagger_ui_html(openapi_url=OPENAPI_URL, title=f"{app.title} - Swagger UI")


def activate_pipeline(app: FastAPI, registry: ServiceRegistry, routers: Sequence[RouterSpec]) -> List[str]:
    """
    Install every pipeline stage on ``app`` and return their names in request order.

    The list is also stored on ``app.state.pipeline``.
    """
    settings = registry.settings
    capabilities = registry.capabilities
    logger = get_context_logger(__name__, variant=capabilities.name)
    stages: List[str] = []
    middleware: List[tuple] = []

    # 1. Docs
    if settings.is_development():
        install_docs(app)
        stages.append("swagger")
        logger.info("Development mode - Swagger UI at %s", DOCS_URL)

    # 2. CORS
    cors = registry.policies.active_cors(settings.environment)
    middleware.append((CORSMiddleware, cors.middleware_options()))
    stages.append(f"cors:{cors.name}")

    # 3. HTTPS redirection
    if settings.enforce_https:
        middleware.append((HTTPSRedirectMiddleware, {}))
        stages.append("https_redirect")

    # 4. Authentication and authorization
    if capabilities.requires_authentication and registry.tokens is not None:
        middleware.append((AuthenticationMiddleware, {"tokens": registry.tokens}))
        middleware.append((AuthorizationMiddleware, {"protected_prefixes": capabilities.protected_prefixes}))
        stages.extend(["authentication", "authorization"])

    for middleware_class, options in reversed(middleware):
        app.add_middleware(middleware_class, **options)

    # 5. Routing
    for router, prefix, tags in routers:
        app.include_router(router, prefix=prefix, tags=tags)
    stages.append("routing")

    app.state.pipeline = stages
    logger.info(
        "Request pipeline activated",
        extra={"extra_data": {"stages": stages}},
    )
    return stages


__all__ = ["DOCS_URL", "OPENAPI_URL", "install_docs", "activate_pipeline"]
