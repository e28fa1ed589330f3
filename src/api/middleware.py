"""Authentication and authorization middleware for the User service."""
from __future__ import annotations

from typing import Iterable, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.auth import TokenService
from core.exceptions import AuthenticationError
from core.logging_config import get_logger

LOGGER = get_logger(__name__)


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """
    Resolve the bearer token, if any, into ``request.state.principal``.

    Never rejects a request on its own; that is the authorization step's job.
    """

    def __init__(self, app, tokens: TokenService) -> None:
        super().__init__(app)
        self.tokens = tokens

    async def dispatch(self, request: Request, call_next):
        request.state.principal = None
        request.state.auth_error = None

        auth_header = request.headers.get("Authorization", "")
        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            try:
                request.state.principal = self.tokens.decode(token)
            except AuthenticationError as exc:
                request.state.auth_error = str(exc)
                LOGGER.debug(f"Rejected bearer token: {exc}")

        return await call_next(request)


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests to protected path prefixes."""

    def __init__(self, app, protected_prefixes: Iterable[str]) -> None:
        super().__init__(app)
        self.protected_prefixes: Tuple[str, ...] = tuple(protected_prefixes)

    def is_protected(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix.rstrip("/") + "/")
            for prefix in self.protected_prefixes
        )

    async def dispatch(self, request: Request, call_next):
        if request.method != "OPTIONS" and self.is_protected(request.url.path):
            if getattr(request.state, "principal", None) is None:
                detail = getattr(request.state, "auth_error", None) or "Authentication required"
                return JSONResponse(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    content={"error": "unauthorized", "message": detail},
                    headers={"WWW-Authenticate": "Bearer"},
                )
        return await call_next(request)


__all__ = ["AuthenticationMiddleware", "AuthorizationMiddleware"]
