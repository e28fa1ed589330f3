"""Request dependencies for FastAPI routes."""
from __future__ import annotations

from typing import Any, Dict, Generator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.auth import TokenService
from core.commands import CommandBus
from core.exceptions import ConfigurationError
from core.registry import ServiceRegistry


def get_registry(request: Request) -> ServiceRegistry:
    return request.app.state.registry


def get_db(registry: ServiceRegistry = Depends(get_registry)) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    A new session is opened for every request, so a database that was
    unreachable at startup is retried here each time.
    """
    db = registry.database.session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_bus(registry: ServiceRegistry = Depends(get_registry)) -> CommandBus:
    return registry.commands


def get_tokens(registry: ServiceRegistry = Depends(get_registry)) -> TokenService:
    """Token service of the running variant; only wired when JWT settings exist."""
    if registry.tokens is None:
        raise ConfigurationError("Token issuance is not configured for this service")
    return registry.tokens


def get_current_principal(request: Request) -> Dict[str, Any]:
    """
    Claims of the authenticated caller.

    Raises 401 if the authentication middleware did not accept a token.
    """
    principal = getattr(request.state, "principal", None)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


__all__ = ["get_registry", "get_db", "get_bus", "get_tokens", "get_current_principal"]
