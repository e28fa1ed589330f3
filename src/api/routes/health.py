"""Health check routes."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.deps import get_db, get_registry
from core.logging_config import get_logger
from core.registry import ServiceRegistry

router = APIRouter()
LOGGER = get_logger(__name__)


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Lightweight health check - no database access, always returns OK."""
    outcome = request.app.state.outcome
    return {
        "status": "ok",
        "service": outcome.variant,
        "startup": outcome.status.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/detailed")
async def detailed_health_check(
    registry: ServiceRegistry = Depends(get_registry),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Health check that also probes the database."""
    status = "healthy"
    checks: Dict[str, Any] = {}

    try:
        db.execute(text("SELECT 1"))
        checks["database"] = {"status": "healthy", "connected": True}
    except SQLAlchemyError as e:
        LOGGER.error(f"Database health check failed: {e}")
        db.rollback()
        status = "unhealthy"
        checks["database"] = {"status": "unhealthy", "error": str(e)}

    checks["authentication"] = {"configured": registry.tokens is not None}

    return {
        "status": status,
        "service": registry.capabilities.name,
        "environment": registry.settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
