"""User routes. Everything under /users requires a bearer token."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.deps import get_bus, get_current_principal, get_db
from core.commands import CommandBus
from domain.users import GetUserQuery

router = APIRouter()


@router.get("/me")
async def get_me(
    principal: Dict[str, Any] = Depends(get_current_principal),
    bus: CommandBus = Depends(get_bus),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Profile of the authenticated caller."""
    return bus.dispatch(GetUserQuery(user_id=int(principal["sub"])), db).to_dict()
