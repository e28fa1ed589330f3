"""Authentication routes: signup and login."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from api.deps import get_bus, get_db, get_tokens
from core.auth import TokenService
from core.commands import CommandBus
from domain.users import AuthResult, LoginCommand, SignupCommand

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================


class SignupRequest(BaseModel):
    """Registration request body."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, max_length=128, description="Password (min 8 chars)")
    display_name: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    """Login request body."""

    email: EmailStr
    password: str


def _token_response(result: AuthResult) -> Dict[str, Any]:
    return {
        "access_token": result.access_token,
        "token_type": result.token_type,
        "expires_in": result.expires_in,
        "user": result.user.to_dict(),
    }


# =============================================================================
# Routes
# =============================================================================


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    bus: CommandBus = Depends(get_bus),
    tokens: TokenService = Depends(get_tokens),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Register a new account and return an access token."""
    result = bus.dispatch(
        SignupCommand(
            email=body.email,
            password=body.password,
            display_name=body.display_name,
            tokens=tokens,
        ),
        db,
    )
    return _token_response(result)


@router.post("/login")
async def login(
    body: LoginRequest,
    bus: CommandBus = Depends(get_bus),
    tokens: TokenService = Depends(get_tokens),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """Authenticate and return an access token."""
    result = bus.dispatch(LoginCommand(email=body.email, password=body.password, tokens=tokens), db)
    return _token_response(result)
