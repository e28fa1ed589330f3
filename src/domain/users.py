"""User account commands and their handlers."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.auth import TokenService, hash_password, verify_password
from core.commands import handles
from core.exceptions import AuthenticationError, ConflictError, NotFoundError
from core.logging_config import get_logger
from core.models import Role, RoleName, User

LOGGER = get_logger(__name__)


@dataclass
class UserProfile:
    """Public user information."""

    id: int
    email: str
    display_name: Optional[str]
    role: str
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, user: User) -> "UserProfile":
        return cls(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            role=user.role.name,
            created_at=user.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "role": self.role,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class AuthResult:
    """A freshly issued access token and the user it belongs to."""

    access_token: str
    expires_in: int
    user: UserProfile
    token_type: str = "bearer"


@dataclass
class SignupCommand:
    email: str
    password: str
    tokens: TokenService
    display_name: Optional[str] = None


@dataclass
class LoginCommand:
    email: str
    password: str
    tokens: TokenService


@dataclass
class GetUserQuery:
    user_id: int


def _issue(user: User, tokens: TokenService) -> AuthResult:
    token = tokens.create_access_token(user.id, user.email, user.role.name)
    return AuthResult(
        access_token=token,
        expires_in=tokens.expiry_minutes * 60,
        user=UserProfile.from_model(user),
    )


@handles(SignupCommand)
def signup(command: SignupCommand, session: Session) -> AuthResult:
    """Register a new account with the standard role and sign it in."""
    email = command.email.strip().lower()
    if session.scalar(select(User.id).where(User.email == email)) is not None:
        raise ConflictError("Email already registered")

    role = session.scalar(select(Role).where(Role.name == RoleName.USER.value))
    if role is None:
        # Seeding has not run yet (degraded start or fresh database)
        role = Role(name=RoleName.USER.value, description="Standard account")
        session.add(role)

    user = User(
        email=email,
        display_name=command.display_name,
        hashed_password=hash_password(command.password),
        role=role,
    )
    session.add(user)
    session.flush()
    session.refresh(user)

    LOGGER.info(f"User registered: {user.email}")
    return _issue(user, command.tokens)


@handles(LoginCommand)
def login(command: LoginCommand, session: Session) -> AuthResult:
    """Check credentials and issue an access token."""
    email = command.email.strip().lower()
    user = session.scalar(select(User).where(User.email == email))
    if user is None or not user.is_active or not verify_password(command.password, user.hashed_password):
        LOGGER.warning(f"Failed login attempt for: {email}")
        raise AuthenticationError("Invalid email or password")
    return _issue(user, command.tokens)


@handles(GetUserQuery)
def get_user(query: GetUserQuery, session: Session) -> UserProfile:
    user = session.get(User, query.user_id)
    if user is None or not user.is_active:
        raise NotFoundError(f"User {query.user_id} not found")
    return UserProfile.from_model(user)
