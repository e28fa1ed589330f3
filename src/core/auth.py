"""Authentication utilities: JWT bearer tokens and password hashing."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from .exceptions import AuthenticationError
from .policies import TokenValidationParameters

# ---------------------------------------------------------------------------
# Password Hashing (passlib)
# ---------------------------------------------------------------------------

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a password with PBKDF2-SHA256."""
    return _pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return _pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognized hash format
        return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and validates access tokens against one set of parameters."""

    def __init__(self, parameters: TokenValidationParameters, expiry_minutes: int = 60) -> None:
        self.parameters = parameters
        self.expiry_minutes = expiry_minutes

    def create_access_token(self, user_id: int, email: str, role: str) -> str:
        """Create a signed access token for a user."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "role": role,
            "iss": self.parameters.issuer,
            "aud": self.parameters.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(minutes=self.expiry_minutes)).timestamp()),
        }
        return jwt.encode(payload, self.parameters.signing_key, algorithm=self.parameters.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Validate a token and return its claims.

        Checks signature, issuer, audience and (unless disabled) expiry with
        the configured clock skew.

        Raises:
            AuthenticationError: If the token is missing, malformed or invalid.
        """
        raw = (token or "").strip()
        if not raw:
            raise AuthenticationError("Access token is empty.")

        params = self.parameters
        try:
            return jwt.decode(
                raw,
                params.signing_key,
                algorithms=[params.algorithm],
                issuer=params.issuer,
                audience=params.audience,
                leeway=params.clock_skew,
                options={
                    "require": ["exp", "iss", "aud", "sub"],
                    "verify_exp": params.validate_lifetime,
                },
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Access token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid access token.") from exc


__all__ = ["hash_password", "verify_password", "TokenService"]
