"""API route modules."""
from __future__ import annotations

from . import auth, health, recipes, users

__all__ = [
    "auth",
    "health",
    "recipes",
    "users",
]
