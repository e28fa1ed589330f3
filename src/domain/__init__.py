"""Domain layer: command and query handlers for each service.

``domain.recipes`` is the handler scope of the Recipe service and
``domain.users`` the handler scope of the User service.
"""
from __future__ import annotations

__all__ = ["recipes", "users"]
