"""Capability descriptors for the two deployable services."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from .exceptions import ConfigurationError


@dataclass(slots=True, frozen=True)
class Capabilities:
    """What a service variant needs from the shared bootstrap."""

    name: str
    requires_authentication: bool
    requires_seeding: bool
    handler_scope: str
    protected_prefixes: Tuple[str, ...] = ()


RECIPE = Capabilities(
    name="recipe",
    requires_authentication=False,  # tokens are checked by the API gateway authorizer
    requires_seeding=False,
    handler_scope="domain.recipes",
)

USER = Capabilities(
    name="user",
    requires_authentication=True,
    requires_seeding=True,
    handler_scope="domain.users",
    protected_prefixes=("/users",),
)

VARIANTS: Dict[str, Capabilities] = {RECIPE.name: RECIPE, USER.name: USER}


def get_variant(name: str) -> Capabilities:
    """Look up a variant by name (case-insensitive)."""
    try:
        return VARIANTS[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown service variant '{name}'. Expected one of: {', '.join(sorted(VARIANTS))}"
        ) from None


__all__ = ["Capabilities", "RECIPE", "USER", "VARIANTS", "get_variant"]
