"""Recipe routes."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from api.deps import get_bus, get_db
from core.commands import CommandBus
from domain.recipes import (
    CreateRecipeCommand,
    DeleteRecipeCommand,
    GetRecipeQuery,
    ListRecipesQuery,
)

router = APIRouter()


# =============================================================================
# Request Models
# =============================================================================


class RecipeCreateRequest(BaseModel):
    """Recipe creation request body."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    instructions: Optional[str] = None
    servings: Optional[int] = Field(default=None, ge=1)
    author_id: Optional[str] = Field(default=None, max_length=64)


# =============================================================================
# Routes
# =============================================================================


@router.get("")
async def list_recipes(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    author_id: Optional[str] = None,
    bus: CommandBus = Depends(get_bus),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """List recipes, newest first."""
    recipes = bus.dispatch(ListRecipesQuery(limit=limit, offset=offset, author_id=author_id), db)
    return {"total": len(recipes), "recipes": [recipe.to_dict() for recipe in recipes]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: RecipeCreateRequest,
    bus: CommandBus = Depends(get_bus),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    recipe = bus.dispatch(CreateRecipeCommand(**body.model_dump()), db)
    return recipe.to_dict()


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: int,
    bus: CommandBus = Depends(get_bus),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    return bus.dispatch(GetRecipeQuery(recipe_id=recipe_id), db).to_dict()


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: int,
    bus: CommandBus = Depends(get_bus),
    db: Session = Depends(get_db),
) -> None:
    bus.dispatch(DeleteRecipeCommand(recipe_id=recipe_id), db)
