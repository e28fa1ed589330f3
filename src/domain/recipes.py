"""Recipe commands and their handlers."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.commands import handles
from core.exceptions import NotFoundError, ValidationError
from core.logging_config import get_logger
from core.models import Recipe

LOGGER = get_logger(__name__)


@dataclass
class RecipeSummary:
    """Recipe data returned to callers."""

    id: int
    title: str
    description: Optional[str]
    ingredients: List[str]
    instructions: Optional[str]
    servings: Optional[int]
    author_id: Optional[str]
    created_at: Optional[datetime]

    @classmethod
    def from_model(cls, recipe: Recipe) -> "RecipeSummary":
        return cls(
            id=recipe.id,
            title=recipe.title,
            description=recipe.description,
            ingredients=list(recipe.ingredients or []),
            instructions=recipe.instructions,
            servings=recipe.servings,
            author_id=recipe.author_id,
            created_at=recipe.created_at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "ingredients": self.ingredients,
            "instructions": self.instructions,
            "servings": self.servings,
            "author_id": self.author_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class CreateRecipeCommand:
    title: str
    description: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    instructions: Optional[str] = None
    servings: Optional[int] = None
    author_id: Optional[str] = None


@dataclass
class ListRecipesQuery:
    limit: int = 50
    offset: int = 0
    author_id: Optional[str] = None


@dataclass
class GetRecipeQuery:
    recipe_id: int


@dataclass
class DeleteRecipeCommand:
    recipe_id: int


@handles(CreateRecipeCommand)
def create_recipe(command: CreateRecipeCommand, session: Session) -> RecipeSummary:
    """Create a recipe."""
    title = command.title.strip()
    if not title:
        raise ValidationError("Recipe title must not be empty.")
    if command.servings is not None and command.servings < 1:
        raise ValidationError("Servings must be at least 1.")

    recipe = Recipe(
        title=title,
        description=command.description,
        ingredients=[item.strip() for item in command.ingredients if item.strip()],
        instructions=command.instructions,
        servings=command.servings,
        author_id=command.author_id,
    )
    session.add(recipe)
    session.flush()
    session.refresh(recipe)

    LOGGER.info(f"Recipe created: {recipe.id}")
    return RecipeSummary.from_model(recipe)


@handles(ListRecipesQuery)
def list_recipes(query: ListRecipesQuery, session: Session) -> List[RecipeSummary]:
    """List recipes, newest first."""
    stmt = select(Recipe).order_by(Recipe.id.desc()).limit(query.limit).offset(query.offset)
    if query.author_id:
        stmt = stmt.where(Recipe.author_id == query.author_id)
    return [RecipeSummary.from_model(recipe) for recipe in session.scalars(stmt)]


@handles(GetRecipeQuery)
def get_recipe(query: GetRecipeQuery, session: Session) -> RecipeSummary:
    recipe = session.get(Recipe, query.recipe_id)
    if recipe is None:
        raise NotFoundError(f"Recipe {query.recipe_id} not found")
    return RecipeSummary.from_model(recipe)


@handles(DeleteRecipeCommand)
def delete_recipe(command: DeleteRecipeCommand, session: Session) -> None:
    recipe = session.get(Recipe, command.recipe_id)
    if recipe is None:
        raise NotFoundError(f"Recipe {command.recipe_id} not found")
    session.delete(recipe)
    LOGGER.info(f"Recipe deleted: {command.recipe_id}")
