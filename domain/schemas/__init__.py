"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.ingredient_schemas import (
    IngredientCreate,
    IngredientUpdate,
    IngredientResponse,
)
from domain.schemas.recipe_schemas import (
    RecipeCreate,
    ExpandedRecipe,
    InsertedIdsResponse,
    DeleteResponse,
)
from domain.schemas.message_schemas import InboundMessage, ChatMessage

__all__ = [
    "IngredientCreate",
    "IngredientUpdate",
    "IngredientResponse",
    "RecipeCreate",
    "ExpandedRecipe",
    "InsertedIdsResponse",
    "DeleteResponse",
    "InboundMessage",
    "ChatMessage",
]
