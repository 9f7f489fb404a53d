"""
Repositories package - Data access layer.
"""

from repositories.base import BaseMongoRepository
from repositories.recipe_repository import RecipeRepository
from repositories.ingredient_repository import IngredientRepository

__all__ = [
    "BaseMongoRepository",
    "RecipeRepository",
    "IngredientRepository",
]
