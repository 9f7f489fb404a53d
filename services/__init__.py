"""Services package - Business logic layer"""

from services.aggregate_cache import AggregateCache
from services.ingredient_service import IngredientService, ALL_INGREDIENTS_KEY
from services.recipe_service import RecipeService, ALL_RECIPES_KEY
from services.broadcast_hub import BroadcastHub, RealtimeConnection
from services.container import Services, build_services, wire_services

__all__ = [
    "AggregateCache",
    "IngredientService",
    "RecipeService",
    "BroadcastHub",
    "RealtimeConnection",
    "Services",
    "build_services",
    "wire_services",
    "ALL_INGREDIENTS_KEY",
    "ALL_RECIPES_KEY",
]
