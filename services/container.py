"""Explicitly constructed service objects shared by the routes.

One ``Services`` instance is built at startup and kept on ``app.state``;
routes receive its members through the dependencies in ``api.dependencies``.
"""

from dataclasses import dataclass
import logging

from pymongo.database import Database
from pymongo.errors import PyMongoError

from app.config import Settings
from repositories import IngredientRepository, RecipeRepository
from services.aggregate_cache import AggregateCache
from services.broadcast_hub import BroadcastHub
from services.ingredient_service import IngredientListing, IngredientService
from services.recipe_service import RecipeListing, RecipeService

logger = logging.getLogger("dynamicrecipes.services")


@dataclass
class Services:
    ingredients: IngredientService
    recipes: RecipeService
    hub: BroadcastHub


def wire_services(
    ingredient_repo: IngredientRepository,
    recipe_repo: RecipeRepository,
    settings: Settings,
) -> Services:
    """Build the caches, services and hub around the given repositories."""
    ingredients_cache: AggregateCache[IngredientListing] = AggregateCache("ingredients")
    recipes_cache: AggregateCache[RecipeListing] = AggregateCache("recipes")

    return Services(
        ingredients=IngredientService(ingredient_repo, ingredients_cache, recipes_cache),
        recipes=RecipeService(
            recipe_repo,
            ingredient_repo,
            recipes_cache,
            timeout_sec=settings.aggregation_timeout_sec,
        ),
        hub=BroadcastHub(
            buffer_size=settings.relay_buffer_size,
            send_timeout_sec=settings.send_timeout_sec,
        ),
    )


def build_services(db: Database, settings: Settings) -> Services:
    """Repositories over a connected database, then ``wire_services``."""
    ingredient_repo = IngredientRepository(db, settings.ingredients_collection)
    recipe_repo = RecipeRepository(db, settings.recipes_collection)

    try:
        ingredient_repo.ensure_indexes()
    except PyMongoError as exc:
        logger.warning("Could not ensure ingredient indexes; continuing: %s", exc)

    return wire_services(ingredient_repo, recipe_repo, settings)
